"""
World simulation orchestrator for the ship, its players and their tethers.

Steps the ship, players and tethers once per frame with optional logging
and automatic output organization.
"""
from __future__ import annotations

from datetime import datetime
from pathlib import Path

import numpy as np
from numpy.typing import NDArray

from tetherlab.components.player import DEFAULT_ROPE_UPGRADE, Player
from tetherlab.components.ship import Ship
from tetherlab.components.system import TetherSystem
from tetherlab.components.tether import AttachmentState
from tetherlab.config import TetherConfig
from tetherlab.dynamics.body import PointBody2D
from tetherlab.logger import CSVLogger
from tetherlab.utils.validation import validate_timestep

# Default output directory
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_DT = 1.0 / 60.0


class World:
    """
    Container and frame loop for a ship and the players tethered to it.

    Parameters
    ----------
    ship : Ship
        The anchor entity
    dt : float
        Frame duration [s], used for the time axis only. Motion and the
        tether advance in per-frame units.
    simulation_name : str | None
        Name for this simulation. Used to organize output files. If None,
        logging is disabled by default. Use enable_logging() to activate.
    output_dir : Path | str | None
        Base directory for all simulation outputs. Defaults to "./output".
    auto_timestamp : bool
        If True, append timestamp to simulation folder name to prevent overwrites.
    auto_save_plots : bool
        If True, generate and save plots when run() completes.
        Only works if logging is enabled.
    tether_config : TetherConfig | None
        Rope settings for players added without their own. Each such player
        gets a private copy, so upgrades stay per player.

    Attributes
    ----------
    ship : Ship
        Anchor entity
    players : list[Player]
        Free-end entities, each with at most one tether
    tethers : TetherSystem
        One TetherController per player, keyed by player name
    t : float
        Current simulation time [s]
    frame : int
        Frames stepped so far
    history : list[dict]
        Per-frame records for pandas export
    logger : CSVLogger | None
        Data logger instance, or None if logging disabled

    Notes
    -----
    **Frame order:**
    1. Ship drift
    2. Per player: oxygen, death/respawn, thrust + damping, tether tick,
       write-back of the corrected position and velocity
    3. Advance time, record history, log

    **Tether ownership:**
    The Player's attachment state is the source of truth. The World attaches
    a tether when a player goes TETHERED and drops it when the player goes
    DETACHED (boarding, death).

    Examples
    --------
    >>> ship = Ship("ship", PointBody2D("ship", (400.0, 300.0)))
    >>> world = World(ship)
    >>> world.add_player(Player("miner", PointBody2D("miner", (460.0, 300.0))))
    >>> world.exit_ship("miner")
    >>> world.run(frames=600)
    """

    def __init__(
        self,
        ship: Ship,
        dt: float = DEFAULT_DT,
        simulation_name: str | None = None,
        output_dir: Path | str | None = None,
        auto_timestamp: bool = True,
        auto_save_plots: bool = False,
        tether_config: TetherConfig | None = None,
    ) -> None:
        validate_timestep(dt)
        if tether_config is not None:
            tether_config.validate()
        self.tether_config = tether_config
        self.ship = ship
        self.players: list[Player] = []
        self.tethers = TetherSystem(f"{ship.name}_tethers")
        self.dt = float(dt)
        self.t = 0.0
        self.frame = 0
        self.history: list[dict] = []

        # Output configuration
        self._simulation_name = simulation_name
        self._output_dir = Path(output_dir) if output_dir else DEFAULT_OUTPUT_DIR
        self._auto_timestamp = auto_timestamp
        self._auto_save_plots = auto_save_plots
        self.output_path: Path | None = None
        self.logger: CSVLogger | None = None

        if simulation_name is not None:
            self.enable_logging(simulation_name)

    @classmethod
    def with_logging(
        cls,
        name: str,
        ship: Ship | None = None,
        dt: float = DEFAULT_DT,
        output_dir: Path | str | None = None,
        auto_save_plots: bool = True,
        tether_config: TetherConfig | None = None,
    ) -> World:
        """
        Convenience factory to create a World with logging pre-enabled.

        A default ship at (400, 300) is created when none is given.
        """
        if ship is None:
            ship = Ship("ship", PointBody2D("ship", (400.0, 300.0)))
        return cls(
            ship,
            dt=dt,
            simulation_name=name,
            output_dir=output_dir,
            auto_timestamp=True,
            auto_save_plots=auto_save_plots,
            tether_config=tether_config,
        )

    def enable_logging(self, name: str | None = None) -> Path:
        """
        Enable data logging with automatic output organization.

        Creates:
            output/simulation_name_timestamp/
                logs/
                plots/

        Raises
        ------
        ValueError
            If no simulation name available
        """
        if name is not None:
            self._simulation_name = name

        if self._simulation_name is None:
            raise ValueError(
                "Simulation name required for logging. "
                "Either pass name to __init__ or to enable_logging()."
            )

        if self._auto_timestamp:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            folder_name = f"{self._simulation_name}_{timestamp}"
        else:
            folder_name = self._simulation_name

        self.output_path = self._output_dir / folder_name

        logs_dir = self.output_path / "logs"
        plots_dir = self.output_path / "plots"
        logs_dir.mkdir(parents=True, exist_ok=True)
        plots_dir.mkdir(parents=True, exist_ok=True)

        csv_path = logs_dir / "simulation.csv"
        self.logger = CSVLogger(str(csv_path))

        print(f"[World] Logging enabled: {self.output_path}")
        print(f"        Logs: {logs_dir}")
        print(f"        Plots: {plots_dir}")

        return self.output_path

    def disable_logging(self) -> None:
        """Disable logging and close any open log files."""
        if self.logger is not None:
            self.logger.close()
            self.logger = None
            print("[World] Logging disabled")

    # --- Entities ---

    @property
    def bodies(self) -> list[PointBody2D]:
        """Ship body first, then player bodies in insertion order."""
        return [self.ship.body] + [p.body for p in self.players]

    def add_player(self, player: Player, aboard: bool = True) -> int:
        """
        Add a player. By default the player starts aboard the ship.

        A player built without its own tether config takes a copy of the
        world's ``tether_config``, if one is set.

        Returns
        -------
        int
            Index of the player

        Raises
        ------
        ValueError
            If a player with the same name already exists
        """
        if any(p.name == player.name for p in self.players):
            raise ValueError(f"Player '{player.name}' already exists")
        if self.tether_config is not None and not player.owns_tether_config:
            player.tether_config = self.tether_config.copy()
        self.players.append(player)
        if aboard:
            player.enter_ship(self.ship)
        return len(self.players) - 1

    def get_player(self, name: str) -> Player:
        for p in self.players:
            if p.name == name:
                return p
        raise KeyError(f"No player named '{name}'")

    def exit_ship(self, name: str) -> None:
        """Player leaves the ship and gets tethered to it."""
        player = self.get_player(name)
        player.exit_ship()
        self._sync_tether(player)

    def enter_ship(self, name: str) -> bool:
        """
        Player boards if close enough to the ship.

        Returns
        -------
        bool
            True if the player boarded
        """
        player = self.get_player(name)
        if not player.alive or player.in_ship:
            return False
        if not self.ship.near(player.body.p):
            return False
        player.enter_ship(self.ship)
        self._sync_tether(player)
        return True

    def kill(self, name: str) -> None:
        """External death event (e.g. hit by a flying asteroid)."""
        player = self.get_player(name)
        player.die()
        self._sync_tether(player)

    def upgrade_rope(self, name: str, delta: float = DEFAULT_ROPE_UPGRADE) -> float:
        """Apply one rope upgrade. Takes effect on a live tether from the next frame."""
        return self.get_player(name).upgrade_rope(delta)

    def _sync_tether(self, player: Player) -> None:
        tethered = self.tethers.is_tethered(player.name)
        if player.state is AttachmentState.TETHERED and not tethered:
            ctrl = self.tethers.attach(
                player.name, self.ship.body.p, player.body.p, player.tether_config
            )
            print(
                f"[World] '{player.name}' tethered to '{self.ship.name}' "
                f"({ctrl.chain.n_particles} particles, max {ctrl.config.max_length:.0f})"
            )
        elif player.state is AttachmentState.DETACHED and tethered:
            self.tethers.detach(player.name)
            print(f"[World] '{player.name}' tether detached")

    # --- Frame loop ---

    def step(self) -> None:
        """Advance the world by one frame."""
        self.ship.update_state(self.t, self.dt)
        anchor = self.ship.body.p

        for player in self.players:
            was_alive = player.alive
            player.update_state(self.t, self.dt)
            if was_alive and not player.alive:
                print(f"[World] '{player.name}' died at t={self.t:.3f}s")
            self._sync_tether(player)

            if not player.alive:
                if player.ready_to_respawn:
                    player.respawn(self.ship)
                    print(f"[World] '{player.name}' respawned aboard '{self.ship.name}'")
                continue

            body = player.body
            if player.in_ship:
                body.set_state(position=self.ship.airlock_position())
                continue

            body.clear_forces()
            player.apply_forces(self.t)
            body.integrate(1.0, damping=player.damping)

            if self.tethers.is_tethered(player.name):
                out = self.tethers.tick(player.name, anchor, body.p, body.v)
                body.set_state(position=out.position, velocity=out.apply(body.v))

        self.t += self.dt
        self.frame += 1
        self.history.append(self._record())

        if self.logger is not None:
            self.logger.log(self)

    def run(self, frames: int, log_interval: int = 60) -> None:
        """
        Run the frame loop.

        Parameters
        ----------
        frames : int
            Number of frames to step
        log_interval : int
            Frames between progress lines. Set to <= 0 to disable.
        """
        if self.logger is not None and self.frame == 0:
            self.logger.log(self)

        print(f"[World] Starting simulation: {frames} frames, dt={self.dt:.5f}s")

        try:
            for _ in range(int(frames)):
                self.step()
                if log_interval > 0 and self.frame % log_interval == 0:
                    print(f"[World] frame={self.frame:6d} t={self.t:7.2f}s | {self._status()}")
        finally:
            if self.logger:
                self.logger.flush()

            if self._auto_save_plots and self.logger is not None:
                print("[World] Auto-generating plots...")
                self.save_plots()

    def _status(self) -> str:
        parts = []
        for p in self.players:
            ctrl = self.tethers.controllers.get(p.name)
            if ctrl is not None and ctrl.chain is not None:
                parts.append(f"{p.name} span={ctrl.chain.span():7.2f}/{ctrl.config.max_length:.0f}")
            else:
                parts.append(f"{p.name} {'aboard' if p.in_ship else 'dead'}")
        return ", ".join(parts)

    def _record(self) -> dict:
        rec: dict = {"frame": self.frame, "t": self.t}
        sx, sy = self.ship.body.p
        rec[f"{self.ship.name}.x"] = float(sx)
        rec[f"{self.ship.name}.y"] = float(sy)
        for p in self.players:
            ctrl = self.tethers.controllers.get(p.name)
            live = ctrl is not None and ctrl.chain is not None
            rec[f"{p.name}.x"] = float(p.body.p[0])
            rec[f"{p.name}.y"] = float(p.body.p[1])
            rec[f"{p.name}.oxygen"] = float(p.oxygen)
            rec[f"{p.name}.attached"] = live
            rec[f"{p.name}.span"] = ctrl.chain.span() if live else float("nan")
            rec[f"{p.name}.taut"] = bool(
                live and ctrl.last_result is not None and ctrl.last_result.clamped
            )
        return rec

    # --- Rendering and output ---

    def snapshot(self) -> dict[str, NDArray[np.float64]]:
        """Rope polylines per tethered player, safe to render after step()."""
        return self.tethers.snapshots()

    def save_history(self, filepath: str | Path) -> Path:
        from tetherlab.utils.io import save_tick_history
        return save_tick_history(self.history, str(filepath))

    def save_plots(self, players: list[str] | None = None, show: bool = False) -> None:
        """
        Generate and save span and trajectory plots from logged data.

        Raises
        ------
        RuntimeError
            If logging is not enabled or no data logged yet
        """
        if self.logger is None or self.output_path is None:
            raise RuntimeError(
                "Logging must be enabled to save plots. "
                "Call enable_logging() or use World.with_logging()."
            )

        from tetherlab.visualization.plotting import plot_tether_span, plot_trajectory_2d

        csv_path = self.output_path / "logs" / "simulation.csv"
        plots_dir = self.output_path / "plots"

        self.logger.flush()
        if not csv_path.exists():
            raise RuntimeError(
                f"No log file found at {csv_path}. "
                "Has the simulation been run yet?"
            )

        if players is None:
            players = [p.name for p in self.players]

        print(f"[World] Generating plots for: {', '.join(players)}")
        for name in players:
            plot_trajectory_2d(
                str(csv_path), name,
                anchor_name=self.ship.name,
                save_path=str(plots_dir / f"{name}_trajectory.png"),
                show=show,
            )
            plot_tether_span(
                str(csv_path), name,
                max_length=self.get_player(name).rope_max_length,
                save_path=str(plots_dir / f"{name}_span.png"),
                show=show,
            )

        print(f"[World] Plots saved to: {plots_dir}")
