"""
Scenario API: Fluent interface for defining and running tether simulations.
"""
from __future__ import annotations

from collections import defaultdict
from pathlib import Path

import numpy as np

from tetherlab.components.player import DEFAULT_ROPE_UPGRADE, Player
from tetherlab.components.ship import Ship
from tetherlab.config import TETHER_PRESETS, TetherConfig, config_from_preset
from tetherlab.core.simulation import World
from tetherlab.dynamics.body import PointBody2D


class Scenario:
    """
    Scripted run: a ship, some players, timed thrust and upgrades.

    Examples
    --------
    >>> (Scenario("spacewalk", logging=False)
    ...     .configure_tether("stiff")
    ...     .add_player("miner")
    ...     .exit_ship("miner")
    ...     .schedule_thrust("miner", start=0, stop=120, direction=(1, 0))
    ...     .run(frames=600))
    """

    def __init__(
        self,
        name: str,
        output_dir: str = "output",
        logging: bool = True,
        ship_position: tuple[float, float] = (400.0, 300.0),
    ):
        self.name = name
        ship = Ship("ship", PointBody2D("ship", ship_position))
        if logging:
            self.world = World.with_logging(
                name=name,
                ship=ship,
                output_dir=Path(output_dir),
                auto_save_plots=False  # We handle this explicitly
            )
        else:
            self.world = World(ship)

        self._tether_params = dict(TETHER_PRESETS["default"])
        self._events: dict[int, list] = defaultdict(list)
        self._show_plots: bool | None = None

    def configure_tether(self, preset: str = "default", **kwargs) -> 'Scenario':
        """
        Set the rope parameters for players added after this call.

        Presets: 'default', 'stiff', 'loose', 'long'
        Kwargs: segment_length, max_length, relax_iterations, pull_strength
        """
        config = config_from_preset(preset, **kwargs)
        config.validate()
        self._tether_params = config.to_dict()
        return self

    def add_player(
        self,
        name: str,
        offset: tuple[float, float] = (60.0, 0.0),
        **player_kwargs,
    ) -> 'Scenario':
        """Add a player aboard the ship with its own copy of the tether config."""
        position = self.world.ship.body.p + np.asarray(offset, dtype=float)
        player = Player(
            name,
            PointBody2D(name, position),
            tether_config=TetherConfig(**self._tether_params),
            **player_kwargs,
        )
        self.world.add_player(player)
        return self

    def exit_ship(self, name: str, frame: int = 0) -> 'Scenario':
        """Player leaves the ship at ``frame`` (relative to run start)."""
        self._events[frame].append(("exit", name, None))
        return self

    def enter_ship(self, name: str, frame: int) -> 'Scenario':
        self._events[frame].append(("enter", name, None))
        return self

    def schedule_thrust(
        self,
        name: str,
        start: int,
        stop: int,
        direction: tuple[float, float],
    ) -> 'Scenario':
        """Hold thrust input ``direction`` from frame ``start`` until ``stop``."""
        if stop <= start:
            raise ValueError(f"Thrust window must satisfy stop > start, got [{start}, {stop})")
        self._events[start].append(("thrust", name, tuple(direction)))
        self._events[stop].append(("thrust", name, (0.0, 0.0)))
        return self

    def schedule_upgrade(
        self,
        name: str,
        frame: int,
        delta: float = DEFAULT_ROPE_UPGRADE,
    ) -> 'Scenario':
        self._events[frame].append(("upgrade", name, float(delta)))
        return self

    def enable_plotting(self, show: bool = False) -> 'Scenario':
        """Generate plots after run(). Requires logging."""
        self._show_plots = show
        return self

    def _fire(self, frame: int) -> None:
        for kind, name, arg in self._events.get(frame, []):
            if kind == "exit":
                self.world.exit_ship(name)
            elif kind == "enter":
                if not self.world.enter_ship(name):
                    print(f"[Scenario] '{name}' too far from the ship to board at frame {frame}")
            elif kind == "thrust":
                self.world.get_player(name).thrust(arg)
            elif kind == "upgrade":
                new_max = self.world.upgrade_rope(name, arg)
                print(f"[Scenario] '{name}' rope upgraded to {new_max:.0f}")

    def run(self, frames: int = 600, log_interval: int = 60) -> 'Scenario':
        print(f"Running Scenario: {self.name}")
        start = self.world.frame

        try:
            for k in range(int(frames)):
                self._fire(k)
                self.world.step()
                if log_interval > 0 and self.world.frame % log_interval == 0:
                    print(f"[Scenario] frame={self.world.frame:6d} | {self.world._status()}")
        finally:
            if self.world.logger is not None:
                self.world.logger.flush()

        print(f"[Scenario] Finished {self.world.frame - start} frames")

        if self._show_plots is not None and self.world.logger is not None:
            print("[Scenario] Generating plots...")
            self.world.save_plots(show=self._show_plots)

        return self

    def save_history(self, filepath: str | Path) -> Path:
        return self.world.save_history(filepath)
