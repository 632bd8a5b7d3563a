"""
Player component - the tether's free end.

Manages:
- Attachment state transitions (DETACHED ↔ TETHERED) on ship exit/entry
- Thruster input and suit velocity damping in zero gravity
- Oxygen drain outside the ship, death when it runs out, timed respawn
- Rope upgrades (length budget only)
"""

from __future__ import annotations

import numpy as np

from tetherlab.config import TetherConfig, extend
from tetherlab.dynamics.body import PointBody2D
from tetherlab.dynamics.forces import Thrust, VelocityDamping

from .base import Component
from .ship import Ship
from .tether import AttachmentState

# One unit of upgrade currency buys 150 units of rope, doubled by a gem
DEFAULT_ROPE_UPGRADE = 150.0 * 2
DEFAULT_MAX_OXYGEN = 200.0
DEFAULT_OXYGEN_DRAIN = 0.08   # per frame outside
DEFAULT_OXYGEN_REFILL = 1.5   # per frame aboard
DEFAULT_RESPAWN_FRAMES = 72   # 1.2 s at 60 fps


class Player(Component):
    """
    Suited miner that leaves the ship on a tether.

    Parameters
    ----------
    name : str
        Component name; also the key of the player's tether
    body : PointBody2D
        Point body for the miner
    tether_config : TetherConfig | None
        This player's rope settings. Upgrades grow its ``max_length``.
        When None the player starts from defaults, which a World with its
        own ``tether_config`` replaces on ``add_player``.
    thrust : float
        Thruster acceleration [units/frame²]. Default 0.08
    damping : float
        Velocity retained per frame, applied before the position update.
        Default 0.998
    max_oxygen : float
        Suit capacity. Default 200
    oxygen_drain : float
        Oxygen used per frame outside the ship. Default 0.08
    oxygen_refill : float
        Oxygen restored per frame aboard. Default 1.5
    respawn_frames : int
        Frames between death and respawn. Default 72

    Attributes
    ----------
    state : AttachmentState
        DETACHED while aboard or dead, TETHERED while outside
    in_ship : bool
        True while aboard
    alive : bool
        False between death and respawn
    oxygen : float
        Current oxygen

    Notes
    -----
    The player only tracks its own side of the state machine. The World
    creates and drops the actual tether when the state changes.
    """

    def __init__(
        self,
        name: str,
        body: PointBody2D,
        tether_config: TetherConfig | None = None,
        thrust: float = 0.08,
        damping: float = 0.998,
        max_oxygen: float = DEFAULT_MAX_OXYGEN,
        oxygen_drain: float = DEFAULT_OXYGEN_DRAIN,
        oxygen_refill: float = DEFAULT_OXYGEN_REFILL,
        respawn_frames: int = DEFAULT_RESPAWN_FRAMES,
    ):
        super().__init__(name, body)

        # False when the rope settings are defaults a World may replace
        self.owns_tether_config = tether_config is not None
        self.tether_config = tether_config if tether_config is not None else TetherConfig()
        self.thruster = Thrust(thrust)
        self.damping = VelocityDamping(damping)
        self.add_force(self.thruster)

        self.max_oxygen = float(max_oxygen)
        self.oxygen = self.max_oxygen
        self.oxygen_drain = float(oxygen_drain)
        self.oxygen_refill = float(oxygen_refill)
        self.respawn_frames = int(respawn_frames)

        self.state = AttachmentState.DETACHED
        self.in_ship = False
        self.alive = True
        self._respawn_countdown = 0

        self._state = {"component_type": "player"}

    # -------------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------------

    def enter_ship(self, ship: Ship) -> None:
        """Board: park at the airlock, stop, refill, drop the tether."""
        self.in_ship = True
        self.state = AttachmentState.DETACHED
        self.body.set_state(position=ship.airlock_position(), velocity=np.zeros(2))
        self.oxygen = self.max_oxygen
        self.thruster.cut()

    def exit_ship(self) -> None:
        """Leave the ship; the host attaches a tether in response."""
        if not self.alive:
            return
        self.in_ship = False
        self.state = AttachmentState.TETHERED

    def die(self) -> None:
        """Entity-death event: tether gone, respawn countdown started."""
        if not self.alive:
            return
        self.alive = False
        self.state = AttachmentState.DETACHED
        self.thruster.cut()
        self._respawn_countdown = self.respawn_frames

    def respawn(self, ship: Ship) -> None:
        """Come back aboard with a full tank."""
        self.alive = True
        self._respawn_countdown = 0
        self.enter_ship(ship)

    @property
    def ready_to_respawn(self) -> bool:
        return not self.alive and self._respawn_countdown <= 0

    # -------------------------------------------------------------------------
    # Per-frame logic
    # -------------------------------------------------------------------------

    def update_state(self, t: float, dt: float) -> None:
        """
        Oxygen bookkeeping for one frame.

        Aboard the tank refills; outside it drains and an empty tank kills
        the player. Dead players count down to respawn.
        """
        if not self.alive:
            self._respawn_countdown -= 1
            return

        if self.in_ship:
            self.oxygen = min(self.max_oxygen, self.oxygen + self.oxygen_refill)
        else:
            self.oxygen -= self.oxygen_drain
            if self.oxygen <= 0:
                self.oxygen = 0.0
                self.die()

    def thrust(self, direction) -> None:
        """Set thruster input, e.g. (1, 0) for right. Ignored aboard or dead."""
        if self.in_ship or not self.alive:
            self.thruster.cut()
            return
        self.thruster.set(direction)

    def upgrade_rope(self, delta: float = DEFAULT_ROPE_UPGRADE) -> float:
        """
        Spend an upgrade: grow the rope's length budget by ``delta``.

        The caller checks the currency balance. Returns the new max length.
        """
        extend(self.tether_config, delta)
        return self.tether_config.max_length

    @property
    def rope_max_length(self) -> float:
        return self.tether_config.max_length

    def get_state_dict(self) -> dict:
        return {
            **super().get_state_dict(),
            "state": self.state.name,
            "in_ship": self.in_ship,
            "alive": self.alive,
            "oxygen": self.oxygen,
            "rope_max_length": self.rope_max_length,
        }
