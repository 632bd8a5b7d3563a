"""
Force models for point bodies.

All force classes follow the Force protocol and act on PointBody2D
instances. Space is gravity-free; the only sources of motion are thrusters
and the tether itself.

Physical units:
- Accelerations: world units per frame²
- Damping factors: dimensionless, per frame
"""
from __future__ import annotations
import numpy as np
from numpy.typing import NDArray
from typing import Protocol
from .body import PointBody2D

# Thruster acceleration of a suited miner [units/frame²]
DEFAULT_THRUST = 0.08
# Suit stabilizers bleed off a little velocity each frame
DEFAULT_DAMPING = 0.998


class Force(Protocol):
    """Protocol for force application to point bodies."""
    def apply(self, body: PointBody2D, t: float | None = None) -> None:
        """
        Apply force to a body.

        Parameters
        ----------
        body : PointBody2D
            The body to apply force to
        t : float | None
            Current simulation time [s]. Optional for time-independent forces.
        """
        ...


class Thrust:
    """
    Direction-controlled thruster.

    The caller sets an input direction each frame (e.g. from held keys);
    components along each axis are clipped to [-1, 1] and scaled by
    ``accel``, so diagonal input gives the same per-axis push as the
    original keyboard controls.

    Parameters
    ----------
    accel : float
        Acceleration per unit input [units/frame²]. Default 0.08

    Examples
    --------
    >>> thrust = Thrust()
    >>> thrust.set((1.0, 0.0))   # full right
    >>> thrust.apply(body)
    """
    def __init__(self, accel: float = DEFAULT_THRUST) -> None:
        if accel < 0:
            raise ValueError(f"Thrust acceleration must be non-negative, got {accel}")
        self.accel = float(accel)
        self.direction = np.zeros(2, dtype=np.float64)
        self.last_force = np.zeros(2, dtype=np.float64)

    def set(self, direction: NDArray[np.float64] | tuple[float, float]) -> None:
        d = np.asarray(direction, dtype=np.float64)
        if d.shape != (2,):
            raise ValueError(f"Thrust direction must be (2,), got shape {d.shape}")
        self.direction = np.clip(d, -1.0, 1.0)

    def cut(self) -> None:
        self.direction = np.zeros(2, dtype=np.float64)

    def apply(self, body: PointBody2D, t: float | None = None) -> None:
        """Add accel * direction to the body's acceleration."""
        acc = self.accel * self.direction
        self.last_force = acc.copy()
        body.apply_acceleration(acc)


class VelocityDamping:
    """
    Multiplicative velocity damping, v <- factor * v.

    Not a force in the accumulator sense, so it never sits in a force list.
    ``PointBody2D.integrate`` calls ``damp`` between the velocity and the
    position update.

    Parameters
    ----------
    factor : float
        Retained fraction of velocity per frame, in (0, 1]. Default 0.998
    """
    def __init__(self, factor: float = DEFAULT_DAMPING) -> None:
        if not 0.0 < factor <= 1.0:
            raise ValueError(f"Damping factor must be in (0, 1], got {factor}")
        self.factor = float(factor)

    def damp(self, body: PointBody2D) -> None:
        body.v *= self.factor
