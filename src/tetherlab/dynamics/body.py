"""
Point bodies in the 2D zero-gravity plane.

Ship and player are simulated as point masses. Units are the game's own:
- Position: world units
- Velocity: world units per frame
- Acceleration: world units per frame²

The host loop steps once per frame, so ``dt`` defaults to 1 frame.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from tetherlab.utils.validation import validate_vector2

if TYPE_CHECKING:
    from .forces import VelocityDamping


class PointBody2D:
    """
    2D point body with semi-implicit Euler integration.

    State Variables
    ---------------
    - p : NDArray[np.float64]
        Position [units] (2,)
    - v : NDArray[np.float64]
        Velocity [units/frame] (2,)

    Accumulators (cleared each step)
    --------------------------------
    - a : NDArray[np.float64]
        Accumulated acceleration [units/frame²] (2,)

    Notes
    -----
    Uses __slots__ like the other per-frame state holders.
    """
    __slots__ = ("name", "p", "v", "a")

    def __init__(
        self,
        name: str,
        position: NDArray[np.float64],
        velocity: NDArray[np.float64] | None = None,
    ) -> None:
        self.name = name
        self.p = validate_vector2(position, "position")
        self.v = (
            validate_vector2(velocity, "velocity")
            if velocity is not None
            else np.zeros(2, dtype=np.float64)
        )
        self.a = np.zeros(2, dtype=np.float64)

    def clear_forces(self) -> None:
        self.a[:] = 0.0

    def apply_acceleration(self, acc: NDArray[np.float64]) -> None:
        self.a += np.asarray(acc, dtype=np.float64)

    def integrate(self, dt: float = 1.0, damping: VelocityDamping | None = None) -> None:
        """
        Semi-implicit Euler step.

        1. v_{n+1} = v_n + a * dt
        2. v_{n+1} *= factor           (only if ``damping`` is given)
        3. p_{n+1} = p_n + v_{n+1} * dt

        Damping acts on the new velocity before the position update, so the
        step already moves with the damped velocity.
        """
        self.v += self.a * dt
        if damping is not None:
            damping.damp(self)
        self.p += self.v * dt

    def set_state(
        self,
        position: NDArray[np.float64] | None = None,
        velocity: NDArray[np.float64] | None = None,
    ) -> None:
        """Overwrite position and/or velocity in place."""
        if position is not None:
            self.p[:] = position
        if velocity is not None:
            self.v[:] = velocity

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.v))

    def distance_to(self, point: NDArray[np.float64]) -> float:
        return float(np.linalg.norm(np.asarray(point, dtype=np.float64) - self.p))

    def __repr__(self) -> str:
        return f"PointBody2D(name='{self.name}', p={self.p.tolist()}, v={self.v.tolist()})"
