"""
Ship component - the mobile tether anchor.

The ship drifts with a slow deterministic bob and exposes the checks the
player needs to enter it.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from tetherlab.dynamics.body import PointBody2D

from .base import Component

# Distance from which a drifting player can re-enter
DEFAULT_BOARDING_RADIUS = 60.0
# Where a player sits while aboard, relative to the ship centre
AIRLOCK_OFFSET = (20.0, 0.0)


class Ship(Component):
    """
    Bobbing ship hull.

    Parameters
    ----------
    name : str
        Component name
    body : PointBody2D
        Body holding the hull centre
    width, height : float
        Hull extents for ``inside`` checks. Default 160 x 80
    bob_amplitude : tuple[float, float]
        Per-frame drift amplitude along x and y. Default (0.05, 0.03)
    bob_frequency : tuple[float, float]
        Phase rate per frame along x and y. Default (0.003, 0.002)

    Notes
    -----
    Per frame ``f``:
        x += sin(f * fx + x) * ax
        y += cos(f * fy + y) * ay
    The ship ignores its velocity; the bob is kinematic.
    """

    def __init__(
        self,
        name: str,
        body: PointBody2D,
        width: float = 160.0,
        height: float = 80.0,
        bob_amplitude: tuple[float, float] = (0.05, 0.03),
        bob_frequency: tuple[float, float] = (0.003, 0.002),
    ):
        super().__init__(name, body)
        self.width = float(width)
        self.height = float(height)
        self.bob_amplitude = tuple(float(a) for a in bob_amplitude)
        self.bob_frequency = tuple(float(f) for f in bob_frequency)
        self.frame = 0

        self._state = {"component_type": "ship"}

    def update_state(self, t: float, dt: float) -> None:
        x, y = self.body.p
        ax, ay = self.bob_amplitude
        fx, fy = self.bob_frequency
        self.body.p[0] = x + np.sin(self.frame * fx + x) * ax
        self.body.p[1] = y + np.cos(self.frame * fy + y) * ay
        self.frame += 1

    def inside(self, point: NDArray[np.float64]) -> bool:
        dx, dy = np.abs(np.asarray(point, dtype=np.float64) - self.body.p)
        return bool(dx < self.width / 2 and dy < self.height / 2)

    def near(self, point: NDArray[np.float64], radius: float = DEFAULT_BOARDING_RADIUS) -> bool:
        """True if ``point`` can board: inside the hull or within ``radius``."""
        return self.inside(point) or self.body.distance_to(point) < radius

    def airlock_position(self) -> NDArray[np.float64]:
        return self.body.p + np.array(AIRLOCK_OFFSET, dtype=np.float64)
