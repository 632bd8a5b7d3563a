"""
Particle chain: the rope's discretization as ordered 2D point masses.

Each particle stores its current and previous position; velocity is implicit
(current - previous) and advanced by position Verlet integration with no
gravity and no damping.

Slot 0 is the anchor slot and slot N-1 the free-end slot. Both are
overwritten from live entities every tick, after integration. Interior
particles belong to the chain alone.
"""
from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from tetherlab.utils.validation import validate_positive, validate_vector2

# Below this separation anchor and free end count as coincident
EPSILON_SEPARATION = 1e-9
MIN_SEGMENTS = 3


def segment_count(separation: float, segment_length: float) -> int:
    """Number of segments for a chain spanning ``separation`` at creation."""
    return max(MIN_SEGMENTS, math.ceil(separation / segment_length))


class ParticleChain:
    """
    Fixed-size ordered sequence of Verlet particles.

    Parameters
    ----------
    positions : NDArray[np.float64]
        Current positions (N, 2), N >= 2
    segment_length : float
        Rest separation between neighbours
    previous : NDArray[np.float64] | None
        Previous positions (N, 2). Defaults to ``positions`` (at rest).

    Attributes
    ----------
    pos : NDArray[np.float64]
        Current positions (N, 2)
    prev : NDArray[np.float64]
        Previous positions (N, 2)
    segment_length : float
        Rest separation, constant for the chain's lifetime

    Notes
    -----
    N never changes after construction. Upgrading the rope changes the
    length budget held by the controller, not the particle count.
    """
    __slots__ = ("pos", "prev", "segment_length")

    def __init__(
        self,
        positions: NDArray[np.float64],
        segment_length: float,
        previous: NDArray[np.float64] | None = None,
    ) -> None:
        validate_positive(segment_length, "segment_length")
        pos = np.array(positions, dtype=np.float64)
        if pos.ndim != 2 or pos.shape[1] != 2 or pos.shape[0] < 2:
            raise ValueError(f"positions must have shape (N, 2) with N >= 2, got {pos.shape}")
        prev = pos.copy() if previous is None else np.array(previous, dtype=np.float64)
        if prev.shape != pos.shape:
            raise ValueError(
                f"previous positions shape {prev.shape} does not match {pos.shape}"
            )
        self.pos = pos
        self.prev = prev
        self.segment_length = float(segment_length)

    @classmethod
    def from_endpoints(
        cls,
        anchor,
        free_end,
        segment_length: float,
    ) -> ParticleChain:
        """
        Lay out a resting chain on the straight line from anchor to free end.

        N = max(3, ceil(separation / segment_length)) + 1 particles are
        spaced evenly. If the endpoints coincide, a straight 3-segment chain
        of rest length ``3 * segment_length`` is laid out from the anchor
        along +x instead of collapsing every segment to zero.

        The layout depends on the inputs only, so repeated calls with the
        same arguments give identical chains.
        """
        validate_positive(segment_length, "segment_length")
        a = validate_vector2(anchor, "anchor")
        b = validate_vector2(free_end, "free_end")

        separation = float(np.linalg.norm(b - a))
        if separation < EPSILON_SEPARATION:
            n_seg = MIN_SEGMENTS
            offsets = np.arange(n_seg + 1, dtype=np.float64) * segment_length
            positions = np.column_stack([a[0] + offsets, np.full(n_seg + 1, a[1])])
        else:
            n_seg = segment_count(separation, segment_length)
            t = np.linspace(0.0, 1.0, n_seg + 1)[:, None]
            positions = a + (b - a) * t
            # linspace hits the endpoints exactly
            positions[0] = a
            positions[-1] = b

        return cls(positions, segment_length)

    # --- Integration ---

    def integrate(self) -> None:
        """
        Advance every particle one Verlet step.

        new = pos + (pos - prev); prev = pos; pos = new

        Runs over all slots, ends included. The controller pins the ends
        afterwards so they carry no phantom momentum.
        """
        new = 2.0 * self.pos - self.prev
        self.prev = self.pos
        self.pos = new

    def pin_anchor(self, p: NDArray[np.float64]) -> None:
        self.pos[0] = p

    def pin_free_end(self, p: NDArray[np.float64]) -> None:
        self.pos[-1] = p

    # --- Read-only views ---

    @property
    def n_particles(self) -> int:
        return int(self.pos.shape[0])

    @property
    def n_segments(self) -> int:
        return self.n_particles - 1

    @property
    def anchor(self) -> NDArray[np.float64]:
        """Anchor slot position (copy)."""
        return self.pos[0].copy()

    @property
    def free_end(self) -> NDArray[np.float64]:
        """Free-end slot position (copy)."""
        return self.pos[-1].copy()

    @property
    def nominal_length(self) -> float:
        """Rest length of the whole chain, (N-1) * segment_length."""
        return self.n_segments * self.segment_length

    @property
    def velocities(self) -> NDArray[np.float64]:
        """Implicit per-particle velocity, pos - prev (N, 2)."""
        return self.pos - self.prev

    def span(self) -> float:
        """Straight-line anchor-to-free-end distance."""
        return float(np.linalg.norm(self.pos[-1] - self.pos[0]))

    def segment_lengths(self) -> NDArray[np.float64]:
        """Distances between adjacent particles (N-1,)."""
        return np.linalg.norm(np.diff(self.pos, axis=0), axis=1)

    def max_segment_deviation(self) -> float:
        """Largest |segment length - rest length| over the chain."""
        return float(np.max(np.abs(self.segment_lengths() - self.segment_length)))

    def snapshot(self) -> NDArray[np.float64]:
        """Copy of the particle positions, safe to hand to a renderer."""
        return self.pos.copy()

    def copy(self) -> ParticleChain:
        return ParticleChain(self.pos, self.segment_length, previous=self.prev)

    def __len__(self) -> int:
        return self.n_particles

    def __repr__(self) -> str:
        return (
            f"ParticleChain(n_particles={self.n_particles}, "
            f"segment_length={self.segment_length}, span={self.span():.3f})"
        )
