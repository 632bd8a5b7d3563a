from __future__ import annotations

import numpy as np

Array = np.ndarray

# Substituted for a zero-length separation to avoid division by zero
EPSILON_LENGTH = 1e-4


class Constraint:
    """Abstract base for position-level constraints on a particle array."""
    def evaluate(self, pos: Array) -> float: raise NotImplementedError  # residual, 0 when satisfied
    def project(self, pos: Array) -> bool: raise NotImplementedError    # correct pos in place; True if it moved anything


class SegmentConstraint(Constraint):
    """
    Keep particles i and j at ``rest_length`` apart.

    Residual: C = |p_j - p_i| - L

    Projection splits the correction half and half:
      d = p_j - p_i,  k = (|d| - L) / |d|
      p_i += 0.5 k d   (skipped when i is pinned)
      p_j -= 0.5 k d

    A pinned i does not hand its share to j; the pair only closes half the
    gap per pass.
    """
    def __init__(self, i: int, j: int, rest_length: float, pinned_i: bool = False) -> None:
        self.i = int(i)
        self.j = int(j)
        self.L = float(rest_length)
        self.pinned_i = bool(pinned_i)

    def evaluate(self, pos: Array) -> float:
        return float(np.linalg.norm(pos[self.j] - pos[self.i]) - self.L)

    def project(self, pos: Array) -> bool:
        d = pos[self.j] - pos[self.i]
        length = float(np.hypot(d[0], d[1]))
        if length == 0.0:
            length = EPSILON_LENGTH
        adjust = d * (0.5 * (length - self.L) / length)
        if not self.pinned_i:
            pos[self.i] += adjust
        pos[self.j] -= adjust
        return bool(np.any(adjust != 0.0))


class SpanConstraint(Constraint):
    """
    Bound the straight-line distance from the anchor (slot 0) to the free end
    (last slot) by ``max_length``.

    Residual: C = max(0, |p_last - p_0| - max_length)

    Projection scales the free end back along the anchor ray:
      p_last = p_0 + (p_last - p_0) * max_length / |p_last - p_0|
    The anchor never moves.
    """
    def __init__(self, max_length: float) -> None:
        self.max_length = float(max_length)

    def evaluate(self, pos: Array) -> float:
        return max(0.0, float(np.linalg.norm(pos[-1] - pos[0])) - self.max_length)

    def project(self, pos: Array) -> bool:
        d = pos[-1] - pos[0]
        dist = float(np.hypot(d[0], d[1]))
        if dist <= self.max_length:
            return False
        pos[-1] = pos[0] + d * (self.max_length / dist)
        return True


def chain_constraints(n_particles: int, segment_length: float) -> list[SegmentConstraint]:
    """Segment constraints for a chain, in solve order 0 -> N-1, anchor pinned."""
    return [
        SegmentConstraint(i, i + 1, segment_length, pinned_i=(i == 0))
        for i in range(n_particles - 1)
    ]
