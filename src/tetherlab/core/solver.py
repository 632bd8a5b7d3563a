from __future__ import annotations
import numpy as np
from dataclasses import dataclass, field
from typing import List
from tetherlab.dynamics.chain import ParticleChain
from tetherlab.dynamics.constraints import SegmentConstraint, SpanConstraint, chain_constraints
from tetherlab.utils.validation import validate_iterations, validate_positive

Array = np.ndarray


@dataclass
class RelaxResult:
    """
    Outcome of one relaxation pass over a chain.

    free_end:    authoritative free-end position for this tick (2,)
    clamped:     True if the span clamp fired on any iteration (rope taut)
    span:        anchor-to-free-end distance after the last iteration
    nominal_length: (N-1) * segment_length, rest length of the chain
    deviation_history: max segment deviation after each iteration, when recorded
    """
    free_end: Array
    clamped: bool
    span: float
    nominal_length: float
    iterations: int
    deviation_history: List[float] = field(default_factory=list)


class ConstraintSolver:
    """
    Iterative Gauss-Seidel distance relaxation with a hard span clamp.

    Per call:
      1) pin slot 0 to the anchor and slot N-1 to the free end
      2) repeat ``iterations`` times:
           a) project each segment constraint in order 0 -> N-1
              (slot 0 never moves; the free end does, giving tension feedback)
           b) clamp the free end to within ``max_length`` of the anchor

    The clamp runs after every pairwise pass, so the span bound holds on
    exit regardless of how much slack or stretch the soft pass leaves.
    Residual segment error of a few percent after 4 iterations is normal.
    """
    def __init__(self, iterations: int = 4, record_history: bool = False) -> None:
        validate_iterations(iterations, "iterations")
        self.iterations = int(iterations)
        self.record_history = bool(record_history)

    def relax(
        self,
        chain: ParticleChain,
        anchor: Array,
        free_end: Array,
        max_length: float,
        segments: List[SegmentConstraint] | None = None,
    ) -> RelaxResult:
        """
        Relax ``chain`` in place between ``anchor`` and ``free_end``.

        ``segments`` are the chain's segment constraints in solve order. A
        caller that relaxes the same chain every frame builds them once with
        ``chain_constraints``; when omitted they are built for this call.
        """
        validate_positive(max_length, "max_length")
        chain.pin_anchor(anchor)
        chain.pin_free_end(free_end)

        if segments is None:
            segments = chain_constraints(chain.n_particles, chain.segment_length)
        span_limit = SpanConstraint(max_length)
        pos = chain.pos

        clamped = False
        history: List[float] = []
        for _ in range(self.iterations):
            for c in segments:
                c.project(pos)
            if span_limit.project(pos):
                clamped = True
            if self.record_history:
                history.append(chain.max_segment_deviation())

        return RelaxResult(
            free_end=pos[-1].copy(),
            clamped=clamped,
            span=chain.span(),
            nominal_length=chain.nominal_length,
            iterations=self.iterations,
            deviation_history=history,
        )
