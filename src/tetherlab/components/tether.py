"""
Tether controller: lifecycle and per-tick API for one rope.

One controller belongs to one tethered entity. It owns that entity's
optional chain (``None`` while detached), runs Verlet integration and
relaxation each tick, and tells the host how to correct the free end.

State Machine:
    DETACHED → (attach) → TETHERED → (detach | death) → DETACHED
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

import numpy as np
from numpy.typing import NDArray

from tetherlab.config import TetherConfig, extend
from tetherlab.core.solver import ConstraintSolver
from tetherlab.dynamics.chain import ParticleChain
from tetherlab.dynamics.constraints import SegmentConstraint, chain_constraints
from tetherlab.utils.validation import validate_vector2

__all__ = [
    "AttachmentState",
    "CorrectedFreeEnd",
    "TetherController",
    "extend",
]


class AttachmentState(Enum):
    """Tether state of one entity."""

    DETACHED = auto()  # No rope, e.g. inside the ship
    TETHERED = auto()  # Rope live, ticked every frame


@dataclass
class CorrectedFreeEnd:
    """
    What the host must write back into the free-end entity after a tick.

    Attributes
    ----------
    position : NDArray[np.float64]
        Corrected free-end position (2,)
    velocity_override : NDArray[np.float64] | None
        Zero vector when the rope went taut this tick, else None
    pull_delta : NDArray[np.float64]
        Velocity nudge toward the anchor (2,), added every tick
    clamped : bool
        True if the span clamp fired
    span : float
        Anchor-to-free-end distance after correction
    """

    position: NDArray[np.float64]
    velocity_override: NDArray[np.float64] | None
    pull_delta: NDArray[np.float64]
    clamped: bool
    span: float

    def apply(self, velocity: NDArray[np.float64]) -> NDArray[np.float64]:
        """
        New free-end velocity: the override replaces ``velocity`` if present,
        then the pull delta is added.
        """
        base = (
            self.velocity_override
            if self.velocity_override is not None
            else np.asarray(velocity, dtype=np.float64)
        )
        return base + self.pull_delta


def pull_delta(
    anchor: NDArray[np.float64],
    free_end: NDArray[np.float64],
    max_length: float,
    pull_strength: float,
) -> NDArray[np.float64]:
    """
    Continuous reel-in bias toward the anchor.

    pull = normalize(anchor - free_end) * pull_strength * clamp(dist / max_length, 0, 1)

    Zero when the points coincide.
    """
    d = anchor - free_end
    dist = float(np.hypot(d[0], d[1]))
    if dist == 0.0:
        return np.zeros(2, dtype=np.float64)
    fraction = min(max(dist / max_length, 0.0), 1.0)
    return d / dist * (pull_strength * fraction)


class TetherController:
    """
    Owns one tether between a mobile anchor and a free-end point mass.

    Parameters
    ----------
    config : TetherConfig | None
        Rope parameters. The controller keeps a reference, so upgrades made
        through ``extend`` on the same object apply from the next tick.
    entity_id : str | None
        Identifier of the free-end entity, for bookkeeping only.

    Attributes
    ----------
    chain : ParticleChain | None
        Live chain while tethered, None while detached
    solver : ConstraintSolver | None
        Relaxation solver built at attach time, None while detached
    state : AttachmentState
        Current attachment state
    ticks : int
        Ticks since the last attach

    Examples
    --------
    >>> ctrl = TetherController()
    >>> ctrl.attach((0.0, 0.0), (100.0, 0.0))
    >>> out = ctrl.tick((0.0, 0.0), (120.0, 0.0), (1.0, 0.0))
    >>> player.p[:] = out.position
    >>> player.v[:] = out.apply(player.v)

    Notes
    -----
    ``tick`` must run exactly once per simulation frame while tethered.
    Skipping frames breaks the Verlet position history and shows up as a
    velocity jump on the next call.

    When the rope goes taut the free end's velocity is zeroed completely,
    not only its outward component.
    """

    def __init__(self, config: TetherConfig | None = None, entity_id: str | None = None):
        self.config = config if config is not None else TetherConfig()
        self.entity_id = entity_id
        self.chain: ParticleChain | None = None
        self.solver: ConstraintSolver | None = None
        self._segments: list[SegmentConstraint] = []
        self.ticks = 0
        self.last_result: CorrectedFreeEnd | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def state(self) -> AttachmentState:
        return AttachmentState.TETHERED if self.chain is not None else AttachmentState.DETACHED

    @property
    def is_tethered(self) -> bool:
        return self.chain is not None

    def attach(
        self,
        anchor_position,
        free_end_position,
        config: TetherConfig | None = None,
    ) -> ParticleChain:
        """
        Create a fresh chain between anchor and free end.

        Parameters
        ----------
        anchor_position : array_like
            Anchor (ship) position (2,)
        free_end_position : array_like
            Free-end (player) position (2,)
        config : TetherConfig | None
            Replaces the controller's config when given

        Returns
        -------
        ParticleChain
            The new chain, at rest

        Raises
        ------
        ValueError
            If the config is invalid or a position is malformed
        """
        if config is not None:
            self.config = config
        self.config.validate()
        anchor = validate_vector2(anchor_position, "anchor_position")
        free_end = validate_vector2(free_end_position, "free_end_position")

        self.chain = ParticleChain.from_endpoints(anchor, free_end, self.config.segment_length)
        self.solver = ConstraintSolver(self.config.relax_iterations)
        self._segments = chain_constraints(self.chain.n_particles, self.chain.segment_length)
        self.ticks = 0
        self.last_result = None
        return self.chain

    def detach(self) -> None:
        """Drop the chain. Nothing about the old rope survives."""
        self.chain = None
        self.solver = None
        self._segments = []
        self.ticks = 0
        self.last_result = None

    def extend(self, delta: float) -> float:
        """Grow max_length by ``delta`` (see tetherlab.config.extend). Returns the new budget."""
        extend(self.config, delta)
        return self.config.max_length

    # -------------------------------------------------------------------------
    # Per-frame update
    # -------------------------------------------------------------------------

    def tick(
        self,
        anchor_position,
        free_end_position,
        free_end_velocity=None,
    ) -> CorrectedFreeEnd:
        """
        Advance the rope one frame and compute the free-end correction.

        Parameters
        ----------
        anchor_position : array_like
            This frame's anchor position (2,)
        free_end_position : array_like
            This frame's free-end position (2,)
        free_end_velocity : array_like | None
            Free-end velocity (2,). Accepted for symmetry with the host's
            entity state; the correction does not depend on it.

        Returns
        -------
        CorrectedFreeEnd

        Raises
        ------
        RuntimeError
            If called while detached
        ValueError
            If a position is not a finite (2,) vector
        """
        if self.chain is None:
            raise RuntimeError(
                f"Tether for '{self.entity_id}' is detached. Call attach() before tick()."
            )
        anchor = validate_vector2(anchor_position, "anchor_position")
        free_end = validate_vector2(free_end_position, "free_end_position")

        self.chain.integrate()
        relaxed = self.solver.relax(
            self.chain, anchor, free_end, self.config.max_length, segments=self._segments
        )

        position = relaxed.free_end
        result = CorrectedFreeEnd(
            position=position,
            velocity_override=np.zeros(2, dtype=np.float64) if relaxed.clamped else None,
            pull_delta=pull_delta(
                anchor, position, self.config.max_length, self.config.pull_strength
            ),
            clamped=relaxed.clamped,
            span=relaxed.span,
        )
        self.ticks += 1
        self.last_result = result
        return result

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    @property
    def particles(self) -> NDArray[np.float64] | None:
        """Polyline snapshot of the rope, or None while detached."""
        return self.chain.snapshot() if self.chain is not None else None

    def __repr__(self) -> str:
        return (
            f"TetherController(entity_id={self.entity_id!r}, state={self.state.name}, "
            f"max_length={self.config.max_length})"
        )
