"""
Tether configuration.

A TetherConfig travels with each tether instance. Everything except
``max_length`` stays fixed once a chain exists; ``max_length`` only grows,
through rope upgrades.
"""
from __future__ import annotations

import warnings
from dataclasses import asdict, dataclass

from tetherlab.utils.validation import (
    validate_iterations,
    validate_non_negative,
    validate_positive,
)

DEFAULT_SEGMENT_LENGTH = 20.0
DEFAULT_MAX_LENGTH = 320.0
DEFAULT_RELAX_ITERATIONS = 4
DEFAULT_PULL_STRENGTH = 0.05


@dataclass
class TetherConfig:
    """
    Rope parameters, in world distance units and per-frame velocity units.

    Parameters
    ----------
    segment_length : float
        Rest distance between adjacent particles. Also sets the particle
        count at attach time.
    max_length : float
        Length budget: largest allowed anchor-to-free-end distance.
    relax_iterations : int
        Relaxation passes per tick. More passes give a stiffer, straighter
        rope at higher cost.
    pull_strength : float
        Velocity nudge toward the anchor at full extension, per tick.
    """

    segment_length: float = DEFAULT_SEGMENT_LENGTH
    max_length: float = DEFAULT_MAX_LENGTH
    relax_iterations: int = DEFAULT_RELAX_ITERATIONS
    pull_strength: float = DEFAULT_PULL_STRENGTH

    def validate(self) -> None:
        """
        Check the configuration can drive a solver.

        Raises
        ------
        ValueError
            If a length is not positive, the iteration count is not an
            integer >= 1, or the pull strength is negative.
        """
        validate_positive(self.segment_length, "segment_length")
        validate_positive(self.max_length, "max_length")
        validate_iterations(self.relax_iterations)
        validate_non_negative(self.pull_strength, "pull_strength")

    def copy(self) -> TetherConfig:
        return TetherConfig(**asdict(self))

    def to_dict(self) -> dict:
        return asdict(self)


def extend(config: TetherConfig, delta: float) -> TetherConfig:
    """
    Grow the length budget of ``config`` in place by exactly ``delta``.

    Parameters
    ----------
    config : TetherConfig
        Configuration to upgrade. Shared with any live tether, so the new
        budget applies from its next tick.
    delta : float
        Amount to add to ``max_length``. Non-positive values leave the
        config unchanged and issue a RuntimeWarning.

    Returns
    -------
    TetherConfig
        The same config object, for chaining.

    Notes
    -----
    Segment length and the particle count of existing chains are never
    touched; an in-progress tether keeps its segments until reattached.
    """
    if not delta > 0:
        warnings.warn(
            f"Tether upgrade delta must be positive, got {delta}. "
            "max_length left unchanged.",
            RuntimeWarning,
            stacklevel=2
        )
        return config
    config.max_length = float(config.max_length) + float(delta)
    return config


TETHER_PRESETS = {
    "default": {
        "segment_length": DEFAULT_SEGMENT_LENGTH,
        "max_length": DEFAULT_MAX_LENGTH,
        "relax_iterations": DEFAULT_RELAX_ITERATIONS,
        "pull_strength": DEFAULT_PULL_STRENGTH,
    },
    "stiff": {
        "segment_length": DEFAULT_SEGMENT_LENGTH,
        "max_length": DEFAULT_MAX_LENGTH,
        "relax_iterations": 8,
        "pull_strength": DEFAULT_PULL_STRENGTH,
    },
    "loose": {
        "segment_length": DEFAULT_SEGMENT_LENGTH,
        "max_length": DEFAULT_MAX_LENGTH,
        "relax_iterations": 2,
        "pull_strength": 0.02,
    },
    "long": {
        "segment_length": DEFAULT_SEGMENT_LENGTH,
        "max_length": 620.0,  # one upgrade (150 doubled)
        "relax_iterations": DEFAULT_RELAX_ITERATIONS,
        "pull_strength": DEFAULT_PULL_STRENGTH,
    },
}


def config_from_preset(preset: str = "default", **overrides) -> TetherConfig:
    """
    Build a TetherConfig from a named preset plus keyword overrides.

    Presets: 'default', 'stiff', 'loose', 'long'
    """
    if preset not in TETHER_PRESETS:
        raise ValueError(
            f"Unknown tether preset '{preset}'. Options: {sorted(TETHER_PRESETS)}"
        )
    params = dict(TETHER_PRESETS[preset])
    unknown = set(overrides) - set(params)
    if unknown:
        raise ValueError(f"Unknown tether parameters: {sorted(unknown)}")
    params.update(overrides)
    return TetherConfig(**params)
