"""Utility functions for tetherlab simulations."""

from .io import load_tether_config, load_tick_history, save_tick_history
from .validation import (
    validate_iterations,
    validate_non_negative,
    validate_positive,
    validate_timestep,
    validate_vector2,
)

__all__ = [
    "save_tick_history",
    "load_tick_history",
    "load_tether_config",
    "validate_positive",
    "validate_non_negative",
    "validate_vector2",
    "validate_iterations",
    "validate_timestep",
]
