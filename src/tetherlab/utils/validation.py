"""
Validation utilities for tether parameters and 2D state vectors.

Provides functions to validate inputs for the rope simulation,
ensuring geometric consistency and numerical stability.
"""
from __future__ import annotations
import numpy as np
from numpy.typing import NDArray
import warnings


def validate_positive(value: float, name: str, strict: bool = True) -> None:
    """
    Validate that a scalar value is positive.

    Parameters
    ----------
    value : float
        Value to validate
    name : str
        Parameter name for error messages
    strict : bool
        If True, raise ValueError. If False, issue warning.

    Raises
    ------
    ValueError
        If strict=True and value <= 0
    """
    if not value > 0:
        msg = f"{name} must be positive, got {value}"
        if strict:
            raise ValueError(msg)
        else:
            warnings.warn(msg, RuntimeWarning, stacklevel=2)


def validate_non_negative(value: float, name: str) -> None:
    """Validate that a value is non-negative."""
    if not value >= 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_vector2(v, name: str) -> NDArray[np.float64]:
    """
    Validate and convert a 2D point or vector.

    Parameters
    ----------
    v : array_like
        Candidate vector, e.g. ``(x, y)``
    name : str
        Parameter name for error messages

    Returns
    -------
    NDArray[np.float64]
        Fresh float64 copy with shape (2,)

    Raises
    ------
    ValueError
        If the shape is not (2,) or a component is not finite
    """
    arr = np.array(v, dtype=np.float64)
    if arr.shape != (2,):
        raise ValueError(f"{name} must have shape (2,), got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must be finite, got {arr}")
    return arr


def validate_iterations(n: int, name: str = "relax_iterations") -> None:
    """Validate an iteration count is an integer >= 1."""
    if isinstance(n, bool) or int(n) != n or n < 1:
        raise ValueError(f"{name} must be an integer >= 1, got {n}")


def validate_timestep(dt: float, max_dt: float = 0.1) -> None:
    """
    Validate frame timestep is positive and reasonable.

    Parameters
    ----------
    dt : float
        Frame duration [s]
    max_dt : float
        Largest frame duration that still reads as real time [s]

    Raises
    ------
    ValueError
        If timestep is invalid
    """
    if dt <= 0:
        raise ValueError(f"Timestep must be positive, got {dt}")
    if dt > max_dt:
        warnings.warn(
            f"Large frame timestep {dt}s. The tether advances once per frame, "
            f"so consider dt < {max_dt}s.",
            RuntimeWarning,
            stacklevel=2
        )
