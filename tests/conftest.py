import os
import sys

import matplotlib
matplotlib.use("Agg")  # Non-interactive backend for testing

import numpy as np
import pytest

# Get the path to the project root (one level up from 'tests')
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(project_root, 'src')

# Add 'src' to sys.path
sys.path.insert(0, src_path)


# Tolerance for the span bound; the clamp is exact up to rounding
SPAN_TOLERANCE = 1e-9


@pytest.fixture
def default_config():
    """Rope settings from the game: 20-unit segments, 320 budget."""
    from tetherlab.config import TetherConfig
    return TetherConfig(segment_length=20.0, max_length=320.0, relax_iterations=4, pull_strength=0.05)


@pytest.fixture
def still_ship():
    """Ship that does not bob, so the anchor is static."""
    from tetherlab.components import Ship
    from tetherlab.dynamics.body import PointBody2D
    return Ship("ship", PointBody2D("ship", (400.0, 300.0)), bob_amplitude=(0.0, 0.0))


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)
