"""
tetherlab - Verlet rope tether simulation for a zero-gravity mining game.

Core Components
---------------
ParticleChain : Rope discretization, Verlet-integrated point masses
ConstraintSolver : Gauss-Seidel segment relaxation with a hard span clamp
TetherController : Attach/tick/detach lifecycle for one tethered entity

Game Harness
------------
TetherSystem : Controllers keyed by entity id
Ship : Bobbing anchor entity
Player : Free-end entity with thrust, oxygen and attachment state
World : Frame loop with CSV logging and plots
Scenario : Fluent scripted runs

Examples
--------
>>> from tetherlab import TetherController, TetherConfig
>>> ctrl = TetherController(TetherConfig(max_length=320.0))
>>> chain = ctrl.attach((0.0, 0.0), (100.0, 0.0))
>>> out = ctrl.tick((0.0, 0.0), (500.0, 0.0))
"""

__version__ = "0.1.0"

from tetherlab.config import TETHER_PRESETS, TetherConfig, config_from_preset, extend
from tetherlab.dynamics.chain import ParticleChain
from tetherlab.dynamics.body import PointBody2D
from tetherlab.core.solver import ConstraintSolver, RelaxResult

# Components
from tetherlab.components import (
    AttachmentState,
    Component,
    CorrectedFreeEnd,
    Player,
    Ship,
    TetherController,
    TetherSystem,
)
from tetherlab.core.simulation import World

# Logging
from tetherlab.logger import CSVLogger
from tetherlab.api.scenario import Scenario

__all__ = [
    # Version
    "__version__",
    # Config
    "TetherConfig",
    "TETHER_PRESETS",
    "config_from_preset",
    "extend",
    # Core
    "ParticleChain",
    "ConstraintSolver",
    "RelaxResult",
    "TetherController",
    "CorrectedFreeEnd",
    "AttachmentState",
    # Harness
    "PointBody2D",
    "Component",
    "Ship",
    "Player",
    "TetherSystem",
    "World",
    # Logging
    "CSVLogger",
    # API
    "Scenario",
]
