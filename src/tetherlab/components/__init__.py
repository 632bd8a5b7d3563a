"""
tetherlab component architecture.

Components wrap PointBody2D with game-entity behavior using composition.
The tether itself is not a body: a TetherController links a Ship anchor to
a Player free end, and a TetherSystem keeps one controller per entity.

Example
-------
>>> from tetherlab.components import Player, Ship, TetherSystem
>>> tethers = TetherSystem()
>>> tethers.attach("miner", ship.position, miner.position)
"""

from .tether import AttachmentState, CorrectedFreeEnd, TetherController, extend
from .base import Component
from .ship import Ship
from .player import Player
from .system import TetherSystem

__all__ = [
    "Component",
    "Ship",
    "Player",
    "AttachmentState",
    "CorrectedFreeEnd",
    "TetherController",
    "TetherSystem",
    "extend",
]
