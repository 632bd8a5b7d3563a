"""
Base component abstraction for game entities.

Components wrap PointBody2D with entity-specific behavior (ship drift,
player suit systems). Uses composition: a Component HAS-A PointBody2D.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

from tetherlab.dynamics.body import PointBody2D
from tetherlab.dynamics.forces import Force


class Component(ABC):
    """
    Base class for simulated entities.

    Parameters
    ----------
    name : str
        Unique entity identifier, also used as the tether key
    body : PointBody2D
        Underlying point-mass dynamics

    Attributes
    ----------
    name : str
        Entity identifier
    body : PointBody2D
        Wrapped body
    forces : list[Force]
        Forces attached to this entity
    _state : dict
        Entity-specific state variables for logging
    """

    def __init__(self, name: str, body: PointBody2D):
        self.name = name
        self.body = body
        self.forces: list[Force] = []
        self._state: dict = {}

    def add_force(self, force: Force) -> None:
        self.forces.append(force)

    def apply_forces(self, t: float) -> None:
        """Apply all forces attached to this entity at time ``t`` [s]."""
        for force in self.forces:
            force.apply(self.body, t)

    @abstractmethod
    def update_state(self, t: float, dt: float) -> None:
        """
        Update entity-specific state for one frame.

        Parameters
        ----------
        t : float
            Current simulation time [s]
        dt : float
            Frame duration [s]
        """
        pass

    # -------------------------------------------------------------------------
    # Convenience properties - delegate to body
    # -------------------------------------------------------------------------

    @property
    def position(self) -> NDArray[np.float64]:
        return self.body.p

    @property
    def velocity(self) -> NDArray[np.float64]:
        return self.body.v

    def get_state_dict(self) -> dict:
        """Position, velocity and entity-specific state, for logging."""
        return {
            "name": self.name,
            "position": self.position.copy(),
            "velocity": self.velocity.copy(),
            **self._state,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', body='{self.body.name}')"
