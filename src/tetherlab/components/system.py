"""
Per-entity tether registry.

A TetherSystem keeps one TetherController per tethered entity, keyed by
entity id. Tethers never interact, so several players can be roped to the
same ship at once.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from tetherlab.config import TetherConfig

from .tether import CorrectedFreeEnd, TetherController


class TetherSystem:
    """
    Tether controllers addressed by entity identifier.

    Parameters
    ----------
    name : str
        System identifier

    Attributes
    ----------
    name : str
        System identifier
    controllers : dict[str, TetherController]
        One controller per entity that has ever been attached

    Examples
    --------
    >>> tethers = TetherSystem("ship_lines")
    >>> tethers.attach("miner", ship.position, miner.position, miner.tether_config)
    >>> out = tethers.tick("miner", ship.position, miner.position, miner.velocity)

    Notes
    -----
    Controllers survive detach with ``chain=None`` so the entity keeps its
    config (and any upgrades) for the next attach.
    """

    def __init__(self, name: str = "tethers"):
        self.name = name
        self.controllers: dict[str, TetherController] = {}

    def controller(self, entity_id: str) -> TetherController:
        """
        Get the controller for ``entity_id``.

        Raises
        ------
        KeyError
            If the entity has never been attached
        """
        try:
            return self.controllers[entity_id]
        except KeyError:
            raise KeyError(f"No tether registered for entity '{entity_id}'") from None

    def attach(
        self,
        entity_id: str,
        anchor_position,
        free_end_position,
        config: TetherConfig | None = None,
    ) -> TetherController:
        """Attach (or re-attach) a tether for ``entity_id`` and return its controller."""
        ctrl = self.controllers.get(entity_id)
        if ctrl is None:
            ctrl = TetherController(config, entity_id=entity_id)
            self.controllers[entity_id] = ctrl
        ctrl.attach(anchor_position, free_end_position, config)
        return ctrl

    def detach(self, entity_id: str) -> None:
        """Detach ``entity_id``'s tether. Unknown ids are ignored."""
        ctrl = self.controllers.get(entity_id)
        if ctrl is not None:
            ctrl.detach()

    def tick(
        self,
        entity_id: str,
        anchor_position,
        free_end_position,
        free_end_velocity=None,
    ) -> CorrectedFreeEnd:
        return self.controller(entity_id).tick(
            anchor_position, free_end_position, free_end_velocity
        )

    def is_tethered(self, entity_id: str) -> bool:
        ctrl = self.controllers.get(entity_id)
        return ctrl is not None and ctrl.is_tethered

    def tethered_ids(self) -> list[str]:
        return [eid for eid, ctrl in self.controllers.items() if ctrl.is_tethered]

    def snapshots(self) -> dict[str, NDArray[np.float64]]:
        """Rope polylines of all live tethers, copied for rendering."""
        return {
            eid: ctrl.particles
            for eid, ctrl in self.controllers.items()
            if ctrl.is_tethered
        }

    def __len__(self) -> int:
        """Number of live tethers."""
        return len(self.tethered_ids())

    def __repr__(self) -> str:
        return f"TetherSystem(name='{self.name}', tethered={len(self)}, known={len(self.controllers)})"

    def summary(self) -> str:
        """Human-readable listing of every controller."""
        lines = [f"TetherSystem: {self.name}"]
        for eid, ctrl in self.controllers.items():
            if ctrl.chain is not None:
                lines.append(
                    f"  [{eid}] TETHERED  particles={ctrl.chain.n_particles} "
                    f"span={ctrl.chain.span():.2f}/{ctrl.config.max_length:.2f}"
                )
            else:
                lines.append(f"  [{eid}] DETACHED  max_length={ctrl.config.max_length:.2f}")
        return "\n".join(lines)
