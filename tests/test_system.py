import numpy as np
import pytest

from tetherlab.components import TetherSystem
from tetherlab.config import TetherConfig

from conftest import SPAN_TOLERANCE


@pytest.fixture
def system():
    tethers = TetherSystem("ship_lines")
    tethers.attach("miner", (0.0, 0.0), (100.0, 0.0))
    tethers.attach("hauler", (0.0, 0.0), (0.0, 60.0), TetherConfig(max_length=200.0))
    return tethers


def test_controllers_are_independent(system):
    assert len(system) == 2
    assert sorted(system.tethered_ids()) == ["hauler", "miner"]

    a = system.tick("miner", (0.0, 0.0), (5000.0, 0.0))
    b = system.tick("hauler", (0.0, 0.0), (0.0, 60.0))

    assert a.clamped and a.span <= 320.0 + SPAN_TOLERANCE
    assert not b.clamped
    assert system.controller("hauler").config.max_length == 200.0


def test_detach_keeps_controller_and_config(system):
    system.controller("miner").extend(300.0)
    system.detach("miner")

    assert not system.is_tethered("miner")
    assert system.is_tethered("hauler")
    assert len(system) == 1
    assert "miner" in system.controllers

    ctrl = system.attach("miner", (0.0, 0.0), (40.0, 0.0))
    assert ctrl is system.controllers["miner"]
    assert ctrl.config.max_length == pytest.approx(620.0)


def test_unknown_ids(system):
    system.detach("ghost")  # ignored
    assert not system.is_tethered("ghost")
    with pytest.raises(KeyError, match="ghost"):
        system.controller("ghost")
    with pytest.raises(KeyError):
        system.tick("ghost", (0.0, 0.0), (1.0, 0.0))


def test_snapshots_only_live_tethers(system):
    system.detach("hauler")
    snaps = system.snapshots()

    assert list(snaps) == ["miner"]
    assert snaps["miner"].shape == (6, 2)
    snaps["miner"][:] = 0.0
    assert not np.allclose(system.controller("miner").chain.pos, 0.0)


def test_summary_and_repr(system):
    system.detach("hauler")
    text = system.summary()
    assert "ship_lines" in text
    assert "[miner] TETHERED" in text
    assert "[hauler] DETACHED" in text
    assert "tethered=1" in repr(system)
