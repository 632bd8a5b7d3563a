import csv
import math
from types import SimpleNamespace

import numpy as np
import pytest

from tetherlab.components import TetherSystem
from tetherlab.dynamics.body import PointBody2D
from tetherlab.logger import CSVLogger


@pytest.fixture
def world():
    ship = PointBody2D("ship", (0.0, 0.0))
    miner = PointBody2D("miner", (100.0, 0.0), velocity=(1.0, -2.0))
    tethers = TetherSystem()
    tethers.attach("miner", ship.p, miner.p)
    return SimpleNamespace(
        t=0.0,
        bodies=[ship, miner],
        players=[SimpleNamespace(name="miner"), SimpleNamespace(name="hauler")],
        tethers=tethers,
    )


def read_rows(path):
    with open(path, newline="") as f:
        return list(csv.reader(f))


def test_header_and_rows(world, tmp_path):
    path = tmp_path / "log.csv"
    with CSVLogger(path) as logger:
        logger.log(world)
        world.t = 1.0
        world.tethers.tick("miner", world.bodies[0].p, (5000.0, 0.0))
        logger.log(world)

    rows = read_rows(path)
    header = rows[0]
    assert header[:5] == ["t", "ship.p_x", "ship.p_y", "ship.v_x", "ship.v_y"]
    assert "miner.p_x" in header
    assert header[-4:] == ["hauler.span", "hauler.taut", "hauler.attached", "hauler.n_particles"]
    assert len(rows) == 3

    first = dict(zip(header, rows[1]))
    assert float(first["miner.v_y"]) == pytest.approx(-2.0)
    assert float(first["miner.span"]) == pytest.approx(100.0)
    assert float(first["miner.attached"]) == 1.0
    assert float(first["miner.taut"]) == 0.0
    assert float(first["miner.n_particles"]) == 6.0
    # Never-attached player
    assert math.isnan(float(first["hauler.span"]))
    assert float(first["hauler.attached"]) == 0.0

    second = dict(zip(header, rows[2]))
    assert float(second["t"]) == pytest.approx(1.0)
    assert float(second["miner.taut"]) == 1.0
    assert float(second["miner.span"]) <= 320.0 + 1e-9


def test_buffer_flushes_when_full(world, tmp_path):
    path = tmp_path / "log.csv"
    logger = CSVLogger(path, buffer_size=2)
    logger.log(world)
    assert len(read_rows(path)) == 1  # header only

    logger.log(world)
    assert len(read_rows(path)) == 3

    logger.log(world)
    logger.close()
    assert len(read_rows(path)) == 4


def test_custom_fields(world, tmp_path):
    path = tmp_path / "nested" / "log.csv"
    with CSVLogger(path, fields=["p"], tether_fields=["span"]) as logger:
        logger.log(world)

    header = read_rows(path)[0]
    assert header == ["t", "ship.p_x", "ship.p_y", "miner.p_x", "miner.p_y",
                      "miner.span", "hauler.span"]


def test_invalid_fields(tmp_path):
    with pytest.raises(ValueError, match="Invalid fields"):
        CSVLogger(tmp_path / "x.csv", fields=["q"])
    with pytest.raises(ValueError, match="Invalid tether fields"):
        CSVLogger(tmp_path / "x.csv", tether_fields=["tension"])


def test_detached_player_logs_nan_span(world, tmp_path):
    world.tethers.detach("miner")
    path = tmp_path / "log.csv"
    with CSVLogger(path) as logger:
        logger.log(world)

    header, row = read_rows(path)
    values = dict(zip(header, row))
    assert math.isnan(float(values["miner.span"]))
    assert float(values["miner.n_particles"]) == 0.0
    assert np.isclose(float(values["miner.p_x"]), 100.0)
