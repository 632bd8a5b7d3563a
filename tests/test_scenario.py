import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pytest

from tetherlab.api import Scenario

from conftest import SPAN_TOLERANCE


def test_scripted_spacewalk():
    sc = (
        Scenario("spacewalk", logging=False)
        .add_player("miner")
        .exit_ship("miner", frame=0)
        .schedule_thrust("miner", start=0, stop=120, direction=(1.0, 0.0))
        .schedule_upgrade("miner", frame=60)
        .run(frames=240, log_interval=0)
    )
    world = sc.world
    miner = world.get_player("miner")

    assert world.frame == 240
    assert miner.rope_max_length == pytest.approx(620.0)
    assert world.tethers.is_tethered("miner")
    assert np.array_equal(miner.thruster.direction, [0.0, 0.0])
    span = np.linalg.norm(miner.position - world.ship.position)
    assert span <= 620.0 + SPAN_TOLERANCE


def test_each_player_gets_own_config():
    sc = (
        Scenario("pair", logging=False)
        .configure_tether("loose", max_length=200.0)
        .add_player("miner")
        .add_player("hauler", offset=(-60.0, 0.0))
        .schedule_upgrade("miner", frame=0, delta=50.0)
        .run(frames=1, log_interval=0)
    )
    miner = sc.world.get_player("miner")
    hauler = sc.world.get_player("hauler")

    assert miner.tether_config is not hauler.tether_config
    assert miner.rope_max_length == pytest.approx(250.0)
    assert hauler.rope_max_length == pytest.approx(200.0)
    assert hauler.tether_config.relax_iterations == 2


def test_return_to_ship():
    sc = (
        Scenario("round_trip", logging=False)
        .add_player("miner")
        .exit_ship("miner", frame=0)
        .enter_ship("miner", frame=5)
        .run(frames=10, log_interval=0)
    )
    miner = sc.world.get_player("miner")
    assert miner.in_ship
    assert not sc.world.tethers.is_tethered("miner")


def test_invalid_schedule():
    sc = Scenario("bad", logging=False)
    with pytest.raises(ValueError, match="stop > start"):
        sc.schedule_thrust("miner", start=10, stop=10, direction=(1.0, 0.0))
    with pytest.raises(ValueError):
        sc.configure_tether("rubber")


def test_logged_run_with_plots(tmp_path):
    sc = (
        Scenario("logged", output_dir=str(tmp_path))
        .add_player("miner")
        .exit_ship("miner")
        .schedule_thrust("miner", start=0, stop=30, direction=(0.0, 1.0))
        .enable_plotting(show=False)
        .run(frames=40, log_interval=0)
    )
    plt.close("all")

    out = sc.world.output_path
    assert (out / "logs" / "simulation.csv").exists()
    assert (out / "plots" / "miner_trajectory.png").exists()
    assert (out / "plots" / "miner_span.png").exists()

    history = sc.save_history(tmp_path / "history.csv")
    assert history.exists()
    sc.world.disable_logging()
