import json

import pytest

from tetherlab.config import TETHER_PRESETS, TetherConfig, config_from_preset, extend
from tetherlab.utils.io import load_tether_config, load_tick_history, save_tick_history


def test_history_roundtrip(tmp_path):
    history = [
        {"frame": 1, "t": 0.0167, "miner.span": 20.0, "miner.taut": False},
        {"frame": 2, "t": 0.0333, "miner.span": 320.0, "miner.taut": True},
    ]
    path = save_tick_history(history, str(tmp_path / "out" / "history.csv"))

    assert path.is_absolute()
    df = load_tick_history(str(path))
    assert list(df.columns) == ["frame", "t", "miner.span", "miner.taut"]
    assert df["miner.span"].tolist() == [20.0, 320.0]


def test_empty_history_rejected(tmp_path):
    with pytest.raises(ValueError, match="empty"):
        save_tick_history([], str(tmp_path / "h.csv"))


def test_missing_history_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_tick_history(str(tmp_path / "nope.csv"))


def test_load_tether_config(tmp_path):
    path = tmp_path / "rope.json"
    path.write_text(json.dumps({"max_length": 500.0, "relax_iterations": 6}))

    config = load_tether_config(str(path))

    assert config.max_length == 500.0
    assert config.relax_iterations == 6
    assert config.segment_length == 20.0


@pytest.mark.parametrize(
    "document, message",
    [
        ([1, 2, 3], "JSON object"),
        ({"tension": 1.0}, "Unknown tether config keys"),
        ({"segment_length": -1.0}, "segment_length"),
    ],
)
def test_load_tether_config_rejects(tmp_path, document, message):
    path = tmp_path / "rope.json"
    path.write_text(json.dumps(document))
    with pytest.raises(ValueError, match=message):
        load_tether_config(str(path))


def test_presets():
    assert set(TETHER_PRESETS) == {"default", "stiff", "loose", "long"}
    assert config_from_preset("stiff").relax_iterations == 8
    assert config_from_preset("long", pull_strength=0.1).pull_strength == 0.1

    with pytest.raises(ValueError, match="Unknown tether preset"):
        config_from_preset("rubber")
    with pytest.raises(ValueError, match="Unknown tether parameters"):
        config_from_preset("default", stretch=2.0)


def test_config_copy_is_independent():
    config = TetherConfig()
    clone = config.copy()
    extend(clone, 100.0)
    assert config.max_length == 320.0
    assert clone.max_length == 420.0
    assert clone.to_dict()["max_length"] == 420.0


def test_extend_returns_same_object():
    config = TetherConfig()
    assert extend(config, 1.5) is config
    with pytest.warns(RuntimeWarning):
        assert extend(config, -1.0) is config
    assert config.max_length == pytest.approx(321.5)
