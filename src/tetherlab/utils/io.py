# src/tetherlab/utils/io.py
import json
import pandas as pd
from pathlib import Path
from typing import List, Dict, Any


def save_tick_history(history: List[Dict[str, Any]], filepath: str) -> Path:
    """
    Saves a list of per-frame state dictionaries to a CSV file.

    Args:
        history: List of dicts, e.g., [{'frame': 0, 't': 0.0, 'miner.span': 20.0}, ...]
        filepath: Destination path (e.g., 'results/run1.csv')

    Returns:
        Absolute path of the written file.
    """
    if not history:
        raise ValueError("Tick history is empty. Nothing to save.")

    path = Path(filepath)
    # Ensure the directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(history)
    df.to_csv(path, index=False)
    print(f"Tick history saved to {path.absolute()}")
    return path.absolute()


def load_tick_history(filepath: str) -> pd.DataFrame:
    """Load a history CSV written by save_tick_history."""
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"No history file at {path}")
    return pd.read_csv(path)


def load_tether_config(filepath: str):
    """
    Load tether settings from a JSON object.

    Keys are any of ``segment_length``, ``max_length``, ``relax_iterations``
    and ``pull_strength``; missing keys keep their defaults.

    Raises:
        ValueError: on unknown keys or a non-object document.
    """
    from tetherlab.config import TetherConfig

    path = Path(filepath)
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Tether config must be a JSON object, got {type(raw).__name__}")

    known = set(TetherConfig.__dataclass_fields__)
    unknown = set(raw) - known
    if unknown:
        raise ValueError(
            f"Unknown tether config keys: {sorted(unknown)}. Valid keys: {sorted(known)}"
        )

    config = TetherConfig(**raw)
    config.validate()
    return config
