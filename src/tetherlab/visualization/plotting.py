from __future__ import annotations
import os
import csv
from typing import Dict, Tuple, List, Iterable, Mapping
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure


def _load_csv(filepath: str) -> Tuple[np.ndarray, Dict[str, np.ndarray], List[str]]:
    """
    Load a CSV produced by CSVLogger.

    Returns
    -------
    t : (N,) array
        Time vector.
    cols : dict[str, np.ndarray]
        Mapping column_name -> (N,) array.
    headers : list[str]
        Column headers in order (first one should be 't').
    """
    with open(filepath, "r", newline="") as f:
        reader = csv.reader(f)
        headers = next(reader)
    if headers[0] != "t":
        raise ValueError("First column must be time 't'.")
    data = np.loadtxt(filepath, delimiter=",", skiprows=1, dtype=float)
    if data.ndim == 1:  # single row edge case
        data = data[None, :]
    cols: Dict[str, np.ndarray] = {}
    for j, name in enumerate(headers):
        cols[name] = data[:, j]
    t = cols["t"]
    return t, cols, headers


def _get_components(cols: Dict[str, np.ndarray], names: Iterable[str]) -> List[np.ndarray]:
    out = []
    for name in names:
        if name not in cols:
            raise KeyError(f"Column '{name}' not found in CSV.")
        out.append(cols[name])
    return out


def _finish(fig: Figure, save_path: str | None, show: bool) -> Figure:
    fig.tight_layout()
    if save_path:
        os.makedirs(os.path.dirname(save_path) or ".", exist_ok=True)
        fig.savefig(save_path, dpi=180, bbox_inches="tight")
    if show:
        plt.show()
    return fig


def plot_trajectory_2d(
    csv_path: str,
    body_name: str,
    anchor_name: str | None = None,
    save_path: str | None = None,
    show: bool = True,
) -> Figure:
    """
    Plot the (x, y) path of a body, optionally with the anchor's path.

    Parameters
    ----------
    csv_path : str
        Path to logger CSV.
    body_name : str
        Name of the body (e.g., 'miner').
    anchor_name : str | None
        Name of the anchor body (e.g., 'ship') to overlay.
    save_path : str | None
        If given, save the figure to this path (png/svg).
    show : bool
        Whether to call plt.show().

    Returns
    -------
    fig : Figure
    """
    _, cols, _ = _load_csv(csv_path)
    px, py = _get_components(cols, [f"{body_name}.p_x", f"{body_name}.p_y"])

    fig, ax = plt.subplots(1, 1, figsize=(8, 6))
    ax.plot(px, py, lw=2.0, color="#1a73e8", label=body_name)
    ax.scatter(px[0], py[0], color="#34a853", s=40, label="start")
    ax.scatter(px[-1], py[-1], color="#ea4335", s=40, label="end")
    if anchor_name is not None:
        sx, sy = _get_components(cols, [f"{anchor_name}.p_x", f"{anchor_name}.p_y"])
        ax.plot(sx, sy, lw=1.5, color="#5f6368", ls="--", label=anchor_name)
    ax.set_xlabel("x [units]"); ax.set_ylabel("y [units]")
    ax.set_aspect("equal", adjustable="datalim")
    ax.invert_yaxis()  # screen coordinates: y grows downward
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")
    ax.set_title(f"Trajectory: {body_name}")
    return _finish(fig, save_path, show)


def plot_tether_span(
    csv_path: str,
    player_name: str,
    max_length: float | None = None,
    save_path: str | None = None,
    show: bool = True,
) -> Figure:
    """
    Plot anchor-to-player span over time, with taut frames highlighted.

    Parameters
    ----------
    csv_path : str
    player_name : str
    max_length : float | None
        Current length budget, drawn as a reference line.
    save_path : str | None
    show : bool

    Returns
    -------
    fig : Figure
    """
    t, cols, _ = _load_csv(csv_path)
    span, taut = _get_components(cols, [f"{player_name}.span", f"{player_name}.taut"])

    fig, ax = plt.subplots(1, 1, figsize=(10, 4))
    ax.plot(t, span, color="#1a73e8", lw=2, label="span")
    mask = taut > 0.5
    if np.any(mask):
        ax.scatter(t[mask], span[mask], color="#ea4335", s=8, label="taut", zorder=3)
    if max_length is not None:
        ax.axhline(max_length, color="#5f6368", ls="--", lw=1, label="max length")
    ax.set_xlabel("t [s]"); ax.set_ylabel("span [units]")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")
    ax.set_title(f"Tether span: {player_name}")
    return _finish(fig, save_path, show)


def plot_rope(
    snapshots: Mapping[str, np.ndarray] | np.ndarray,
    anchor: np.ndarray | None = None,
    save_path: str | None = None,
    show: bool = True,
    markers: bool = True,
) -> Figure:
    """
    Draw rope polylines from particle snapshots.

    Parameters
    ----------
    snapshots : dict[str, (N, 2) array] | (N, 2) array
        Output of World.snapshot() or a single chain snapshot.
    anchor : (2,) array | None
        Anchor position to mark.
    save_path : str | None
    show : bool
    markers : bool
        Draw a dot per particle.

    Returns
    -------
    fig : Figure
    """
    if isinstance(snapshots, np.ndarray):
        snapshots = {"rope": snapshots}

    fig, ax = plt.subplots(1, 1, figsize=(8, 6))
    for name, pts in snapshots.items():
        pts = np.asarray(pts, dtype=float)
        if pts.ndim != 2 or pts.shape[1] != 2:
            raise ValueError(f"Snapshot '{name}' must have shape (N, 2), got {pts.shape}")
        ax.plot(pts[:, 0], pts[:, 1], lw=2.0, marker="o" if markers else None, ms=3, label=name)
        ax.scatter(pts[-1, 0], pts[-1, 1], color="#ea4335", s=30, zorder=3)
    if anchor is not None:
        ax.scatter(anchor[0], anchor[1], color="#5f6368", marker="s", s=60, label="anchor", zorder=3)
    ax.set_xlabel("x [units]"); ax.set_ylabel("y [units]")
    ax.set_aspect("equal", adjustable="datalim")
    ax.invert_yaxis()
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")
    ax.set_title("Tether polylines")
    return _finish(fig, save_path, show)
