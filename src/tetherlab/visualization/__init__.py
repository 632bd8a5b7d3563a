"""Matplotlib plots for logged runs and rope snapshots."""

from .plotting import plot_rope, plot_tether_span, plot_trajectory_2d

__all__ = ["plot_rope", "plot_tether_span", "plot_trajectory_2d"]
