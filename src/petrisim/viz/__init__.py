"""
Visualization utilities.

- Snapshot bar charts
- Trajectory line charts
"""

from petrisim.viz.plots import (
    TYPE_COLORS,
    plot_snapshot_bars,
    plot_trajectory,
    save_figure,
)

__all__ = [
    "TYPE_COLORS",
    "plot_snapshot_bars",
    "plot_trajectory",
    "save_figure",
]
