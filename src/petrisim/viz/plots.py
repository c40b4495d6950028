"""
Charts of snapshots and trajectories.

- Bar chart of one snapshot: counts per type, stacked by dynamical state
- Line chart of a trajectory: counts per step, by type or by (type, state)

All plots use matplotlib and return (fig, ax) so callers can compose them.
"""

from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Literal

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from petrisim.core.tokens import DynamicalState, TokenType

if TYPE_CHECKING:
    from petrisim.core.snapshot import Snapshot


# Normal cells in blues/greens, cancer cells in warm tones
TYPE_COLORS = {
    TokenType.NORMAL_A: "#31688e",
    TokenType.NORMAL_B: "#35b779",
    TokenType.CANCER_A: "#d8576b",
    TokenType.CANCER_B: "#fb9f3a",
}

STATE_HATCHES = {
    DynamicalState.ACTIVE: "",
    DynamicalState.INACTIVE: "//",
    DynamicalState.DORMANT: "..",
}


def plot_snapshot_bars(
    snapshot: "Snapshot",
    title: str | None = None,
    ax: Axes | None = None,
    figsize: tuple[float, float] = (8, 5),
) -> tuple[Figure, Axes]:
    """
    Bar chart of one snapshot: one bar per token type, stacked by state.

    Args:
        snapshot: Snapshot to plot
        title: Plot title (defaults to the step number)
        ax: Existing axes (creates new figure if None)
        figsize: Figure size if creating new figure

    Returns:
        (fig, ax) tuple
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    types = list(TokenType)
    x = np.arange(len(types))
    bottom = np.zeros(len(types))

    for state in DynamicalState:
        heights = np.array([snapshot.counts[(t, state)] for t in types], dtype=float)
        ax.bar(
            x,
            heights,
            bottom=bottom,
            color=[TYPE_COLORS[t] for t in types],
            hatch=STATE_HATCHES[state],
            edgecolor="black",
            linewidth=0.5,
            label=state.value,
        )
        bottom += heights

    ax.set_xticks(x)
    ax.set_xticklabels([t.value for t in types])
    ax.set_ylabel("Tokens")
    ax.set_title(title if title is not None else f"Step {snapshot.step}")
    ax.legend(title="State", loc="upper right")

    return fig, ax


def plot_trajectory(
    snapshots: Iterable["Snapshot"],
    by: Literal["type", "pair"] = "type",
    title: str = "Token Counts Over Time",
    ax: Axes | None = None,
    figsize: tuple[float, float] = (10, 6),
    show_total: bool = False,
) -> tuple[Figure, Axes]:
    """
    Line chart of counts per step.

    Args:
        snapshots: Snapshots in step order (a TrajectoryRecorder works too)
        by: "type" for one line per token type, "pair" for one line per
            (type, state) pair
        title: Plot title
        ax: Existing axes (creates new if None)
        figsize: Figure size if creating new figure
        show_total: Also draw the total token count

    Returns:
        (fig, ax) tuple
    """
    snapshots = list(snapshots)
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    times = [s.time for s in snapshots]

    if by == "type":
        for t in TokenType:
            ax.plot(
                times,
                [s.count(token_type=t) for s in snapshots],
                color=TYPE_COLORS[t],
                linewidth=2,
                label=t.value,
            )
    elif by == "pair":
        styles = {
            DynamicalState.ACTIVE: "-",
            DynamicalState.INACTIVE: "--",
            DynamicalState.DORMANT: ":",
        }
        for t in TokenType:
            for state in DynamicalState:
                ax.plot(
                    times,
                    [s.counts[(t, state)] for s in snapshots],
                    color=TYPE_COLORS[t],
                    linestyle=styles[state],
                    label=f"{t.value} / {state.value}",
                )
    else:
        raise ValueError(f"Unknown grouping: {by!r}")

    if show_total:
        ax.plot(times, [s.total for s in snapshots], color="black", linewidth=1, label="Total")

    ax.set_xlabel("Time")
    ax.set_ylabel("Tokens")
    ax.set_title(title)
    ax.legend(fontsize="small", ncol=2 if by == "pair" else 1)
    ax.grid(True, alpha=0.3)

    return fig, ax


def save_figure(fig: Figure, path: str | Path, dpi: int = 150, **kwargs) -> None:
    """Save figure to file."""
    fig.savefig(path, dpi=dpi, bbox_inches="tight", **kwargs)
