"""Strategy heat maps for a trained ResultsTable.

Two public data-builder functions return NumPy matrices that can be used
programmatically or passed to the plot helpers:

    build_best_action_data(table)  — greedy action code per cell
    build_best_ev_data(table)      — mean outcome of that greedy action

One public plot function renders a matplotlib figure:

    plot_strategy_heatmaps(table, title, ...)  — 1×2 figure (action + EV)

Matrix convention (both builders):
    Shape  : (32, 10) — rows = player buckets 0–31, cols = dealer up-card 2..A
    Values : Action code 0–3 (STAND/HIT/DOUBLE/SPLIT) or mean EV in units
             np.nan = no sampled action for the cell
"""

from __future__ import annotations

import matplotlib
import matplotlib.colors
import matplotlib.figure
import matplotlib.pyplot as plt
import numpy as np

from src.engine.game_state import ACTION_CODES, Action
from src.solvers.buckets import (
    NUM_DEALER_BUCKETS,
    NUM_PLAYER_BUCKETS,
    allowed_actions_for_bucket,
    dealer_bucket_label,
    player_bucket_label,
)
from src.solvers.results_table import ResultsTable

# ─── Constants ────────────────────────────────────────────────────────────────

_ROW_LABELS: list[str] = [player_bucket_label(p) for p in range(NUM_PLAYER_BUCKETS)]
_COL_LABELS: list[str] = [dealer_bucket_label(d) for d in range(NUM_DEALER_BUCKETS)]
_NAN_COLOR: str = "#cccccc"
_ACTION_COLORS: list[str] = ["#d62728", "#2ca02c", "#1f77b4", "#ff7f0e"]


# ─── Colormaps ────────────────────────────────────────────────────────────────


def _make_action_cmap() -> matplotlib.colors.ListedColormap:
    """Red=STAND, green=HIT, blue=DOUBLE, orange=SPLIT, grey=unsampled."""
    cmap = matplotlib.colors.ListedColormap(_ACTION_COLORS)
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


def _make_ev_cmap() -> matplotlib.colors.Colormap:
    cmap = matplotlib.colormaps["RdYlGn"].copy()
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


_ACTION_CMAP: matplotlib.colors.Colormap = _make_action_cmap()
_EV_CMAP: matplotlib.colors.Colormap = _make_ev_cmap()


# ─── Data builders ────────────────────────────────────────────────────────────


def build_best_action_data(table: ResultsTable) -> np.ndarray:
    """Return the (32, 10) matrix of greedy action codes, NaN where unsampled."""
    data = np.full((NUM_PLAYER_BUCKETS, NUM_DEALER_BUCKETS), np.nan)
    for p in range(NUM_PLAYER_BUCKETS):
        allowed = allowed_actions_for_bucket(p)
        for d in range(NUM_DEALER_BUCKETS):
            best = table.best_sampled_action(d, p, allowed)
            if best is not None:
                data[p, d] = float(best)
    return data


def build_best_ev_data(table: ResultsTable) -> np.ndarray:
    """Return the (32, 10) matrix of the greedy action's mean outcome."""
    actions = build_best_action_data(table)
    data = np.full(actions.shape, np.nan)
    for p, d in zip(*np.nonzero(~np.isnan(actions))):
        data[p, d] = table.cell_mean(p, d, Action(int(actions[p, d])))
    return data


# ─── Rendering helper ─────────────────────────────────────────────────────────


def _render_panel(
    ax: matplotlib.axes.Axes,
    data: np.ndarray,
    is_action: bool,
) -> matplotlib.image.AxesImage:
    """Render one heat-map panel onto *ax* and return the AxesImage."""
    masked = np.ma.masked_invalid(data)
    if is_action:
        im = ax.imshow(masked, cmap=_ACTION_CMAP, vmin=-0.5, vmax=3.5, aspect="auto")
    else:
        limit = float(np.nanmax(np.abs(data))) if not np.all(np.isnan(data)) else 1.0
        limit = max(limit, 1e-9)
        im = ax.imshow(masked, cmap=_EV_CMAP, vmin=-limit, vmax=limit, aspect="auto")

    ax.set_xticks(range(NUM_DEALER_BUCKETS))
    ax.set_xticklabels(_COL_LABELS, fontsize=8)
    ax.set_yticks(range(NUM_PLAYER_BUCKETS))
    ax.set_yticklabels(_ROW_LABELS, fontsize=7)

    if is_action:
        for r in range(data.shape[0]):
            for c in range(data.shape[1]):
                val = data[r, c]
                if np.isnan(val):
                    continue
                ax.text(
                    c,
                    r,
                    ACTION_CODES[Action(int(val))].upper(),
                    ha="center",
                    va="center",
                    fontsize=7,
                    color="white",
                    fontweight="bold",
                )

    return im


# ─── Public plot function ─────────────────────────────────────────────────────


def plot_strategy_heatmaps(
    table: ResultsTable,
    title: str = "Learned strategy",
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot greedy action and its mean EV as a 1×2 figure.

    Args:
        table:     Trained ResultsTable.
        title:     Figure suptitle.
        show:      If True, call plt.show() after rendering.
        save_path: If not None, save the figure to this path before showing.

    Returns:
        matplotlib.figure.Figure.
    """
    actions = build_best_action_data(table)
    ev = build_best_ev_data(table)

    fig, (ax_action, ax_ev) = plt.subplots(1, 2, figsize=(12, 10))
    fig.suptitle(title, fontsize=13, fontweight="bold")

    _render_panel(ax_action, actions, is_action=True)
    im_ev = _render_panel(ax_ev, ev, is_action=False)

    ax_action.set_title("Greedy action", fontsize=10)
    ax_action.set_xlabel("Dealer up-card", fontsize=9)
    ax_action.set_ylabel("Player bucket", fontsize=9)

    ax_ev.set_title("Mean outcome of greedy action", fontsize=10)
    ax_ev.set_xlabel("Dealer up-card", fontsize=9)
    plt.colorbar(im_ev, ax=ax_ev, label="EV (units)", fraction=0.046, pad=0.04)

    plt.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=120)
    if show:
        plt.show()

    return fig


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from src.analysis.simulator import SimulationConfig, train

    iterations = int(sys.argv[1]) if len(sys.argv) > 1 else 100_000
    print(f"Training for {iterations:,} rounds …")
    result = train(SimulationConfig(iterations=iterations))
    print(result)

    plot_strategy_heatmaps(result.table, show=False, save_path="learned_strategy.png")
    print("Saved: learned_strategy.png")
