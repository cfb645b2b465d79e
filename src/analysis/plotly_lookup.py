"""Interactive Plotly lookup for a trained ResultsTable.

Two public functions:

    build_lookup_figure(table)
        — Heatmap of the greedy action's mean outcome; hover any cell to see
          the bucket, up-card, greedy action, and every action's mean and
          sample count.
    save_lookup_html(fig, path)
        — Export any figure to a self-contained HTML file.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go

from src.analysis.heat_maps import build_best_action_data, build_best_ev_data
from src.engine.game_state import Action
from src.solvers.buckets import (
    NUM_DEALER_BUCKETS,
    NUM_PLAYER_BUCKETS,
    dealer_bucket_label,
    player_bucket_label,
)
from src.solvers.results_table import ResultsTable

# ─── Constants ────────────────────────────────────────────────────────────────

_ROW_LABELS: list[str] = [player_bucket_label(p) for p in range(NUM_PLAYER_BUCKETS)]
_COL_LABELS: list[str] = [dealer_bucket_label(d) for d in range(NUM_DEALER_BUCKETS)]
_EV_COLORSCALE: str = "RdYlGn"


# ─── Hover text builder ───────────────────────────────────────────────────────


def _build_hover(table: ResultsTable, actions: np.ndarray) -> list[list[str]]:
    """Return a 32×10 list of hover strings (empty string for unsampled cells)."""
    means = table.mean()
    rows: list[list[str]] = []
    for p in range(NUM_PLAYER_BUCKETS):
        row: list[str] = []
        for d in range(NUM_DEALER_BUCKETS):
            if np.isnan(actions[p, d]):
                row.append("")
                continue
            lines = [
                f"Player: <b>{_ROW_LABELS[p]}</b>",
                f"Dealer shows: {_COL_LABELS[d]}",
                f"Greedy action: <b>{Action(int(actions[p, d])).name}</b>",
            ]
            for action in Action:
                count = int(table.counts[p, d, action])
                if count == 0:
                    continue
                lines.append(f"{action.name}: {means[p, d, action]:+.4f} (n={count:,})")
            row.append("<br>".join(lines))
        rows.append(row)
    return rows


# ─── Public figure builders ───────────────────────────────────────────────────


def build_lookup_figure(table: ResultsTable, title: str = "Learned strategy lookup") -> go.Figure:
    """Build an interactive heatmap of the greedy action's mean outcome.

    Unsampled cells are rendered blank.

    Args:
        table: Trained ResultsTable.
        title: Figure title.

    Returns:
        go.Figure with one heatmap trace.
    """
    actions = build_best_action_data(table)
    ev = build_best_ev_data(table)
    z = [[None if np.isnan(v) else v for v in row] for row in ev.tolist()]

    fig = go.Figure(
        go.Heatmap(
            z=z,
            x=_COL_LABELS,
            y=_ROW_LABELS,
            colorscale=_EV_COLORSCALE,
            zmid=0.0,
            text=_build_hover(table, actions),
            hovertemplate="%{text}<extra></extra>",
            colorbar={"title": "EV (units)"},
            name="greedy EV",
        )
    )
    fig.update_layout(
        title=title,
        xaxis_title="Dealer up-card",
        yaxis_title="Player bucket",
        yaxis={"autorange": "reversed"},
        height=900,
    )
    return fig


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to an HTML file.

    Plotly JS is loaded from the CDN so the file itself remains compact.

    Args:
        fig:  A go.Figure produced by this module.
        path: Destination file path (e.g. ``"strategy_lookup.html"``).
    """
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from src.analysis.simulator import SimulationConfig, train

    iterations = int(sys.argv[1]) if len(sys.argv) > 1 else 100_000
    print(f"Training for {iterations:,} rounds …")
    result = train(SimulationConfig(iterations=iterations))
    print(result)

    save_lookup_html(build_lookup_figure(result.table), "strategy_lookup.html")
    print("Saved: strategy_lookup.html")
