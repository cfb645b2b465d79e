"""Text output for a trained ResultsTable and the action chart derived from it.

    format_results_grid(table)   — tab-separated mean grid (32 buckets × 4 actions rows)
    build_action_chart(table)    — (32, 10) int array of greedy actions
    chart_to_string(chart)       — one character per cell: s / h / d / p
    chart_from_string(text)      — inverse of chart_to_string, validated
    chart_action(chart, d, sub)  — action a fixed chart plays for a subhand
    print_action_chart(chart)    — labelled chart for the console, optionally with visits
    random_chart(rng)            — uniformly random allowed action per cell
    perturb_chart(chart, n, rng) — copy with n random cells redrawn

Chart strings are row-major by player bucket, then dealer bucket, so 320
characters in total. Split ('p') is only valid in pair buckets.
"""

from __future__ import annotations

import numpy as np

from src.engine.game_state import ACTION_CODES, Action, legal_actions
from src.engine.hand import PlayerSubHand
from src.solvers.buckets import (
    NUM_DEALER_BUCKETS,
    NUM_PLAYER_BUCKETS,
    allowed_actions_for_bucket,
    dealer_bucket_label,
    player_bucket,
    player_bucket_label,
)
from src.solvers.results_table import ResultsTable

_CODE_TO_ACTION: dict[str, Action] = {code: action for action, code in ACTION_CODES.items()}
_CHART_LENGTH: int = NUM_PLAYER_BUCKETS * NUM_DEALER_BUCKETS


# ─── Results grid ─────────────────────────────────────────────────────────────

def format_results_grid(table: ResultsTable) -> str:
    """Render the table as 32 × 4 lines of 10 tab-separated means.

    Lines are ordered by player bucket, then action (STAND, HIT, DOUBLE,
    SPLIT). Each field is the cell's running mean, or empty when the cell
    has no samples.
    """
    means = table.mean()
    lines: list[str] = []
    for p in range(NUM_PLAYER_BUCKETS):
        for action in Action:
            fields = [
                '' if np.isnan(means[p, d, action]) else f"{means[p, d, action]:.6f}"
                for d in range(NUM_DEALER_BUCKETS)
            ]
            lines.append('\t'.join(fields))
    return '\n'.join(lines)


# ─── Action chart ─────────────────────────────────────────────────────────────

def build_action_chart(table: ResultsTable) -> np.ndarray:
    """Return the greedy action per (player bucket, dealer bucket).

    Split is only considered in pair buckets; cells with no sampled action
    default to STAND.
    """
    chart = np.full((NUM_PLAYER_BUCKETS, NUM_DEALER_BUCKETS), int(Action.STAND), dtype=np.int8)
    for p in range(NUM_PLAYER_BUCKETS):
        allowed = allowed_actions_for_bucket(p)
        for d in range(NUM_DEALER_BUCKETS):
            best = table.best_sampled_action(d, p, allowed)
            if best is not None:
                chart[p, d] = int(best)
    return chart


def chart_to_string(chart: np.ndarray) -> str:
    """Encode a chart as one action character per cell.

    Examples:
        >>> chart_to_string(np.zeros((32, 10), dtype=np.int8))[:5]
        'sssss'
    """
    return ''.join(ACTION_CODES[Action(int(v))] for v in chart.flat)


def chart_from_string(text: str) -> np.ndarray:
    """Parse a 320-character chart string.

    Raises:
        ValueError: On wrong length, unknown characters, or a split outside a
                    pair bucket.
    """
    if len(text) != _CHART_LENGTH:
        raise ValueError(f"Chart string must have {_CHART_LENGTH} characters, got {len(text)}.")

    chart = np.empty((NUM_PLAYER_BUCKETS, NUM_DEALER_BUCKETS), dtype=np.int8)
    for i, ch in enumerate(text):
        p, d = divmod(i, NUM_DEALER_BUCKETS)
        action = _CODE_TO_ACTION.get(ch)
        if action is None:
            raise ValueError(f"Unknown action code {ch!r} at position {i}.")
        if action not in allowed_actions_for_bucket(p):
            raise ValueError(
                f"Split at position {i} is outside a pair bucket ({player_bucket_label(p)})."
            )
        chart[p, d] = int(action)
    return chart


def chart_action(
    chart: np.ndarray,
    dealer_bkt: int,
    subhand: PlayerSubHand,
    visits: np.ndarray | None = None,
) -> Action:
    """Action a fixed chart plays for ``subhand``.

    A DOUBLE entry on a hand that can no longer double is played as HIT.
    When ``visits`` is given, the looked-up cell's count is incremented.
    """
    if legal_actions(subhand) == [Action.STAND]:
        return Action.STAND
    player_bkt = player_bucket(subhand)
    if visits is not None:
        visits[player_bkt, dealer_bkt] += 1
    action = Action(int(chart[player_bkt, dealer_bkt]))
    if action == Action.DOUBLE and not subhand.can_double_down():
        return Action.HIT
    return action


def print_action_chart(chart: np.ndarray, visits: np.ndarray | None = None) -> None:
    """Print the chart with bucket labels, one row per player bucket.

    With ``visits``, each cell also shows how often chart play looked it up.
    """
    width = 2 if visits is None else 10
    header = ' '.join(f"{dealer_bucket_label(d):>{width}}" for d in range(NUM_DEALER_BUCKETS))
    print(f"{'':10}{header}")
    print('─' * (10 + len(header)))
    for p in range(NUM_PLAYER_BUCKETS):
        if visits is None:
            cells = [ACTION_CODES[Action(int(v))] for v in chart[p]]
        else:
            cells = [
                f"{ACTION_CODES[Action(int(v))]} ({int(n)})" for v, n in zip(chart[p], visits[p])
            ]
        print(f"{player_bucket_label(p):<10}" + ' '.join(f"{c:>{width}}" for c in cells))


# ─── Random charts ────────────────────────────────────────────────────────────

def random_chart(rng: np.random.Generator) -> np.ndarray:
    """Draw a chart with a uniformly random allowed action in every cell."""
    chart = np.empty((NUM_PLAYER_BUCKETS, NUM_DEALER_BUCKETS), dtype=np.int8)
    for p in range(NUM_PLAYER_BUCKETS):
        n_allowed = len(allowed_actions_for_bucket(p))
        chart[p] = rng.integers(0, n_allowed, size=NUM_DEALER_BUCKETS)
    return chart


def perturb_chart(chart: np.ndarray, n_cells: int, rng: np.random.Generator) -> np.ndarray:
    """Return a copy of ``chart`` with ``n_cells`` random cells redrawn.

    Cells are picked with replacement and may redraw their current action.

    Raises:
        ValueError: If n_cells is negative.
    """
    if n_cells < 0:
        raise ValueError(f"n_cells must be >= 0, got {n_cells}.")
    adjusted = chart.copy()
    for _ in range(n_cells):
        p = int(rng.integers(NUM_PLAYER_BUCKETS))
        d = int(rng.integers(NUM_DEALER_BUCKETS))
        adjusted[p, d] = rng.integers(len(allowed_actions_for_bucket(p)))
    return adjusted
