"""
ResultsTable: per-(player bucket, dealer bucket, action) running outcome means.

Storage is two numpy arrays of shape (32, 10, 4):
    sums[p, d, a]    running sum of realized outcomes
    counts[p, d, a]  number of recorded samples

A cell with zero samples has no mean (NaN), is skipped by action selection,
and renders as an empty field. It is never treated as a zero outcome.

Action selection is greedy and non-exploratory: among the legal actions that
have at least one sample, pick the highest mean; ties go to the earlier action
in STAND < HIT < DOUBLE < SPLIT order; with no sampled legal action, STAND.
An early lucky sample can therefore keep an action preferred for a bucket
until its mean is dragged down by later samples.
"""

from __future__ import annotations

import numpy as np

from src.engine.game_state import Action, legal_actions
from src.engine.hand import PlayerSubHand
from src.solvers.buckets import NUM_DEALER_BUCKETS, NUM_PLAYER_BUCKETS, player_bucket

NUM_ACTIONS: int = len(Action)


class ResultsTable:
    """Online mean accumulator over the discretized state/action grid."""

    def __init__(self) -> None:
        shape = (NUM_PLAYER_BUCKETS, NUM_DEALER_BUCKETS, NUM_ACTIONS)
        self.sums: np.ndarray = np.zeros(shape, dtype=np.float64)
        self.counts: np.ndarray = np.zeros(shape, dtype=np.int64)

    def record_result(
        self,
        dealer_bucket: int,
        player_bucket: int,
        action: Action,
        outcome: float,
    ) -> None:
        """Add one realized outcome to a cell."""
        self.sums[player_bucket, dealer_bucket, action] += outcome
        self.counts[player_bucket, dealer_bucket, action] += 1

    def mean(self) -> np.ndarray:
        """Return the (32, 10, 4) array of running means, NaN where unsampled."""
        means = np.full(self.sums.shape, np.nan)
        np.divide(self.sums, self.counts, out=means, where=self.counts > 0)
        return means

    def cell_mean(self, player_bucket: int, dealer_bucket: int, action: Action) -> float | None:
        """Running mean of one cell, or None if it has no samples."""
        count = self.counts[player_bucket, dealer_bucket, action]
        if count == 0:
            return None
        return float(self.sums[player_bucket, dealer_bucket, action] / count)

    def best_sampled_action(
        self,
        dealer_bucket: int,
        player_bucket: int,
        allowed: list[Action],
    ) -> Action | None:
        """Highest-mean sampled action among ``allowed``, or None if none sampled."""
        best: Action | None = None
        best_mean = -np.inf
        for action in sorted(allowed):
            mean = self.cell_mean(player_bucket, dealer_bucket, action)
            if mean is not None and mean > best_mean:
                best, best_mean = action, mean
        return best

    def select_best_action(self, dealer_bucket: int, subhand: PlayerSubHand) -> Action:
        """Pick the greedy action for ``subhand`` against the given dealer bucket.

        Only actions that are currently legal for the subhand and have at
        least one recorded sample are considered. Defaults to STAND.
        """
        allowed = legal_actions(subhand)
        if allowed == [Action.STAND]:
            return Action.STAND
        best = self.best_sampled_action(dealer_bucket, player_bucket(subhand), allowed)
        return Action.STAND if best is None else best

    @property
    def total_samples(self) -> int:
        return int(self.counts.sum())

    def copy(self) -> ResultsTable:
        table = ResultsTable()
        table.sums = self.sums.copy()
        table.counts = self.counts.copy()
        return table

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultsTable):
            return NotImplemented
        return (
            np.array_equal(self.sums, other.sums)
            and np.array_equal(self.counts, other.counts)
        )
