"""Tests for src/solvers/results_table.py — accumulation and greedy selection."""

from __future__ import annotations

import numpy as np
import pytest

from src.engine.game_state import Action
from src.solvers.buckets import player_bucket
from src.solvers.results_table import NUM_ACTIONS, ResultsTable
from tests.conftest import subhand


class TestRecordResult:
    def test_shape(self):
        table = ResultsTable()
        assert table.sums.shape == (32, 10, NUM_ACTIONS)
        assert table.counts.shape == (32, 10, 4)

    def test_record_accumulates(self):
        table = ResultsTable()
        table.record_result(3, 8, Action.HIT, 1.0)
        table.record_result(3, 8, Action.HIT, -2.0)
        assert table.counts[8, 3, Action.HIT] == 2
        assert table.sums[8, 3, Action.HIT] == -1.0
        assert table.cell_mean(8, 3, Action.HIT) == pytest.approx(-0.5)
        assert table.total_samples == 2

    def test_empty_cell_mean_is_none(self):
        assert ResultsTable().cell_mean(0, 0, Action.STAND) is None

    def test_mean_nan_for_unsampled(self):
        table = ResultsTable()
        table.record_result(0, 1, Action.STAND, 1.0)
        means = table.mean()
        assert means[1, 0, Action.STAND] == 1.0
        assert np.isnan(means[1, 0, Action.HIT])
        assert np.isnan(means).sum() == 32 * 10 * 4 - 1

    def test_zero_outcome_is_a_sample(self):
        table = ResultsTable()
        table.record_result(0, 1, Action.STAND, 0.0)
        assert table.cell_mean(1, 0, Action.STAND) == 0.0

    def test_copy_and_equality(self):
        table = ResultsTable()
        table.record_result(0, 1, Action.STAND, 1.0)
        clone = table.copy()
        assert clone == table
        clone.record_result(0, 1, Action.STAND, 1.0)
        assert clone != table


class TestSelectBestAction:
    def setup_method(self):
        self.table = ResultsTable()
        self.sub = subhand('KS', '6H')                 # hard 16, bucket 8
        self.bucket_p = player_bucket(self.sub)
        self.bucket_d = 8

    def record(self, action, *outcomes):
        for outcome in outcomes:
            self.table.record_result(self.bucket_d, self.bucket_p, action, outcome)

    def test_default_stand_when_empty(self):
        assert self.table.select_best_action(self.bucket_d, self.sub) == Action.STAND

    def test_picks_highest_mean(self):
        self.record(Action.STAND, -1.0, -1.0)
        self.record(Action.HIT, 1.0, -1.0)
        assert self.table.select_best_action(self.bucket_d, self.sub) == Action.HIT

    def test_sampled_negative_beats_unsampled(self):
        self.record(Action.HIT, -0.9)
        assert self.table.select_best_action(self.bucket_d, self.sub) == Action.HIT

    def test_tie_goes_to_earlier_action(self):
        self.record(Action.DOUBLE, 0.5)
        self.record(Action.HIT, 0.5)
        assert self.table.select_best_action(self.bucket_d, self.sub) == Action.HIT

    def test_illegal_action_skipped(self):
        three_card = subhand('KS', '4H', '2D')        # hard 16 as well
        self.record(Action.DOUBLE, 2.0)
        self.record(Action.HIT, -0.5)
        self.record(Action.STAND, -0.6)
        assert self.table.select_best_action(self.bucket_d, three_card) == Action.HIT

    def test_other_dealer_bucket_ignored(self):
        self.table.record_result(0, self.bucket_p, Action.HIT, 1.0)
        assert self.table.select_best_action(self.bucket_d, self.sub) == Action.STAND

    def test_terminal_hand_stands_without_lookup(self):
        assert self.table.select_best_action(0, subhand('7S', '7H', '7D')) == Action.STAND

    def test_split_selected_for_pair(self):
        pair = subhand('8S', '8H')
        self.table.record_result(self.bucket_d, player_bucket(pair), Action.SPLIT, 0.3)
        self.table.record_result(self.bucket_d, player_bucket(pair), Action.STAND, 0.1)
        assert self.table.select_best_action(self.bucket_d, pair) == Action.SPLIT

    def test_best_sampled_action_none(self):
        assert self.table.best_sampled_action(0, 0, list(Action)) is None
