"""Tests for the interactive Plotly lookup tool (src/analysis/plotly_lookup.py).

Tests verify that the figure builder returns a well-formed go.Figure with the
expected trace, data invariants, and hover text. The save helper is tested
against a temporary file path.

No display server is required: Plotly figures are in-memory objects and the
save helper writes HTML without rendering.
"""

from __future__ import annotations

import os

import plotly.graph_objects as go
import pytest

from src.analysis.plotly_lookup import build_lookup_figure, save_lookup_html
from src.analysis.simulator import SimulationConfig, train
from src.engine.game_state import Action
from src.solvers.results_table import ResultsTable


@pytest.fixture(scope="module")
def table() -> ResultsTable:
    return train(SimulationConfig(iterations=200, seed=3)).table


# ─── build_lookup_figure ──────────────────────────────────────────────────────


class TestBuildLookupFigure:
    def test_returns_figure(self, table) -> None:
        assert isinstance(build_lookup_figure(table), go.Figure)

    def test_single_heatmap_trace(self, table) -> None:
        fig = build_lookup_figure(table)
        assert len(fig.data) == 1
        assert fig.data[0].type == "heatmap"

    def test_grid_dimensions(self, table) -> None:
        trace = build_lookup_figure(table).data[0]
        assert len(trace.z) == 32
        assert all(len(row) == 10 for row in trace.z)
        assert list(trace.x)[-1] == "A"
        assert list(trace.y)[-1] == "pair A"

    def test_title(self, table) -> None:
        fig = build_lookup_figure(table, title="Lookup")
        assert fig.layout.title.text == "Lookup"

    def test_hover_names_greedy_action(self) -> None:
        t = ResultsTable()
        t.record_result(0, 6, Action.STAND, -0.3)
        t.record_result(0, 6, Action.HIT, 0.1)
        trace = build_lookup_figure(t).data[0]
        hover = trace.text[6][0]
        assert "Greedy action: <b>HIT</b>" in hover
        assert "STAND: -0.3000 (n=1)" in hover
        assert "DOUBLE" not in hover

    def test_unsampled_cells_blank(self) -> None:
        trace = build_lookup_figure(ResultsTable()).data[0]
        assert all(v is None for row in trace.z for v in row)
        assert all(text == "" for row in trace.text for text in row)


# ─── save_lookup_html ─────────────────────────────────────────────────────────


class TestSaveLookupHtml:
    def test_writes_file(self, table, tmp_path) -> None:
        path = str(tmp_path / "lookup.html")
        save_lookup_html(build_lookup_figure(table), path)
        assert os.path.exists(path)

    def test_uses_cdn(self, table, tmp_path) -> None:
        path = str(tmp_path / "lookup.html")
        save_lookup_html(build_lookup_figure(table), path)
        with open(path, encoding="utf-8") as fh:
            html = fh.read()
        assert "cdn.plot.ly" in html
