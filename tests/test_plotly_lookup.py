"""Tests for the interactive Plotly lookup (pity_solver/analysis/plotly_lookup.py)."""

from __future__ import annotations

import plotly.graph_objects as go
import pytest

from pity_solver.analysis.plotly_lookup import (
    _build_hover,
    build_lookup_figure,
    build_margin_figure,
    save_lookup_html,
)
from pity_solver.engine.config import RateConfig
from pity_solver.solvers.strategy_dp import Action, StrategyTable, build_margin_table, solve


@pytest.fixture(scope="module")
def table() -> StrategyTable:
    return solve(RateConfig(max_summons=60))


def _non_empty(text) -> list[str]:
    return [cell for row in text for cell in row if cell]


# ─── Hover text ───────────────────────────────────────────────────────────────


class TestBuildHover:
    def test_grid_shape(self, table: StrategyTable) -> None:
        hover = _build_hover(table, None)
        assert len(hover) == 110
        assert all(len(row) == 61 for row in hover)

    def test_one_string_per_state(self, table: StrategyTable) -> None:
        hover = _build_hover(table, None)
        assert len(_non_empty(hover)) == len(table)

    def test_root_cell_content(self, table: StrategyTable) -> None:
        hover = _build_hover(table, build_margin_table(table))
        cell = hover[0][60]
        assert "Draws left: <b>60</b>" in cell
        assert "Pity: 0" in cell
        assert f"{table.root_value:.4f}" in cell
        assert "Action: <b>" in cell
        assert "Single − tenfold" in cell

    def test_no_margin_below_ten(self, table: StrategyTable) -> None:
        hover = _build_hover(table, build_margin_table(table))
        assert "Single − tenfold" not in hover[0][5]
        assert Action.SINGLE.value in hover[0][5]


# ─── Figures ──────────────────────────────────────────────────────────────────


class TestBuildLookupFigure:
    def test_two_traces(self, table: StrategyTable) -> None:
        fig = build_lookup_figure(table)
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 2
        assert all(isinstance(trace, go.Heatmap) for trace in fig.data)

    def test_title_has_headline(self, table: StrategyTable) -> None:
        fig = build_lookup_figure(table)
        assert "Summon Strategy Lookup" in fig.layout.title.text
        assert f"{table.root_value:.4f}" in fig.layout.title.text

    def test_hover_contains_action(self, table: StrategyTable) -> None:
        fig = build_lookup_figure(table)
        cells = _non_empty(fig.data[0].text)
        assert cells
        assert all("Action:" in cell for cell in cells)

    def test_show_margin_false_omits_margin(self, table: StrategyTable) -> None:
        fig = build_lookup_figure(table, show_margin=False)
        assert not any("Single − tenfold" in cell for cell in _non_empty(fig.data[0].text))

    def test_unevaluated_cells_blank(self, table: StrategyTable) -> None:
        fig = build_lookup_figure(table)
        z = fig.data[0].z
        assert z[100][30] is None
        assert z[0][60] == pytest.approx(table.root_value)

    def test_fixed_policy_without_margin(self) -> None:
        fixed = solve(RateConfig(max_summons=30), policy=Action.SINGLE)
        fig = build_lookup_figure(fixed, show_margin=False)
        assert len(fig.data) == 2


class TestBuildMarginFigure:
    def test_single_trace(self, table: StrategyTable) -> None:
        fig = build_margin_figure(table)
        assert len(fig.data) == 1
        assert fig.layout.title.text == "Single vs Tenfold Margin"

    def test_symmetric_range(self, table: StrategyTable) -> None:
        trace = build_margin_figure(table).data[0]
        assert trace.zmin == -trace.zmax
        assert trace.zmax > 0.0

    def test_below_ten_blank(self, table: StrategyTable) -> None:
        z = build_margin_figure(table).data[0].z
        assert z[0][5] is None
        assert z[0][60] is not None

    def test_fixed_policy_rejected(self) -> None:
        fixed = solve(RateConfig(max_summons=30), policy=Action.BULK)
        with pytest.raises(ValueError):
            build_margin_figure(fixed)


# ─── HTML export ──────────────────────────────────────────────────────────────


class TestSaveLookupHtml:
    def test_writes_file(self, table: StrategyTable, tmp_path) -> None:
        path = tmp_path / "lookup.html"
        save_lookup_html(build_lookup_figure(table), str(path))
        assert path.exists()
        content = path.read_text(encoding="utf-8")
        assert "<html>" in content
        assert "cdn.plot.ly" in content
