"""
Tests for pity_solver/analysis/simulator.py — Monte Carlo validation of the DP tables.
"""

from __future__ import annotations

import math

import pytest

from pity_solver.analysis.simulator import (
    _FEATURED,
    _NON_FEATURED_RARE,
    _NONE,
    SimulationResult,
    _sample_outcome,
    play_session,
    run_validation,
    simulate_policy,
)
from pity_solver.engine.config import RateConfig
from pity_solver.engine.outcomes import DrawDistribution
from pity_solver.solvers.strategy_dp import Action, StrategyTable, solve

CERTAIN = RateConfig(base_rate=1.0, featured_share=1.0, pity_increment=0.0, max_summons=5)
NO_FEATURED = RateConfig(featured_share=0.0, max_summons=25)


@pytest.fixture(scope="module")
def table_60() -> StrategyTable:
    return solve(RateConfig(max_summons=60))


@pytest.fixture(scope="module")
def result_60(table_60) -> SimulationResult:
    return simulate_policy(table_60, n_trials=4_000, seed=7)


# ─── SimulationResult ─────────────────────────────────────────────────────────


class TestSimulationResult:
    def test_fields(self, result_60):
        assert result_60.n_trials == 4_000
        assert 0 <= result_60.n_successes <= 4_000
        assert result_60.success_rate == result_60.n_successes / 4_000
        assert result_60.start_summons == 60
        assert result_60.start_pity == 0

    def test_str(self, result_60):
        text = str(result_60)
        assert text.startswith("Trials: 4,000")
        assert "95% CI" in text
        assert "pity 0" in text

    def test_mean_draws_within_budget(self, result_60):
        assert 0.0 < result_60.mean_draws_used <= 60.0

    def test_action_counts_consistent(self, result_60):
        total_draws = result_60.mean_draws_used * result_60.n_trials
        assert result_60.n_bulk_actions * 10 + result_60.n_single_actions == pytest.approx(total_draws)


# ─── Outcome sampling ─────────────────────────────────────────────────────────


class TestSampleOutcome:
    DIST = DrawDistribution(featured=0.2, non_featured_rare=0.3, none=0.5)

    def test_featured_band(self):
        assert _sample_outcome(self.DIST, 0.0) == _FEATURED
        assert _sample_outcome(self.DIST, 0.19) == _FEATURED

    def test_non_featured_band(self):
        assert _sample_outcome(self.DIST, 0.2) == _NON_FEATURED_RARE
        assert _sample_outcome(self.DIST, 0.49) == _NON_FEATURED_RARE

    def test_none_band(self):
        assert _sample_outcome(self.DIST, 0.5) == _NONE
        assert _sample_outcome(self.DIST, 0.999) == _NONE


# ─── play_session ─────────────────────────────────────────────────────────────


class TestPlaySession:
    def test_certain_success_first_draw(self):
        table = solve(CERTAIN)
        assert play_session(table, 5, 0) == (True, 1, 0)

    def test_no_featured_uses_whole_budget(self):
        table = solve(NO_FEATURED)
        success, draws_used, n_bulk = play_session(table, 25, 0)
        assert not success
        assert draws_used == 25
        assert n_bulk == 0

    def test_bulk_policy_counts_tenfolds(self):
        cfg = RateConfig(featured_share=0.0, max_summons=30)
        table = solve(cfg, policy=Action.BULK)
        success, draws_used, n_bulk = play_session(table, 30, 0)
        assert not success
        assert draws_used == 30
        assert n_bulk == 3

    def test_tenfold_past_threshold_stays_in_table(self):
        # A tenfold from pity 95 lands at 105, which the table must hold.
        cfg = RateConfig(featured_share=0.0, max_summons=20)
        table = solve(cfg, summons=20, pity=95, policy=Action.BULK)
        assert table.has_state(10, 105)
        for _ in range(50):
            success, draws_used, n_bulk = play_session(table, 20, 95)
            assert not success
            assert draws_used == 20
            assert n_bulk == 2


# ─── simulate_policy ──────────────────────────────────────────────────────────


class TestSimulatePolicy:
    def test_reproducible_with_seed(self, table_60):
        a = simulate_policy(table_60, n_trials=500, seed=123)
        b = simulate_policy(table_60, n_trials=500, seed=123)
        assert a.n_successes == b.n_successes
        assert a.mean_draws_used == b.mean_draws_used

    def test_zero_trials_raises(self, table_60):
        with pytest.raises(ValueError):
            simulate_policy(table_60, n_trials=0)

    def test_converges_to_dp_value(self, table_60, result_60):
        p = table_60.root_value
        tolerance = 4 * math.sqrt(p * (1 - p) / result_60.n_trials)
        assert abs(result_60.success_rate - p) < tolerance

    def test_ci_contains_rate(self, result_60):
        assert result_60.ci_95_low <= result_60.success_rate <= result_60.ci_95_high

    def test_custom_start_state(self, table_60):
        result = simulate_policy(table_60, n_trials=200, summons=30, pity=0)
        assert result.start_summons == 30
        assert result.mean_draws_used <= 30.0

    def test_certain_success(self):
        result = simulate_policy(solve(CERTAIN), n_trials=100)
        assert result.n_successes == 100
        assert result.mean_draws_used == 1.0

    def test_single_only_policy(self):
        table = solve(RateConfig(max_summons=40), policy=Action.SINGLE)
        result = simulate_policy(table, n_trials=300)
        assert result.n_bulk_actions == 0


# ─── run_validation ───────────────────────────────────────────────────────────


class TestRunValidation:
    def test_prints_comparison(self, table_60, capsys):
        result, discrepancy = run_validation(table_60, n_trials=1_000, seed=1)
        out = capsys.readouterr().out
        assert "DP value" in out
        assert "MC" in out
        assert "Delta" in out
        assert discrepancy == pytest.approx(result.success_rate - table_60.root_value)
