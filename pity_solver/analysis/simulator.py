"""
Monte Carlo simulator for summon strategy validation.

Plays the summon process forward, following the action stored in a solved
StrategyTable at every visited state, and reports the observed rate of
obtaining the featured unit with a 95% Wilson confidence interval.

Primary use: cross-validate the DP solver.  Each action resolves to one of
the three outcome classes drawn from the same outcome model the solver uses
(a tenfold is sampled from the bulk distribution, not as ten separate
draws), so the estimate converges to ``table.value(summons, pity)``.

Usage (standalone report):
    python -m pity_solver.analysis.simulator
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy import stats

from pity_solver.engine.config import BULK_SIZE
from pity_solver.engine.outcomes import (
    DrawDistribution,
    bulk_draw_distribution,
    single_draw_distribution,
)
from pity_solver.solvers.strategy_dp import Action, StrategyTable

# Outcome class indices returned by _sample_outcome.
_FEATURED: int = 0
_NON_FEATURED_RARE: int = 1
_NONE: int = 2


# ─── Result type ──────────────────────────────────────────────────────────────


@dataclass
class SimulationResult:
    """Aggregate statistics from a Monte Carlo run.

    Attributes:
        n_trials:        Number of independent summon sessions simulated.
        n_successes:     Sessions that obtained the featured unit.
        success_rate:    n_successes / n_trials.
        ci_95_low:       Lower bound of the 95% Wilson interval.
        ci_95_high:      Upper bound of the 95% Wilson interval.
        mean_draws_used: Mean draws spent per session (stops at success).
        n_bulk_actions:  Tenfolds performed across all sessions.
        n_single_actions: Single summons performed across all sessions.
        start_summons:   Draw budget each session started with.
        start_pity:      Pity counter each session started with.
    """

    n_trials: int
    n_successes: int
    success_rate: float
    ci_95_low: float
    ci_95_high: float
    mean_draws_used: float
    n_bulk_actions: int
    n_single_actions: int
    start_summons: int
    start_pity: int

    def __str__(self) -> str:
        return (
            f"Trials: {self.n_trials:,} | "
            f"P(featured): {self.success_rate:.4f} | "
            f"95% CI: [{self.ci_95_low:.4f}, {self.ci_95_high:.4f}] | "
            f"Mean draws: {self.mean_draws_used:.1f} | "
            f"Start: {self.start_summons} draws, pity {self.start_pity}"
        )


# ─── Single session ───────────────────────────────────────────────────────────


def _sample_outcome(dist: DrawDistribution, u: float) -> int:
    """Map a uniform sample in [0, 1) to an outcome class index."""
    if u < dist.featured:
        return _FEATURED
    if u < dist.featured + dist.non_featured_rare:
        return _NON_FEATURED_RARE
    return _NONE


def play_session(table: StrategyTable, summons: int, pity: int) -> tuple[bool, int, int]:
    """Play one session from ``(summons, pity)`` following the table's actions.

    Args:
        table:   Solved StrategyTable covering every state the session visits.
        summons: Starting draw budget.
        pity:    Starting pity counter.

    Returns:
        ``(success, draws_used, n_bulk)``.

    Raises:
        KeyError: The session reached a state missing from the table.
    """
    config = table.config
    draws_used = 0
    n_bulk = 0

    while summons > 0:
        action = table.action(summons, pity)
        if action == Action.BULK:
            dist = bulk_draw_distribution(pity, config)
            size = BULK_SIZE
            n_bulk += 1
        else:
            dist = single_draw_distribution(pity, config)
            size = 1

        outcome = _sample_outcome(dist, np.random.random())
        summons -= size
        draws_used += size

        if outcome == _FEATURED:
            return True, draws_used, n_bulk
        if outcome == _NON_FEATURED_RARE:
            pity = 0
        else:
            pity += size

    return False, draws_used, n_bulk


# ─── Core simulation loop ─────────────────────────────────────────────────────


def simulate_policy(
    table: StrategyTable,
    n_trials: int = 10_000,
    seed: int | None = 42,
    summons: int | None = None,
    pity: int | None = None,
) -> SimulationResult:
    """Simulate ``n_trials`` sessions and summarise the success rate.

    Args:
        table:    Solved StrategyTable (optimal or fixed policy).
        n_trials: Number of sessions to simulate.
        seed:     NumPy random seed for reproducibility. None for a
                  non-deterministic run.
        summons:  Starting budget; defaults to the table's root budget.
        pity:     Starting pity; defaults to the table's root pity.

    Returns:
        SimulationResult for the run.

    Raises:
        ValueError: ``n_trials`` < 1.
    """
    if n_trials < 1:
        raise ValueError(f"n_trials must be at least 1, got {n_trials}")
    if summons is None:
        summons = table.root_summons
    if pity is None:
        pity = table.root_pity

    if seed is not None:
        np.random.seed(seed)

    n_successes = 0
    total_draws = 0
    total_bulk = 0
    total_actions = 0

    for _ in range(n_trials):
        success, draws_used, n_bulk = play_session(table, summons, pity)
        n_successes += int(success)
        total_draws += draws_used
        total_bulk += n_bulk
        total_actions += n_bulk + (draws_used - n_bulk * BULK_SIZE)

    ci = stats.binomtest(n_successes, n_trials).proportion_ci(
        confidence_level=0.95, method="wilson"
    )

    return SimulationResult(
        n_trials=n_trials,
        n_successes=n_successes,
        success_rate=n_successes / n_trials,
        ci_95_low=float(ci.low),
        ci_95_high=float(ci.high),
        mean_draws_used=total_draws / n_trials,
        n_bulk_actions=total_bulk,
        n_single_actions=total_actions - total_bulk,
        start_summons=summons,
        start_pity=pity,
    )


def run_validation(
    table: StrategyTable,
    n_trials: int = 20_000,
    seed: int | None = 42,
) -> tuple[SimulationResult, float]:
    """Simulate from the table's root and print the DP vs MC comparison.

    Returns:
        ``(result, discrepancy)`` where discrepancy = MC rate − DP value.
    """
    result = simulate_policy(table, n_trials=n_trials, seed=seed)
    dp_value = table.root_value
    discrepancy = result.success_rate - dp_value
    inside = result.ci_95_low <= dp_value <= result.ci_95_high

    print(f"DP value : {dp_value:.4f}")
    print(f"MC       : {result}")
    print(f"Delta    : {discrepancy:+.4f}  ({'inside' if inside else 'OUTSIDE'} 95% CI)")
    return result, discrepancy


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from pity_solver.engine.config import RateConfig
    from pity_solver.solvers.strategy_dp import solve

    print("Monte Carlo validation — 200-draw budget, reference rates")
    run_validation(solve(RateConfig(max_summons=200)), n_trials=50_000)
