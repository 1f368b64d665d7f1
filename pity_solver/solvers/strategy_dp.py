"""
Strategy DP solver for featured-unit summoning under pity.

Computes, for every reachable state ``(pity, summons)``, the maximum
probability of obtaining the featured unit at least once before the draw
budget runs out, together with the action (single summon or tenfold) that
achieves it.  The player is assumed to re-optimise after every outcome.

Recursion (``s`` = remaining draws, ``p`` = pity counter):

    single(s, p) = F(p) + R(p)·V(s-1, 0) + N(p)·V(s-1, p+1)
    bulk(s, p)   = F10(p) + R10(p)·V(s-10, 0) + N10(p)·V(s-10, p+10)
    V(s, p)      = single                 if s < 10
                 = max(single, bulk)      otherwise (ties go to SINGLE)

where F/R/N are the featured / non-featured-rare / none probabilities from
``pity_solver.engine.outcomes``.  ``V`` is 0 when ``s <= 0`` or when ``p``
falls outside ``[0, pity_bound)``.

Memoisation makes the work proportional to the number of distinct states,
O(pity_bound × max_summons), instead of exponential in the budget.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from pity_solver.engine.config import (
    BULK_SIZE,
    REFERENCE_CONFIG,
    RateConfig,
    StateSpaceOverflow,
)
from pity_solver.engine.outcomes import bulk_draw_distribution, single_draw_distribution

# ─── Action ───────────────────────────────────────────────────────────────────


class Action(Enum):
    """Summon actions available at a state."""

    SINGLE = "SINGLE"
    BULK = "BULK"


# ─── Result types ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class StateResult:
    """Solved value of one state.

    Attributes:
        probability: Probability of obtaining the featured unit from this state.
        action:      Action that achieves ``probability``.
    """

    probability: float
    action: Action


@dataclass
class StrategyTable:
    """Completed memo table of one ``solve()`` run.

    Entries are keyed by ``(pity, summons)``.  Only evaluated states are
    present; terminal states (no draws left, pity out of range) are never
    stored and read as 0 through :meth:`value`.

    Attributes:
        config:       Rate configuration the table was solved under.
        root_summons: Draw budget of the root state.
        root_pity:    Pity counter of the root state.
        entries:      ``{(pity, summons): StateResult}``.
        policy:       ``None`` for the optimal policy, otherwise the fixed
                      action the table was forced to use.
    """

    config: RateConfig
    root_summons: int
    root_pity: int
    entries: dict[tuple[int, int], StateResult]
    policy: Action | None = None

    @property
    def root_value(self) -> float:
        """Headline answer: success probability from the root state."""
        return self.value(self.root_summons, self.root_pity)

    def value(self, summons: int, pity: int) -> float:
        """Success probability at a state.

        Raises:
            KeyError: The state is non-terminal but was never evaluated.
        """
        if _is_terminal(summons, pity, self.config):
            return 0.0
        return self.entries[(pity, summons)].probability

    def action(self, summons: int, pity: int) -> Action:
        """Chosen action at an evaluated state.

        Raises:
            KeyError: The state was never evaluated (terminal states included).
        """
        return self.entries[(pity, summons)].action

    def has_state(self, summons: int, pity: int) -> bool:
        return (pity, summons) in self.entries

    def states(self) -> Iterator[tuple[int, int]]:
        """Yield evaluated ``(pity, summons)`` keys in row-major order."""
        yield from sorted(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


# ─── Recursion ────────────────────────────────────────────────────────────────


def _is_terminal(summons: int, pity: int, config: RateConfig) -> bool:
    """True for states valued at 0 without evaluation."""
    return summons <= 0 or pity < 0 or pity >= config.pity_bound


def _single_value(
    summons: int,
    pity: int,
    config: RateConfig,
    memo: dict,
    policy: Action | None,
) -> float:
    """Success probability of drawing one single summon, then playing on."""
    dist = single_draw_distribution(pity, config)
    reset = _optimal_value(summons - 1, 0, config, memo, policy)
    carry = _optimal_value(summons - 1, pity + 1, config, memo, policy)
    return dist.featured + dist.non_featured_rare * reset + dist.none * carry


def _bulk_value(
    summons: int,
    pity: int,
    config: RateConfig,
    memo: dict,
    policy: Action | None,
) -> float:
    """Success probability of drawing one tenfold, then playing on."""
    dist = bulk_draw_distribution(pity, config)
    reset = _optimal_value(summons - BULK_SIZE, 0, config, memo, policy)
    carry = _optimal_value(summons - BULK_SIZE, pity + BULK_SIZE, config, memo, policy)
    return dist.featured + dist.non_featured_rare * reset + dist.none * carry


def _evaluate_state(
    summons: int,
    pity: int,
    config: RateConfig,
    memo: dict,
    policy: Action | None,
) -> StateResult:
    """Compute (not look up) the value and action of a non-terminal state.

    Below BULK_SIZE remaining draws only the single summon is available.
    Under the optimal policy a tenfold is chosen only when strictly better;
    ties resolve to SINGLE.
    """
    if policy is Action.BULK and summons >= BULK_SIZE:
        return StateResult(_bulk_value(summons, pity, config, memo, policy), Action.BULK)

    single = _single_value(summons, pity, config, memo, policy)
    if summons < BULK_SIZE or policy is Action.SINGLE:
        return StateResult(single, Action.SINGLE)

    bulk = _bulk_value(summons, pity, config, memo, policy)
    if bulk > single:
        return StateResult(bulk, Action.BULK)
    return StateResult(single, Action.SINGLE)


def _optimal_value(
    summons: int,
    pity: int,
    config: RateConfig,
    memo: dict,
    policy: Action | None = None,
) -> float:
    """Memoised success probability ``V(summons, pity)``.

    Args:
        summons: Remaining draws.
        pity:    Current pity counter.
        config:  Rate configuration.
        memo:    ``{(pity, summons): StateResult}`` shared across the run.
        policy:  ``None`` to optimise, or a fixed Action to force.

    Returns:
        Probability in [0, 1].  Terminal and out-of-range states return 0
        without touching ``memo``.
    """
    if _is_terminal(summons, pity, config):
        return 0.0

    key = (pity, summons)
    result = memo.get(key)
    if result is None:
        result = _evaluate_state(summons, pity, config, memo, policy)
        memo[key] = result
    return result.probability


# ─── Public API ───────────────────────────────────────────────────────────────


def solve(
    config: RateConfig = REFERENCE_CONFIG,
    summons: int | None = None,
    pity: int = 0,
    policy: Action | None = None,
) -> StrategyTable:
    """Solve every state reachable from ``(summons, pity)``.

    Reset-chain states ``(s, 0)`` below the root are evaluated first in
    ascending order.  They are all reachable from the root, so the table is
    the same as pure top-down recursion, but each later recursion only has
    to descend through the pity range rather than the whole budget.

    Args:
        config:  Rate configuration.
        summons: Root draw budget; defaults to ``config.max_summons``.
        pity:    Root pity counter.
        policy:  ``None`` for the optimal policy; ``Action.SINGLE`` or
                 ``Action.BULK`` to evaluate a fixed policy instead.

    Returns:
        StrategyTable holding every evaluated state.

    Raises:
        StateSpaceOverflow: Root state outside the configured bounds.
    """
    if summons is None:
        summons = config.max_summons
    if not 0 <= summons <= config.max_summons:
        raise StateSpaceOverflow(
            f"root budget {summons} outside 0..{config.max_summons}"
        )
    if not 0 <= pity < config.pity_bound:
        raise StateSpaceOverflow(f"root pity {pity} outside 0..{config.pity_bound - 1}")

    memo: dict = {}
    step = BULK_SIZE if policy is Action.BULK else 1
    for warm in reversed(range(summons - step, 0, -step)):
        _optimal_value(warm, 0, config, memo, policy)
    _optimal_value(summons, pity, config, memo, policy)

    return StrategyTable(
        config=config,
        root_summons=summons,
        root_pity=pity,
        entries=memo,
        policy=policy,
    )


def optimal_action(
    summons: int,
    pity: int,
    config: RateConfig = REFERENCE_CONFIG,
) -> tuple[Action, float]:
    """Return the optimal action and its success probability for one state.

    Raises:
        KeyError: ``summons <= 0`` — no action exists at a terminal state.
    """
    table = solve(config, summons=summons, pity=pity)
    return (table.action(summons, pity), table.value(summons, pity))


def action_values(table: StrategyTable, summons: int, pity: int) -> tuple[float, float | None]:
    """Return ``(single_value, bulk_value)`` at an evaluated state.

    Recomputed from the table's successor values, so only valid on an
    optimal-policy table where both branches were explored.  ``bulk_value``
    is None below BULK_SIZE draws.
    """
    config = table.config
    dist = single_draw_distribution(pity, config)
    single = (
        dist.featured
        + dist.non_featured_rare * table.value(summons - 1, 0)
        + dist.none * table.value(summons - 1, pity + 1)
    )
    if summons < BULK_SIZE:
        return single, None

    dist10 = bulk_draw_distribution(pity, config)
    bulk = (
        dist10.featured
        + dist10.non_featured_rare * table.value(summons - BULK_SIZE, 0)
        + dist10.none * table.value(summons - BULK_SIZE, pity + BULK_SIZE)
    )
    return single, bulk


def build_margin_table(table: StrategyTable) -> dict[tuple[int, int], float | None]:
    """Return ``single − bulk`` success probability for every evaluated state.

    Positive = single summon is better, negative = tenfold is better.
    States with fewer than BULK_SIZE draws map to ``None`` (no tenfold option).

    Args:
        table: Optimal-policy table from :func:`solve`.

    Raises:
        ValueError: ``table`` was solved under a fixed policy.
    """
    if table.policy is not None:
        raise ValueError("margin table needs an optimal-policy table")

    margins: dict[tuple[int, int], float | None] = {}
    for pity, summons in table.states():
        single, bulk = action_values(table, summons, pity)
        margins[(pity, summons)] = None if bulk is None else single - bulk
    return margins


def compare_policies(
    config: RateConfig = REFERENCE_CONFIG,
    summons: int | None = None,
    pity: int = 0,
) -> dict[str, float]:
    """Root success probability under optimal, single-only and bulk-only play.

    Bulk-only still draws singles once fewer than BULK_SIZE draws remain.
    """
    return {
        "optimal": solve(config, summons, pity).root_value,
        "single_only": solve(config, summons, pity, policy=Action.SINGLE).root_value,
        "bulk_only": solve(config, summons, pity, policy=Action.BULK).root_value,
    }


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import time

    print("Summon Pity Solver — featured unit, single vs tenfold")
    print(f"Config: {REFERENCE_CONFIG}")

    t0 = time.time()
    table = solve()
    elapsed = time.time() - t0

    print(f"Solved {len(table):,} states in {elapsed:.2f}s")
    print(f"P(featured | {table.root_summons} summons, pity 0) = {table.root_value:.6f}")

    print(f"\n{'─' * 50}")
    for name, value in compare_policies().items():
        print(f"  {name:<12}: {value:.6f}")
    print(f"{'─' * 50}")
