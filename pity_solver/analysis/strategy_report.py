"""Strategy report for the summon pity solver.

Public functions format a solved StrategyTable into human-readable tables:

    print_headline(table)                 — root value, config, table size
    print_budget_milestones(table)        — P(featured) at selected budgets
    print_action_chart(table)             — S/B grid over pity × budget
    print_policy_comparison(values)       — optimal vs fixed policies
    action_switch_points(table, pity)     — budgets where the action flips
    bulk_share(table)                     — fraction of tenfold-eligible states choosing BULK
"""

from __future__ import annotations

from pity_solver.engine.config import BULK_SIZE
from pity_solver.solvers.strategy_dp import Action, StrategyTable

_DEFAULT_MILESTONES: tuple[int, ...] = (1, 10, 50, 100, 200, 300, 500, 750, 1000)


# ─── Summary helpers ──────────────────────────────────────────────────────────


def action_switch_points(table: StrategyTable, pity: int = 0) -> list[tuple[int, Action]]:
    """Return ``(budget, new_action)`` for each budget where the action changes.

    Walks the evaluated states of one pity row in increasing budget order.
    The first evaluated budget is always reported.
    """
    points: list[tuple[int, Action]] = []
    previous: Action | None = None
    for row_pity, summons in table.states():
        if row_pity != pity:
            continue
        action = table.action(summons, pity)
        if action != previous:
            points.append((summons, action))
            previous = action
    return points


def bulk_share(table: StrategyTable) -> float:
    """Fraction of evaluated states with a tenfold option where BULK is chosen."""
    eligible = [key for key in table.entries if key[1] >= BULK_SIZE]
    if not eligible:
        return 0.0
    n_bulk = sum(1 for key in eligible if table.entries[key].action == Action.BULK)
    return n_bulk / len(eligible)


# ─── Public report functions ──────────────────────────────────────────────────


def print_headline(table: StrategyTable) -> None:
    """Print the headline success probability and the configuration used."""
    config = table.config
    policy = "optimal" if table.policy is None else f"{table.policy.value} only"

    print("=" * 56)
    print("Featured Unit Success Probability")
    print("=" * 56)
    print(f"  Budget / pity:   {table.root_summons} draws, pity {table.root_pity}")
    print(f"  Policy:          {policy}")
    print(f"  P(featured):     {table.root_value:.6f}  ({table.root_value * 100:.2f}%)")
    print(f"  States solved:   {len(table):,}")
    print()
    print("  Rates:")
    print(f"    base rare rate     {config.base_rate:.4f}")
    print(f"    featured share     {config.featured_share:.4f}")
    print(f"    pity increment     {config.pity_increment:.4f} per 10 draws")
    print(f"    guaranteed at      {config.pity_threshold} pity")
    print()


def print_budget_milestones(
    table: StrategyTable,
    budgets: tuple[int, ...] = _DEFAULT_MILESTONES,
) -> None:
    """Print P(featured) and the first action from pity 0 at selected budgets.

    Budgets that were not evaluated in this table are skipped.
    """
    print("=" * 56)
    print("Success Probability by Budget  (pity 0)")
    print("=" * 56)
    print(f"  {'Draws':>6}  {'P(featured)':>11}  {'First action':>12}")
    print(f"  {'------':>6}  {'-----------':>11}  {'------------':>12}")
    for summons in budgets:
        if not table.has_state(summons, 0):
            continue
        value = table.value(summons, 0)
        action = table.action(summons, 0)
        print(f"  {summons:>6}  {value:>11.4f}  {action.value:>12}")
    print()


def print_action_chart(
    table: StrategyTable,
    pities: range | None = None,
    budgets: range | None = None,
) -> None:
    """Print the optimal action as a terminal grid.

    Rows: pity values (default every 10 up to the threshold).
    Cols: draw budgets (default 10..100 in steps of 10).
    Cells: 'S' (SINGLE), 'B' (BULK), or '-' if the state was not evaluated.
    """
    config = table.config
    if pities is None:
        pities = range(0, config.pity_threshold + 1, 10)
    if budgets is None:
        budgets = range(10, min(config.max_summons, 100) + 1, 10)

    col_w = 5
    header = "".join(f"{s:>{col_w}}" for s in budgets)
    divider = "─" * (10 + col_w * len(budgets))

    print(f"\nAction Chart: {table.root_summons} draws root")
    print(f"{'pity':<10}{header}")
    print(divider)
    for pity in pities:
        cells = ""
        for summons in budgets:
            if not table.has_state(summons, pity):
                cell = "-"
            elif table.action(summons, pity) == Action.BULK:
                cell = "B"
            else:
                cell = "S"
            cells += f"{cell:>{col_w}}"
        print(f"{pity:<10}{cells}")
    print()


def print_policy_comparison(values: dict[str, float]) -> None:
    """Print root success probability per policy and the gain of optimal play.

    Args:
        values: Output of :func:`pity_solver.solvers.strategy_dp.compare_policies`.
    """
    optimal = values["optimal"]
    print("=" * 56)
    print("Policy Comparison")
    print("=" * 56)
    print(f"  {'Policy':<12}  {'P(featured)':>11}  {'Gap to optimal':>14}")
    print(f"  {'------':<12}  {'-----------':>11}  {'--------------':>14}")
    for name, value in values.items():
        print(f"  {name:<12}  {value:>11.6f}  {value - optimal:>+14.6f}")
    print()


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from pity_solver.solvers.strategy_dp import compare_policies, solve

    table = solve()
    print_headline(table)
    print_budget_milestones(table)
    print_action_chart(table)
    print_policy_comparison(compare_policies())
    print(f"Tenfold chosen in {bulk_share(table) * 100:.1f}% of eligible states")
    print(f"Switch points at pity 0: {action_switch_points(table)[:10]}")
