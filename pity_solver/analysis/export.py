"""Grid export for a solved strategy table.

The grid has one row per pity value ``0..pity_bound-1`` and one column per
remaining-draw budget ``0..max_summons``.  Each cell holds the *signed*
success probability of that state:

    negative → a single summon is optimal
    positive → a tenfold is optimal
    0.0      → state never evaluated (includes the ``summons == 0`` column)

Single-optimal states with zero success probability export as ``-0.0``.

Usage (writes ``strategy_grid.csv`` in the working directory):
    python -m pity_solver.analysis.export
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from pity_solver.solvers.strategy_dp import Action, StrategyTable

# ─── Constants ────────────────────────────────────────────────────────────────

ACTION_SIGN: dict[Action, float] = {Action.SINGLE: -1.0, Action.BULK: 1.0}
"""Multiplier applied to the success probability to encode the chosen action."""

DEFAULT_CSV_PATH: str = "strategy_grid.csv"


# ─── Grid builders ────────────────────────────────────────────────────────────


def build_signed_grid(table: StrategyTable) -> np.ndarray:
    """Return the signed probability grid, shape ``(pity_bound, max_summons + 1)``.

    Args:
        table: StrategyTable from :func:`pity_solver.solvers.strategy_dp.solve`.

    Returns:
        float64 array indexed ``[pity, summons]``.  Unevaluated cells are 0.0.
    """
    config = table.config
    grid = np.zeros((config.pity_bound, config.max_summons + 1), dtype=np.float64)
    for (pity, summons), result in table.entries.items():
        grid[pity, summons] = ACTION_SIGN[result.action] * result.probability
    return grid


def grid_to_frame(table: StrategyTable) -> pd.DataFrame:
    """Wrap the signed grid in a DataFrame labelled by pity (rows) and budget (cols)."""
    grid = build_signed_grid(table)
    frame = pd.DataFrame(
        grid,
        index=pd.RangeIndex(grid.shape[0]),
        columns=pd.RangeIndex(grid.shape[1]),
    )
    return frame


def write_grid_csv(table: StrategyTable, path: str = DEFAULT_CSV_PATH) -> pd.DataFrame:
    """Write the signed grid as CSV and return the frame that was written.

    Layout: header row ``,0,1,...,max_summons``; each data row starts with
    its pity index.
    """
    frame = grid_to_frame(table)
    frame.to_csv(path)
    return frame


def read_grid_csv(path: str) -> pd.DataFrame:
    """Load a grid written by :func:`write_grid_csv` with integer axis labels."""
    frame = pd.read_csv(path, index_col=0)
    frame.columns = frame.columns.astype(int)
    return frame


def decode_cell(cell: float) -> tuple[float, Action]:
    """Split one signed cell back into ``(probability, action)``.

    Zero cells decode as SINGLE: an evaluated zero-probability state is always
    single (a tenfold only wins when strictly better), and unevaluated cells
    carry no action.

    Examples:
        >>> decode_cell(0.42)
        (0.42, <Action.BULK: 'BULK'>)
        >>> decode_cell(-0.125)
        (0.125, <Action.SINGLE: 'SINGLE'>)
    """
    if cell > 0.0:
        return cell, Action.BULK
    return abs(cell), Action.SINGLE


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import time

    from pity_solver.solvers.strategy_dp import solve

    t0 = time.time()
    table = solve()
    print(table.root_value)
    write_grid_csv(table, DEFAULT_CSV_PATH)
    print(f"Wrote {DEFAULT_CSV_PATH} ({len(table):,} states, {time.time() - t0:.2f}s)")
