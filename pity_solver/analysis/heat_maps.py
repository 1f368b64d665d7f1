"""Strategy heat maps for the summon pity solver.

Two public data-builder functions return NumPy matrices that can be used
programmatically or passed to the plot helpers:

    build_probability_heatmap_data(table)  — success probability per state
    build_action_heatmap_data(table)       — 1.0 = BULK, 0.0 = SINGLE

Two public plot functions render matplotlib figures:

    plot_strategy_heatmaps(table, ...)     — 1×2 figure (probability + action)
    plot_policy_comparison(config, ...)    — root value vs budget per policy

Matrix convention (both builders):
    Shape  : (pity_bound, max_summons + 1) — rows = pity, cols = draws left
    Values : np.nan = state never evaluated
"""

from __future__ import annotations

import matplotlib
import matplotlib.colors
import matplotlib.figure
import matplotlib.patches
import matplotlib.pyplot as plt
import numpy as np

from pity_solver.engine.config import REFERENCE_CONFIG, RateConfig
from pity_solver.solvers.strategy_dp import Action, StrategyTable, solve

# ─── Constants ────────────────────────────────────────────────────────────────

_NAN_COLOR: str = "#cccccc"
_SINGLE_COLOR: str = "#1f77b4"
_BULK_COLOR: str = "#ff7f0e"


# ─── Colormaps ────────────────────────────────────────────────────────────────


def _make_binary_cmap() -> matplotlib.colors.ListedColormap:
    """Blue=SINGLE (0), Orange=BULK (1), grey=not evaluated (NaN)."""
    cmap = matplotlib.colors.ListedColormap([_SINGLE_COLOR, _BULK_COLOR])
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


def _make_continuous_cmap() -> matplotlib.colors.Colormap:
    """Viridis gradient for success probability, grey=not evaluated (NaN)."""
    cmap = matplotlib.colormaps["viridis"].copy()
    cmap.set_bad(color=_NAN_COLOR)
    return cmap


_BINARY_CMAP: matplotlib.colors.Colormap = _make_binary_cmap()
_CONTINUOUS_CMAP: matplotlib.colors.Colormap = _make_continuous_cmap()


# ─── Data builders ────────────────────────────────────────────────────────────


def _empty_grid(table: StrategyTable) -> np.ndarray:
    config = table.config
    return np.full((config.pity_bound, config.max_summons + 1), np.nan)


def build_probability_heatmap_data(table: StrategyTable) -> np.ndarray:
    """Return success probability per state; NaN where the state was not evaluated."""
    grid = _empty_grid(table)
    for (pity, summons), result in table.entries.items():
        grid[pity, summons] = result.probability
    return grid


def build_action_heatmap_data(table: StrategyTable) -> np.ndarray:
    """Return 1.0 where BULK is chosen, 0.0 where SINGLE is, NaN elsewhere."""
    grid = _empty_grid(table)
    for (pity, summons), result in table.entries.items():
        grid[pity, summons] = 1.0 if result.action == Action.BULK else 0.0
    return grid


# ─── Rendering helper ─────────────────────────────────────────────────────────


def _render_panel(
    ax: matplotlib.axes.Axes,
    data: np.ndarray,
    binary: bool,
) -> matplotlib.image.AxesImage:
    """Render one heat-map panel onto *ax* and return the AxesImage.

    Pity runs bottom-to-top so the saturation band sits at the top of the
    panel.  The caller sets the title.
    """
    cmap = _BINARY_CMAP if binary else _CONTINUOUS_CMAP
    masked = np.ma.masked_invalid(data)
    im = ax.imshow(
        masked,
        cmap=cmap,
        vmin=0.0,
        vmax=1.0,
        aspect="auto",
        origin="lower",
        interpolation="nearest",
    )
    ax.set_xlabel("Draws remaining")
    ax.set_ylabel("Pity counter")
    return im


# ─── Public plot functions ────────────────────────────────────────────────────


def plot_strategy_heatmaps(
    table: StrategyTable,
    title: str | None = None,
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot success probability and optimal action as a 1×2 figure.

    Args:
        table:     Optimal-policy StrategyTable.
        title:     Figure suptitle; defaults to the root state's headline.
        show:      Call ``plt.show()`` after building the figure.
        save_path: If given, save the figure to this path (PNG, SVG, ...).

    Returns:
        The matplotlib Figure.
    """
    probability = build_probability_heatmap_data(table)
    actions = build_action_heatmap_data(table)

    if title is None:
        title = (
            f"P(featured) = {table.root_value:.4f} "
            f"from {table.root_summons} draws, pity {table.root_pity}"
        )

    fig, (ax_prob, ax_action) = plt.subplots(1, 2, figsize=(14, 5))
    fig.suptitle(title, fontsize=12, fontweight="bold")

    im_prob = _render_panel(ax_prob, probability, binary=False)
    ax_prob.set_title("Success probability")
    fig.colorbar(im_prob, ax=ax_prob, fraction=0.046, pad=0.04)

    _render_panel(ax_action, actions, binary=True)
    ax_action.set_title("Optimal action")
    handles = [
        matplotlib.patches.Patch(color=_SINGLE_COLOR, label="Single"),
        matplotlib.patches.Patch(color=_BULK_COLOR, label="Tenfold"),
        matplotlib.patches.Patch(color=_NAN_COLOR, label="Not reached"),
    ]
    ax_action.legend(handles=handles, loc="upper right", fontsize=8)

    fig.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
    if show:
        plt.show()

    return fig


def plot_policy_comparison(
    config: RateConfig = REFERENCE_CONFIG,
    *,
    show: bool = True,
    save_path: str | None = None,
) -> matplotlib.figure.Figure:
    """Plot success probability vs budget (pity 0) for each policy.

    One solve per policy from ``config.max_summons`` covers every smaller
    budget, because every ``(s, 0)`` with ``s`` below the root is evaluated.

    Args:
        config:    Rate configuration.
        show:      Call ``plt.show()`` after building the figure.
        save_path: If given, save the figure to this path.

    Returns:
        The matplotlib Figure with one line per policy.
    """
    budgets = np.arange(config.max_summons + 1)
    policies = [
        ("Optimal", None),
        ("Single only", Action.SINGLE),
        ("Tenfold only", Action.BULK),
    ]

    fig, ax = plt.subplots(figsize=(9, 5))
    for label, policy in policies:
        table = solve(config, policy=policy)
        # Tenfold-only tables skip budgets that are not reachable in steps of 10.
        reached = [int(s) for s in budgets if table.has_state(int(s), 0)]
        values = [table.value(s, 0) for s in reached]
        ax.plot(reached, values, label=label, linewidth=1.5)

    ax.set_xlabel("Draw budget")
    ax.set_ylabel("P(featured)")
    ax.set_ylim(0.0, 1.0)
    ax.grid(alpha=0.3)
    ax.legend()
    ax.set_title("Success probability by policy (pity 0)")
    fig.tight_layout()

    if save_path is not None:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
    if show:
        plt.show()

    return fig
