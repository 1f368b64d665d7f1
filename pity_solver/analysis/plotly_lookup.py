"""Interactive Plotly strategy lookup for the summon pity solver.

Three public functions:

    build_lookup_figure(table, show_margin)
        — Success-probability and optimal-action heatmaps, one hover per state.
    build_margin_figure(table)
        — Diverging heatmap of single − tenfold success probability.
    save_lookup_html(fig, path)
        — Export any figure to a self-contained HTML file.

Hover over any cell to see the draws remaining, pity counter, success
probability, chosen action and (optionally) the single-vs-tenfold margin.
"""

from __future__ import annotations

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from pity_solver.analysis.heat_maps import (
    build_action_heatmap_data,
    build_probability_heatmap_data,
)
from pity_solver.solvers.strategy_dp import StrategyTable, build_margin_table

# ─── Constants ────────────────────────────────────────────────────────────────

# Discrete blue→orange colorscale: 0.0 = SINGLE, 1.0 = BULK.
_BINARY_COLORSCALE: list[list] = [
    [0.0, "#1f77b4"],
    [0.499, "#1f77b4"],
    [0.501, "#ff7f0e"],
    [1.0, "#ff7f0e"],
]

_PROBABILITY_COLORSCALE: str = "Viridis"
_MARGIN_COLORSCALE: str = "RdBu"


# ─── Hover text builder ───────────────────────────────────────────────────────


def _build_hover(
    table: StrategyTable,
    margins: dict[tuple[int, int], float | None] | None,
) -> list[list[str]]:
    """Return a pity × budget grid of hover strings (empty for unevaluated states).

    Args:
        table:   Solved StrategyTable.
        margins: Output of build_margin_table, or None to omit the margin line.
    """
    config = table.config
    rows: list[list[str]] = [
        [""] * (config.max_summons + 1) for _ in range(config.pity_bound)
    ]
    for (pity, summons), result in table.entries.items():
        lines = [
            f"Draws left: <b>{summons}</b>",
            f"Pity: {pity}",
            f"P(featured): <b>{result.probability:.4f}</b>",
            f"Action: <b>{result.action.value}</b>",
        ]
        if margins is not None:
            margin = margins.get((pity, summons))
            if margin is not None:
                lines.append(f"Single − tenfold: {margin:+.5f}")
        rows[pity][summons] = "<br>".join(lines)
    return rows


# ─── Trace builder ────────────────────────────────────────────────────────────


def _make_heatmap_trace(
    data: np.ndarray,
    hover_text: list[list[str]],
    *,
    colorscale: list[list] | str,
    name: str,
    zmin: float = 0.0,
    zmax: float = 1.0,
    showscale: bool = True,
    colorbar_title: str = "",
    colorbar_x: float = 1.02,
) -> go.Heatmap:
    """Build one go.Heatmap trace; NaN cells become None and render blank."""
    z = [[None if np.isnan(v) else v for v in row] for row in data.tolist()]
    return go.Heatmap(
        z=z,
        colorscale=colorscale,
        zmin=zmin,
        zmax=zmax,
        text=hover_text,
        hovertemplate="%{text}<extra></extra>",
        showscale=showscale,
        colorbar={"title": colorbar_title, "x": colorbar_x},
        name=name,
    )


# ─── Public figure builders ───────────────────────────────────────────────────


def build_lookup_figure(
    table: StrategyTable,
    *,
    show_margin: bool = True,
) -> go.Figure:
    """Build the interactive probability + action lookup (1×2 subplots).

    Args:
        table:       Solved StrategyTable.
        show_margin: Include the single − tenfold margin in hover text.
                     Requires an optimal-policy table.

    Returns:
        go.Figure with two heatmap traces (probability, action).
    """
    probability = build_probability_heatmap_data(table)
    actions = build_action_heatmap_data(table)
    margins = build_margin_table(table) if show_margin else None
    hover = _build_hover(table, margins)

    fig = make_subplots(
        rows=1,
        cols=2,
        subplot_titles=["Success probability", "Optimal action"],
        horizontal_spacing=0.12,
    )
    fig.add_trace(
        _make_heatmap_trace(
            probability,
            hover,
            colorscale=_PROBABILITY_COLORSCALE,
            name="Probability",
            showscale=True,
            colorbar_title="P(featured)",
            colorbar_x=0.44,
        ),
        row=1,
        col=1,
    )
    fig.add_trace(
        _make_heatmap_trace(
            actions,
            hover,
            colorscale=_BINARY_COLORSCALE,
            name="Action",
            showscale=True,
            colorbar_title="SINGLE / BULK",
            colorbar_x=1.02,
        ),
        row=1,
        col=2,
    )

    fig.update_layout(
        title_text=(
            f"Summon Strategy Lookup — P(featured) = {table.root_value:.4f} "
            f"from {table.root_summons} draws"
        ),
        title_font_size=15,
        height=520,
        width=1200,
    )
    fig.update_yaxes(title_text="Pity counter", col=1)
    fig.update_xaxes(title_text="Draws remaining")
    return fig


def build_margin_figure(table: StrategyTable) -> go.Figure:
    """Build a diverging heatmap of single − tenfold success probability.

    Red cells favour the tenfold, blue cells favour the single summon.  The
    colour range is symmetric around zero.

    Args:
        table: Optimal-policy StrategyTable.

    Returns:
        go.Figure with one heatmap trace.
    """
    config = table.config
    margins = build_margin_table(table)
    data = np.full((config.pity_bound, config.max_summons + 1), np.nan)
    for (pity, summons), margin in margins.items():
        if margin is not None:
            data[pity, summons] = margin

    finite = data[~np.isnan(data)]
    bound = float(np.max(np.abs(finite))) if finite.size else 1.0
    if bound == 0.0:
        bound = 1.0

    fig = go.Figure(
        _make_heatmap_trace(
            data,
            _build_hover(table, margins),
            colorscale=_MARGIN_COLORSCALE,
            name="Margin",
            zmin=-bound,
            zmax=bound,
            colorbar_title="single − tenfold",
        )
    )
    fig.update_layout(
        title_text="Single vs Tenfold Margin",
        title_font_size=15,
        height=520,
        width=900,
    )
    fig.update_yaxes(title_text="Pity counter")
    fig.update_xaxes(title_text="Draws remaining")
    return fig


# ─── HTML export ──────────────────────────────────────────────────────────────


def save_lookup_html(fig: go.Figure, path: str) -> None:
    """Save a Plotly figure to a self-contained HTML file.

    Plotly JS is loaded from the CDN so the file itself remains compact.

    Args:
        fig:  Any go.Figure produced by this module.
        path: Destination file path (e.g. ``"strategy_lookup.html"``).
    """
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    from pity_solver.solvers.strategy_dp import solve

    print("Solving reference configuration …")
    table = solve()

    print("Building interactive lookup figures …")
    save_lookup_html(build_lookup_figure(table), "strategy_lookup.html")
    save_lookup_html(build_margin_figure(table), "strategy_margin.html")
    print("Saved: strategy_lookup.html, strategy_margin.html")
