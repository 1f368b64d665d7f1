"""
Outcome-probability model for single and bulk (tenfold) summons.

Every draw lands in exactly one of three mutually exclusive classes:

    featured           — the targeted unit; the run ends in success.
    non_featured_rare  — some other rare unit; pity resets to 0.
    none               — no rare unit; pity grows by the number of draws.

The pity bonus is assumed to be distributed proportionally across all rare
units, so the featured rate is scaled by the same multiplier as the total
rare rate:

    featured(p) = featured_share × (base_rate + pity_bonus(p)) / base_rate

Bulk probabilities come from complementary counting over ten draws with the
pity counter held fixed for all ten.  Pity drift inside a tenfold is ignored
except for the guaranteed draw at saturation.

All functions are pure; the hot ones keep a bounded LRU cache on ``(pity, config)``.
"""

from __future__ import annotations

import functools
from typing import NamedTuple

from pity_solver.engine.config import BULK_SIZE, RateConfig

CACHE_SIZE: int = 4096
"""Entries kept per cached function; about 37 configurations of 110 pity rows."""

# ─── Result type ──────────────────────────────────────────────────────────────


class DrawDistribution(NamedTuple):
    """Probabilities of the three outcome classes for one summon action."""

    featured: float
    non_featured_rare: float
    none: float


# ─── Single draw ──────────────────────────────────────────────────────────────


def is_saturated(pity: int, config: RateConfig) -> bool:
    """True if the next draw is a guaranteed rare."""
    return pity >= config.pity_threshold


@functools.lru_cache(maxsize=CACHE_SIZE)
def rate_up_featured_prob(pity: int, config: RateConfig) -> float:
    """Featured probability on an ordinary (non-guaranteed) draw.

    No saturation handling: this is the rate-up formula alone, used directly
    for the nine ordinary draws of a saturated tenfold.

    Examples:
        >>> from pity_solver.engine.config import REFERENCE_CONFIG
        >>> rate_up_featured_prob(0, REFERENCE_CONFIG)
        0.01
        >>> round(rate_up_featured_prob(40, REFERENCE_CONFIG), 6)   # 0.01 × 0.06/0.04
        0.015
    """
    multiplier = 1.0 + config.pity_bonus(pity) / config.base_rate
    return multiplier * config.featured_share


def featured_prob(pity: int, config: RateConfig) -> float:
    """Probability that one draw yields the featured unit."""
    if is_saturated(pity, config):
        return config.guaranteed_featured
    return rate_up_featured_prob(pity, config)


def non_featured_rare_prob(pity: int, config: RateConfig) -> float:
    """Probability that one draw yields a rare unit other than the featured one."""
    if is_saturated(pity, config):
        return 1.0 - config.guaranteed_featured
    return config.rare_rate(pity) - rate_up_featured_prob(pity, config)


def none_prob(pity: int, config: RateConfig) -> float:
    """Probability that one draw yields no rare unit (0 once saturated)."""
    if is_saturated(pity, config):
        return 0.0
    return 1.0 - config.rare_rate(pity)


@functools.lru_cache(maxsize=CACHE_SIZE)
def single_draw_distribution(pity: int, config: RateConfig) -> DrawDistribution:
    """Outcome distribution of one single summon at the given pity."""
    return DrawDistribution(
        featured=featured_prob(pity, config),
        non_featured_rare=non_featured_rare_prob(pity, config),
        none=none_prob(pity, config),
    )


# ─── Bulk draw ────────────────────────────────────────────────────────────────


def bulk_featured_prob(pity: int, config: RateConfig) -> float:
    """Probability that a tenfold yields at least one featured unit.

    Below the threshold this is ``1 - (1 - featured)^10``.  At or above it the
    first draw is the guaranteed rare and the remaining nine use the ordinary
    rate-up formula at the same pity value.
    """
    ordinary = rate_up_featured_prob(pity, config)
    if is_saturated(pity, config):
        miss_guaranteed = 1.0 - config.guaranteed_featured
        return 1.0 - miss_guaranteed * (1.0 - ordinary) ** (BULK_SIZE - 1)
    return 1.0 - (1.0 - ordinary) ** BULK_SIZE


def bulk_none_prob(pity: int, config: RateConfig) -> float:
    """Probability that a tenfold yields no rare unit at all."""
    if is_saturated(pity, config):
        return 0.0
    return none_prob(pity, config) ** BULK_SIZE


def bulk_non_featured_rare_prob(pity: int, config: RateConfig) -> float:
    """Probability that a tenfold yields at least one rare but never the featured unit."""
    if is_saturated(pity, config):
        return 1.0 - bulk_featured_prob(pity, config)
    return (1.0 - bulk_none_prob(pity, config)) - bulk_featured_prob(pity, config)


@functools.lru_cache(maxsize=CACHE_SIZE)
def bulk_draw_distribution(pity: int, config: RateConfig) -> DrawDistribution:
    """Outcome distribution of one tenfold summon at the given pity."""
    return DrawDistribution(
        featured=bulk_featured_prob(pity, config),
        non_featured_rare=bulk_non_featured_rare_prob(pity, config),
        none=bulk_none_prob(pity, config),
    )
