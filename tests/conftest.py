"""
Shared pytest fixtures for summon pity solver tests.

Provides a brute-force (non-memoised) reference recursion written directly
from the rate formulas, independent of pity_solver.engine.outcomes.
"""

from __future__ import annotations

import pytest

from pity_solver.engine.config import REFERENCE_CONFIG, RateConfig


def brute_force_value(summons: int, pity: int, config: RateConfig = REFERENCE_CONFIG) -> float:
    """Plain exponential recursion for V(summons, pity).

    Keep ``summons`` small (≤ 16): the call count roughly doubles per draw.

    Examples:
        >>> brute_force_value(1, 0)
        0.01
    """
    if summons <= 0 or pity < 0 or pity >= config.pity_bound:
        return 0.0

    base = config.base_rate
    share = config.featured_share
    bonus = (pity // 10) * config.pity_increment
    ordinary = share * (1.0 + bonus / base)
    saturated = pity >= config.pity_threshold

    if saturated:
        f, r, n = share / base, 1.0 - share / base, 0.0
    else:
        f, r, n = ordinary, base + bonus - ordinary, 1.0 - (base + bonus)

    single = (
        f
        + r * brute_force_value(summons - 1, 0, config)
        + n * brute_force_value(summons - 1, pity + 1, config)
    )
    if summons < 10:
        return single

    if saturated:
        f10 = 1.0 - (1.0 - share / base) * (1.0 - ordinary) ** 9
        n10 = 0.0
        r10 = 1.0 - f10
    else:
        f10 = 1.0 - (1.0 - ordinary) ** 10
        n10 = n**10
        r10 = 1.0 - n10 - f10

    bulk = (
        f10
        + r10 * brute_force_value(summons - 10, 0, config)
        + n10 * brute_force_value(summons - 10, pity + 10, config)
    )
    return max(single, bulk)


@pytest.fixture
def small_config() -> RateConfig:
    """Reference rates with a 60-draw table: fast to solve, still crosses tenfold boundaries."""
    return RateConfig(max_summons=60)


@pytest.fixture
def bf():
    """Expose brute_force_value as a fixture for convenience."""
    return brute_force_value
