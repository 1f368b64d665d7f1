"""
Rate configuration for the summon pity model.

All constants that drive the outcome model and size the DP state space live
in a single frozen dataclass.  Consistency is checked once, at construction
time, so the solver never discovers a bad configuration mid-recursion.

Pity rule (fixed by the banner mechanics, not configurable):
    For every PITY_STEP draws accumulated in the pity counter, the total
    rare rate grows by ``pity_increment``.  Once the counter reaches
    ``pity_threshold`` the next draw is a guaranteed rare.
"""

from __future__ import annotations

from dataclasses import dataclass

# ─── Constants ────────────────────────────────────────────────────────────────

BULK_SIZE: int = 10
"""Number of draws resolved together by one bulk (tenfold) summon."""

PITY_STEP: int = 10
"""Pity counter granularity: the rate increases once per PITY_STEP draws."""


# ─── Errors ───────────────────────────────────────────────────────────────────


class InvalidRateConfiguration(ValueError):
    """Rate constants that would push an outcome probability outside [0, 1]."""


class StateSpaceOverflow(ValueError):
    """State-space bounds too small to represent every reachable state."""


# ─── RateConfig ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RateConfig:
    """Fixed inputs to the outcome model and the DP state-space bounds.

    Attributes:
        base_rate:       Probability of any rare outcome on one draw at zero pity.
        featured_share:  Portion of ``base_rate`` allocated to the featured
                         unit(s).  0.01 accounts for two featured adventurers.
        pity_increment:  Rare-rate increase per PITY_STEP draws of pity.
        pity_threshold:  Pity value at which the next draw is a guaranteed rare.
        max_summons:     Largest draw budget the table is sized for.
        pity_bound:      Exclusive upper bound for pity indexing.  At least
                         ``pity_threshold + BULK_SIZE`` so that bulk draws
                         starting just below the threshold stay indexable.

    Raises:
        InvalidRateConfiguration: Rates that break the probability model.
        StateSpaceOverflow:       Bounds that cannot hold the state space.
    """

    base_rate: float = 0.04
    featured_share: float = 0.01
    pity_increment: float = 0.005
    pity_threshold: int = 100
    max_summons: int = 1000
    pity_bound: int = 110

    def __post_init__(self) -> None:
        if self.base_rate <= 0.0:
            raise InvalidRateConfiguration(
                f"base_rate must be positive, got {self.base_rate}"
            )
        if self.featured_share < 0.0:
            raise InvalidRateConfiguration(
                f"featured_share must be non-negative, got {self.featured_share}"
            )
        if self.featured_share > self.base_rate:
            raise InvalidRateConfiguration(
                f"featured_share ({self.featured_share}) exceeds base_rate ({self.base_rate})"
            )
        if self.pity_increment < 0.0:
            raise InvalidRateConfiguration(
                f"pity_increment must be non-negative, got {self.pity_increment}"
            )
        # A tenfold started at pity_threshold - 1 lands at pity_threshold + BULK_SIZE - 1.
        if self.pity_bound < self.pity_threshold + BULK_SIZE:
            raise StateSpaceOverflow(
                f"pity_bound ({self.pity_bound}) must be at least pity_threshold + "
                f"BULK_SIZE ({self.pity_threshold + BULK_SIZE})"
            )
        if self.max_summons < 0:
            raise StateSpaceOverflow(f"max_summons must be non-negative, got {self.max_summons}")

        # Bulk draws above the threshold still use the ordinary rate for the
        # nine non-guaranteed draws, so the whole pity range must stay valid.
        top_rate = self.rare_rate(self.pity_bound - 1)
        if top_rate > 1.0:
            raise InvalidRateConfiguration(
                f"rare rate reaches {top_rate:.4f} at pity {self.pity_bound - 1}"
            )

    def pity_bonus(self, pity: int) -> float:
        """Cumulative rare-rate increase earned by ``pity`` draws.

        Examples:
            >>> RateConfig().pity_bonus(9)
            0.0
            >>> RateConfig().pity_bonus(25)
            0.01
        """
        return (pity // PITY_STEP) * self.pity_increment

    def rare_rate(self, pity: int) -> float:
        """Total probability of any rare outcome on one ordinary draw."""
        return self.base_rate + self.pity_bonus(pity)

    @property
    def guaranteed_featured(self) -> float:
        """Featured probability on a guaranteed-rare draw (featured share of all rares)."""
        return self.featured_share / self.base_rate


# ─── Presets ──────────────────────────────────────────────────────────────────

REFERENCE_CONFIG: RateConfig = RateConfig()
"""Standard banner: 4% rare rate, 1% featured, +0.5% per 10 pity, cap at 100."""

GALA_CONFIG: RateConfig = RateConfig(base_rate=0.06)
"""Gala banner: 6% base rare rate, same featured share and pity rules."""
