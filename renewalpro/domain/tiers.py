"""Subscription pricing tiers.

Plain dataclasses (no ORM): the tier table is reference data shared by the
entity-limit check, the admin MRR aggregate and the checkout flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PricingTier:
    id: str
    name: str
    monthly_price: int
    yearly_price: int
    # None means unlimited
    entities: Optional[int]


PRICING_TIERS: dict[str, PricingTier] = {
    "starter": PricingTier("starter", "Starter", 25, 249, 5),
    "professional": PricingTier("professional", "Professional", 99, 986, 25),
    "enterprise": PricingTier("enterprise", "Enterprise", 200, 1992, 100),
    "unlimited": PricingTier("unlimited", "Unlimited", 350, 3486, None),
}

TIER_ORDER = list(PRICING_TIERS)

DEFAULT_TIER = "starter"


def get_tier(tier_id: Optional[str]) -> PricingTier:
    """Resolve a tier id, falling back to the starter tier for unknown ids."""
    return PRICING_TIERS.get(tier_id or DEFAULT_TIER, PRICING_TIERS[DEFAULT_TIER])


def next_tier(tier_id: Optional[str]) -> Optional[PricingTier]:
    current = get_tier(tier_id).id
    idx = TIER_ORDER.index(current)
    if idx + 1 < len(TIER_ORDER):
        return PRICING_TIERS[TIER_ORDER[idx + 1]]
    return None
