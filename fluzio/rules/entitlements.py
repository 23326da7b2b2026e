"""
Entitlement resolution.

Translates a (level, tier) pair into the operating limits and perks of an
account. The lookup is total over levels 1-6 and the four tiers; anything
outside that domain is a caller bug and raises InvalidLevelTierError.

Numeric limits use -1 for unlimited. Use is_unlimited() / remaining() /
within_limit() instead of comparing limits directly.
"""
from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, List, Optional

from .business_levels import level_name
from .subscription_tiers import (
    UNLIMITED,
    LEVELS,
    SubscriptionTier,
    BillingCycle,
    TierPricing,
    MissionLimits,
    MeetupLimits,
    LevelPerks,
    GrowthCreditPack,
    TIER_PRICING,
    GROWTH_CREDITS,
    MISSION_LIMITS,
    MEETUP_LIMITS,
    LEVEL_PERKS,
    ANNUAL_BONUSES,
    GROWTH_CREDIT_PACKS,
    GROWTH_CREDIT_DISCOUNTS,
)
from ..utils.exceptions import InvalidLevelTierError

CENTS = Decimal('0.01')


@dataclass(frozen=True)
class Entitlements:
    """Resolved limits and perks for one (level, tier) cell."""
    level: int
    tier: SubscriptionTier
    billing_cycle: BillingCycle
    pricing: TierPricing
    missions: MissionLimits
    meetups: MeetupLimits
    growth_credits: int  # monthly, including any annual bonus
    perks: LevelPerks

    @property
    def verified_badge_eligible(self) -> bool:
        return self.perks.verified_badge

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['level_name'] = level_name(self.level)
        data['pricing'] = {
            'monthly': float(self.pricing.monthly),
            'annual': float(self.pricing.annual),
            'annual_months': self.pricing.annual_months,
        }
        data['verified_badge_eligible'] = self.verified_badge_eligible
        return data


@dataclass(frozen=True)
class UsageLimits:
    """Remaining monthly allowances; -1 means unlimited."""
    missions_remaining: int
    meetups_host_remaining: int
    meetups_join_remaining: int
    boosts_remaining: int
    growth_credits_available: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def validate_level(level) -> int:
    """Return level if it is an int in 1-6, else raise InvalidLevelTierError."""
    if isinstance(level, bool) or not isinstance(level, int) or level not in LEVELS:
        raise InvalidLevelTierError(f'Level must be an integer from 1 to 6, got {level!r}', field='level')
    return level


def validate_tier(tier) -> SubscriptionTier:
    """Coerce a tier name to SubscriptionTier, else raise InvalidLevelTierError."""
    if isinstance(tier, SubscriptionTier):
        return tier
    try:
        return SubscriptionTier(tier)
    except ValueError:
        raise InvalidLevelTierError(
            f'Tier must be one of BASIC, SILVER, GOLD, PLATINUM, got {tier!r}', field='tier'
        ) from None


def is_unlimited(limit: int) -> bool:
    return limit == UNLIMITED


def remaining(limit: int, used: int) -> int:
    """Remaining allowance for a limit; UNLIMITED stays UNLIMITED."""
    if is_unlimited(limit):
        return UNLIMITED
    return max(0, limit - used)


def within_limit(used: int, limit: int) -> bool:
    """True if one more use fits under the limit."""
    return is_unlimited(limit) or used < limit


def pricing(level: int, tier) -> TierPricing:
    """Subscription price (EUR) of a cell. Zero monthly means not offered."""
    return TIER_PRICING[validate_level(level)][validate_tier(tier)]


def monthly_growth_credits(level: int, tier, annual: bool = False) -> int:
    """
    Monthly Growth Credits for a cell.

    Annual billing adds the tier's credit bonus (rounded down). BASIC never
    gets an annual bonus.
    """
    level = validate_level(level)
    tier = validate_tier(tier)
    base = GROWTH_CREDITS[level][tier]
    if annual and tier != SubscriptionTier.BASIC:
        bonus = ANNUAL_BONUSES[tier].credit_bonus
        return base * (100 + bonus) // 100
    return base


def resolve(level: int, tier, billing_cycle=BillingCycle.MONTHLY) -> Entitlements:
    """
    Resolve the entitlements of a (level, tier) cell.

    Args:
        level: Main business level, 1-6
        tier: SubscriptionTier or its name
        billing_cycle: MONTHLY or ANNUAL (annual adds the Growth Credit bonus)

    Raises:
        InvalidLevelTierError: level or tier outside the declared domain
    """
    level = validate_level(level)
    tier = validate_tier(tier)
    try:
        billing_cycle = BillingCycle(billing_cycle)
    except ValueError:
        raise InvalidLevelTierError(
            f'Billing cycle must be MONTHLY or ANNUAL, got {billing_cycle!r}', field='billing_cycle'
        ) from None

    return Entitlements(
        level=level,
        tier=tier,
        billing_cycle=billing_cycle,
        pricing=TIER_PRICING[level][tier],
        missions=MISSION_LIMITS[level][tier],
        meetups=MEETUP_LIMITS[level][tier],
        growth_credits=monthly_growth_credits(level, tier, annual=billing_cycle == BillingCycle.ANNUAL),
        perks=LEVEL_PERKS[level][tier],
    )


def is_tier_available(level: int, tier) -> bool:
    """Level 1 only offers BASIC; levels 2-6 offer every tier."""
    level = validate_level(level)
    tier = validate_tier(tier)
    if level == 1:
        return tier == SubscriptionTier.BASIC
    return tier == SubscriptionTier.BASIC or TIER_PRICING[level][tier].monthly > 0


def available_tiers(level: int) -> List[SubscriptionTier]:
    return [tier for tier in SubscriptionTier if is_tier_available(level, tier)]


def usage_limits(entitlements: Entitlements, usage: Dict[str, int]) -> UsageLimits:
    """
    Remaining allowances for an account's current monthly usage.

    usage keys: missions_created, meetups_hosted, meetups_joined, boosts_used,
    growth_credits_available. Missing keys count as zero.
    """
    return UsageLimits(
        missions_remaining=remaining(
            entitlements.missions.max_missions_per_month, usage.get('missions_created', 0)),
        meetups_host_remaining=remaining(
            entitlements.meetups.max_host_per_month, usage.get('meetups_hosted', 0)),
        meetups_join_remaining=remaining(
            entitlements.meetups.max_join_per_month, usage.get('meetups_joined', 0)),
        boosts_remaining=remaining(
            entitlements.missions.mission_boosts, usage.get('boosts_used', 0)),
        growth_credits_available=usage.get('growth_credits_available', 0),
    )


# ==================== Growth Credit Packs ====================

def pack_by_name(name: str) -> Optional[GrowthCreditPack]:
    for pack in GROWTH_CREDIT_PACKS:
        if pack.name.lower() == (name or '').lower():
            return pack
    return None


def growth_credit_pack_price(pack: GrowthCreditPack, level: int) -> Decimal:
    """Pack price after the level discount, rounded to cents."""
    level = validate_level(level)
    discount = GROWTH_CREDIT_DISCOUNTS[level]
    return (pack.price * (1 - discount)).quantize(CENTS, rounding=ROUND_HALF_UP)


def growth_credit_pack_quotes(level: int) -> List[Dict[str, Any]]:
    """All packs with base and discounted prices for a level."""
    level = validate_level(level)
    discount = GROWTH_CREDIT_DISCOUNTS[level]
    return [
        {
            'name': pack.name,
            'credits': pack.credits,
            'base_price': float(pack.price),
            'discount_percent': int(discount * 100),
            'price': float(growth_credit_pack_price(pack, level)),
        }
        for pack in GROWTH_CREDIT_PACKS
    ]
