"""
Subscription tier tables.

The 6-level x 4-tier model: pricing, monthly Growth Credits, mission limits,
meetup limits and perks per (level, tier) cell, plus annual billing bonuses
and Growth Credit purchase packs.

A value of -1 in any numeric limit means unlimited (see UNLIMITED).

Level 1 (Explorer) has no paid tiers. Its SILVER, GOLD and PLATINUM cells are
all zero / all false; only BASIC carries the free baseline.
"""
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from .business_levels import MIN_LEVEL, MAX_LEVEL
from ..utils.exceptions import ConfigurationError

UNLIMITED = -1


class SubscriptionTier(str, Enum):
    BASIC = 'BASIC'
    SILVER = 'SILVER'
    GOLD = 'GOLD'
    PLATINUM = 'PLATINUM'


class BillingCycle(str, Enum):
    MONTHLY = 'MONTHLY'
    ANNUAL = 'ANNUAL'


class GeographicReach(str, Enum):
    SAME_CITY = 'SAME_CITY'
    NEARBY_CITIES = 'NEARBY_CITIES'
    COUNTRY = 'COUNTRY'
    MULTI_COUNTRY = 'MULTI_COUNTRY'
    GLOBAL = 'GLOBAL'


class AnalyticsLevel(str, Enum):
    NONE = 'NONE'
    BASIC = 'BASIC'
    ADVANCED = 'ADVANCED'
    PREMIUM = 'PREMIUM'


LEVELS = tuple(range(MIN_LEVEL, MAX_LEVEL + 1))
TIERS = tuple(SubscriptionTier)


@dataclass(frozen=True)
class TierPricing:
    monthly: Decimal
    annual: Decimal
    annual_months: int  # months paid for a year on annual billing


@dataclass(frozen=True)
class MissionLimits:
    max_missions_per_month: int
    max_participants: int
    geographic_reach: GeographicReach
    priority_matching: bool
    mission_boosts: int  # free boosts per month
    premium_templates: bool
    collab_missions: bool
    influencer_missions: bool
    automated_campaigns: bool


@dataclass(frozen=True)
class MeetupLimits:
    max_join_per_month: int
    max_host_per_month: int
    featured_in_city: bool
    vip_access: bool
    global_matching: bool


@dataclass(frozen=True)
class LevelPerks:
    analytics: AnalyticsLevel
    free_events_per_month: int
    workshops_per_year: int
    city_promotion: bool
    speaker_opportunities: bool
    retreat_access: bool
    vip_concierge: bool
    verified_badge: bool
    discount_on_events: int  # percent
    discount_on_growth_credits: int  # percent


@dataclass(frozen=True)
class AnnualBonus:
    credit_bonus: int  # percent on monthly Growth Credits
    city_promotions: int
    retreat_tickets: int
    premium_onboarding: bool


@dataclass(frozen=True)
class GrowthCreditPack:
    name: str
    credits: int
    price: Decimal  # base price in EUR


B, S, G, P = TIERS
SAME_CITY, NEARBY, COUNTRY, MULTI, GLOBAL = tuple(GeographicReach)
A_NONE, A_BASIC, A_ADVANCED, A_PREMIUM = tuple(AnalyticsLevel)


def _price(monthly, annual, months) -> TierPricing:
    return TierPricing(Decimal(monthly), Decimal(annual), months)


_FREE = _price(0, 0, 0)

# ============================================================================
# PRICING MATRIX (EUR)
# ============================================================================

TIER_PRICING = {
    1: {B: _FREE, S: _FREE, G: _FREE, P: _FREE},
    2: {B: _FREE, S: _price(19, 190, 10), G: _price(39, 390, 10), P: _price(79, 711, 9)},
    3: {B: _FREE, S: _price(39, 390, 10), G: _price(79, 790, 10), P: _price(149, 1341, 9)},
    4: {B: _FREE, S: _price(59, 590, 10), G: _price(119, 1190, 10), P: _price(199, 1791, 9)},
    5: {B: _FREE, S: _price(79, 790, 10), G: _price(149, 1490, 10), P: _price(249, 2241, 9)},
    6: {B: _FREE, S: _price(119, 1190, 10), G: _price(199, 1990, 10), P: _price(349, 3141, 9)},
}

# ============================================================================
# GROWTH CREDITS: monthly allocation
# ============================================================================

GROWTH_CREDITS = {
    1: {B: 0, S: 0, G: 0, P: 0},
    2: {B: 0, S: 200, G: 500, P: 1000},
    3: {B: 50, S: 300, G: 800, P: 1500},
    4: {B: 100, S: 500, G: 1000, P: 2000},
    5: {B: 200, S: 700, G: 1500, P: 2500},
    6: {B: 300, S: 1000, G: 2000, P: 3000},
}

# ============================================================================
# MISSION LIMITS
# (missions/month, participants, reach, priority, boosts,
#  templates, collab, influencer, automated)
# ============================================================================

_NO_MISSIONS = MissionLimits(0, 0, SAME_CITY, False, 0, False, False, False, False)

MISSION_LIMITS = {
    1: {B: _NO_MISSIONS, S: _NO_MISSIONS, G: _NO_MISSIONS, P: _NO_MISSIONS},
    2: {
        B: MissionLimits(2, 10, SAME_CITY, False, 0, False, False, False, False),
        S: MissionLimits(10, 30, NEARBY, False, 0, False, False, False, False),
        G: MissionLimits(30, 100, MULTI, False, 1, True, False, False, False),
        P: MissionLimits(-1, -1, GLOBAL, True, 3, True, True, False, False),
    },
    3: {
        B: MissionLimits(5, 20, SAME_CITY, False, 1, False, False, False, False),
        S: MissionLimits(20, 50, COUNTRY, False, 1, True, True, True, False),
        G: MissionLimits(50, 200, MULTI, True, 2, True, True, True, False),
        P: MissionLimits(-1, -1, GLOBAL, True, 5, True, True, True, False),
    },
    4: {
        B: MissionLimits(10, 30, NEARBY, False, 1, False, False, True, False),
        S: MissionLimits(30, 100, COUNTRY, True, 2, True, True, True, False),
        G: MissionLimits(-1, -1, GLOBAL, True, 3, True, True, True, True),
        P: MissionLimits(-1, -1, GLOBAL, True, 10, True, True, True, True),
    },
    5: {
        B: MissionLimits(20, 50, COUNTRY, False, 2, True, True, True, False),
        S: MissionLimits(-1, -1, GLOBAL, True, 3, True, True, True, False),
        G: MissionLimits(-1, -1, GLOBAL, True, 5, True, True, True, True),
        P: MissionLimits(-1, -1, GLOBAL, True, -1, True, True, True, True),
    },
    6: {
        B: MissionLimits(-1, -1, GLOBAL, True, 3, True, True, True, False),
        S: MissionLimits(-1, -1, GLOBAL, True, 5, True, True, True, True),
        G: MissionLimits(-1, -1, GLOBAL, True, -1, True, True, True, True),
        P: MissionLimits(-1, -1, GLOBAL, True, -1, True, True, True, True),
    },
}

# ============================================================================
# MEETUP LIMITS
# (join/month, host/month, featured in city, VIP, global matching)
# ============================================================================

_NO_MEETUPS = MeetupLimits(0, 0, False, False, False)
_ALL_MEETUPS = MeetupLimits(-1, -1, True, True, True)

MEETUP_LIMITS = {
    1: {B: MeetupLimits(2, 0, False, False, False), S: _NO_MEETUPS, G: _NO_MEETUPS, P: _NO_MEETUPS},
    2: {
        B: MeetupLimits(-1, 1, False, False, False),
        S: MeetupLimits(-1, 2, False, False, False),
        G: MeetupLimits(-1, 3, False, False, False),
        P: MeetupLimits(-1, 5, True, False, False),
    },
    3: {
        B: MeetupLimits(-1, 2, False, False, False),
        S: MeetupLimits(-1, 3, False, False, False),
        G: MeetupLimits(-1, 4, True, False, False),
        P: MeetupLimits(-1, -1, True, False, False),
    },
    4: {
        B: MeetupLimits(-1, 3, False, False, False),
        S: MeetupLimits(-1, -1, True, False, False),
        G: MeetupLimits(-1, -1, True, False, True),
        P: _ALL_MEETUPS,
    },
    5: {
        B: MeetupLimits(-1, -1, True, False, False),
        S: _ALL_MEETUPS,
        G: _ALL_MEETUPS,
        P: _ALL_MEETUPS,
    },
    6: {B: _ALL_MEETUPS, S: _ALL_MEETUPS, G: _ALL_MEETUPS, P: _ALL_MEETUPS},
}

# ============================================================================
# PERKS
# (analytics, free events/month, workshops/year, city promotion, speaker,
#  retreat, concierge, verified badge, % off events, % off Growth Credits)
# ============================================================================

_NO_PERKS = LevelPerks(A_NONE, 0, 0, False, False, False, False, False, 0, 0)

LEVEL_PERKS = {
    1: {B: _NO_PERKS, S: _NO_PERKS, G: _NO_PERKS, P: _NO_PERKS},
    2: {
        B: _NO_PERKS,
        S: LevelPerks(A_BASIC, 0, 0, False, False, False, False, False, 0, 0),
        G: LevelPerks(A_BASIC, 0, 1, False, False, False, False, False, 0, 0),
        P: LevelPerks(A_ADVANCED, 1, 2, True, False, False, False, False, 0, 0),
    },
    3: {
        B: LevelPerks(A_BASIC, 0, 0, False, False, False, False, False, 0, 0),
        S: LevelPerks(A_BASIC, 0, 1, False, False, False, False, False, 0, 0),
        G: LevelPerks(A_ADVANCED, 1, 2, True, False, False, False, False, 0, 0),
        P: LevelPerks(A_PREMIUM, 2, 4, True, True, False, False, False, 10, 0),
    },
    4: {
        B: LevelPerks(A_BASIC, 0, 1, False, False, False, False, False, 10, 10),
        S: LevelPerks(A_ADVANCED, 1, 2, True, False, False, False, False, 10, 10),
        G: LevelPerks(A_PREMIUM, 2, 4, True, True, False, False, False, 10, 10),
        P: LevelPerks(A_PREMIUM, 3, 6, True, True, False, False, False, 10, 10),
    },
    5: {
        B: LevelPerks(A_ADVANCED, 1, 2, True, True, False, False, False, 20, 20),
        S: LevelPerks(A_PREMIUM, 2, 4, True, True, False, False, False, 20, 20),
        G: LevelPerks(A_PREMIUM, 3, 6, True, True, False, False, True, 20, 20),
        P: LevelPerks(A_PREMIUM, 5, 12, True, True, True, False, True, 20, 20),
    },
    6: {
        B: LevelPerks(A_PREMIUM, 2, 4, True, True, False, False, False, 30, 30),
        S: LevelPerks(A_PREMIUM, 3, 6, True, True, False, False, True, 30, 30),
        G: LevelPerks(A_PREMIUM, 5, 12, True, True, True, True, True, 30, 30),
        P: LevelPerks(A_PREMIUM, -1, -1, True, True, True, True, True, 30, 30),
    },
}

# ============================================================================
# ANNUAL BILLING BONUSES
# ============================================================================

ANNUAL_BONUSES = {
    B: AnnualBonus(credit_bonus=0, city_promotions=0, retreat_tickets=0, premium_onboarding=False),
    S: AnnualBonus(credit_bonus=10, city_promotions=0, retreat_tickets=0, premium_onboarding=False),
    G: AnnualBonus(credit_bonus=20, city_promotions=1, retreat_tickets=0, premium_onboarding=False),
    P: AnnualBonus(credit_bonus=30, city_promotions=2, retreat_tickets=1, premium_onboarding=True),
}

# ============================================================================
# GROWTH CREDIT PURCHASE PACKS
# ============================================================================

GROWTH_CREDIT_PACKS = (
    GrowthCreditPack('Starter', 100, Decimal('5')),
    GrowthCreditPack('Growth', 500, Decimal('19')),
    GrowthCreditPack('Boost', 1000, Decimal('29')),
    GrowthCreditPack('Scale', 3000, Decimal('59')),
    GrowthCreditPack('Enterprise', 10000, Decimal('149')),
)

# Level-based discount on pack purchases
GROWTH_CREDIT_DISCOUNTS = {
    1: Decimal('0'),
    2: Decimal('0'),
    3: Decimal('0'),
    4: Decimal('0.10'),
    5: Decimal('0.20'),
    6: Decimal('0.30'),
}


def _check_complete():
    """Every (level, tier) cell must be present in every matrix."""
    matrices = {
        'TIER_PRICING': TIER_PRICING,
        'GROWTH_CREDITS': GROWTH_CREDITS,
        'MISSION_LIMITS': MISSION_LIMITS,
        'MEETUP_LIMITS': MEETUP_LIMITS,
        'LEVEL_PERKS': LEVEL_PERKS,
    }
    for table_name, matrix in matrices.items():
        for level in LEVELS:
            row = matrix.get(level)
            if row is None or set(row) != set(TIERS):
                raise ConfigurationError(f'{table_name} is missing cells for level {level}')

    if set(ANNUAL_BONUSES) != set(TIERS):
        raise ConfigurationError('ANNUAL_BONUSES must cover every tier')
    if set(GROWTH_CREDIT_DISCOUNTS) != set(LEVELS):
        raise ConfigurationError('GROWTH_CREDIT_DISCOUNTS must cover every level')


_check_complete()
