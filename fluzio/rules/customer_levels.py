"""
Customer level tables.

Four levels define the DEFAULT redemption limits for customers:
Explorer -> Regular -> Insider -> Ambassador. Businesses can override
these limits per reward (see RewardLevelOverride).
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any


class CustomerLevel(str, Enum):
    EXPLORER = 'EXPLORER'
    REGULAR = 'REGULAR'
    INSIDER = 'INSIDER'
    AMBASSADOR = 'AMBASSADOR'


LEVEL_ORDER = (
    CustomerLevel.EXPLORER,
    CustomerLevel.REGULAR,
    CustomerLevel.INSIDER,
    CustomerLevel.AMBASSADOR,
)


@dataclass(frozen=True)
class RedemptionLimits:
    per_day: int
    per_week: int
    repeat_usage_per_business: int  # all-time redemptions at one business


@dataclass(frozen=True)
class LevelRequirements:
    min_points: int  # lifetime points earned
    min_missions_completed: int
    min_redemptions: int
    account_age_days: int


@dataclass(frozen=True)
class CustomerLevelDefinition:
    level: CustomerLevel
    display_name: str
    description: str
    redemption_limits: RedemptionLimits
    requirements: LevelRequirements
    benefits: tuple


@dataclass
class CustomerStats:
    """Lifetime activity counters used to place a customer on a level."""
    total_points: int = 0
    missions_completed: int = 0
    rewards_redeemed: int = 0
    created_at: Optional[datetime] = None


CUSTOMER_LEVELS = {
    CustomerLevel.EXPLORER: CustomerLevelDefinition(
        level=CustomerLevel.EXPLORER,
        display_name='Explorer',
        description='Just getting started',
        redemption_limits=RedemptionLimits(per_day=1, per_week=3, repeat_usage_per_business=1),
        requirements=LevelRequirements(
            min_points=0, min_missions_completed=0, min_redemptions=0, account_age_days=0),
        benefits=(
            'Access to basic rewards',
            'Complete missions to earn points',
            'Unlock Regular level with activity',
        ),
    ),
    CustomerLevel.REGULAR: CustomerLevelDefinition(
        level=CustomerLevel.REGULAR,
        display_name='Regular',
        description='Active member',
        redemption_limits=RedemptionLimits(per_day=2, per_week=7, repeat_usage_per_business=2),
        requirements=LevelRequirements(
            min_points=100, min_missions_completed=5, min_redemptions=1, account_age_days=7),
        benefits=(
            'Redeem more rewards daily',
            'Repeat rewards at favorite businesses',
            'Priority in mission selection',
            'Unlock Insider with continued activity',
        ),
    ),
    CustomerLevel.INSIDER: CustomerLevelDefinition(
        level=CustomerLevel.INSIDER,
        display_name='Insider',
        description='Engaged community member',
        redemption_limits=RedemptionLimits(per_day=5, per_week=20, repeat_usage_per_business=5),
        requirements=LevelRequirements(
            min_points=500, min_missions_completed=25, min_redemptions=10, account_age_days=30),
        benefits=(
            'Significantly higher redemption limits',
            'Frequent repeat usage at favorite spots',
            'Early access to new missions',
            'Exclusive Insider-only rewards',
            'Unlock Ambassador status with dedication',
        ),
    ),
    CustomerLevel.AMBASSADOR: CustomerLevelDefinition(
        level=CustomerLevel.AMBASSADOR,
        display_name='Ambassador',
        description='Elite power user',
        redemption_limits=RedemptionLimits(per_day=10, per_week=50, repeat_usage_per_business=15),
        requirements=LevelRequirements(
            min_points=2000, min_missions_completed=100, min_redemptions=50, account_age_days=90),
        benefits=(
            'Maximum redemption freedom',
            'Unlimited repeat usage at favorite businesses',
            'VIP mission access',
            'Exclusive Ambassador rewards',
            'Priority customer support',
            'Special recognition badge',
        ),
    ),
}


def get_level_definition(level) -> CustomerLevelDefinition:
    return CUSTOMER_LEVELS[CustomerLevel(level)]


def _meets(stats: CustomerStats, requirements: LevelRequirements, now: datetime) -> bool:
    created_at = stats.created_at or now
    account_age_days = (now - created_at).days
    return (
        stats.total_points >= requirements.min_points
        and stats.missions_completed >= requirements.min_missions_completed
        and stats.rewards_redeemed >= requirements.min_redemptions
        and account_age_days >= requirements.account_age_days
    )


def calculate_customer_level(stats: CustomerStats, now: datetime = None) -> CustomerLevel:
    """Highest level whose requirements are all met."""
    now = now or datetime.utcnow()
    for level in reversed(LEVEL_ORDER):
        if _meets(stats, CUSTOMER_LEVELS[level].requirements, now):
            return level
    return CustomerLevel.EXPLORER


def next_customer_level(level) -> Optional[CustomerLevel]:
    """The level above, or None at Ambassador."""
    index = LEVEL_ORDER.index(CustomerLevel(level))
    if index == len(LEVEL_ORDER) - 1:
        return None
    return LEVEL_ORDER[index + 1]


def _percent(value: int, target: int) -> float:
    if target <= 0:
        return 100.0
    return min(100.0, value / target * 100)


def level_progress(stats: CustomerStats, now: datetime = None) -> Dict[str, Any]:
    """
    Progress toward the next level.

    Percentage is the average of points, missions and redemptions progress.
    The milestone names the first requirement still missing.
    """
    current = calculate_customer_level(stats, now)
    next_level = next_customer_level(current)

    if next_level is None:
        return {
            'current_level': current.value,
            'next_level': None,
            'progress_percentage': 100,
            'next_milestone': "You've reached the highest level!",
        }

    requirements = CUSTOMER_LEVELS[next_level].requirements
    points = _percent(stats.total_points, requirements.min_points)
    missions = _percent(stats.missions_completed, requirements.min_missions_completed)
    redemptions = _percent(stats.rewards_redeemed, requirements.min_redemptions)

    if points < 100:
        milestone = f'Earn {requirements.min_points - stats.total_points} more points'
    elif missions < 100:
        milestone = f'Complete {requirements.min_missions_completed - stats.missions_completed} more missions'
    elif redemptions < 100:
        milestone = f'Redeem {requirements.min_redemptions - stats.rewards_redeemed} more rewards'
    else:
        milestone = 'Almost there! Keep it up!'

    return {
        'current_level': current.value,
        'next_level': next_level.value,
        'progress_percentage': round((points + missions + redemptions) / 3),
        'next_milestone': milestone,
    }
