"""
Redemption eligibility checks.

A prospective redemption passes three ordered checks; the first failing
check decides:

1. daily limit
2. weekly limit
3. repeat usage at the same business (all-time)

Each limit is the reward's override for the customer's level if one is set,
else the level default. Messages shown to customers are qualitative only;
raw limits and counts never appear in a decision.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from .customer_levels import CustomerLevel, RedemptionLimits, get_level_definition
from .entitlements import within_limit

SUCCESS_MESSAGE = 'You can redeem this reward!'
DAILY_LIMIT_MESSAGE = 'Available again tomorrow'
DAILY_UPGRADE_MESSAGE = 'Higher levels can redeem more often'
WEEKLY_LIMIT_MESSAGE = 'Available next week'
WEEKLY_UPGRADE_MESSAGE = 'Insiders can redeem more often'
REPEAT_LIMIT_MESSAGE = "You've reached your reward limit at this business"
VERIFY_FAILED_MESSAGE = 'Unable to verify eligibility. Please try again.'

REPEAT_UPGRADE_MESSAGES = {
    CustomerLevel.EXPLORER: 'Regular members can redeem more at their favorite spots',
    CustomerLevel.REGULAR: 'Insiders can redeem more often',
    CustomerLevel.INSIDER: 'Ambassadors have unlimited access',
    CustomerLevel.AMBASSADOR: '',
}


@dataclass
class RedemptionCounts:
    """Completed redemptions by one customer."""
    today: int = 0
    this_week: int = 0
    at_business: int = 0  # all-time, at the reward's business


@dataclass
class LimitOverride:
    """Per-reward, per-level partial override. None falls back to the level default."""
    per_day: Optional[int] = None
    per_week: Optional[int] = None
    repeat_usage_per_business: Optional[int] = None


@dataclass
class RedemptionDecision:
    can_redeem: bool
    message: str
    upgrade_message: Optional[str] = None
    available_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'can_redeem': self.can_redeem,
            'message': self.message,
        }
        if self.upgrade_message:
            data['upgrade_message'] = self.upgrade_message
        if self.available_at:
            data['available_at'] = self.available_at.isoformat()
        return data


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Most recent Sunday midnight."""
    days_since_sunday = (now.weekday() + 1) % 7
    return start_of_day(now) - timedelta(days=days_since_sunday)


def next_midnight(now: datetime) -> datetime:
    return start_of_day(now) + timedelta(days=1)


def next_week_start(now: datetime) -> datetime:
    return start_of_week(now) + timedelta(days=7)


def effective_limits(level, override: Optional[LimitOverride] = None) -> RedemptionLimits:
    """Level defaults with any override fields applied."""
    defaults = get_level_definition(level).redemption_limits
    if override is None:
        return defaults

    def pick(value, default):
        return default if value is None else value

    return RedemptionLimits(
        per_day=pick(override.per_day, defaults.per_day),
        per_week=pick(override.per_week, defaults.per_week),
        repeat_usage_per_business=pick(
            override.repeat_usage_per_business, defaults.repeat_usage_per_business),
    )


def check_redemption(level, counts: RedemptionCounts,
                     override: Optional[LimitOverride] = None,
                     now: datetime = None) -> RedemptionDecision:
    """
    Decide whether one more redemption is allowed.

    Args:
        level: CustomerLevel (or its name) of the redeeming customer
        counts: today / this week / at this business
        override: the reward's override for this level, if any
        now: clock for available_at (defaults to utcnow)
    """
    level = CustomerLevel(level)
    now = now or datetime.utcnow()
    limits = effective_limits(level, override)

    if not within_limit(counts.today, limits.per_day):
        return RedemptionDecision(
            can_redeem=False,
            message=DAILY_LIMIT_MESSAGE,
            upgrade_message=DAILY_UPGRADE_MESSAGE,
            available_at=next_midnight(now),
        )

    if not within_limit(counts.this_week, limits.per_week):
        return RedemptionDecision(
            can_redeem=False,
            message=WEEKLY_LIMIT_MESSAGE,
            upgrade_message=WEEKLY_UPGRADE_MESSAGE,
            available_at=next_week_start(now),
        )

    if not within_limit(counts.at_business, limits.repeat_usage_per_business):
        return RedemptionDecision(
            can_redeem=False,
            message=REPEAT_LIMIT_MESSAGE,
            upgrade_message=REPEAT_UPGRADE_MESSAGES[level],
        )

    return RedemptionDecision(can_redeem=True, message=SUCCESS_MESSAGE)


def default_deny() -> RedemptionDecision:
    """Decision used when eligibility cannot be verified."""
    return RedemptionDecision(can_redeem=False, message=VERIFY_FAILED_MESSAGE)
