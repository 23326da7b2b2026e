"""
Read-only sources for redemption eligibility: redemption counts and
per-reward level overrides.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import RedemptionRecord, RewardLevelOverride
from ..rules.customer_levels import CustomerLevel
from ..rules.redemption_eligibility import LimitOverride, start_of_day, start_of_week
from ..utils.exceptions import DataAccessError


class RedemptionAggregateSource:
    """Counts completed redemptions for a customer."""

    def _count(self, *criteria) -> int:
        try:
            return RedemptionRecord.query.filter(*criteria).count()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DataAccessError('Could not count redemptions', e) from e

    def count_today(self, user_id: str, now: datetime = None) -> int:
        now = now or datetime.utcnow()
        return self._count(
            RedemptionRecord.user_id == user_id,
            RedemptionRecord.redeemed_at >= start_of_day(now),
        )

    def count_this_week(self, user_id: str, now: datetime = None) -> int:
        """Redemptions since Sunday midnight."""
        now = now or datetime.utcnow()
        return self._count(
            RedemptionRecord.user_id == user_id,
            RedemptionRecord.redeemed_at >= start_of_week(now),
        )

    def count_at_business(self, user_id: str, business_id: str) -> int:
        return self._count(
            RedemptionRecord.user_id == user_id,
            RedemptionRecord.business_id == business_id,
        )


class RewardOverrideSource:
    """Looks up a reward's limit override for one customer level."""

    def get(self, reward_id: str, level) -> Optional[LimitOverride]:
        if not reward_id:
            return None
        try:
            row = RewardLevelOverride.query.filter_by(
                reward_id=reward_id,
                customer_level=CustomerLevel(level).value,
            ).first()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DataAccessError(f'Could not load overrides for reward {reward_id}', e) from e

        if row is None:
            return None
        return LimitOverride(
            per_day=row.per_day,
            per_week=row.per_week,
            repeat_usage_per_business=row.repeat_usage_per_business,
        )
