"""
Redemption Eligibility Service.

Gathers the customer level, the reward's override and the three
redemption counts, then asks the rules for a decision. If any of that
cannot be read, for whatever reason, the answer is a default deny, never a
silent allow.
"""
import logging
from datetime import datetime
from typing import Dict, Any

from ..rules.customer_levels import calculate_customer_level, get_level_definition
from ..rules.entitlements import within_limit
from ..rules.redemption_eligibility import (
    RedemptionCounts,
    RedemptionDecision,
    check_redemption,
    default_deny,
    effective_limits,
)
from ..utils.exceptions import FluzioError
from .account_store import AccountStore
from .redemption_sources import RedemptionAggregateSource, RewardOverrideSource

logger = logging.getLogger(__name__)

STATUS_CAN_REDEEM = 'You can redeem rewards today!'
STATUS_TOMORROW = 'Available again tomorrow'
STATUS_NEXT_WEEK = 'Available next week'


class RedemptionEligibilityService:
    """
    Usage:
        service = RedemptionEligibilityService()
        decision = service.check(user_id, reward_id, business_id)
    """

    def __init__(self, accounts: AccountStore = None,
                 aggregates: RedemptionAggregateSource = None,
                 overrides: RewardOverrideSource = None):
        self.accounts = accounts or AccountStore()
        self.aggregates = aggregates or RedemptionAggregateSource()
        self.overrides = overrides or RewardOverrideSource()

    def check(self, user_id: str, reward_id: str, business_id: str,
              now: datetime = None) -> RedemptionDecision:
        """Decide whether user_id may redeem reward_id at business_id now."""
        now = now or datetime.utcnow()
        try:
            account = self.accounts.load(user_id)
            level = calculate_customer_level(account.customer_stats(), now)
            override = self.overrides.get(reward_id, level)
            counts = RedemptionCounts(
                today=self.aggregates.count_today(user_id, now),
                this_week=self.aggregates.count_this_week(user_id, now),
                at_business=self.aggregates.count_at_business(user_id, business_id),
            )
        except FluzioError as e:
            logger.warning('Cannot verify redemption eligibility for user %s: %s', user_id, e.message)
            return default_deny()
        except Exception as e:
            # An injected source failing in an unexpected way still denies
            logger.exception('Redemption eligibility check failed for user %s: %s', user_id, e)
            return default_deny()

        decision = check_redemption(level, counts, override, now)

        # Limits go to the log only, never into the decision
        limits = effective_limits(level, override)
        logger.info(
            'Redemption check user=%s reward=%s level=%s counts=%s/%s/%s limits=%s/%s/%s allowed=%s',
            user_id, reward_id, level.value,
            counts.today, counts.this_week, counts.at_business,
            limits.per_day, limits.per_week, limits.repeat_usage_per_business,
            decision.can_redeem,
        )
        return decision

    def redemption_status(self, user_id: str, now: datetime = None) -> Dict[str, Any]:
        """
        Qualitative redemption status for a customer's home screen.

        Raises:
            AccountNotFoundError: unknown user
            DataAccessError: counts could not be read
        """
        now = now or datetime.utcnow()
        account = self.accounts.load(user_id)
        level = calculate_customer_level(account.customer_stats(), now)
        definition = get_level_definition(level)
        limits = definition.redemption_limits

        can_redeem_today = within_limit(self.aggregates.count_today(user_id, now), limits.per_day)
        can_redeem_this_week = within_limit(self.aggregates.count_this_week(user_id, now), limits.per_week)

        if can_redeem_today and can_redeem_this_week:
            status_message = STATUS_CAN_REDEEM
        elif not can_redeem_today:
            status_message = STATUS_TOMORROW
        else:
            status_message = STATUS_NEXT_WEEK

        return {
            'level': level.value,
            'level_name': definition.display_name,
            'status_message': status_message,
            'can_redeem_today': can_redeem_today,
            'can_redeem_this_week': can_redeem_this_week,
        }
