"""
Tests for the redemption eligibility rules.

Tests cover:
- Daily, weekly and repeat-at-business limits in order
- Per-reward overrides (tightening, loosening, unlimited)
- Qualitative messages and available_at times
"""
import re
import pytest
from datetime import datetime

from fluzio.rules.customer_levels import CustomerLevel
from fluzio.rules.redemption_eligibility import (
    RedemptionCounts,
    LimitOverride,
    check_redemption,
    default_deny,
    effective_limits,
    start_of_week,
    next_midnight,
    next_week_start,
    DAILY_LIMIT_MESSAGE,
    WEEKLY_LIMIT_MESSAGE,
    REPEAT_LIMIT_MESSAGE,
    SUCCESS_MESSAGE,
    VERIFY_FAILED_MESSAGE,
)
from fluzio.rules.subscription_tiers import UNLIMITED

# Wednesday
NOW = datetime(2026, 3, 4, 15, 30)


class TestDailyLimit:

    def test_count_equal_to_limit_is_denied(self):
        decision = check_redemption(CustomerLevel.EXPLORER, RedemptionCounts(today=1), now=NOW)

        assert decision.can_redeem is False
        assert decision.message == DAILY_LIMIT_MESSAGE
        assert decision.upgrade_message == 'Higher levels can redeem more often'
        assert decision.available_at == datetime(2026, 3, 5)

    def test_count_one_below_limit_moves_on_to_weekly(self):
        # Regular: 2/day, 7/week
        decision = check_redemption(
            CustomerLevel.REGULAR, RedemptionCounts(today=1, this_week=7), now=NOW
        )
        assert decision.message == WEEKLY_LIMIT_MESSAGE

    def test_daily_failure_wins_over_later_checks(self):
        decision = check_redemption(
            CustomerLevel.INSIDER,
            RedemptionCounts(today=5, this_week=20, at_business=5),
            now=NOW,
        )
        assert decision.message == DAILY_LIMIT_MESSAGE


class TestWeeklyLimit:

    def test_denied_until_next_sunday(self):
        decision = check_redemption(
            CustomerLevel.EXPLORER, RedemptionCounts(today=0, this_week=3), now=NOW
        )
        assert decision.can_redeem is False
        assert decision.message == WEEKLY_LIMIT_MESSAGE
        assert decision.upgrade_message == 'Insiders can redeem more often'
        assert decision.available_at == datetime(2026, 3, 8)


class TestRepeatAtBusiness:

    @pytest.mark.parametrize('level,hint', [
        (CustomerLevel.EXPLORER, 'Regular members can redeem more at their favorite spots'),
        (CustomerLevel.REGULAR, 'Insiders can redeem more often'),
        (CustomerLevel.INSIDER, 'Ambassadors have unlimited access'),
    ])
    def test_level_specific_hint(self, level, hint):
        limits = effective_limits(level)
        decision = check_redemption(
            level, RedemptionCounts(at_business=limits.repeat_usage_per_business), now=NOW
        )
        assert decision.can_redeem is False
        assert decision.message == REPEAT_LIMIT_MESSAGE
        assert decision.upgrade_message == hint
        assert decision.available_at is None

    def test_ambassador_has_no_hint(self):
        decision = check_redemption(CustomerLevel.AMBASSADOR, RedemptionCounts(at_business=15), now=NOW)
        assert decision.message == REPEAT_LIMIT_MESSAGE
        assert 'upgrade_message' not in decision.to_dict()


class TestSuccess:

    def test_all_checks_pass(self):
        decision = check_redemption(
            CustomerLevel.REGULAR, RedemptionCounts(today=1, this_week=6, at_business=1), now=NOW
        )
        assert decision.can_redeem is True
        assert decision.message == SUCCESS_MESSAGE
        assert decision.to_dict() == {'can_redeem': True, 'message': SUCCESS_MESSAGE}

    def test_accepts_level_name(self):
        assert check_redemption('EXPLORER', RedemptionCounts(), now=NOW).can_redeem is True


class TestOverrides:

    def test_per_day_override_replaces_level_default(self):
        assert effective_limits(CustomerLevel.EXPLORER, LimitOverride(per_day=1)).per_day == 1

        # Ambassador default is 10/day
        decision = check_redemption(
            CustomerLevel.AMBASSADOR, RedemptionCounts(today=1), LimitOverride(per_day=1), now=NOW
        )
        assert decision.message == DAILY_LIMIT_MESSAGE

    def test_override_can_loosen_limit(self):
        decision = check_redemption(
            CustomerLevel.EXPLORER, RedemptionCounts(today=2), LimitOverride(per_day=3), now=NOW
        )
        assert decision.can_redeem is True

    def test_missing_fields_fall_back_to_defaults(self):
        limits = effective_limits(CustomerLevel.REGULAR, LimitOverride(per_week=4))
        assert (limits.per_day, limits.per_week, limits.repeat_usage_per_business) == (2, 4, 2)

    def test_minus_one_means_unlimited(self):
        decision = check_redemption(
            CustomerLevel.EXPLORER,
            RedemptionCounts(today=0, this_week=100, at_business=50),
            LimitOverride(per_week=UNLIMITED, repeat_usage_per_business=UNLIMITED),
            now=NOW,
        )
        assert decision.can_redeem is True

    def test_zero_override_blocks_reward(self):
        decision = check_redemption(
            CustomerLevel.AMBASSADOR, RedemptionCounts(), LimitOverride(repeat_usage_per_business=0), now=NOW
        )
        assert decision.message == REPEAT_LIMIT_MESSAGE


class TestMessages:

    @pytest.mark.parametrize('counts', [
        RedemptionCounts(today=1),
        RedemptionCounts(this_week=3),
        RedemptionCounts(at_business=1),
        RedemptionCounts(),
    ])
    def test_decisions_never_expose_numbers(self, counts):
        data = check_redemption(CustomerLevel.EXPLORER, counts, now=NOW).to_dict()
        assert not re.search(r'\d', data['message'])
        assert not re.search(r'\d', data.get('upgrade_message', ''))
        assert set(data) <= {'can_redeem', 'message', 'upgrade_message', 'available_at'}

    def test_default_deny(self):
        decision = default_deny()
        assert decision.can_redeem is False
        assert decision.message == VERIFY_FAILED_MESSAGE


class TestCalendar:

    def test_week_starts_on_sunday(self):
        assert start_of_week(NOW) == datetime(2026, 3, 1)
        assert next_week_start(NOW) == datetime(2026, 3, 8)

    def test_on_sunday_next_week_is_seven_days_out(self):
        sunday = datetime(2026, 3, 8, 9, 0)
        assert start_of_week(sunday) == datetime(2026, 3, 8)
        assert next_week_start(sunday) == datetime(2026, 3, 15)

    def test_next_midnight(self):
        assert next_midnight(datetime(2026, 12, 31, 23, 59)) == datetime(2027, 1, 1)
