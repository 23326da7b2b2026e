"""
Tests for customer level placement and progress.
"""
from datetime import datetime, timedelta

from fluzio.rules.customer_levels import (
    CustomerLevel,
    CustomerStats,
    CUSTOMER_LEVELS,
    calculate_customer_level,
    next_customer_level,
    level_progress,
)

NOW = datetime(2026, 3, 4, 12, 0)


def stats(points=0, missions=0, redemptions=0, age_days=0):
    return CustomerStats(
        total_points=points,
        missions_completed=missions,
        rewards_redeemed=redemptions,
        created_at=NOW - timedelta(days=age_days),
    )


class TestCalculateCustomerLevel:

    def test_new_customer_is_explorer(self):
        assert calculate_customer_level(stats(), NOW) == CustomerLevel.EXPLORER

    def test_meets_regular_requirements(self):
        assert calculate_customer_level(stats(100, 5, 1, 7), NOW) == CustomerLevel.REGULAR

    def test_all_requirements_must_hold(self):
        # Plenty of activity but the account is too young
        assert calculate_customer_level(stats(5000, 500, 500, 6), NOW) == CustomerLevel.EXPLORER

    def test_highest_matching_level_wins(self):
        assert calculate_customer_level(stats(800, 40, 12, 60), NOW) == CustomerLevel.INSIDER
        assert calculate_customer_level(stats(2000, 100, 50, 90), NOW) == CustomerLevel.AMBASSADOR

    def test_missing_created_at_counts_as_new_account(self):
        customer = CustomerStats(total_points=800, missions_completed=40, rewards_redeemed=12)
        assert calculate_customer_level(customer, NOW) == CustomerLevel.EXPLORER


class TestNextLevel:

    def test_ladder(self):
        assert next_customer_level(CustomerLevel.EXPLORER) == CustomerLevel.REGULAR
        assert next_customer_level('REGULAR') == CustomerLevel.INSIDER
        assert next_customer_level(CustomerLevel.INSIDER) == CustomerLevel.AMBASSADOR
        assert next_customer_level(CustomerLevel.AMBASSADOR) is None


class TestLevelProgress:

    def test_progress_toward_regular(self):
        progress = level_progress(stats(50, 5, 0, 10), NOW)
        assert progress['current_level'] == 'EXPLORER'
        assert progress['next_level'] == 'REGULAR'
        # points 50%, missions 100%, redemptions 0%
        assert progress['progress_percentage'] == 50
        assert progress['next_milestone'] == 'Earn 50 more points'

    def test_milestone_names_first_missing_requirement(self):
        progress = level_progress(stats(150, 5, 0, 10), NOW)
        assert progress['next_milestone'] == 'Redeem 1 more rewards'

    def test_ambassador_is_complete(self):
        progress = level_progress(stats(2500, 120, 60, 100), NOW)
        assert progress['next_level'] is None
        assert progress['progress_percentage'] == 100


class TestLevelTables:

    def test_redemption_limits(self):
        limits = {level: definition.redemption_limits for level, definition in CUSTOMER_LEVELS.items()}
        assert (limits[CustomerLevel.EXPLORER].per_day, limits[CustomerLevel.EXPLORER].per_week) == (1, 3)
        assert limits[CustomerLevel.AMBASSADOR].repeat_usage_per_business == 15
