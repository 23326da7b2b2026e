"""
Fluzio rule evaluators.

Pure functions over an account and the bundled tables. Nothing in this
package reads or writes storage.
"""
from .business_levels import (
    MAX_LEVEL,
    MAX_SUB_LEVEL,
    SUB_LEVEL_THRESHOLDS,
    XpActivity,
    level_name,
    level_display,
    xp_for_activity,
)
from .level_progression import (
    UpgradeFailure,
    UpgradeResult,
    sub_level_from_xp,
    xp_to_next_sub_level,
    add_xp,
    sync_sub_level,
    can_request_upgrade,
    request_upgrade,
    approve_upgrade,
    reject_upgrade,
)
from .subscription_tiers import UNLIMITED, SubscriptionTier, BillingCycle
from .entitlements import (
    Entitlements,
    resolve,
    pricing,
    monthly_growth_credits,
    is_tier_available,
    available_tiers,
    growth_credit_pack_price,
)
from .customer_levels import CustomerLevel, CustomerStats, calculate_customer_level
from .redemption_eligibility import (
    RedemptionCounts,
    LimitOverride,
    RedemptionDecision,
    check_redemption,
    default_deny,
)
