"""
Services that connect the rule evaluators to storage.
"""
from .account_store import AccountStore
from .entitlement_service import EntitlementService
from .level_service import LevelService
from .redemption_service import RedemptionEligibilityService
from .redemption_sources import RedemptionAggregateSource, RewardOverrideSource
