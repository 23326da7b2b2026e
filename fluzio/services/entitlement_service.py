"""
Entitlement lookups for stored accounts.
"""
from typing import Dict, Any, List

from ..rules import entitlements as rules
from ..rules.subscription_tiers import BillingCycle
from .account_store import AccountStore


class EntitlementService:

    def __init__(self, store: AccountStore = None):
        self.store = store or AccountStore()

    def for_cell(self, level: int, tier, billing_cycle=BillingCycle.MONTHLY) -> Dict[str, Any]:
        """Entitlements of a (level, tier) cell plus the tiers offered at that level."""
        resolved = rules.resolve(level, tier, billing_cycle)
        data = resolved.to_dict()
        data['tier_available'] = rules.is_tier_available(level, tier)
        data['available_tiers'] = [t.value for t in rules.available_tiers(level)]
        return data

    def for_account(self, account_id: str) -> Dict[str, Any]:
        """Entitlements for an account's level and tier, with this month's remaining allowances."""
        account = self.store.load(account_id)
        resolved = rules.resolve(account.level, account.tier, account.billing_cycle)
        return {
            'account_id': account.id,
            'entitlements': resolved.to_dict(),
            'usage': rules.usage_limits(resolved, account.monthly_usage()).to_dict(),
        }

    def growth_credit_packs(self, level: int) -> List[Dict[str, Any]]:
        return rules.growth_credit_pack_quotes(level)
