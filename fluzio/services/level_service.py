"""
Business Level Service.

Runs the level progression rules against stored accounts:

- XP grants: one UPDATE moves xp and sub_level together.
- Only business accounts change level; other roles are refused with
  ValidationError (INVALID_ROLE).
- Promotion workflow: load, evaluate, conditional save. When the save
  loses to a concurrent write the account is reloaded and the transition
  re-evaluated, so two identical requests racing each other end with one
  success and one REQUEST_ALREADY_PENDING.

Every transition writes a LevelChangeLog row in the same commit.
"""
from typing import Optional, Dict, Any, List, Callable

from flask import current_app

from ..models import Account, LevelChangeLog
from ..rules.business_levels import (
    MAX_LEVEL,
    MAX_SUB_LEVEL,
    SUB_LEVEL_THRESHOLDS,
    XpActivity,
    level_name,
    xp_for_activity,
)
from ..rules import level_progression
from ..rules.level_progression import UpgradeResult
from ..utils.exceptions import ConflictError, ValidationError
from .account_store import AccountStore

SYSTEM_ACTOR = 'system'


class LevelService:
    """
    Level and promotion operations for business accounts.

    Usage:
        service = LevelService()
        result = service.request_upgrade(account_id)
    """

    def __init__(self, store: AccountStore = None, max_attempts: int = None):
        self.store = store or AccountStore()
        if max_attempts is None:
            max_attempts = current_app.config.get('LEVEL_SAVE_ATTEMPTS', 3)
        self.max_attempts = max(1, max_attempts)

    # ==================== Queries ====================

    def get_level_summary(self, account_id: str) -> Dict[str, Any]:
        account = self.store.load(account_id)
        return self._summary(account)

    def pending_upgrade_requests(self) -> List[Dict[str, Any]]:
        return [self._summary(account) for account in self.store.pending_upgrade_requests()]

    def _load_business(self, account_id: str) -> Account:
        """Load an account whose level may change. Other roles stay at level 1."""
        account = self.store.load(account_id)
        if not account.is_business:
            current_app.logger.warning(f'Level change refused for {account_id}: role is {account.role}')
            raise ValidationError(
                f'Account {account_id} is not a business; levels only change for business accounts',
                field='role',
            )
        return account

    def _summary(self, account: Account) -> Dict[str, Any]:
        level = account.level or 1
        sub_level = account.sub_level or 1
        data = account.to_dict()
        data.update({
            'xp_to_next_sub_level': level_progression.xp_to_next_sub_level(account.xp or 0),
            'next_sub_level_xp': SUB_LEVEL_THRESHOLDS[sub_level] if sub_level < MAX_SUB_LEVEL else None,
            'can_request_upgrade': account.is_business and level_progression.can_request_upgrade(account),
            'is_max_level': level >= MAX_LEVEL,
            'next_level_name': level_name(level + 1) if level < MAX_LEVEL else None,
        })
        return data

    # ==================== XP ====================

    def grant_xp(self, account_id: str, delta: int, reason: str = None,
                 actor: str = SYSTEM_ACTOR) -> Dict[str, Any]:
        """
        Grant (or, with a negative delta, remove) XP.

        xp, sub_level, a withdrawn request and the audit row are written in
        one UPDATE and commit, so no conflict can leave them apart.

        Returns a summary with sub_level_changed / upgrade_withdrawn flags.

        Raises:
            ValidationError: delta is not an integer, or the account is not a business
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError('XP delta must be an integer', field='delta')

        before = self._load_business(account_id)
        previous_level = before.level
        previous_sub_level = before.sub_level
        was_pending = bool(before.upgrade_requested)

        def audit(account: Account) -> LevelChangeLog:
            return LevelChangeLog(
                account_id=account.id,
                change_type='xp_granted',
                previous_level=previous_level,
                new_level=account.level,
                previous_sub_level=previous_sub_level,
                new_sub_level=account.sub_level,
                xp_delta=delta,
                reason=reason,
                created_by=actor,
            )

        account = self.store.add_xp(account_id, delta, audit=audit)

        withdrawn = was_pending and not account.upgrade_requested
        current_app.logger.info(
            f'Granted {delta} XP to {account_id}: now {account.level}.{account.sub_level} ({account.xp} XP)'
        )
        if withdrawn:
            current_app.logger.info(f'Upgrade request for {account_id} withdrawn, sub-level dropped below 9')

        summary = self._summary(account)
        summary.update({
            'success': True,
            'xp_delta': delta,
            'sub_level_changed': previous_sub_level != account.sub_level,
            'upgrade_withdrawn': withdrawn,
        })
        return summary

    def grant_activity_xp(self, account_id: str, activity, actor: str = SYSTEM_ACTOR) -> Dict[str, Any]:
        """Grant the XP reward for an activity such as MEETUP_HOSTED."""
        try:
            activity = XpActivity(activity)
        except ValueError:
            raise ValidationError(f'Unknown XP activity: {activity}', field='activity') from None
        return self.grant_xp(account_id, xp_for_activity(activity), reason=activity.value, actor=actor)

    # ==================== Promotion Workflow ====================

    def request_upgrade(self, account_id: str) -> UpgradeResult:
        return self._transition(
            account_id,
            level_progression.request_upgrade,
            change_type='upgrade_requested',
            actor=account_id,
        )

    def approve_upgrade(self, account_id: str, approver_id: str) -> UpgradeResult:
        return self._transition(
            account_id,
            lambda account: level_progression.approve_upgrade(account, approver_id),
            change_type='upgrade_approved',
            actor=approver_id,
        )

    def reject_upgrade(self, account_id: str, approver_id: str, reason: str = None) -> UpgradeResult:
        return self._transition(
            account_id,
            lambda account: level_progression.reject_upgrade(account, approver_id, reason),
            change_type='upgrade_rejected',
            actor=approver_id,
            reason=reason or level_progression.DEFAULT_REJECTION_REASON,
        )

    def _transition(self, account_id: str, evaluate: Callable[[Account], UpgradeResult],
                    change_type: str, actor: str, reason: Optional[str] = None) -> UpgradeResult:
        """Load, evaluate and conditionally save, re-evaluating on conflict."""
        for attempt in range(1, self.max_attempts + 1):
            account = self._load_business(account_id)
            previous_level = account.level
            previous_sub_level = account.sub_level

            result = evaluate(account)
            if not result.success:
                current_app.logger.info(
                    f'{change_type} refused for {account_id}: {result.failure.value}'
                )
                return result

            log = LevelChangeLog(
                account_id=account.id,
                change_type=change_type,
                previous_level=previous_level,
                new_level=account.level,
                previous_sub_level=previous_sub_level,
                new_sub_level=account.sub_level,
                reason=reason,
                created_by=actor,
            )
            try:
                self.store.save(account, log)
            except ConflictError:
                if attempt == self.max_attempts:
                    current_app.logger.warning(
                        f'{change_type} for {account_id} gave up after {attempt} conflicting saves'
                    )
                    raise
                current_app.logger.info(
                    f'{change_type} for {account_id} conflicted, re-evaluating ({attempt}/{self.max_attempts})'
                )
                continue

            current_app.logger.info(
                f'{change_type} for {account_id} by {actor}: '
                f'{previous_level}.{previous_sub_level} -> {account.level}.{account.sub_level}'
            )
            return result
