"""
Level progression rules.

XP drives the sub-level (1-9) automatically. Main-level promotion is a
two-phase workflow:

    Idle(sub_level < 9) --XP--> Idle(sub_level == 9)
        --request_upgrade--> PendingApproval
        --approve_upgrade--> Idle(level + 1, sub_level 1, xp 0)
        --reject_upgrade---> Idle(sub_level == 9)

The functions here mutate the account object they are given and return it
(or a result describing the transition). They never touch storage; the
caller persists the account. Invalid transitions come back as UpgradeResult
failures, never as exceptions.
"""
from bisect import bisect_right
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from .business_levels import (
    MAX_LEVEL,
    MAX_SUB_LEVEL,
    SUB_LEVEL_THRESHOLDS,
    level_name,
    level_display,
)

DEFAULT_REJECTION_REASON = 'Not specified'


class UpgradeFailure(str, Enum):
    """Why an upgrade transition was refused."""

    ALREADY_MAX_LEVEL = 'ALREADY_MAX_LEVEL'
    SUB_LEVEL_TOO_LOW = 'SUB_LEVEL_TOO_LOW'
    REQUEST_ALREADY_PENDING = 'REQUEST_ALREADY_PENDING'
    NO_PENDING_REQUEST = 'NO_PENDING_REQUEST'


@dataclass
class UpgradeResult:
    """Outcome of request/approve/reject."""
    success: bool
    failure: Optional[UpgradeFailure] = None
    error: Optional[str] = None
    new_level: Optional[int] = None
    new_sub_level: Optional[int] = None

    @classmethod
    def failed(cls, failure: UpgradeFailure, error: str) -> 'UpgradeResult':
        return cls(success=False, failure=failure, error=error)

    def to_dict(self) -> Dict[str, Any]:
        data = {'success': self.success}
        if self.failure:
            data['failure'] = self.failure.value
            data['error'] = self.error
        if self.new_level is not None:
            data['new_level'] = {'main': self.new_level, 'sub': self.new_sub_level}
        return data


# ==================== XP and Sub-levels ====================

def sub_level_from_xp(xp: int) -> int:
    """
    Sub-level (1-9) for an XP total.

    The greatest threshold index i with xp >= threshold[i], plus one. The
    first threshold is 0, so any xp >= 0 lands on at least sub-level 1.
    """
    return max(1, bisect_right(SUB_LEVEL_THRESHOLDS, xp))


def xp_to_next_sub_level(xp: int) -> int:
    """XP still needed for the next sub-level; 0 at sub-level 9."""
    sub_level = sub_level_from_xp(xp)
    if sub_level >= MAX_SUB_LEVEL:
        return 0
    return SUB_LEVEL_THRESHOLDS[sub_level] - xp


def add_xp(account, delta: int):
    """
    Add delta XP and recompute the sub-level. The main level never changes.

    A negative delta that drops the sub-level below 9 withdraws a pending
    upgrade request.
    """
    account.xp = (account.xp or 0) + delta
    return sync_sub_level(account)


def sync_sub_level(account):
    """
    Recompute the sub-level from the account's current xp.

    Storage does the same in one UPDATE (AccountStore.add_xp).
    """
    account.sub_level = sub_level_from_xp(account.xp or 0)

    if account.upgrade_requested and account.sub_level < MAX_SUB_LEVEL:
        account.upgrade_requested = False
        account.upgrade_requested_at = None

    return account


# ==================== Promotion Workflow ====================

def can_request_upgrade(account) -> bool:
    return (
        (account.level or 1) < MAX_LEVEL
        and (account.sub_level or 1) >= MAX_SUB_LEVEL
        and not account.upgrade_requested
    )


def request_upgrade(account, now: datetime = None) -> UpgradeResult:
    """Business asks to be promoted to the next main level."""
    level = account.level or 1
    sub_level = account.sub_level or 1

    if level >= MAX_LEVEL:
        return UpgradeResult.failed(
            UpgradeFailure.ALREADY_MAX_LEVEL,
            f'Already at maximum level ({level_name(MAX_LEVEL)})'
        )

    if sub_level < MAX_SUB_LEVEL:
        return UpgradeResult.failed(
            UpgradeFailure.SUB_LEVEL_TOO_LOW,
            f'Must reach sub-level {MAX_SUB_LEVEL} (currently at {level_display(level, sub_level)})'
        )

    if account.upgrade_requested:
        return UpgradeResult.failed(
            UpgradeFailure.REQUEST_ALREADY_PENDING,
            'Upgrade request already pending'
        )

    account.upgrade_requested = True
    account.upgrade_requested_at = now or datetime.utcnow()
    return UpgradeResult(success=True)


def approve_upgrade(account, approver_id: str, now: datetime = None) -> UpgradeResult:
    """
    Admin approves a pending request.

    Promotion resets sub_level to 1 and xp to 0 so each main level starts a
    fresh ladder.
    """
    if not account.upgrade_requested:
        return UpgradeResult.failed(UpgradeFailure.NO_PENDING_REQUEST, 'No upgrade request pending')

    level = account.level or 1
    if level >= MAX_LEVEL:
        return UpgradeResult.failed(UpgradeFailure.ALREADY_MAX_LEVEL, 'Already at maximum level')

    account.level = level + 1
    account.sub_level = 1
    account.xp = 0
    account.upgrade_requested = False
    account.upgrade_requested_at = None
    account.upgrade_approved_at = now or datetime.utcnow()
    account.last_upgrade_approved_by = approver_id

    return UpgradeResult(success=True, new_level=account.level, new_sub_level=1)


def reject_upgrade(account, approver_id: str, reason: str = None, now: datetime = None) -> UpgradeResult:
    """Admin rejects a pending request. Level, sub-level and XP are kept."""
    if not account.upgrade_requested:
        return UpgradeResult.failed(UpgradeFailure.NO_PENDING_REQUEST, 'No upgrade request pending')

    account.upgrade_requested = False
    account.upgrade_requested_at = None
    account.last_upgrade_rejected_by = approver_id
    account.last_upgrade_rejected_at = now or datetime.utcnow()
    account.last_upgrade_rejection_reason = reason or DEFAULT_REJECTION_REASON

    return UpgradeResult(success=True)
