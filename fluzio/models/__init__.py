"""
Database models for the Fluzio rules service.
"""
from .account import Account, AccountRole
from .level_change_log import LevelChangeLog
from .redemption import RedemptionRecord, RewardLevelOverride

__all__ = [
    'Account',
    'AccountRole',
    'LevelChangeLog',
    'RedemptionRecord',
    'RewardLevelOverride',
]
