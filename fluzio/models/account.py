"""
Account model.

One row per business or customer. Business accounts carry the level/XP
ladder and a subscription tier; customer accounts carry the lifetime
counters that decide their customer level.
"""
import uuid
from datetime import datetime
from enum import Enum

from ..extensions import db
from ..rules.business_levels import level_name, level_display
from ..rules.customer_levels import CustomerStats


class AccountRole(str, Enum):
    BUSINESS = 'BUSINESS'
    CUSTOMER = 'CUSTOMER'


def _new_account_id() -> str:
    return uuid.uuid4().hex


class Account(db.Model):
    """Business or customer account."""

    __tablename__ = 'accounts'

    id = db.Column(db.String(64), primary_key=True, default=_new_account_id)
    role = db.Column(db.String(20), nullable=False, default=AccountRole.BUSINESS.value)
    name = db.Column(db.String(200))

    # Business level ladder
    level = db.Column(db.Integer, nullable=False, default=1)  # 1-6, admin-approved
    sub_level = db.Column(db.Integer, nullable=False, default=1)  # 1-9, from xp
    xp = db.Column(db.Integer, nullable=False, default=0)
    tier = db.Column(db.String(20), nullable=False, default='BASIC')
    billing_cycle = db.Column(db.String(20), nullable=False, default='MONTHLY')

    # Promotion workflow
    upgrade_requested = db.Column(db.Boolean, nullable=False, default=False)
    upgrade_requested_at = db.Column(db.DateTime)
    upgrade_approved_at = db.Column(db.DateTime)
    last_upgrade_approved_by = db.Column(db.String(64))
    last_upgrade_rejected_by = db.Column(db.String(64))
    last_upgrade_rejected_at = db.Column(db.DateTime)
    last_upgrade_rejection_reason = db.Column(db.String(500))

    # Monthly usage (business)
    missions_created_this_month = db.Column(db.Integer, nullable=False, default=0)
    meetups_hosted_this_month = db.Column(db.Integer, nullable=False, default=0)
    meetups_joined_this_month = db.Column(db.Integer, nullable=False, default=0)
    boosts_used_this_month = db.Column(db.Integer, nullable=False, default=0)
    growth_credits = db.Column(db.Integer, nullable=False, default=0)

    # Lifetime counters (customer)
    lifetime_points = db.Column(db.Integer, nullable=False, default=0)
    missions_completed = db.Column(db.Integer, nullable=False, default=0)
    rewards_redeemed = db.Column(db.Integer, nullable=False, default=0)

    # Optimistic concurrency: every ORM flush checks and bumps this
    version = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {'version_id_col': version}

    def __repr__(self):
        return f'<Account {self.id} L{self.level}.{self.sub_level}>'

    @property
    def is_business(self) -> bool:
        return self.role == AccountRole.BUSINESS.value

    def customer_stats(self) -> CustomerStats:
        return CustomerStats(
            total_points=self.lifetime_points or 0,
            missions_completed=self.missions_completed or 0,
            rewards_redeemed=self.rewards_redeemed or 0,
            created_at=self.created_at,
        )

    def monthly_usage(self) -> dict:
        return {
            'missions_created': self.missions_created_this_month or 0,
            'meetups_hosted': self.meetups_hosted_this_month or 0,
            'meetups_joined': self.meetups_joined_this_month or 0,
            'boosts_used': self.boosts_used_this_month or 0,
            'growth_credits_available': self.growth_credits or 0,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'role': self.role,
            'name': self.name,
            'level': self.level,
            'level_name': level_name(self.level),
            'sub_level': self.sub_level,
            'level_display': level_display(self.level, self.sub_level),
            'xp': self.xp,
            'tier': self.tier,
            'billing_cycle': self.billing_cycle,
            'upgrade_requested': self.upgrade_requested,
            'upgrade_requested_at': self.upgrade_requested_at.isoformat() if self.upgrade_requested_at else None,
            'upgrade_approved_at': self.upgrade_approved_at.isoformat() if self.upgrade_approved_at else None,
            'last_upgrade_rejected_at': self.last_upgrade_rejected_at.isoformat() if self.last_upgrade_rejected_at else None,
            'last_upgrade_rejection_reason': self.last_upgrade_rejection_reason,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
