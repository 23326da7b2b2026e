"""
Redemption records and per-reward limit overrides.

RedemptionRecord rows are written by the redemption-processing flow; the
eligibility checks only count them.
"""
from datetime import datetime

from ..extensions import db


class RedemptionRecord(db.Model):
    """A completed reward redemption."""

    __tablename__ = 'redemption_records'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    business_id = db.Column(db.String(64), nullable=False, index=True)
    reward_id = db.Column(db.String(64), nullable=False)
    redeemed_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.Index('ix_redemption_records_user_redeemed_at', 'user_id', 'redeemed_at'),
    )

    def __repr__(self):
        return f'<RedemptionRecord {self.user_id} {self.reward_id}>'

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'business_id': self.business_id,
            'reward_id': self.reward_id,
            'redeemed_at': self.redeemed_at.isoformat() if self.redeemed_at else None,
        }


class RewardLevelOverride(db.Model):
    """
    Business-defined limits for one reward at one customer level.

    NULL columns fall back to the level default. -1 means unlimited.
    """

    __tablename__ = 'reward_level_overrides'

    id = db.Column(db.Integer, primary_key=True)
    reward_id = db.Column(db.String(64), nullable=False)
    customer_level = db.Column(db.String(20), nullable=False)  # EXPLORER, REGULAR, INSIDER, AMBASSADOR

    per_day = db.Column(db.Integer)
    per_week = db.Column(db.Integer)
    repeat_usage_per_business = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint('reward_id', 'customer_level', name='uq_reward_level_override'),
    )

    def to_dict(self):
        return {
            'reward_id': self.reward_id,
            'customer_level': self.customer_level,
            'per_day': self.per_day,
            'per_week': self.per_week,
            'repeat_usage_per_business': self.repeat_usage_per_business,
        }
