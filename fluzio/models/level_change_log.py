"""
Audit trail for business level changes.
"""
from datetime import datetime

from ..extensions import db


class LevelChangeLog(db.Model):
    """One row per XP grant or promotion-workflow transition."""

    __tablename__ = 'level_change_logs'

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.String(64), db.ForeignKey('accounts.id'), nullable=False, index=True)

    # Types: xp_granted, upgrade_requested, upgrade_approved, upgrade_rejected
    change_type = db.Column(db.String(30), nullable=False)

    previous_level = db.Column(db.Integer)
    new_level = db.Column(db.Integer)
    previous_sub_level = db.Column(db.Integer)
    new_sub_level = db.Column(db.Integer)
    xp_delta = db.Column(db.Integer)

    reason = db.Column(db.String(500))
    created_by = db.Column(db.String(64))  # admin id, or 'system'
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    account = db.relationship('Account', backref=db.backref('level_changes', lazy='dynamic'))

    def to_dict(self):
        return {
            'id': self.id,
            'account_id': self.account_id,
            'change_type': self.change_type,
            'previous_level': self.previous_level,
            'new_level': self.new_level,
            'previous_sub_level': self.previous_sub_level,
            'new_sub_level': self.new_sub_level,
            'xp_delta': self.xp_delta,
            'reason': self.reason,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
