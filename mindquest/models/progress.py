"""
Progress models.

UserProgress holds the XP / token aggregate and the streak perks
(rescues, weekly shield, wager). StreakState holds the consecutive-day counter.
Both are created on the user's first interaction.
"""

from datetime import datetime
from mindquest.extensions import db
from mindquest.constants import GameConstants


class UserProgress(db.Model):
    __tablename__ = 'user_progress'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True, nullable=False, index=True)

    total_xp = db.Column(db.Integer, default=0, nullable=False)
    current_level = db.Column(db.String(20), default=GameConstants.DEFAULT_LEVEL, nullable=False)
    power_tokens = db.Column(db.Integer, default=0, nullable=False)

    streak_rescues_available = db.Column(db.Integer, default=GameConstants.FREE_RESCUES, nullable=False)
    streak_rescues_used = db.Column(db.Integer, default=0, nullable=False)

    # Shield: one activation per ISO week, consumed when it bridges a missed day
    shield_used_at = db.Column(db.Date, nullable=True)
    shield_pending = db.Column(db.Boolean, default=False, nullable=False)

    wager_active = db.Column(db.Boolean, default=False, nullable=False)
    wager_amount = db.Column(db.Integer, default=0, nullable=False)
    wager_placed_on = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = db.relationship('User', back_populates='progress')

    __table_args__ = (
        db.CheckConstraint('total_xp >= 0', name='total_xp_non_negative'),
        db.CheckConstraint('power_tokens >= 0', name='power_tokens_non_negative'),
        db.CheckConstraint('streak_rescues_available >= 0', name='rescues_non_negative'),
        db.CheckConstraint('wager_amount >= 0', name='wager_amount_non_negative'),
    )

    def __repr__(self):
        return f'<UserProgress user={self.user_id} xp={self.total_xp} level={self.current_level}>'

    def to_dict(self):
        return {
            'total_xp': self.total_xp,
            'current_level': self.current_level,
            'power_tokens': self.power_tokens,
            'streak_rescues_available': self.streak_rescues_available,
            'shield_used_at': self.shield_used_at.isoformat() if self.shield_used_at else None,
            'wager_active': self.wager_active,
            'wager_amount': self.wager_amount,
        }


class StreakState(db.Model):
    __tablename__ = 'streak_state'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), unique=True, nullable=False, index=True)

    current_streak = db.Column(db.Integer, default=0, nullable=False)
    longest_streak = db.Column(db.Integer, default=0, nullable=False)
    last_check_in_date = db.Column(db.Date, nullable=True)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = db.relationship('User', back_populates='streak')

    __table_args__ = (
        db.CheckConstraint('current_streak >= 0', name='current_streak_non_negative'),
    )

    def __repr__(self):
        return f'<StreakState user={self.user_id} streak={self.current_streak} last={self.last_check_in_date}>'

    def to_dict(self):
        return {
            'current_streak': self.current_streak,
            'longest_streak': self.longest_streak,
            'last_check_in_date': self.last_check_in_date.isoformat() if self.last_check_in_date else None,
        }
