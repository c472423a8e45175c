"""
Daily challenge ledger models.

Completions, perfect-day bonuses and victories are append-only facts.
Their per-day uniqueness is enforced by the database, not only by the service.
"""

from datetime import datetime
from mindquest.extensions import db


class MissionCompletion(db.Model):
    """One completed mission for one user on one calendar day."""
    __tablename__ = 'mission_completion'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    mission_id = db.Column(db.String(32), nullable=False)
    mission_type = db.Column(db.String(20), nullable=False, index=True)
    mission_date = db.Column(db.Date, nullable=False, index=True)  # user's local calendar day

    xp_earned = db.Column(db.Integer, nullable=False)
    extra_data = db.Column('metadata', db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship('User', backref=db.backref('mission_completions', lazy='dynamic'))

    __table_args__ = (
        db.UniqueConstraint('user_id', 'mission_id', 'mission_date', name='unique_user_mission_day'),
        db.Index('idx_completion_user_date', 'user_id', 'mission_date'),
    )

    def __repr__(self):
        return f'<MissionCompletion user={self.user_id} mission={self.mission_id} date={self.mission_date}>'

    def to_dict(self):
        return {
            'mission_id': self.mission_id,
            'mission_type': self.mission_type,
            'mission_date': self.mission_date.isoformat(),
            'xp_earned': self.xp_earned,
        }


class PerfectDayBonus(db.Model):
    """Marks the day a user covered every required mission. At most one per day."""
    __tablename__ = 'perfect_day_bonus'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    bonus_date = db.Column(db.Date, nullable=False)
    xp_awarded = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'bonus_date', name='unique_user_perfect_day'),
    )

    def __repr__(self):
        return f'<PerfectDayBonus user={self.user_id} date={self.bonus_date}>'


class DailyVictory(db.Model):
    """A short "victory of the day" note, worth a small XP bonus."""
    __tablename__ = 'daily_victory'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    victory_text = db.Column(db.String(500), nullable=False)
    victory_date = db.Column(db.Date, nullable=False, index=True)
    xp_bonus = db.Column(db.Integer, nullable=False)
    is_public = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'victory_date', name='unique_user_victory_day'),
    )

    def __repr__(self):
        return f'<DailyVictory user={self.user_id} date={self.victory_date}>'
