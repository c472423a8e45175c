"""
Weekly league models.

A league is a cohort of at most LEAGUE_CAPACITY users of one tier for one
ISO week. A user belongs to at most one league per week.
"""

from datetime import datetime
from mindquest.extensions import db


class League(db.Model):
    __tablename__ = 'league'

    id = db.Column(db.Integer, primary_key=True)
    tier = db.Column(db.String(10), nullable=False)
    week_start = db.Column(db.Date, nullable=False)  # Monday
    is_closed = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    members = db.relationship(
        'LeagueMember', back_populates='league',
        order_by='LeagueMember.id', lazy='select'
    )

    __table_args__ = (
        db.Index('idx_league_tier_week', 'tier', 'week_start'),
    )

    def __repr__(self):
        return f'<League {self.id} {self.tier} week={self.week_start}>'


class LeagueMember(db.Model):
    __tablename__ = 'league_member'

    id = db.Column(db.Integer, primary_key=True)  # insertion order breaks ranking ties
    league_id = db.Column(db.Integer, db.ForeignKey('league.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    week_start = db.Column(db.Date, nullable=False)  # copy of league.week_start for the uniqueness rule

    xp_earned_this_week = db.Column(db.Integer, default=0, nullable=False)
    final_position = db.Column(db.Integer, nullable=True)  # set when the week is closed

    joined_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    league = db.relationship('League', back_populates='members')
    user = db.relationship('User')

    __table_args__ = (
        db.UniqueConstraint('user_id', 'week_start', name='unique_user_league_week'),
        db.CheckConstraint('xp_earned_this_week >= 0', name='weekly_xp_non_negative'),
    )

    def __repr__(self):
        return f'<LeagueMember league={self.league_id} user={self.user_id} xp={self.xp_earned_this_week}>'
