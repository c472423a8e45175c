"""
Achievement grants.

The achievement definitions are static (see mindquest.catalog); only the
grant is stored. A grant is permanent and happens once per user.
"""

from datetime import datetime
from mindquest.extensions import db


class UserAchievement(db.Model):
    __tablename__ = 'user_achievement'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    achievement_id = db.Column(db.String(32), nullable=False)

    unlocked_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    tokens_awarded = db.Column(db.Integer, nullable=False)

    user = db.relationship('User', backref=db.backref('achievements_earned', lazy='dynamic'))

    __table_args__ = (
        db.UniqueConstraint('user_id', 'achievement_id', name='unique_user_achievement'),
    )

    def __repr__(self):
        return f'<UserAchievement user={self.user_id} achievement={self.achievement_id}>'
