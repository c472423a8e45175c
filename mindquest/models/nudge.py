"""
Adaptive nudge log.

Each row is a nudge that was shown to a user. The (user, day) uniqueness is
the "at most one nudge per day" rule, kept in the database so every device
and every worker reads the same answer.
"""

import enum
from datetime import datetime
from mindquest.extensions import db


class NudgeType(str, enum.Enum):
    STREAK_DANGER = 'streak_danger'            # streak alive, nothing done today, evening
    INACTIVITY = 'inactivity'                  # no missions for a few days
    NEGATIVE_SENTIMENT = 'negative_sentiment'  # recent journal keeps tagging hard feelings


class NudgeEvent(db.Model):
    __tablename__ = 'nudge_event'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    nudge_type = db.Column(db.String(30), nullable=False, index=True)
    nudge_date = db.Column(db.Date, nullable=False)  # user's local calendar day

    action_taken = db.Column(db.Boolean, default=False, nullable=False)
    acted_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'nudge_date', name='unique_user_nudge_day'),
    )

    def __repr__(self):
        return f'<NudgeEvent user={self.user_id} {self.nudge_type} date={self.nudge_date}>'

    def to_dict(self):
        return {
            'id': self.id,
            'nudge_type': self.nudge_type,
            'nudge_date': self.nudge_date.isoformat(),
            'action_taken': self.action_taken,
        }
