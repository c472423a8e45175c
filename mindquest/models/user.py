"""User model. Sign-in is handled by the external identity provider."""

import logging
from datetime import datetime
from flask_login import UserMixin
from mindquest.extensions import db

logger = logging.getLogger(__name__)


class User(UserMixin, db.Model):
    __tablename__ = 'user'

    id = db.Column(db.Integer, primary_key=True)
    external_id = db.Column(db.String(64), unique=True, nullable=True, index=True)  # identity provider subject
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(80), nullable=True)

    is_premium = db.Column(db.Boolean, default=False, nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    is_ranking_private = db.Column(db.Boolean, default=False, nullable=False)

    timezone = db.Column(db.String(64), nullable=True)  # IANA name, e.g. 'Europe/Madrid'
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    progress = db.relationship('UserProgress', back_populates='user', uselist=False)
    streak = db.relationship('StreakState', back_populates='user', uselist=False)

    def __repr__(self):
        return f'<User {self.username}>'

    @property
    def alias(self):
        """Public name for rankings."""
        return self.display_name or self.username
