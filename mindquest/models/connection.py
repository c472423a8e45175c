# mindquest/models/connection.py

from datetime import datetime
from mindquest.extensions import db


class ConnectionStatus:
    """Connection request states."""
    PENDING = 'pending'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'


class Connection(db.Model):
    """
    A connection between two users, used for the "my circle" ranking.

    Directional while pending:
    - requester_id: user who sent the request
    - receiver_id: user who can accept or reject it

    Once accepted both users are in each other's circle. There is at most
    one row per pair of users, whichever direction it was sent in.
    """
    __tablename__ = 'connection'

    id = db.Column(db.Integer, primary_key=True)
    requester_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    receiver_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    status = db.Column(db.String(20), default=ConnectionStatus.PENDING, nullable=False, index=True)

    # Unordered pair key (lower id first) so A->B and B->A collide
    user_low_id = db.Column(db.Integer, nullable=False)
    user_high_id = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    responded_at = db.Column(db.DateTime, nullable=True)

    requester = db.relationship('User', foreign_keys=[requester_id])
    receiver = db.relationship('User', foreign_keys=[receiver_id])

    __table_args__ = (
        db.UniqueConstraint('user_low_id', 'user_high_id', name='unique_connection_pair'),
        db.CheckConstraint('requester_id <> receiver_id', name='connection_not_self'),
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.set_pair(self.requester_id, self.receiver_id)

    def set_pair(self, requester_id, receiver_id):
        self.requester_id = requester_id
        self.receiver_id = receiver_id
        self.user_low_id = min(requester_id, receiver_id)
        self.user_high_id = max(requester_id, receiver_id)

    def other_user_id(self, user_id):
        return self.receiver_id if self.requester_id == user_id else self.requester_id

    @property
    def is_pending(self):
        return self.status == ConnectionStatus.PENDING

    @property
    def is_accepted(self):
        return self.status == ConnectionStatus.ACCEPTED

    def __repr__(self):
        return f'<Connection {self.requester_id} -> {self.receiver_id} ({self.status})>'

    def to_dict(self):
        return {
            'id': self.id,
            'requester_id': self.requester_id,
            'requester_alias': self.requester.alias if self.requester else None,
            'receiver_id': self.receiver_id,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
