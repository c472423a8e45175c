"""
Journal models.

Each entry kind has its own typed columns instead of a stringified JSON
blob; `entry_type` says which ones are populated.
"""

import enum
from datetime import datetime
from mindquest.extensions import db


class JournalEntryType(str, enum.Enum):
    CHECK_IN = 'check_in'      # daily mood check-in: scores + optional note
    REFLECTION = 'reflection'  # free-form entry: title, text, tags


class JournalEntry(db.Model):
    __tablename__ = 'journal_entry'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    entry_type = db.Column(db.String(20), nullable=False, index=True)
    entry_date = db.Column(db.Date, nullable=False, index=True)

    # check_in
    mood_score = db.Column(db.Integer, nullable=True)
    energy_score = db.Column(db.Integer, nullable=True)
    stress_score = db.Column(db.Integer, nullable=True)

    # reflection (text is shared with the check-in note)
    title = db.Column(db.String(200), nullable=True)
    text = db.Column(db.Text, nullable=True)
    tags = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship('User', backref=db.backref('journal_entries', lazy='dynamic'))

    def __repr__(self):
        return f'<JournalEntry {self.id} {self.entry_type} user={self.user_id}>'

    def to_dict(self):
        data = {
            'id': self.id,
            'entry_type': self.entry_type,
            'entry_date': self.entry_date.isoformat(),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if self.entry_type == JournalEntryType.CHECK_IN.value:
            data.update({
                'mood_score': self.mood_score,
                'energy_score': self.energy_score,
                'stress_score': self.stress_score,
                'note': self.text,
            })
        else:
            data.update({
                'title': self.title,
                'text': self.text,
                'tags': self.tags or [],
            })
        return data
