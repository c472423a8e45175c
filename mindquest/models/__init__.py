# mindquest/models/__init__.py

from mindquest.extensions import db

from .user import User
from .progress import UserProgress, StreakState
from .mission import MissionCompletion, PerfectDayBonus, DailyVictory
from .achievement import UserAchievement
from .league import League, LeagueMember
from .journal import JournalEntry, JournalEntryType
from .connection import Connection, ConnectionStatus
from .nudge import NudgeEvent, NudgeType

__all__ = [
    'db',
    'User',
    'UserProgress',
    'StreakState',
    'MissionCompletion',
    'PerfectDayBonus',
    'DailyVictory',
    'UserAchievement',
    'League',
    'LeagueMember',
    'JournalEntry',
    'JournalEntryType',
    'Connection',
    'ConnectionStatus',
    'NudgeEvent',
    'NudgeType',
]
