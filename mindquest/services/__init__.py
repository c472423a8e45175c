# mindquest/services/__init__.py

from .progress_service import ProgressService
from .mission_service import MissionService
from .achievement_service import AchievementService
from .streak_service import StreakService
from .league_service import LeagueService
from .ranking_service import RankingService
from .journal_service import JournalService
from .connection_service import ConnectionService
from .nudge_service import NudgeService

__all__ = [
    'ProgressService',
    'MissionService',
    'AchievementService',
    'StreakService',
    'LeagueService',
    'RankingService',
    'JournalService',
    'ConnectionService',
    'NudgeService',
]
