"""
Achievement Service - Handles achievement tracking and unlocking.

This service checks cumulative mission counts and the streak against the
achievement table and grants each badge (plus one power token) the first
time its threshold is crossed.
"""

import logging
from typing import Dict, Iterable, List
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from mindquest.extensions import db
from mindquest.catalog import ACHIEVEMENTS, ACHIEVEMENTS_BY_ID, STREAK_REQUIREMENT
from mindquest.constants import GameConstants
from mindquest.events import achievement_unlocked
from mindquest.models import UserAchievement

logger = logging.getLogger(__name__)


def evaluate_achievements(granted_ids: Iterable[str], counts_by_type: Dict[str, int], streak: int) -> List[str]:
    """
    Achievements newly earned given the user's counts and streak.

    Every achievement not in `granted_ids` is checked, whatever mission type
    triggered the evaluation: a streak badge can be crossed by any activity.

    Returns:
        list: achievement ids in catalog order
    """
    granted = set(granted_ids)
    earned = []

    for achievement in ACHIEVEMENTS:
        if achievement['id'] in granted:
            continue

        requirement = achievement['requirement']
        if requirement['type'] == STREAK_REQUIREMENT:
            value = streak
        else:
            value = counts_by_type.get(requirement['type'], 0)

        if value >= requirement['count']:
            earned.append(achievement['id'])

    return earned


class AchievementService:
    """Service for managing user achievements."""

    @staticmethod
    def get_granted_ids(user):
        return set(db.session.scalars(
            select(UserAchievement.achievement_id).where(UserAchievement.user_id == user.id)
        ).all())

    @staticmethod
    def check_and_grant(user, mission_type=None):
        """
        Evaluate all achievements for the user and grant the newly earned ones.

        Must run after the triggering completion is flushed so the counts
        include it.

        Args:
            user: User instance
            mission_type: Type of the mission that triggered the check (for logging)

        Returns:
            list: ids of achievements granted by this call
        """
        from mindquest.services.mission_service import MissionService
        from mindquest.services.progress_service import ProgressService

        counts = MissionService.get_counts_by_type(user)
        streak = ProgressService.get_current_streak(user)
        candidates = evaluate_achievements(AchievementService.get_granted_ids(user), counts, streak)

        granted = []
        for achievement_id in candidates:
            if AchievementService.unlock_achievement(user, achievement_id):
                granted.append(achievement_id)

        if granted:
            logger.info(f"User {user.id} unlocked {granted} (trigger: {mission_type or 'check-in'})")

        return granted

    @staticmethod
    def unlock_achievement(user, achievement_id):
        """
        Grant one achievement and its power token.

        The (user, achievement) pair is unique in the database, so a second
        grant fails without awarding another token.

        Returns:
            bool: True if unlocked by this call
        """
        from mindquest.services.progress_service import ProgressService

        if achievement_id not in ACHIEVEMENTS_BY_ID:
            logger.warning(f"Achievement {achievement_id} not found in catalog")
            return False

        reward = GameConstants.TOKEN_REWARD_ACHIEVEMENT
        try:
            with db.session.begin_nested():
                db.session.add(UserAchievement(
                    user_id=user.id,
                    achievement_id=achievement_id,
                    tokens_awarded=reward
                ))
        except IntegrityError:
            logger.warning(f"User {user.id} already has achievement {achievement_id}")
            return False

        ProgressService.add_tokens(user, reward, f'Achievement: {achievement_id}')
        achievement_unlocked.send(user.id, achievement_id=achievement_id)
        return True

    @staticmethod
    def get_all_achievements_with_progress(user):
        """Get all achievements with the user's progress toward each."""
        from mindquest.services.mission_service import MissionService
        from mindquest.services.progress_service import ProgressService

        unlocked = {
            ua.achievement_id: ua for ua in db.session.scalars(
                select(UserAchievement).where(UserAchievement.user_id == user.id)
            )
        }
        counts = MissionService.get_counts_by_type(user)
        streak = ProgressService.get_current_streak(user)

        result = []
        for achievement in ACHIEVEMENTS:
            if achievement['is_premium'] and not user.is_premium and achievement['id'] not in unlocked:
                continue

            requirement = achievement['requirement']
            if requirement['type'] == STREAK_REQUIREMENT:
                current_value = streak
            else:
                current_value = counts.get(requirement['type'], 0)

            user_achievement = unlocked.get(achievement['id'])
            result.append({
                'id': achievement['id'],
                'label': achievement['label'],
                'description': achievement['description'],
                'icon': achievement['icon'],
                'unlocked': user_achievement is not None,
                'unlocked_at': user_achievement.unlocked_at.isoformat() if user_achievement else None,
                'current_value': current_value,
                'requirement': requirement['count'],
                'progress_percentage': min(100, round(current_value / requirement['count'] * 100, 1)),
            })

        return result
