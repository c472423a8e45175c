"""
Mission Service - Handles daily challenge completion and rewards.

This service records mission completions (at most once per user, mission and
day), applies the streak multiplier, awards the perfect-day bonus and the
daily victory bonus, and hands off to achievements and the weekly league.
"""

import logging
from datetime import timedelta
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from mindquest.extensions import db
from mindquest.catalog import get_day_missions, get_mission
from mindquest.constants import GameConstants
from mindquest.exceptions import (
    AlreadyCompletedError, PremiumRequiredError, UnknownMissionError,
    InvalidAmountError, StorageFailureError
)
from mindquest.models import MissionCompletion, PerfectDayBonus, DailyVictory
from mindquest.time_helpers import get_user_today, get_week_start
from mindquest.utils import calculate_mission_xp

logger = logging.getLogger(__name__)


class MissionService:
    """Service for the daily challenge ledger."""

    @staticmethod
    def get_todays_missions(user, today=None):
        """
        Today's schedule for a user. Bonus missions are only listed for premium users.

        Returns:
            dict: {'date', 'day_of_week', 'required_missions', 'bonus_missions',
                   'completed', 'todays_xp', 'perfect_day'}
        """
        if today is None:
            today = get_user_today(user)

        day = get_day_missions(today)
        completions = MissionService.get_completions_for_day(user, today)
        completed_ids = {c.mission_id for c in completions}
        streak = MissionService._current_streak(user)

        def serialize(mission):
            data = mission.to_dict()
            data['completed'] = mission.id in completed_ids
            data['xp_preview'] = calculate_mission_xp(mission.base_xp, streak)
            return data

        return {
            'date': today.isoformat(),
            'day_of_week': day.day_of_week,
            'required_missions': [serialize(m) for m in day.required_missions],
            'bonus_missions': [serialize(m) for m in day.bonus_missions] if user.is_premium else [],
            'completed': [c.to_dict() for c in completions],
            'todays_xp': sum(c.xp_earned for c in completions),
            'perfect_day': day.required_ids <= completed_ids,
        }

    @staticmethod
    def get_completions_for_day(user, day):
        return db.session.scalars(
            select(MissionCompletion)
            .where(
                MissionCompletion.user_id == user.id,
                MissionCompletion.mission_date == day
            )
            .order_by(MissionCompletion.id)
        ).all()

    @staticmethod
    def is_mission_completed(user, mission_id, day):
        return db.session.scalar(
            select(func.count(MissionCompletion.id))
            .where(
                MissionCompletion.user_id == user.id,
                MissionCompletion.mission_id == mission_id,
                MissionCompletion.mission_date == day
            )
        ) > 0

    @staticmethod
    def get_counts_by_type(user):
        """Cumulative completions per mission type, all time."""
        rows = db.session.execute(
            select(MissionCompletion.mission_type, func.count(MissionCompletion.id))
            .where(MissionCompletion.user_id == user.id)
            .group_by(MissionCompletion.mission_type)
        ).all()
        return {mission_type: count for mission_type, count in rows}

    @staticmethod
    def _current_streak(user):
        from mindquest.services.progress_service import ProgressService
        return ProgressService.get_current_streak(user)

    @staticmethod
    def complete_mission(user, mission_id, today=None, metadata=None):
        """
        Record a mission completion and credit its XP.

        The completion row and the XP total change in the same transaction;
        the caller commits. A second completion of the same mission on the
        same day is rejected by the unique constraint, not only by the
        existence check, so two racing requests cannot both credit XP.

        Args:
            user: User instance
            mission_id: Catalog mission id
            today: User's calendar day (defaults to the user's local today)
            metadata: Free-form details about the completion

        Returns:
            dict: {
                'success': bool,
                'xp_earned': int,
                'perfect_day_bonus': int,
                'total_xp': int,
                'current_level': str,
                'leveled_up': bool,
                'achievements': [achievement_id, ...]
            } or a failure result ('already_completed', 'premium_required', ...)

        Raises:
            StorageFailureError: the write failed and the unit was rolled back
        """
        from mindquest.services.progress_service import ProgressService
        from mindquest.services.achievement_service import AchievementService
        from mindquest.services.league_service import LeagueService
        from mindquest.services.streak_service import StreakService

        if today is None:
            today = get_user_today(user)

        mission = get_mission(mission_id)
        if mission is None:
            return UnknownMissionError().to_result()

        if mission.is_premium and not user.is_premium:
            return PremiumRequiredError().to_result()

        if MissionService.is_mission_completed(user, mission.id, today):
            logger.debug(f"User {user.id} already completed '{mission.id}' on {today}")
            return AlreadyCompletedError().to_result(mission_id=mission.id)

        streak = ProgressService.get_current_streak(user)
        xp = calculate_mission_xp(mission.base_xp, streak)

        completion = MissionCompletion(
            user_id=user.id,
            mission_id=mission.id,
            mission_type=mission.type.value,
            mission_date=today,
            xp_earned=xp,
            extra_data=metadata or {},
        )

        try:
            with db.session.begin_nested():
                db.session.add(completion)
        except IntegrityError:
            logger.info(f"Duplicate completion of '{mission.id}' for user {user.id} on {today} rejected")
            return AlreadyCompletedError().to_result(mission_id=mission.id)

        try:
            leveled_up, progress = ProgressService.add_xp(user, xp, f'Mission: {mission.id}')
            LeagueService.add_weekly_xp(user, xp, today=today)

            bonus = MissionService._award_perfect_day_bonus(user, today)
            if bonus:
                bonus_leveled_up, progress = ProgressService.add_xp(user, bonus, 'Perfect day bonus')
                leveled_up = leveled_up or bonus_leveled_up
                LeagueService.add_weekly_xp(user, bonus, today=today)
                MissionService._award_perfect_week_tokens(user, today)
                StreakService.resolve_wager(user, won=True)

            granted = AchievementService.check_and_grant(user, mission.type.value)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to record mission '{mission.id}' for user {user.id}: {e}", exc_info=True)
            raise StorageFailureError() from e

        logger.info(
            f"User {user.id} completed mission '{mission.id}' (+{xp} XP, streak {streak}"
            f"{', perfect day' if bonus else ''})"
        )

        return {
            'success': True,
            'mission_id': mission.id,
            'xp_earned': xp,
            'perfect_day_bonus': bonus,
            'total_xp': progress.total_xp,
            'current_level': progress.current_level,
            'leveled_up': leveled_up,
            'achievements': granted,
        }

    @staticmethod
    def _award_perfect_day_bonus(user, today):
        """
        Award the perfect-day bonus if every required mission for today is now done.

        Idempotent per day: the bonus row is unique on (user, date), so a
        second call on the same day awards nothing.

        Returns:
            int: XP to credit (0 if not earned or already awarded)
        """
        required_ids = get_day_missions(today).required_ids
        completed_ids = {c.mission_id for c in MissionService.get_completions_for_day(user, today)}

        if not required_ids <= completed_ids:
            return 0

        already_awarded = db.session.scalar(
            select(func.count(PerfectDayBonus.id))
            .where(PerfectDayBonus.user_id == user.id, PerfectDayBonus.bonus_date == today)
        )
        if already_awarded:
            return 0

        try:
            with db.session.begin_nested():
                db.session.add(PerfectDayBonus(
                    user_id=user.id,
                    bonus_date=today,
                    xp_awarded=GameConstants.PERFECT_DAY_BONUS
                ))
        except IntegrityError:
            return 0

        return GameConstants.PERFECT_DAY_BONUS

    @staticmethod
    def _award_perfect_week_tokens(user, today):
        """Two tokens once the user has a perfect day on every day of the ISO week."""
        from mindquest.services.progress_service import ProgressService

        week_start = get_week_start(today)
        perfect_days = db.session.scalar(
            select(func.count(PerfectDayBonus.id))
            .where(
                PerfectDayBonus.user_id == user.id,
                PerfectDayBonus.bonus_date >= week_start,
                PerfectDayBonus.bonus_date < week_start + timedelta(weeks=1)
            )
        )
        if perfect_days == GameConstants.PERFECT_WEEK_DAYS:
            ProgressService.add_tokens(user, GameConstants.TOKEN_REWARD_PERFECT_WEEK, 'Perfect week')
            logger.info(f"User {user.id} completed a perfect week starting {week_start}")
            return GameConstants.TOKEN_REWARD_PERFECT_WEEK
        return 0

    @staticmethod
    def save_victory(user, victory_text, today=None, is_public=False):
        """
        Save the user's victory of the day for a small XP bonus. One per day.

        Returns:
            dict: {'success', 'xp_bonus', 'total_xp'} or a failure result
        """
        from mindquest.services.progress_service import ProgressService
        from mindquest.services.league_service import LeagueService

        victory_text = (victory_text or '').strip()
        if not victory_text:
            return InvalidAmountError('Victory text cannot be empty.').to_result()

        if today is None:
            today = get_user_today(user)

        victory = DailyVictory(
            user_id=user.id,
            victory_text=victory_text[:500],
            victory_date=today,
            xp_bonus=GameConstants.VICTORY_XP_BONUS,
            is_public=is_public,
        )
        try:
            with db.session.begin_nested():
                db.session.add(victory)
        except IntegrityError:
            return AlreadyCompletedError('Victory already saved today.').to_result()

        try:
            _, progress = ProgressService.add_xp(user, GameConstants.VICTORY_XP_BONUS, 'Daily victory')
            LeagueService.add_weekly_xp(user, GameConstants.VICTORY_XP_BONUS, today=today)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to save victory for user {user.id}: {e}", exc_info=True)
            raise StorageFailureError() from e

        return {
            'success': True,
            'xp_bonus': GameConstants.VICTORY_XP_BONUS,
            'total_xp': progress.total_xp,
        }

    @staticmethod
    def get_mission_stats(user, today=None):
        """Get mission completion statistics for a user."""
        if today is None:
            today = get_user_today(user)
        week_start = get_week_start(today)

        total_completed = db.session.scalar(
            select(func.count(MissionCompletion.id))
            .where(MissionCompletion.user_id == user.id)
        ) or 0

        completed_this_week = db.session.scalar(
            select(func.count(MissionCompletion.id))
            .where(
                MissionCompletion.user_id == user.id,
                MissionCompletion.mission_date >= week_start
            )
        ) or 0

        perfect_days = db.session.scalar(
            select(func.count(PerfectDayBonus.id))
            .where(PerfectDayBonus.user_id == user.id)
        ) or 0

        return {
            'total_completed': total_completed,
            'completed_this_week': completed_this_week,
            'perfect_days': perfect_days,
            'by_type': MissionService.get_counts_by_type(user),
        }
