"""
Journal Service - Daily mood check-ins and free-form reflections.

A mood check-in is also the user's daily streak check-in.
"""

import logging
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from mindquest.extensions import db
from mindquest.constants import GameConstants
from mindquest.exceptions import InvalidAmountError, StorageFailureError
from mindquest.models import JournalEntry, JournalEntryType
from mindquest.time_helpers import get_user_today

logger = logging.getLogger(__name__)


def _valid_score(value):
    return (
        isinstance(value, int) and not isinstance(value, bool)
        and GameConstants.MOOD_SCORE_MIN <= value <= GameConstants.MOOD_SCORE_MAX
    )


class JournalService:
    """Service for journal entries."""

    @staticmethod
    def create_check_in(user, mood, energy, stress, note=None, today=None, use_rescue=False):
        """
        Save a mood check-in and record the day for the streak.

        Args:
            user: User instance
            mood, energy, stress: Scores from 1 to 10
            note: Optional free text
            today: User's calendar day
            use_rescue: Spend a streak rescue if the check-in needs one

        Returns:
            dict: {'success', 'entry', 'streak'} or a failure result
        """
        from mindquest.services.streak_service import StreakService

        for name, value in (('mood', mood), ('energy', energy), ('stress', stress)):
            if not _valid_score(value):
                return InvalidAmountError(
                    f"{name.capitalize()} must be between "
                    f"{GameConstants.MOOD_SCORE_MIN} and {GameConstants.MOOD_SCORE_MAX}."
                ).to_result(field=name)

        if today is None:
            today = get_user_today(user)

        entry = JournalEntry(
            user_id=user.id,
            entry_type=JournalEntryType.CHECK_IN.value,
            entry_date=today,
            mood_score=mood,
            energy_score=energy,
            stress_score=stress,
            text=(note or '').strip() or None,
        )

        try:
            db.session.add(entry)
            db.session.flush()
            streak = StreakService.record_check_in(user, today=today, use_rescue=use_rescue)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to save check-in for user {user.id}: {e}", exc_info=True)
            raise StorageFailureError() from e

        logger.info(f"User {user.id} mood check-in on {today} (mood {mood})")
        return {'success': True, 'entry': entry.to_dict(), 'streak': streak}

    @staticmethod
    def create_reflection(user, text, title=None, tags=None, today=None):
        """Save a free-form journal entry."""
        text = (text or '').strip()
        if not text:
            return InvalidAmountError('Reflection text cannot be empty.').to_result(field='text')

        if today is None:
            today = get_user_today(user)

        entry = JournalEntry(
            user_id=user.id,
            entry_type=JournalEntryType.REFLECTION.value,
            entry_date=today,
            title=(title or '').strip()[:200] or None,
            text=text,
            tags=[str(tag) for tag in (tags or [])],
        )
        db.session.add(entry)
        db.session.flush()

        return {'success': True, 'entry': entry.to_dict()}

    @staticmethod
    def get_entries(user, entry_type=None, limit=30):
        query = select(JournalEntry).where(JournalEntry.user_id == user.id)
        if entry_type is not None:
            query = query.where(JournalEntry.entry_type == JournalEntryType(entry_type).value)
        query = query.order_by(JournalEntry.entry_date.desc(), JournalEntry.id.desc()).limit(limit)
        return [entry.to_dict() for entry in db.session.scalars(query)]
