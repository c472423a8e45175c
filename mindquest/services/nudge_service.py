"""
Nudge Service - Decides which adaptive nudge, if any, to show a user.

Nudges are checked in priority order: streak in danger, then inactivity,
then recurring hard feelings in the journal. A user gets at most one nudge
per local calendar day; the shown nudge is recorded as a NudgeEvent row and
that row is what later checks read, not any client-side flag.
"""

import logging
from datetime import datetime
import pytz
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from mindquest.extensions import db
from mindquest.constants import GameConstants
from mindquest.exceptions import NudgeNotFoundError
from mindquest.models import JournalEntry, MissionCompletion, NudgeEvent, NudgeType
from mindquest.time_helpers import get_user_now

logger = logging.getLogger(__name__)

# What the client shows for each nudge and where the action leads
NUDGE_CONTENT = {
    NudgeType.STREAK_DANGER.value: {
        'title': 'Tu racha de {streak} días está en peligro',
        'description': 'Completa una misión antes de medianoche',
        'action_label': 'Ir ahora',
        'action_target': 'home',
    },
    NudgeType.INACTIVITY.value: {
        'title': 'Han pasado {days} días sin practicar',
        'description': '¿Cómo estás? El Coach está aquí para ti',
        'action_label': 'Hablar con Coach',
        'action_target': 'coach',
    },
    NudgeType.NEGATIVE_SENTIMENT.value: {
        'title': 'Tu diario muestra algo que merece atención',
        'description': 'Tienes una meditación recomendada para ti',
        'action_label': 'Ver recomendación',
        'action_target': 'coach',
    },
}


def is_negative_entry(tags):
    """True if any tag mentions one of the hard feelings."""
    return any(
        negative in (tag or '').lower()
        for tag in (tags or [])
        for negative in GameConstants.NEGATIVE_JOURNAL_TAGS
    )


def choose_nudge(streak, hours_since_last_mission, local_hour, negative_entries):
    """
    Pick the nudge for the current facts, or None.

    Args:
        streak: Current streak
        hours_since_last_mission: Hours since the last completed mission, None if never
        local_hour: Hour of day in the user's timezone
        negative_entries: Recent journal entries with hard-feeling tags
    """
    if hours_since_last_mission is not None:
        if (
            streak > 0
            and hours_since_last_mission > GameConstants.NUDGE_STREAK_DANGER_HOURS
            and local_hour >= GameConstants.NUDGE_STREAK_DANGER_FROM_HOUR
        ):
            return NudgeType.STREAK_DANGER.value
        if hours_since_last_mission >= GameConstants.NUDGE_INACTIVITY_DAYS * 24:
            return NudgeType.INACTIVITY.value

    if negative_entries >= GameConstants.NUDGE_NEGATIVE_ENTRIES:
        return NudgeType.NEGATIVE_SENTIMENT.value
    return None


class NudgeService:
    """Service for adaptive nudges."""

    @staticmethod
    def get_nudge_for_day(user, day):
        return db.session.scalar(
            select(NudgeEvent).where(NudgeEvent.user_id == user.id, NudgeEvent.nudge_date == day)
        )

    @staticmethod
    def _last_mission_at(user):
        return db.session.scalar(
            select(func.max(MissionCompletion.created_at)).where(MissionCompletion.user_id == user.id)
        )

    @staticmethod
    def _count_negative_entries(user):
        recent_tags = db.session.scalars(
            select(JournalEntry.tags)
            .where(JournalEntry.user_id == user.id)
            .order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc())
            .limit(GameConstants.NUDGE_RECENT_JOURNAL_ENTRIES)
        ).all()
        return sum(1 for tags in recent_tags if is_negative_entry(tags))

    @staticmethod
    def check_nudge(user, now=None):
        """
        Decide today's nudge and record it if one is due.

        Args:
            user: User instance
            now: Timezone-aware current time (defaults to now in the user's timezone)

        Returns:
            dict: {'success': True, 'nudge': {...} or None}
        """
        from mindquest.services.progress_service import ProgressService

        if now is None:
            now = get_user_now(user)
        today = now.date()

        if NudgeService.get_nudge_for_day(user, today) is not None:
            return {'success': True, 'nudge': None}

        streak = ProgressService.get_current_streak(user)
        last_mission_at = NudgeService._last_mission_at(user)
        hours_since = None
        if last_mission_at is not None:
            # Completion timestamps are stored as naive UTC
            now_utc = now.astimezone(pytz.UTC).replace(tzinfo=None)
            hours_since = (now_utc - last_mission_at).total_seconds() / 3600

        nudge_type = choose_nudge(streak, hours_since, now.hour, NudgeService._count_negative_entries(user))
        if nudge_type is None:
            return {'success': True, 'nudge': None}

        event = NudgeEvent(user_id=user.id, nudge_type=nudge_type, nudge_date=today)
        try:
            with db.session.begin_nested():
                db.session.add(event)
        except IntegrityError:
            # Another request already showed today's nudge
            return {'success': True, 'nudge': None}

        logger.info(f"Nudge '{nudge_type}' for user {user.id} on {today}")

        content = NUDGE_CONTENT[nudge_type]
        nudge = event.to_dict()
        nudge.update(content)
        nudge['title'] = content['title'].format(
            streak=streak,
            days=int(hours_since // 24) if hours_since is not None else 0
        )
        return {'success': True, 'nudge': nudge}

    @staticmethod
    def mark_action_taken(user, nudge_id):
        """Record that the user followed a nudge's action."""
        event = db.session.scalar(
            select(NudgeEvent).where(NudgeEvent.id == nudge_id, NudgeEvent.user_id == user.id)
        )
        if event is None:
            return NudgeNotFoundError().to_result()

        if not event.action_taken:
            event.action_taken = True
            event.acted_at = datetime.utcnow()
            db.session.flush()
            logger.info(f"User {user.id} acted on nudge {event.id} ({event.nudge_type})")

        return {'success': True, 'nudge': event.to_dict()}
