"""
Tests for adaptive nudges: which nudge is due, and the one-per-day gate
kept in the nudge_event table.
"""

from datetime import datetime, timedelta

import pytest
import pytz
from sqlalchemy import func, select

from mindquest.extensions import db
from mindquest.models import MissionCompletion, NudgeEvent
from mindquest.services import JournalService, NudgeService, ProgressService
from mindquest.services.nudge_service import choose_nudge, is_negative_entry

# Tuesday evening, UTC
EVENING = pytz.UTC.localize(datetime(2025, 1, 7, 19, 0))


def add_completion(user, when):
    db.session.add(MissionCompletion(
        user_id=user.id,
        mission_id='hero',
        mission_type='hero',
        mission_date=when.date(),
        xp_earned=20,
        created_at=when,
    ))
    db.session.commit()


def set_streak(user, days):
    ProgressService.get_or_create_streak(user).current_streak = days
    db.session.commit()


def nudge_count(user):
    return db.session.scalar(select(func.count(NudgeEvent.id)).where(NudgeEvent.user_id == user.id))


class TestChooseNudge:

    @pytest.mark.parametrize('streak, hours, hour, negative, expected', [
        (3, 23, 19, 0, 'streak_danger'),
        (3, 23, 17, 0, None),            # too early in the day
        (3, 10, 19, 0, None),            # practiced today
        (0, 23, 19, 0, None),            # no streak to lose
        (0, 72, 10, 0, 'inactivity'),
        (5, 80, 20, 3, 'streak_danger'),  # streak danger comes first
        (0, 80, 10, 3, 'inactivity'),
        (0, None, 19, 3, 'negative_sentiment'),
        (0, None, 19, 2, None),
    ])
    def test_priority_and_thresholds(self, streak, hours, hour, negative, expected):
        assert choose_nudge(streak, hours, hour, negative) == expected

    def test_negative_tags_match_case_insensitively(self):
        assert is_negative_entry(['Ansiedad en el trabajo'])
        assert not is_negative_entry(['trabajo'])
        assert not is_negative_entry(None)


class TestCheckNudge:

    def test_streak_in_danger(self, user):
        set_streak(user, 3)
        add_completion(user, datetime(2025, 1, 6, 9, 0))

        nudge = NudgeService.check_nudge(user, now=EVENING)['nudge']

        assert nudge['nudge_type'] == 'streak_danger'
        assert nudge['title'] == 'Tu racha de 3 días está en peligro'
        assert nudge['action_target'] == 'home'

    def test_inactivity_counts_whole_days(self, user):
        add_completion(user, datetime(2025, 1, 3, 9, 0))

        nudge = NudgeService.check_nudge(user, now=EVENING)['nudge']

        assert nudge['nudge_type'] == 'inactivity'
        assert nudge['title'] == 'Han pasado 4 días sin practicar'

    def test_recurring_negative_journal(self, user):
        for tags in (['miedo'], ['Tristeza'], ['trabajo'], ['bloqueo creativo']):
            JournalService.create_reflection(user, 'Hoy fue difícil', tags=tags)

        nudge = NudgeService.check_nudge(user, now=EVENING)['nudge']

        assert nudge['nudge_type'] == 'negative_sentiment'

    def test_nothing_due_records_nothing(self, user):
        add_completion(user, datetime(2025, 1, 7, 8, 0))

        assert NudgeService.check_nudge(user, now=EVENING) == {'success': True, 'nudge': None}
        assert nudge_count(user) == 0

    def test_at_most_one_nudge_per_day(self, user):
        add_completion(user, datetime(2025, 1, 1, 9, 0))

        first = NudgeService.check_nudge(user, now=EVENING)
        second = NudgeService.check_nudge(user, now=EVENING + timedelta(hours=2))
        next_day = NudgeService.check_nudge(user, now=EVENING + timedelta(days=1))

        assert first['nudge'] is not None
        assert second['nudge'] is None
        assert next_day['nudge']['nudge_type'] == 'inactivity'
        assert nudge_count(user) == 2

    def test_unique_day_row_backs_the_check(self, user, monkeypatch):
        add_completion(user, datetime(2025, 1, 1, 9, 0))
        NudgeService.check_nudge(user, now=EVENING)
        db.session.commit()
        monkeypatch.setattr(NudgeService, 'get_nudge_for_day', staticmethod(lambda *args: None))

        result = NudgeService.check_nudge(user, now=EVENING)

        assert result['nudge'] is None
        assert nudge_count(user) == 1


class TestMarkActionTaken:

    def test_marks_own_nudge(self, user):
        add_completion(user, datetime(2025, 1, 1, 9, 0))
        nudge = NudgeService.check_nudge(user, now=EVENING)['nudge']

        result = NudgeService.mark_action_taken(user, nudge['id'])

        assert result['nudge']['action_taken'] is True
        assert db.session.get(NudgeEvent, nudge['id']).acted_at is not None

    def test_other_users_nudge_not_found(self, make_user):
        ana, bea = make_user(), make_user()
        add_completion(ana, datetime(2025, 1, 1, 9, 0))
        nudge = NudgeService.check_nudge(ana, now=EVENING)['nudge']

        assert NudgeService.mark_action_taken(bea, nudge['id'])['error'] == 'nudge_not_found'
