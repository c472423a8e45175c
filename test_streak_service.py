"""
Tests for the streak tracker: the check-in law, shield, rescues, week-streak
tokens and wagers.
"""

from datetime import date, timedelta

import pytest

from mindquest.events import streak_changed
from mindquest.extensions import db
from mindquest.services import ProgressService, StreakService
from mindquest.services.streak_service import (
    BRIDGED_BY_RESCUE, BRIDGED_BY_SHIELD, CONTINUED, RESET, STARTED, UNCHANGED,
    advance_streak, is_shield_available
)
from conftest import MONDAY

D = MONDAY


class TestAdvanceStreak:

    def test_first_check_in_starts_at_one(self):
        assert advance_streak(0, None, D) == (1, STARTED)

    def test_same_day_is_noop(self):
        assert advance_streak(4, D, D) == (4, UNCHANGED)

    def test_next_day_increments(self):
        assert advance_streak(4, D, D + timedelta(days=1)) == (5, CONTINUED)

    def test_gap_resets_to_one(self):
        assert advance_streak(4, D, D + timedelta(days=3)) == (1, RESET)

    def test_earlier_date_is_noop(self):
        assert advance_streak(4, D, D - timedelta(days=1)) == (4, UNCHANGED)

    def test_shield_covers_the_missed_day(self):
        assert advance_streak(4, D, D + timedelta(days=2), shield_day=D + timedelta(days=1)) == (5, BRIDGED_BY_SHIELD)

    def test_shield_does_not_cover_two_missed_days(self):
        assert advance_streak(4, D, D + timedelta(days=3), shield_day=D + timedelta(days=1)) == (1, RESET)

    def test_rescue_bridges_any_gap(self):
        assert advance_streak(4, D, D + timedelta(days=10), rescue_available=True) == (5, BRIDGED_BY_RESCUE)


class TestShieldAvailability:

    def test_never_used(self):
        assert is_shield_available(None, D)

    def test_used_this_week(self):
        assert not is_shield_available(D, D + timedelta(days=6))

    def test_used_last_week(self):
        assert is_shield_available(D - timedelta(days=1), D)


class TestRecordCheckIn:

    def test_streak_law(self, user):
        assert StreakService.record_check_in(user, today=D)['streak'] == 1
        assert StreakService.record_check_in(user, today=D)['streak'] == 1
        assert StreakService.record_check_in(user, today=D + timedelta(days=1))['streak'] == 2
        result = StreakService.record_check_in(user, today=D + timedelta(days=4))
        db.session.commit()

        assert result['streak'] == 1
        assert result['outcome'] == RESET
        state = ProgressService.get_or_create_streak(user)
        assert state.current_streak == 1
        assert state.longest_streak == 2
        assert state.last_check_in_date == D + timedelta(days=4)

    def test_shield_bridges_missed_day(self, premium_user):
        StreakService.record_check_in(premium_user, today=D)
        assert StreakService.activate_shield(premium_user, today=D + timedelta(days=1))['success'] is True

        result = StreakService.record_check_in(premium_user, today=D + timedelta(days=2))

        assert result['streak'] == 2
        assert result['outcome'] == BRIDGED_BY_SHIELD
        assert ProgressService.get_or_create_progress(premium_user).shield_pending is False

    def test_unused_shield_expires(self, premium_user):
        StreakService.record_check_in(premium_user, today=D)
        StreakService.activate_shield(premium_user, today=D)
        StreakService.record_check_in(premium_user, today=D + timedelta(days=1))

        result = StreakService.record_check_in(premium_user, today=D + timedelta(days=3))

        assert result['outcome'] == RESET
        assert ProgressService.get_or_create_progress(premium_user).shield_pending is False

    def test_rescue_used_only_when_requested(self, user):
        StreakService.record_check_in(user, today=D)
        StreakService.record_check_in(user, today=D + timedelta(days=1))

        result = StreakService.record_check_in(user, today=D + timedelta(days=4), use_rescue=True)

        assert result['streak'] == 3
        assert result['outcome'] == BRIDGED_BY_RESCUE
        progress = ProgressService.get_or_create_progress(user)
        assert progress.streak_rescues_available == 0
        assert progress.streak_rescues_used == 1

        # Free users only get one
        result = StreakService.record_check_in(user, today=D + timedelta(days=8), use_rescue=True)
        assert result['outcome'] == RESET

    def test_rescue_not_spent_on_consecutive_day(self, user):
        StreakService.record_check_in(user, today=D)
        StreakService.record_check_in(user, today=D + timedelta(days=1), use_rescue=True)

        assert ProgressService.get_or_create_progress(user).streak_rescues_available == 1

    def test_premium_users_start_with_three_rescues(self, premium_user):
        assert ProgressService.get_or_create_progress(premium_user).streak_rescues_available == 3

    def test_week_streak_awards_token_and_achievement(self, user):
        for offset in range(7):
            result = StreakService.record_check_in(user, today=D + timedelta(days=offset))
        db.session.commit()

        assert result['streak'] == 7
        assert result['tokens_awarded'] == 1
        assert result['achievements'] == ['week_streak']
        # 1 for the week streak, 1 for the achievement
        assert ProgressService.get_or_create_progress(user).power_tokens == 2

    def test_fires_streak_changed_signal(self, user):
        received = []

        def receiver(sender, **kwargs):
            received.append((sender, kwargs['streak'], kwargs['bridged_by']))

        with streak_changed.connected_to(receiver):
            StreakService.record_check_in(user, today=D)
            StreakService.record_check_in(user, today=D)

        assert received == [(user.id, 1, STARTED)]


class TestShield:

    def test_free_user_cannot_activate(self, user):
        result = StreakService.activate_shield(user, today=D)
        assert result['error'] == 'premium_required'

    def test_free_user_allowed_when_configured(self, app, user):
        app.config['SHIELD_PREMIUM_ONLY'] = False
        assert StreakService.activate_shield(user, today=D)['success'] is True

    def test_once_per_iso_week(self, premium_user):
        first = StreakService.activate_shield(premium_user, today=D)
        second = StreakService.activate_shield(premium_user, today=D + timedelta(days=6))
        next_week = StreakService.activate_shield(premium_user, today=D + timedelta(days=7))

        assert first['success'] is True
        assert second['error'] == 'shield_unavailable'
        assert next_week['success'] is True


class TestWager:

    def test_requires_seeds(self, user):
        result = StreakService.place_wager(user, 3, today=D)
        assert result['error'] == 'insufficient_seeds'
        assert ProgressService.get_or_create_progress(user).wager_active is False

    @pytest.mark.parametrize('amount', [0, -1, '3', 2.5, True, None])
    def test_rejects_invalid_amounts(self, user, amount):
        assert StreakService.place_wager(user, amount, today=D)['error'] == 'invalid_amount'

    def test_only_one_active_wager(self, user):
        ProgressService.add_tokens(user, 5)
        assert StreakService.place_wager(user, 3, today=D)['success'] is True

        result = StreakService.place_wager(user, 1, today=D)

        assert result['error'] == 'wager_active'
        assert ProgressService.get_or_create_progress(user).wager_amount == 3

    def test_win_pays_half_the_stake(self, user):
        ProgressService.add_tokens(user, 4)
        StreakService.place_wager(user, 3, today=D)

        result = StreakService.resolve_wager(user, won=True)

        assert result['reward'] == 1
        progress = ProgressService.get_or_create_progress(user)
        assert progress.power_tokens == 5
        assert progress.wager_active is False
        assert progress.wager_amount == 0

    def test_loss_takes_the_stake(self, user):
        ProgressService.add_tokens(user, 5)
        StreakService.place_wager(user, 3, today=D)

        StreakService.resolve_wager(user, won=False)

        assert ProgressService.get_or_create_progress(user).power_tokens == 2

    def test_loss_clamps_at_zero(self, user):
        ProgressService.add_tokens(user, 4)
        StreakService.place_wager(user, 4, today=D)
        ProgressService.spend_tokens(user, 'pro_sos_card')

        StreakService.resolve_wager(user, won=False)

        progress = ProgressService.get_or_create_progress(user)
        assert progress.power_tokens == 0
        assert progress.wager_active is False

    def test_broken_streak_loses_wager(self, user):
        ProgressService.add_tokens(user, 3)
        StreakService.record_check_in(user, today=D)
        StreakService.place_wager(user, 2, today=D)

        StreakService.record_check_in(user, today=D + timedelta(days=3))

        progress = ProgressService.get_or_create_progress(user)
        assert progress.wager_active is False
        assert progress.power_tokens == 1

    def test_settle_stale_wagers(self, user, make_user):
        other = make_user()
        ProgressService.add_tokens(user, 2)
        ProgressService.add_tokens(other, 2)
        StreakService.place_wager(user, 2, today=date(2020, 1, 6))
        db.session.commit()

        assert StreakService.settle_stale_wagers() == 1
        assert ProgressService.get_or_create_progress(user).power_tokens == 0
        assert ProgressService.get_or_create_progress(other).power_tokens == 2
