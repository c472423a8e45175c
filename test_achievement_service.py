"""
Tests for the achievement evaluator: threshold crossing, streak badges,
idempotent grants and the token reward.
"""

from datetime import timedelta

from sqlalchemy import func, select

from mindquest.extensions import db
from mindquest.models import UserAchievement
from mindquest.services import AchievementService, MissionService, ProgressService
from mindquest.services.achievement_service import evaluate_achievements
from conftest import MONDAY


class TestEvaluateAchievements:

    def test_nothing_below_thresholds(self):
        assert evaluate_achievements(set(), {'hero': 9, 'scripts': 4}, streak=6) == []

    def test_threshold_is_inclusive(self):
        assert evaluate_achievements(set(), {'hero': 10}, streak=0) == ['detector']

    def test_streak_badges_checked_for_any_activity(self):
        earned = evaluate_achievements(set(), {'calm': 1}, streak=30)
        assert earned == ['week_streak', 'month_warrior']

    def test_granted_ids_skipped(self):
        assert evaluate_achievements({'detector'}, {'hero': 50}, streak=0) == []

    def test_missing_type_counts_as_zero(self):
        assert evaluate_achievements(set(), {}, streak=0) == []


class TestCheckAndGrant:

    def test_crossing_grants_badge_and_token(self, user):
        granted = []
        for offset in range(5):
            result = MissionService.complete_mission(user, 'scripts', today=MONDAY + timedelta(days=offset))
            granted.extend(result['achievements'])
        db.session.commit()

        assert granted == ['limit_said']
        assert ProgressService.get_or_create_progress(user).power_tokens == 1

    def test_reevaluation_never_regrants(self, user):
        for offset in range(5):
            MissionService.complete_mission(user, 'scripts', today=MONDAY + timedelta(days=offset))

        assert AchievementService.check_and_grant(user) == []
        assert AchievementService.check_and_grant(user, 'scripts') == []
        assert db.session.scalar(select(func.count(UserAchievement.id))) == 1
        assert ProgressService.get_or_create_progress(user).power_tokens == 1

    def test_direct_unlock_is_idempotent(self, user):
        assert AchievementService.unlock_achievement(user, 'detector') is True
        assert AchievementService.unlock_achievement(user, 'detector') is False
        assert ProgressService.get_or_create_progress(user).power_tokens == 1

    def test_unknown_achievement(self, user):
        assert AchievementService.unlock_achievement(user, 'nope') is False

    def test_progress_listing(self, user):
        MissionService.complete_mission(user, 'hero', today=MONDAY)

        listing = {a['id']: a for a in AchievementService.get_all_achievements_with_progress(user)}

        assert listing['detector']['current_value'] == 1
        assert listing['detector']['progress_percentage'] == 10.0
        assert listing['detector']['unlocked'] is False
        # Premium badges are hidden from free users until unlocked
        assert 'sos_mode' not in listing

    def test_premium_listing_includes_premium_badges(self, premium_user):
        ids = [a['id'] for a in AchievementService.get_all_achievements_with_progress(premium_user)]
        assert 'sos_mode' in ids
        assert 'strategist_badge' in ids
