"""
Tests for weekly leagues: tiering, capacity-bounded assignment, ranking,
zones, weekly XP and closing a week.
"""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from sqlalchemy import func, select

from mindquest.extensions import db
from mindquest.models import League, LeagueMember
from mindquest.services import LeagueService, MissionService, ProgressService
from mindquest.services.league_service import (
    DEMOTION_ZONE, PROMOTION_ZONE, SAFE_ZONE, get_zone, rank_members, tier_for_xp
)
from conftest import MONDAY

NEXT_MONDAY = MONDAY + timedelta(weeks=1)


class TestTiers:

    @pytest.mark.parametrize('xp, tier', [
        (0, 'bronze'), (499, 'bronze'),
        (500, 'silver'), (2999, 'silver'),
        (3000, 'gold'), (7999, 'gold'),
        (8000, 'diamond'), (50000, 'diamond'),
    ])
    def test_tier_thresholds(self, xp, tier):
        assert tier_for_xp(xp) == tier


class TestRanking:

    def test_sorted_by_weekly_xp_ties_by_join_order(self):
        members = [
            SimpleNamespace(id=1, xp_earned_this_week=50),
            SimpleNamespace(id=2, xp_earned_this_week=80),
            SimpleNamespace(id=3, xp_earned_this_week=50),
            SimpleNamespace(id=4, xp_earned_this_week=0),
        ]
        assert [m.id for m in rank_members(members)] == [2, 1, 3, 4]
        assert [m.id for m in rank_members(list(reversed(members)))] == [2, 1, 3, 4]

    def test_zones_full_league(self):
        zones = [get_zone(position, 20) for position in range(1, 21)]
        assert zones[:6] == [PROMOTION_ZONE] * 6
        assert zones[6:14] == [SAFE_ZONE] * 8
        assert zones[14:] == [DEMOTION_ZONE] * 6

    def test_zones_small_leagues(self):
        assert get_zone(1, 1) == PROMOTION_ZONE
        assert [get_zone(p, 3) for p in (1, 2, 3)] == [PROMOTION_ZONE, SAFE_ZONE, DEMOTION_ZONE]


class TestAssignment:

    def test_capacity_splits_into_new_league(self, make_user):
        users = [make_user() for _ in range(21)]
        memberships = [LeagueService.assign_to_league(u, total_xp=0, week_start=MONDAY) for u in users]
        db.session.commit()

        assert db.session.scalar(select(func.count(League.id))) == 2
        first, second = db.session.scalars(select(League).order_by(League.id)).all()
        assert len(first.members) == 20
        assert [m.user_id for m in second.members] == [users[-1].id]
        assert memberships[-1].league_id == second.id

    def test_assignment_is_idempotent_per_week(self, user):
        first = LeagueService.assign_to_league(user, total_xp=0, week_start=MONDAY)
        again = LeagueService.assign_to_league(user, total_xp=9000, week_start=MONDAY)

        assert again.id == first.id
        assert again.league.tier == 'bronze'
        assert db.session.scalar(select(func.count(LeagueMember.id))) == 1

    def test_tiers_get_separate_leagues(self, make_user):
        bronze = LeagueService.assign_to_league(make_user(), total_xp=10, week_start=MONDAY)
        gold = LeagueService.assign_to_league(make_user(), total_xp=4000, week_start=MONDAY)

        assert bronze.league_id != gold.league_id
        assert gold.league.tier == 'gold'

    def test_tier_defaults_to_total_xp(self, user):
        progress = ProgressService.get_or_create_progress(user)
        progress.total_xp = 600
        db.session.commit()

        membership = LeagueService.assign_to_league(user, week_start=MONDAY)

        assert membership.league.tier == 'silver'


class TestWeeklyXp:

    def test_accumulates_in_current_week_only(self, user):
        LeagueService.add_weekly_xp(user, 20, today=MONDAY)
        LeagueService.add_weekly_xp(user, 25, today=MONDAY + timedelta(days=3))
        LeagueService.add_weekly_xp(user, 30, today=NEXT_MONDAY)

        assert LeagueService.get_membership(user, MONDAY).xp_earned_this_week == 45
        assert LeagueService.get_membership(user, NEXT_MONDAY).xp_earned_this_week == 30

    def test_ignores_non_positive_xp(self, user):
        assert LeagueService.add_weekly_xp(user, 0, today=MONDAY) == 0
        assert LeagueService.get_membership(user, MONDAY) is None


class TestStanding:

    def test_positions_and_zones(self, make_user):
        users = [make_user() for _ in range(4)]
        for u, xp in zip(users, (10, 40, 20, 30)):
            LeagueService.add_weekly_xp(u, xp, today=MONDAY)

        standing = LeagueService.get_standing(users[0], today=MONDAY)

        assert [m['user_id'] for m in standing['members']] == [users[1].id, users[3].id, users[2].id, users[0].id]
        assert standing['my_position'] == 4
        assert standing['my_zone'] == DEMOTION_ZONE
        assert standing['members'][0]['zone'] == PROMOTION_ZONE
        assert standing['league']['member_count'] == 4
        assert all(m['position_change'] is None for m in standing['members'])

    def test_position_change_against_last_week(self, make_user):
        a, b = make_user(), make_user()
        LeagueService.add_weekly_xp(a, 50, today=MONDAY)
        LeagueService.add_weekly_xp(b, 10, today=MONDAY)
        assert LeagueService.close_week(MONDAY) == 1

        LeagueService.add_weekly_xp(a, 5, today=NEXT_MONDAY)
        LeagueService.add_weekly_xp(b, 60, today=NEXT_MONDAY)

        changes = {
            m['user_id']: m['position_change']
            for m in LeagueService.get_standing(a, today=NEXT_MONDAY)['members']
        }
        assert changes == {a.id: -1, b.id: 1}

    def test_close_week_persists_final_positions(self, make_user):
        a, b = make_user(), make_user()
        LeagueService.add_weekly_xp(a, 5, today=MONDAY)
        LeagueService.add_weekly_xp(b, 15, today=MONDAY)

        LeagueService.close_week(MONDAY)
        db.session.commit()

        assert LeagueService.get_membership(b, MONDAY).final_position == 1
        assert LeagueService.get_membership(a, MONDAY).final_position == 2
        assert LeagueService.close_week(MONDAY) == 0

    def test_mission_xp_flows_into_league(self, user):
        for mission_id in ('hero', 'calm', 'scripts'):
            MissionService.complete_mission(user, mission_id, today=MONDAY)

        standing = LeagueService.get_standing(user, today=MONDAY)

        # Perfect-day bonus counts too
        assert standing['members'][0]['xp_earned_this_week'] == 80
