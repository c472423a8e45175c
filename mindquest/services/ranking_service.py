"""
Ranking Service - Global leaderboard by XP, streak or victories.

Position change compares each user's position with their position over the
previous period (last week, last month, or for all-time XP, the standings
before this week's missions).
"""

import logging
from sqlalchemy import select, func
from mindquest.extensions import db
from mindquest.models import User, UserProgress, StreakState, MissionCompletion, DailyVictory
from mindquest.time_helpers import (
    get_user_today, get_week_start, get_previous_week_start,
    get_month_start, get_previous_month_start
)
from mindquest.utils import LEVEL_ORDER

logger = logging.getLogger(__name__)

PERIODS = ('weekly', 'monthly', 'historical')
METRICS = ('xp', 'streak', 'victories')
SCOPES = ('global', 'circle')


def assign_positions(values):
    """
    1-based positions for {user_id: value}, highest value first.

    Ties are ordered by user id so the same data always ranks the same way.
    """
    ordered = sorted(values.items(), key=lambda item: (-item[1], item[0]))
    return {user_id: position for position, (user_id, _) in enumerate(ordered, start=1)}


class RankingService:
    """Service for the global ranking."""

    @staticmethod
    def _period_bounds(period, today):
        """(start, end, previous_start) of the current period; None means unbounded."""
        if period == 'weekly':
            return get_week_start(today), None, get_previous_week_start(today)
        if period == 'monthly':
            return get_month_start(today), None, get_previous_month_start(today)
        return None, None, None

    @staticmethod
    def _sum_mission_xp(start=None, end=None):
        query = select(MissionCompletion.user_id, func.sum(MissionCompletion.xp_earned))
        if start is not None:
            query = query.where(MissionCompletion.mission_date >= start)
        if end is not None:
            query = query.where(MissionCompletion.mission_date < end)
        return dict(db.session.execute(query.group_by(MissionCompletion.user_id)).all())

    @staticmethod
    def _count_victories(start=None, end=None):
        query = select(DailyVictory.user_id, func.count(DailyVictory.id))
        if start is not None:
            query = query.where(DailyVictory.victory_date >= start)
        if end is not None:
            query = query.where(DailyVictory.victory_date < end)
        return dict(db.session.execute(query.group_by(DailyVictory.user_id)).all())

    @staticmethod
    def get_ranking(period='weekly', metric='xp', user=None, today=None, level_filter=None, limit=100,
                    scope='global'):
        """
        Ranked users for a period and metric.

        Private profiles are left out, except the requesting user's own. The
        circle scope only ranks the requesting user and their accepted
        connections.

        Args:
            period: 'weekly', 'monthly' or 'historical'
            metric: 'xp', 'streak' or 'victories'
            user: Requesting user (kept in the list even if private)
            today: Calendar day the periods are anchored on
            level_filter: Only users at this level
            limit: Maximum rows returned
            scope: 'global' or 'circle'

        Returns:
            dict: {'period', 'metric', 'scope', 'rankings': [...], 'my_position'}
        """
        if period not in PERIODS:
            raise ValueError(f"Unknown ranking period '{period}'")
        if metric not in METRICS:
            raise ValueError(f"Unknown ranking metric '{metric}'")
        if level_filter and level_filter != 'all' and level_filter not in LEVEL_ORDER:
            raise ValueError(f"Unknown level '{level_filter}'")
        if scope not in SCOPES:
            raise ValueError(f"Unknown ranking scope '{scope}'")
        if scope == 'circle' and user is None:
            raise ValueError("The circle ranking needs a signed-in user")

        if today is None:
            today = get_user_today(user)
        start, _, previous_start = RankingService._period_bounds(period, today)

        query = (
            select(User, UserProgress, StreakState.current_streak)
            .join(UserProgress, UserProgress.user_id == User.id)
            .outerjoin(StreakState, StreakState.user_id == User.id)
        )
        if user is not None:
            query = query.where((User.is_ranking_private == False) | (User.id == user.id))
        else:
            query = query.where(User.is_ranking_private == False)
        if level_filter and level_filter != 'all':
            query = query.where(UserProgress.current_level == level_filter)
        if scope == 'circle':
            from mindquest.services.connection_service import ConnectionService
            query = query.where(User.id.in_([user.id] + ConnectionService.get_circle_ids(user)))
        rows = db.session.execute(query).all()

        # Period totals
        if period == 'historical':
            xp_now = {u.id: p.total_xp for u, p, _ in rows}
            this_week = RankingService._sum_mission_xp(start=get_week_start(today))
            xp_before = {uid: xp - this_week.get(uid, 0) for uid, xp in xp_now.items()}
            victories_now = RankingService._count_victories()
            victories_before = RankingService._count_victories(end=get_week_start(today))
        else:
            xp_now = RankingService._sum_mission_xp(start=start)
            xp_before = RankingService._sum_mission_xp(start=previous_start, end=start)
            victories_now = RankingService._count_victories(start=start)
            victories_before = RankingService._count_victories(start=previous_start, end=start)

        user_ids = [u.id for u, _, _ in rows]
        if metric == 'xp':
            current = {uid: xp_now.get(uid, 0) for uid in user_ids}
            previous = {uid: xp_before.get(uid, 0) for uid in user_ids}
        elif metric == 'victories':
            current = {uid: victories_now.get(uid, 0) for uid in user_ids}
            previous = {uid: victories_before.get(uid, 0) for uid in user_ids}
        else:
            # Streak history is not stored, so there is nothing to compare against
            current = {u.id: streak or 0 for u, _, streak in rows}
            previous = {}

        positions = assign_positions(current)
        previous_positions = assign_positions({uid: v for uid, v in previous.items() if v > 0})

        rankings = []
        for u, progress, streak in rows:
            position = positions[u.id]
            previous_position = previous_positions.get(u.id)
            rankings.append({
                'position': position,
                'position_change': previous_position - position if previous_position else None,
                'user_id': u.id,
                'alias': u.alias,
                'level': progress.current_level,
                'xp': xp_now.get(u.id, 0),
                'streak': streak or 0,
                'victories_count': victories_now.get(u.id, 0),
                'is_premium': u.is_premium,
                'is_current_user': user is not None and u.id == user.id,
            })
        rankings.sort(key=lambda r: r['position'])

        return {
            'period': period,
            'metric': metric,
            'scope': scope,
            'rankings': rankings[:limit],
            'my_position': positions.get(user.id) if user is not None else None,
        }
