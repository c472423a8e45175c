"""
League Service - Weekly league assignment, XP accumulation and standings.

Users are grouped each ISO week into leagues of at most LEAGUE_CAPACITY
members of the same tier. Standings are recomputed on every read; only the
final position is persisted, when the week is closed.
"""

import logging
import math
from datetime import timedelta
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from mindquest.extensions import db
from mindquest.constants import GameConstants
from mindquest.models import League, LeagueMember
from mindquest.time_helpers import get_user_today, get_week_start

logger = logging.getLogger(__name__)

PROMOTION_ZONE = 'promotion'
DEMOTION_ZONE = 'demotion'
SAFE_ZONE = 'safe'


def tier_for_xp(total_xp):
    """bronze < 500 <= silver < 3000 <= gold < 8000 <= diamond"""
    for min_xp, tier in GameConstants.LEAGUE_TIERS:
        if total_xp >= min_xp:
            return tier
    return GameConstants.LEAGUE_TIERS[-1][1]


def rank_members(members):
    """Members by weekly XP, highest first; ties keep join order."""
    return sorted(members, key=lambda m: (-m.xp_earned_this_week, m.id))


def get_zone(position, member_count):
    """
    Zone for a 1-based position in a league of `member_count` members.

    The top ceil(30%) are promoted and positions past floor(70%) are demoted.
    In very small leagues the two overlap; promotion wins.
    """
    if position <= math.ceil(GameConstants.PROMOTION_RATIO * member_count):
        return PROMOTION_ZONE
    if position > math.floor(GameConstants.DEMOTION_RATIO * member_count):
        return DEMOTION_ZONE
    return SAFE_ZONE


class LeagueService:
    """Service for weekly leagues."""

    tier_for_xp = staticmethod(tier_for_xp)
    rank_members = staticmethod(rank_members)
    get_zone = staticmethod(get_zone)

    @staticmethod
    def get_membership(user, week_start):
        return db.session.scalar(
            select(LeagueMember).where(
                LeagueMember.user_id == user.id,
                LeagueMember.week_start == week_start
            )
        )

    @staticmethod
    def get_members(league):
        """Members read fresh from the database, in join order."""
        return db.session.scalars(
            select(LeagueMember)
            .where(LeagueMember.league_id == league.id)
            .order_by(LeagueMember.id)
        ).all()

    @staticmethod
    def assign_to_league(user, total_xp=None, week_start=None):
        """
        Place the user in a league for the week.

        Idempotent per week: an existing membership is returned unchanged.
        Otherwise the user joins the oldest open league of their tier with
        room left, or a new league when every one of them is full.

        Args:
            user: User instance
            total_xp: XP that decides the tier (defaults to the user's total)
            week_start: Monday of the week (defaults to the user's current week)

        Returns:
            LeagueMember
        """
        from mindquest.services.progress_service import ProgressService

        if week_start is None:
            week_start = get_week_start(get_user_today(user))

        membership = LeagueService.get_membership(user, week_start)
        if membership:
            return membership

        if total_xp is None:
            total_xp = ProgressService.get_or_create_progress(user).total_xp
        tier = tier_for_xp(total_xp)

        member_count = (
            select(func.count(LeagueMember.id))
            .where(LeagueMember.league_id == League.id)
            .correlate(League)
            .scalar_subquery()
        )
        league = db.session.scalar(
            select(League)
            .where(
                League.tier == tier,
                League.week_start == week_start,
                League.is_closed == False,
                member_count < GameConstants.LEAGUE_CAPACITY
            )
            .order_by(League.id)
            .limit(1)
            .with_for_update()
        )

        if league is None:
            league = League(tier=tier, week_start=week_start)
            db.session.add(league)
            db.session.flush()
            logger.info(f"Created {tier} league {league.id} for week {week_start}")

        membership = LeagueMember(
            league_id=league.id,
            user_id=user.id,
            week_start=week_start,
            xp_earned_this_week=0
        )
        try:
            with db.session.begin_nested():
                db.session.add(membership)
        except IntegrityError:
            # Assigned concurrently by another request
            return LeagueService.get_membership(user, week_start)

        logger.info(f"User {user.id} joined {tier} league {league.id} for week {week_start}")
        return membership

    @staticmethod
    def add_weekly_xp(user, xp, today=None):
        """
        Add XP to the user's league membership for the week containing `today`.

        Joins a league first if needed. Earlier weeks are never touched.

        Returns:
            int: XP earned this week after the update
        """
        if xp <= 0:
            return 0

        if today is None:
            today = get_user_today(user)
        week_start = get_week_start(today)

        membership = LeagueService.assign_to_league(user, week_start=week_start)
        membership = db.session.scalar(
            select(LeagueMember).where(LeagueMember.id == membership.id).with_for_update()
        )
        membership.xp_earned_this_week += xp
        db.session.flush()

        return membership.xp_earned_this_week

    @staticmethod
    def get_standing(user, today=None):
        """
        Current standings of the user's league for this week.

        Returns:
            dict: {'league': {...}, 'members': [...], 'my_position', 'my_zone'}
        """
        if today is None:
            today = get_user_today(user)
        week_start = get_week_start(today)

        membership = LeagueService.assign_to_league(user, week_start=week_start)
        league = membership.league
        ranked = rank_members(LeagueService.get_members(league))
        count = len(ranked)

        previous_positions = dict(db.session.execute(
            select(LeagueMember.user_id, LeagueMember.final_position)
            .where(
                LeagueMember.week_start == week_start - timedelta(weeks=1),
                LeagueMember.user_id.in_([m.user_id for m in ranked]),
                LeagueMember.final_position.isnot(None)
            )
        ).all())

        members = []
        my_position = None
        for position, member in enumerate(ranked, start=1):
            previous = previous_positions.get(member.user_id)
            is_me = member.user_id == user.id
            if is_me:
                my_position = position
            members.append({
                'position': position,
                'user_id': member.user_id,
                'alias': member.user.alias,
                'xp_earned_this_week': member.xp_earned_this_week,
                'zone': get_zone(position, count),
                # Positive means the member climbed since last week
                'position_change': previous - position if previous is not None else None,
                'is_current_user': is_me,
            })

        return {
            'league': {
                'id': league.id,
                'tier': league.tier,
                'week_start': league.week_start.isoformat(),
                'member_count': count,
                'capacity': GameConstants.LEAGUE_CAPACITY,
            },
            'members': members,
            'my_position': my_position,
            'my_zone': get_zone(my_position, count),
        }

    @staticmethod
    def close_week(week_start):
        """
        Persist final positions for every open league of the week and close them.

        Returns:
            int: number of leagues closed
        """
        leagues = db.session.scalars(
            select(League)
            .where(League.week_start == week_start, League.is_closed == False)
            .order_by(League.id)
            .with_for_update()
        ).all()

        for league in leagues:
            for position, member in enumerate(rank_members(LeagueService.get_members(league)), start=1):
                member.final_position = position
            league.is_closed = True

        db.session.flush()
        if leagues:
            logger.info(f"Closed {len(leagues)} leagues for week {week_start}")
        return len(leagues)
