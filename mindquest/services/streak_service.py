"""
Streak Service - Handles daily check-in streaks and the streak perks.

Perks:
- Shield: once per ISO week a user can freeze the streak for one day.
- Rescue: a limited stock of rescues that bridge any gap when the user asks.
- Wager: stake seeds (power tokens) on keeping the day; win +50%, lose the stake.
"""

import logging
import math
from datetime import timedelta
from flask import current_app
from sqlalchemy import select
from mindquest.extensions import db
from mindquest.constants import GameConstants
from mindquest.events import streak_changed
from mindquest.exceptions import (
    InsufficientSeedsError, InvalidAmountError, PremiumRequiredError,
    ShieldUnavailableError, WagerAlreadyActiveError
)
from mindquest.logging_config import log_transaction
from mindquest.models import User, UserProgress
from mindquest.time_helpers import get_user_today, get_week_start, days_between

logger = logging.getLogger(__name__)

# Outcomes of a check-in
STARTED = 'started'
UNCHANGED = 'unchanged'
CONTINUED = 'continued'
BRIDGED_BY_SHIELD = 'bridged_by_shield'
BRIDGED_BY_RESCUE = 'bridged_by_rescue'
RESET = 'reset'


def advance_streak(current_streak, last_check_in_date, today, shield_day=None, rescue_available=False):
    """
    Next streak value for a check-in on `today`.

    Args:
        current_streak: Streak before the check-in
        last_check_in_date: Date of the previous check-in, or None
        today: Check-in date
        shield_day: Date an unconsumed shield was activated for, or None
        rescue_available: The user asked for a rescue and has one left

    Returns:
        tuple: (new_streak, outcome)
    """
    if last_check_in_date is None:
        return 1, STARTED

    gap = days_between(last_check_in_date, today)
    if gap <= 0:
        return current_streak, UNCHANGED
    if gap == 1:
        return current_streak + 1, CONTINUED

    # A shield covers exactly one missed day: the day it was activated for
    if gap == 2 and shield_day == last_check_in_date + timedelta(days=1):
        return current_streak + 1, BRIDGED_BY_SHIELD
    if rescue_available:
        return current_streak + 1, BRIDGED_BY_RESCUE
    return 1, RESET


def is_shield_available(shield_used_at, today):
    """One shield per ISO week (weeks start on Monday)."""
    return shield_used_at is None or shield_used_at < get_week_start(today)


class StreakService:
    """Service for streak check-ins, shields, rescues and wagers."""

    @staticmethod
    def record_check_in(user, today=None, use_rescue=False):
        """
        Record today's check-in and update the streak.

        Same-day repeats are no-ops. A gap of two or more days resets the
        streak to 1 unless a shield activated for the missed day, or a
        rescue the caller opted into, bridges it.

        Args:
            user: User instance
            today: User's calendar day (defaults to the user's local today)
            use_rescue: Spend one streak rescue if the gap needs bridging

        Returns:
            dict: {'success', 'streak', 'previous_streak', 'longest_streak',
                   'outcome', 'tokens_awarded', 'achievements'}
        """
        from mindquest.services.progress_service import ProgressService
        from mindquest.services.achievement_service import AchievementService

        if today is None:
            today = get_user_today(user)

        state = ProgressService.get_or_create_streak(user, lock=True)
        progress = ProgressService.get_or_create_progress(user, lock=True)

        if state.last_check_in_date and today < state.last_check_in_date:
            logger.warning(
                f"User {user.id} check-in for {today} is before last check-in {state.last_check_in_date}"
            )

        shield_day = progress.shield_used_at if progress.shield_pending else None
        previous = state.current_streak
        new_streak, outcome = advance_streak(
            previous,
            state.last_check_in_date,
            today,
            shield_day=shield_day,
            rescue_available=use_rescue and progress.streak_rescues_available > 0,
        )

        result = {
            'success': True,
            'streak': new_streak,
            'previous_streak': previous,
            'longest_streak': state.longest_streak,
            'outcome': outcome,
            'tokens_awarded': 0,
            'achievements': [],
        }

        if outcome == UNCHANGED:
            return result

        if outcome == BRIDGED_BY_SHIELD:
            progress.shield_pending = False
            logger.info(f"User {user.id} streak bridged by shield ({progress.shield_used_at})")
        elif outcome == BRIDGED_BY_RESCUE:
            progress.streak_rescues_available -= 1
            progress.streak_rescues_used += 1
            logger.info(f"User {user.id} used a streak rescue ({progress.streak_rescues_available} left)")
        elif outcome == RESET and progress.wager_active:
            StreakService.resolve_wager(user, won=False)

        # A pending shield only covers the day it was activated for
        if progress.shield_pending and shield_day is not None and shield_day < today:
            progress.shield_pending = False

        state.current_streak = new_streak
        state.last_check_in_date = today
        state.longest_streak = max(state.longest_streak, new_streak)
        result['longest_streak'] = state.longest_streak
        db.session.flush()

        if new_streak > previous and new_streak % GameConstants.WEEK_STREAK_LENGTH == 0:
            ProgressService.add_tokens(user, GameConstants.TOKEN_REWARD_WEEK_STREAK, f'{new_streak}-day streak')
            result['tokens_awarded'] = GameConstants.TOKEN_REWARD_WEEK_STREAK

        result['achievements'] = AchievementService.check_and_grant(user)

        logger.info(f"User {user.id} checked in on {today}: streak {previous} -> {new_streak} ({outcome})")
        streak_changed.send(user.id, streak=new_streak, previous=previous, bridged_by=outcome)
        return result

    @staticmethod
    def get_streak_features(user, today=None):
        """Shield and wager state for display."""
        from mindquest.services.progress_service import ProgressService

        if today is None:
            today = get_user_today(user)

        progress = ProgressService.get_or_create_progress(user)
        return {
            'shield_used_at': progress.shield_used_at.isoformat() if progress.shield_used_at else None,
            'shield_available_this_week': is_shield_available(progress.shield_used_at, today),
            'shield_pending': progress.shield_pending,
            'streak_rescues_available': progress.streak_rescues_available,
            'wager_active': progress.wager_active,
            'wager_amount': progress.wager_amount,
        }

    @staticmethod
    def activate_shield(user, today=None):
        """
        Activate the weekly streak shield for today.

        Returns:
            dict: {'success', 'shield_used_at'} or a failure result
        """
        from mindquest.services.progress_service import ProgressService

        if current_app.config.get('SHIELD_PREMIUM_ONLY', True) and not user.is_premium:
            return PremiumRequiredError().to_result()

        if today is None:
            today = get_user_today(user)

        progress = ProgressService.get_or_create_progress(user, lock=True)
        if not is_shield_available(progress.shield_used_at, today):
            return ShieldUnavailableError().to_result(shield_used_at=progress.shield_used_at.isoformat())

        progress.shield_used_at = today
        progress.shield_pending = True
        db.session.flush()

        logger.info(f"User {user.id} activated streak shield for {today}")
        return {'success': True, 'shield_used_at': today.isoformat()}

    @staticmethod
    def place_wager(user, seed_amount, today=None):
        """
        Stake seeds on keeping the streak today.

        Seeds are the user's power tokens; nothing is deducted until the
        wager is resolved.

        Returns:
            dict: {'success', 'wager_amount'} or a failure result
        """
        from mindquest.services.progress_service import ProgressService

        if isinstance(seed_amount, bool) or not isinstance(seed_amount, int) or seed_amount <= 0:
            return InvalidAmountError().to_result()

        if today is None:
            today = get_user_today(user)

        progress = ProgressService.get_or_create_progress(user, lock=True)
        if progress.wager_active:
            return WagerAlreadyActiveError().to_result(wager_amount=progress.wager_amount)

        if seed_amount > progress.power_tokens:
            return InsufficientSeedsError().to_result(available_seeds=progress.power_tokens)

        progress.wager_active = True
        progress.wager_amount = seed_amount
        progress.wager_placed_on = today
        db.session.flush()

        logger.info(f"User {user.id} wagered {seed_amount} seeds on {today}")
        return {'success': True, 'wager_amount': seed_amount}

    @staticmethod
    def resolve_wager(user, won):
        """
        Settle the active wager.

        Win: +floor(stake * 0.5) tokens. Loss: -stake tokens, never below 0.
        The wager is cleared either way.

        Returns:
            dict: {'success', 'won', 'reward', 'power_tokens'}
        """
        from mindquest.services.progress_service import ProgressService

        progress = ProgressService.get_or_create_progress(user, lock=True)
        if not progress.wager_active:
            return {'success': True, 'won': won, 'reward': 0, 'power_tokens': progress.power_tokens}

        stake = progress.wager_amount
        if won:
            reward = math.floor(stake * GameConstants.WAGER_WIN_RATIO)
            progress.power_tokens += reward
        else:
            reward = -min(stake, progress.power_tokens)
            progress.power_tokens = max(0, progress.power_tokens - stake)

        progress.wager_active = False
        progress.wager_amount = 0
        progress.wager_placed_on = None
        db.session.flush()

        log_transaction(
            user.id, 'WAGER_WON' if won else 'WAGER_LOST', reward, 'tokens',
            f'Wager of {stake}', balance=progress.power_tokens
        )
        return {'success': True, 'won': won, 'reward': reward, 'power_tokens': progress.power_tokens}

    @staticmethod
    def settle_stale_wagers():
        """
        Resolve as lost every wager placed before the owner's current day.

        Wagers won on a perfect day are already settled, so anything still
        open from an earlier day was lost. Returns the number settled.
        """
        rows = db.session.execute(
            select(UserProgress, User)
            .join(User, User.id == UserProgress.user_id)
            .where(UserProgress.wager_active == True)
        ).all()

        count = 0
        for progress, user in rows:
            if progress.wager_placed_on and progress.wager_placed_on < get_user_today(user):
                StreakService.resolve_wager(user, won=False)
                count += 1

        if count > 0:
            logger.info(f"Settled {count} stale wagers as lost")

        return count
