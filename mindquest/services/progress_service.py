"""
Progress Service - Owns the XP and power-token aggregate.

Every read-modify-write of totals goes through here with a row lock, so
callers never compute "old total + delta" themselves.
"""

import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from mindquest.extensions import db
from mindquest.constants import GameConstants
from mindquest.events import xp_earned
from mindquest.exceptions import InsufficientTokensError, InvalidAmountError
from mindquest.logging_config import log_transaction
from mindquest.models import UserProgress, StreakState
from mindquest.utils import get_level_from_xp, get_progress_to_next_level, get_xp_for_next_level

logger = logging.getLogger(__name__)


class ProgressService:
    """Service for user XP, level and token balances."""

    @staticmethod
    def get_or_create_progress(user, lock=False):
        """
        Get the user's progress row, creating it with defaults on first use.

        New rows start at 0 XP, level 'explorer', and 1 streak rescue
        (3 for premium users).
        """
        query = select(UserProgress).where(UserProgress.user_id == user.id)
        if lock:
            query = query.with_for_update()
        progress = db.session.scalar(query)

        if progress:
            return progress

        progress = UserProgress(
            user_id=user.id,
            total_xp=0,
            current_level=GameConstants.DEFAULT_LEVEL,
            power_tokens=0,
            streak_rescues_available=(
                GameConstants.PREMIUM_RESCUES if user.is_premium else GameConstants.FREE_RESCUES
            ),
        )
        try:
            with db.session.begin_nested():
                db.session.add(progress)
        except IntegrityError:
            # Created concurrently by another request for the same user
            progress = db.session.scalar(query)
        else:
            logger.info(f"Created progress for user {user.id}")

        return progress

    @staticmethod
    def get_or_create_streak(user, lock=False):
        query = select(StreakState).where(StreakState.user_id == user.id)
        if lock:
            query = query.with_for_update()
        state = db.session.scalar(query)

        if state:
            return state

        state = StreakState(user_id=user.id, current_streak=0, longest_streak=0)
        try:
            with db.session.begin_nested():
                db.session.add(state)
        except IntegrityError:
            state = db.session.scalar(query)

        return state

    @staticmethod
    def get_current_streak(user):
        state = db.session.scalar(select(StreakState).where(StreakState.user_id == user.id))
        return state.current_streak if state else 0

    @staticmethod
    def add_xp(user, amount, reason=''):
        """
        Add XP to the user's total under a row lock and recompute the level.

        Args:
            user: User instance
            amount: Positive XP amount
            reason: Short description for the transaction log

        Returns:
            tuple: (leveled_up: bool, progress: UserProgress)
        """
        if amount <= 0:
            raise InvalidAmountError(f"XP amount must be positive, got {amount}")

        progress = ProgressService.get_or_create_progress(user, lock=True)
        old_level = progress.current_level

        progress.total_xp += amount
        progress.current_level = get_level_from_xp(progress.total_xp)['name']
        db.session.flush()

        leveled_up = progress.current_level != old_level
        log_transaction(user.id, 'XP_EARNED', amount, 'xp', reason, total=progress.total_xp)
        if leveled_up:
            logger.info(f"User {user.id} leveled up from {old_level} to {progress.current_level}")

        xp_earned.send(user.id, amount=amount, total_xp=progress.total_xp, reason=reason)
        return leveled_up, progress

    @staticmethod
    def add_tokens(user, amount, reason=''):
        """Award power tokens. Returns the new balance."""
        if amount <= 0:
            raise InvalidAmountError(f"Token amount must be positive, got {amount}")

        progress = ProgressService.get_or_create_progress(user, lock=True)
        progress.power_tokens += amount
        db.session.flush()

        log_transaction(user.id, 'TOKENS_EARNED', amount, 'tokens', reason, balance=progress.power_tokens)
        return progress.power_tokens

    @staticmethod
    def spend_tokens(user, perk):
        """
        Spend power tokens on a perk.

        Args:
            user: User instance
            perk: Key of GameConstants.TOKEN_COSTS

        Returns:
            dict: {'success', 'perk', 'cost', 'power_tokens'} or a failure result
        """
        cost = GameConstants.TOKEN_COSTS.get(perk)
        if cost is None:
            return InvalidAmountError(f"Unknown perk '{perk}'").to_result()

        progress = ProgressService.get_or_create_progress(user, lock=True)
        if progress.power_tokens < cost:
            logger.info(f"User {user.id} cannot afford {perk}: {progress.power_tokens}/{cost} tokens")
            return InsufficientTokensError().to_result(cost=cost, power_tokens=progress.power_tokens)

        progress.power_tokens -= cost
        db.session.flush()

        log_transaction(user.id, 'TOKENS_SPENT', cost, 'tokens', perk, balance=progress.power_tokens)
        return {
            'success': True,
            'perk': perk,
            'cost': cost,
            'power_tokens': progress.power_tokens,
        }

    @staticmethod
    def get_summary(user):
        """Progress snapshot for display: totals, level band and streak."""
        progress = ProgressService.get_or_create_progress(user)
        level = get_level_from_xp(progress.total_xp)

        summary = progress.to_dict()
        summary.update({
            'level': {'name': level['name'], 'label': level['label']},
            'progress_to_next_level': get_progress_to_next_level(progress.total_xp),
            'next_level': get_xp_for_next_level(progress.total_xp),
            'streak': ProgressService.get_current_streak(user),
        })
        return summary
