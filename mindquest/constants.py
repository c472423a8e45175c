# mindquest/constants.py
"""Gamification constants and configuration values."""


class GameConstants:
    """Centralized challenge, streak and league rules."""

    # --- Experience & Leveling ---
    DEFAULT_LEVEL = 'explorer'

    # Streak multipliers, checked from the highest threshold down
    STREAK_MULTIPLIERS = (
        (21, 1.30),  # +30% XP (cap)
        (7, 1.20),   # +20% XP
        (3, 1.10),   # +10% XP
    )

    # --- Daily Challenge ---
    PERFECT_DAY_BONUS = 15
    VICTORY_XP_BONUS = 10

    # --- Streak Rescues ---
    FREE_RESCUES = 1
    PREMIUM_RESCUES = 3

    # --- Power Tokens ---
    TOKEN_REWARD_WEEK_STREAK = 1
    TOKEN_REWARD_PERFECT_WEEK = 2
    TOKEN_REWARD_ACHIEVEMENT = 1
    WEEK_STREAK_LENGTH = 7
    PERFECT_WEEK_DAYS = 7

    TOKEN_COSTS = {
        'premium_audio_preview': 1,
        'pro_sos_card': 2,
        'extended_simulation': 3,
    }

    # --- Wager ---
    WAGER_WIN_RATIO = 0.5  # win: +50% of the stake

    # --- Weekly Leagues ---
    LEAGUE_CAPACITY = 20
    LEAGUE_TIERS = (
        (8000, 'diamond'),
        (3000, 'gold'),
        (500, 'silver'),
        (0, 'bronze'),
    )
    PROMOTION_RATIO = 0.3
    DEMOTION_RATIO = 0.7

    # --- Journal ---
    MOOD_SCORE_MIN = 1
    MOOD_SCORE_MAX = 10

    # --- Adaptive Nudges ---
    NUDGE_STREAK_DANGER_HOURS = 20    # no mission for this long...
    NUDGE_STREAK_DANGER_FROM_HOUR = 18  # ...and it is evening in the user's timezone
    NUDGE_INACTIVITY_DAYS = 3
    NUDGE_RECENT_JOURNAL_ENTRIES = 5
    NUDGE_NEGATIVE_ENTRIES = 3
    NEGATIVE_JOURNAL_TAGS = ('miedo', 'ansiedad', 'tristeza', 'bloqueo', 'dolor')
