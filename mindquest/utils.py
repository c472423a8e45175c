# mindquest/utils.py
import math

from mindquest.constants import GameConstants

# --- Leveling Constants ---
# Ascending bands; the last band is open-ended.
# explorer:      0 -  499
# observer:    500 - 1499
# regulator:  1500 - 2999
# guardian:   3000 - 4999
# strategist: 5000 - 7999
# mentor:     8000+
LEVELS = (
    {'name': 'explorer', 'label': 'Explorador/a', 'min_xp': 0, 'max_xp': 499},
    {'name': 'observer', 'label': 'Observador/a', 'min_xp': 500, 'max_xp': 1499},
    {'name': 'regulator', 'label': 'Regulador/a', 'min_xp': 1500, 'max_xp': 2999},
    {'name': 'guardian', 'label': 'Guardián/a de Límites', 'min_xp': 3000, 'max_xp': 4999},
    {'name': 'strategist', 'label': 'Estratega', 'min_xp': 5000, 'max_xp': 7999},
    {'name': 'mentor', 'label': 'Mentor/a', 'min_xp': 8000, 'max_xp': math.inf},
)

LEVEL_ORDER = tuple(level['name'] for level in LEVELS)


def get_level_from_xp(xp):
    """Returns the highest level band whose min_xp is at or below the given XP."""
    xp = max(0, int(xp))
    for level in reversed(LEVELS):
        if xp >= level['min_xp']:
            return level
    return LEVELS[0]


def get_level_index(level_name):
    """Position of a level in band order (0 = explorer). Unknown names sort first."""
    try:
        return LEVEL_ORDER.index(level_name)
    except ValueError:
        return 0


def get_next_level(level_name):
    """Returns the band after the given one, or None at the top band."""
    idx = get_level_index(level_name)
    if idx >= len(LEVELS) - 1:
        return None
    return LEVELS[idx + 1]


def get_streak_multiplier(streak):
    """XP multiplier for a streak length. Thresholds are inclusive."""
    for threshold, multiplier in GameConstants.STREAK_MULTIPLIERS:
        if streak >= threshold:
            return multiplier
    return 1.0


def calculate_mission_xp(base_xp, streak):
    """
    XP earned for a mission after the streak multiplier.

    Truncates rather than rounds: 23 base XP at a 7-day streak is
    23 * 1.2 = 27.6 -> 27.
    """
    # round() first so float error never costs a whole XP point
    return math.floor(round(base_xp * get_streak_multiplier(streak), 6))


def get_progress_to_next_level(total_xp):
    """Percentage (0-100) of the current band already covered."""
    level = get_level_from_xp(total_xp)
    if level['max_xp'] == math.inf:
        return 100

    xp_in_level = max(0, int(total_xp)) - level['min_xp']
    level_range = level['max_xp'] - level['min_xp'] + 1
    return math.floor(xp_in_level / level_range * 100)


def get_xp_for_next_level(total_xp):
    """
    XP still needed to enter the next band.

    Returns:
        dict: {'next_level', 'needed', 'current'} or None at the top band
    """
    level = get_level_from_xp(total_xp)
    next_level = get_next_level(level['name'])
    if next_level is None:
        return None
    return {
        'next_level': next_level['name'],
        'needed': next_level['min_xp'] - int(total_xp),
        'current': int(total_xp) - level['min_xp'],
    }
