"""
Change notifications.

Blinker signals fired after XP or streak state changes, so readers that
cache progress (API layers, notification hooks) can refresh. Receivers get
the user id as sender plus keyword details; they must not mutate state.
"""

from blinker import Namespace

_signals = Namespace()

# sender=user_id, kwargs: amount, total_xp, reason
xp_earned = _signals.signal('xp-earned')

# sender=user_id, kwargs: streak, previous, bridged_by
streak_changed = _signals.signal('streak-changed')

# sender=user_id, kwargs: achievement_id
achievement_unlocked = _signals.signal('achievement-unlocked')
