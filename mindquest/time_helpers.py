# mindquest/time_helpers.py
# Helper functions for the user's calendar day and ISO week boundaries

from datetime import datetime, timedelta
import pytz
from flask import current_app


def get_user_timezone(user=None):
    """Resolve the user's timezone, falling back to DEFAULT_TIMEZONE."""
    tz_name = getattr(user, 'timezone', None) or current_app.config.get('DEFAULT_TIMEZONE', 'UTC')
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        current_app.logger.warning(f"Unknown timezone '{tz_name}', using UTC")
        return pytz.UTC


def get_user_now(user=None):
    """Get current time in the user's timezone."""
    return datetime.now(get_user_timezone(user))


def get_user_today(user=None):
    """
    Get today's calendar date in the user's timezone.

    Mission dates, check-ins and victories are keyed by this date, so a
    user checking in at 23:30 local time still counts for that day.
    """
    return get_user_now(user).date()


def get_week_start(day):
    """Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.weekday())


def get_previous_week_start(day):
    """Monday of the ISO week before the one containing `day`."""
    return get_week_start(day) - timedelta(weeks=1)


def get_month_start(day):
    return day.replace(day=1)


def get_previous_month_start(day):
    return get_month_start(get_month_start(day) - timedelta(days=1))


def days_between(earlier, later):
    """Whole calendar days from `earlier` to `later` (negative if reversed)."""
    return (later - earlier).days
