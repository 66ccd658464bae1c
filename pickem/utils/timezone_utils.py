"""
Timezone utility functions for NCAA Pick'em

Calendar days ("today", "yesterday") follow the configured TIMEZONE, since
game dates on the scoreboard are US local dates.
"""

from datetime import datetime, timedelta, timezone

import pytz
from flask import current_app


def get_app_timezone():
    """Get the application's configured timezone"""
    try:
        timezone_name = current_app.config.get("TIMEZONE", "UTC")
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        # Fallback to UTC if timezone is invalid
        return pytz.UTC


def get_current_time():
    """Get current time in the application's timezone"""
    app_tz = get_app_timezone()
    return datetime.now(app_tz)


def get_utc_time():
    """Get current time in UTC"""
    return datetime.now(timezone.utc)


def today_and_yesterday(now=None):
    """(yesterday, today) as dates in the application's timezone"""
    if now is None:
        now = get_current_time()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc).astimezone(get_app_timezone())
    else:
        now = now.astimezone(get_app_timezone())

    today = now.date()
    return today - timedelta(days=1), today


def local_day_bounds(day):
    """UTC start/end instants of a calendar day in the application's timezone"""
    app_tz = get_app_timezone()
    start = app_tz.localize(datetime(day.year, day.month, day.day))
    end = app_tz.localize(datetime(day.year, day.month, day.day) + timedelta(days=1))
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def convert_to_app_timezone(dt):
    """Convert a datetime to the application's timezone"""
    if dt is None:
        return None

    app_tz = get_app_timezone()

    # If datetime is naive, assume it's UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(app_tz)
