"""
Calendar date and wall-clock time helpers.

All values are owner-local and naive: there is no time-zone model, and a
time-of-day only gains meaning once it is combined with the calendar day it
belongs to. Parsers never raise. On malformed input they fall back to "now",
so callers that need to reject bad input must check ``is_valid_date`` /
``is_valid_time_of_day`` first.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Optional

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^\d{2}:\d{2}$")

# Anchor day for walks that only care about the time-of-day component.
REFERENCE_DAY = date(2000, 1, 3)


def is_valid_date(value: str) -> bool:
    """True if ``value`` is a real calendar date in YYYY-MM-DD form."""
    if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
        return False
    try:
        datetime.strptime(value.strip(), DATE_FORMAT)
        return True
    except ValueError:
        return False


def is_valid_time_of_day(value: str) -> bool:
    """True if ``value`` is a 24h HH:MM wall-clock time."""
    if not isinstance(value, str) or not _TIME_RE.match(value.strip()):
        return False
    try:
        datetime.strptime(value.strip(), TIME_FORMAT)
        return True
    except ValueError:
        return False


def parse_date(value: str, now: Optional[datetime] = None) -> date:
    """Parse YYYY-MM-DD, falling back to today's date on malformed input."""
    if is_valid_date(value):
        return datetime.strptime(value.strip(), DATE_FORMAT).date()
    return (now or datetime.now()).date()


def parse_time_of_day(value: str, now: Optional[datetime] = None) -> time:
    """Parse HH:MM, falling back to the current minute on malformed input."""
    if is_valid_time_of_day(value):
        return datetime.strptime(value.strip(), TIME_FORMAT).time()
    current = now or datetime.now()
    return current.time().replace(second=0, microsecond=0)


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def format_time_of_day(value: time) -> str:
    return value.strftime(TIME_FORMAT)


def format_display(day: date, value: time) -> str:
    """Human-readable form used in notification payloads.

    Examples:
        >>> format_display(date(2025, 3, 14), time(9, 30))
        'Friday, March 14, 2025 at 9:30 AM'
    """
    moment = combine(day, value)
    hour = moment.strftime("%I").lstrip("0") or "12"
    return f"{moment.strftime('%A, %B')} {moment.day}, {moment.year} at {hour}:{moment.strftime('%M %p')}"


def combine(day: date, value: time) -> datetime:
    """Attach a time-of-day to its calendar day (naive, owner-local)."""
    return datetime.combine(day, value)


def add_minutes(moment: datetime, minutes: int) -> datetime:
    return moment + timedelta(minutes=minutes)


def is_before(a: datetime, b: datetime) -> bool:
    return a < b
