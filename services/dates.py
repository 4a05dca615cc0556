"""
Date Helpers

Parsing and week/month arithmetic for the meal calendar and grocery lists.
All values are plain datetime.date objects; no timezone handling happens
past the parsing step.
"""

import calendar
import re
from datetime import date, datetime, timedelta

from .errors import InvalidInput

SUNDAY = 6
DAYS_PER_WEEK = 7

MONTH_RE = re.compile(r'^(\d{4})-(\d{2})$')


def parse_date(value, field='date'):
    """
    Parse a calendar date.

    Accepts date objects, 'YYYY-MM-DD' strings and full ISO timestamps
    (the date part is kept, e.g. '2025-07-04T00:00:00.000Z').
    Raises InvalidInput for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f'{field} is required (YYYY-MM-DD)')

    text = value.strip()
    try:
        # fromisoformat only learned the 'Z' suffix in 3.11
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidInput(f'{field} must be a date in YYYY-MM-DD format') from None


def parse_month(value):
    """Parse 'YYYY-MM' into (year, month)."""
    match = MONTH_RE.match(value or '')
    if not match:
        raise InvalidInput('month must be in YYYY-MM format')
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidInput('month must be between 01 and 12')
    return year, month


def start_of_week(day, week_starts_on=SUNDAY):
    """Return the first day of the week containing day."""
    offset = (day.weekday() - week_starts_on) % DAYS_PER_WEEK
    return day - timedelta(days=offset)


def end_of_week(day, week_starts_on=SUNDAY):
    return start_of_week(day, week_starts_on) + timedelta(days=DAYS_PER_WEEK - 1)


def week_window(week_start):
    """Inclusive 7-day window starting at week_start."""
    return week_start, week_start + timedelta(days=DAYS_PER_WEEK - 1)


def month_grid_range(year, month, week_starts_on=SUNDAY):
    """
    Range a month view needs: from the start of the week holding the 1st
    to the end of the week holding the last day of the month.
    """
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    return start_of_week(first, week_starts_on), end_of_week(last, week_starts_on)

