"""Recitation date rules.

Lessons are not held on Friday. Two rules derive from that:

- default_recitation_date: the date pre-filled for a new loo7 (tomorrow,
  or the day after if tomorrow is Friday)
- next_scheduled_date: the date of the replacement loo7 when an evaluation
  asks for a repeat
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

from hifz.core.errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"

# datetime.weekday(): Monday == 0
FRIDAY = 4
REST_WEEKDAYS = frozenset({FRIDAY})


def parse_date(value: str | date) -> date:
    """Parse a ``YYYY-MM-DD`` string.

    Args:
        value: Date string or date (returned unchanged)

    Returns:
        Parsed date

    Raises:
        ValidationError: If the string is not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def format_date(value: date) -> str:
    """Format a date as ``YYYY-MM-DD`` (four-digit, zero-padded year)."""
    return value.isoformat()


def is_rest_day(value: date) -> bool:
    """True if no lesson is held on this day."""
    return value.weekday() in REST_WEEKDAYS


def _next_lesson_day(value: date) -> date:
    """First lesson day strictly after ``value``.

    Raises:
        ValidationError: If that day is past the last representable date
    """
    day = value
    try:
        day += timedelta(days=1)
        while is_rest_day(day):
            day += timedelta(days=1)
    except OverflowError as e:
        raise ValidationError(f"No lesson day after {format_date(value)}") from e
    return day


def default_recitation_date(today: date | None = None) -> str:
    """Date to pre-fill for a new loo7.

    Args:
        today: Reference day (defaults to the local current date)

    Returns:
        Tomorrow as ``YYYY-MM-DD``, moved past Friday if needed
    """
    today = today or date.today()
    return format_date(_next_lesson_day(today))


def next_scheduled_date(current: str | date) -> str:
    """Date for the replacement of a loo7 that must be repeated.

    Args:
        current: Recitation date of the loo7 being repeated

    Returns:
        The next non-Friday day strictly after ``current``

    Raises:
        ValidationError: If ``current`` is not a valid date or is the
            last representable date
    """
    return format_date(_next_lesson_day(parse_date(current)))
