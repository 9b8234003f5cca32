"""Calendar-date arithmetic on YYYY-MM-DD strings.

Dates are handled as ``datetime.date`` values, which carry no time of day
and no time zone, so day differences never drift across DST transitions or
the caller's local offset.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from ganttr.exceptions import InvalidDateError

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str | date) -> date:
    """Parse a ``YYYY-MM-DD`` string. ``date`` instances pass through."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError):
        raise InvalidDateError(f"Invalid date {value!r}. Use YYYY-MM-DD.") from None


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def difference_in_days(a: str | date, b: str | date) -> int:
    """Whole days from *a* to *b*; positive when *b* is later."""
    return (parse_date(b) - parse_date(a)).days


def add_days(value: str | date, days: int) -> str:
    """Return the calendar date *days* after *value* (negative goes back)."""
    return format_date(parse_date(value) + timedelta(days=days))


def today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date()
