"""
Date helpers for booking and payment flows.

Notes:
- All "UTC" helpers use timezone-aware datetimes with `timezone.utc`.
- Stay durations are counted in calendar months, not days.
"""

from datetime import date, datetime, timezone

UTC = timezone.utc


def now_utc() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def today_utc() -> date:
    """Return today's date in UTC."""
    return now_utc().date()


def month_span(start: date, end: date) -> int:
    """
    Whole calendar months between two dates, never less than one.

    Only the year and month fields are used, so 2024-01-31 -> 2024-02-01
    counts as one month and 2024-01-15 -> 2024-03-15 as two.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    return max(1, months)
