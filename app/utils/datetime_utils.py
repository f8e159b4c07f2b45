"""
Datetime utilities.

Provides timezone-aware datetime functions and month helpers used by
the monthly stair-step cycle.
"""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def utc_today() -> date:
    """Current UTC calendar date."""
    return utc_now().date()


def month_start(value: date | datetime | None = None) -> date:
    """
    First day of the month containing ``value``.

    Args:
        value: Date or datetime (defaults to today, UTC)

    Returns:
        Date of the first day of that month
    """
    if value is None:
        value = utc_today()
    if isinstance(value, datetime):
        value = value.date()
    return value.replace(day=1)


def previous_month(value: date | None = None) -> date:
    """First day of the month before the one containing ``value``."""
    first = month_start(value)
    if first.month == 1:
        return first.replace(year=first.year - 1, month=12)
    return first.replace(month=first.month - 1)


def is_consecutive_month(earlier: date | None, later: date) -> bool:
    """True if ``earlier`` is exactly the month before ``later``."""
    if earlier is None:
        return False
    return month_start(earlier) == previous_month(later)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
