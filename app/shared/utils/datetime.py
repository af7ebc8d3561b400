"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC.
Use these helpers instead of datetime.now() or datetime.utcnow().
"""

from datetime import UTC, date, datetime, time

# Inclusive upper bound of a calendar day (millisecond precision, as stored by clients).
END_OF_DAY = time(23, 59, 59, 999000)


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes.
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume it's UTC and attach timezone
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def start_of_day_utc(day: date) -> datetime:
    """Return 00:00:00.000 UTC of the given calendar day."""
    return datetime.combine(day, time.min, tzinfo=UTC)


def end_of_day_utc(day: date) -> datetime:
    """Return 23:59:59.999 UTC of the given calendar day."""
    return datetime.combine(day, END_OF_DAY, tzinfo=UTC)
