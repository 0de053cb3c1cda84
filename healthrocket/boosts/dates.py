"""Calendar-day and week boundaries in the reference timezone."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def reference_zone(name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ValueError: If the name is not a known timezone
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"Invalid timezone '{name}'. Use IANA timezone identifiers."
        ) from None


def _require_aware(now: datetime) -> None:
    if now.tzinfo is None or now.utcoffset() is None:
        raise ValueError(f"Expected a timezone-aware datetime, got {now!r}")


def local_date(now: datetime, tz: ZoneInfo) -> date:
    """Calendar date of an instant in the reference timezone."""
    _require_aware(now)
    return now.astimezone(tz).date()


def days_since_sunday(day: date) -> int:
    """Day of week where Sunday=0, Saturday=6."""
    # Python weekday: Monday=0, Sunday=6
    return (day.weekday() + 1) % 7


def week_start_date(day: date) -> date:
    """The Sunday on or before a calendar date."""
    return day - timedelta(days=days_since_sunday(day))


def week_start(now: datetime, tz: ZoneInfo) -> datetime:
    """
    Most recent Sunday 00:00 in the reference timezone.

    An instant exactly at Sunday midnight already belongs to the new week.
    """
    start = week_start_date(local_date(now, tz))
    return datetime(start.year, start.month, start.day, tzinfo=tz)


def days_until_reset(now: datetime, tz: ZoneInfo) -> int:
    """
    Whole days until the next Sunday reset, in [1, 7].

    Counted on calendar days so DST transitions never yield 0 or 8.

    Example:
        Sunday 00:01 -> 7, Wednesday -> 4, Saturday 23:59 -> 1
    """
    return 7 - days_since_sunday(local_date(now, tz))
