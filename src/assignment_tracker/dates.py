"""Timezone-aware date handling at day granularity.

Every day comparison in the tracker happens in one fixed IANA timezone so a
chunk planned for "Tuesday" means the same calendar day no matter where the
due timestamp's offset came from.
"""
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "America/Toronto"


def get_zone(name: str = DEFAULT_TIMEZONE) -> ZoneInfo:
    """Return the ZoneInfo for an IANA name. Raises ValueError if unknown."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name}") from e


def local_now(tz: ZoneInfo) -> datetime:
    return datetime.now(tz)


def parse_due(iso_string: str, tz: ZoneInfo) -> datetime:
    """Parse an ISO timestamp into an aware datetime in `tz`.

    Accepts a trailing 'Z' and explicit offsets. A naive timestamp is taken
    to be wall-clock time in `tz`. Raises ValueError on malformed input.
    """
    if not isinstance(iso_string, str) or not iso_string.strip():
        raise ValueError(f"Invalid due date: {iso_string!r}")
    normalized = iso_string.strip().replace("Z", "+00:00")
    try:
        dt = datetime.fromisoformat(normalized)
        dt = dt.replace(tzinfo=tz) if dt.tzinfo is None else dt.astimezone(tz)
        # must also be representable in UTC for export
        dt.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"Invalid due date: {iso_string!r}") from e
    return dt


def parse_day(iso_date: str) -> date:
    """Parse a YYYY-MM-DD string. Raises ValueError on malformed input."""
    return date.fromisoformat(str(iso_date).strip())


def local_day(dt: datetime, tz: ZoneInfo) -> date:
    return dt.astimezone(tz).date()


def day_diff(start: date, end: date) -> int:
    """Whole days from `start` to `end` (negative if `end` is earlier)."""
    return (end - start).days


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def clamp_day(day: date, earliest: date, latest: date) -> date:
    return max(earliest, min(day, latest))


def format_day_label(day: date, today: date) -> str:
    diff = day_diff(today, day)
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    return f"{day:%a, %b} {day.day}"


def format_due(dt: datetime) -> str:
    """Format as 'Mon, Oct 20 · 11:59 PM'."""
    hour = dt.hour % 12 or 12
    return f"{dt:%a, %b} {dt.day} · {hour}:{dt:%M %p}"
