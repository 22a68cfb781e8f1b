"""Calendar export: .ics files and per-assignment calendar links."""
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode
from zoneinfo import ZoneInfo

from icalendar import Calendar, Event

from assignment_tracker.dates import DEFAULT_TIMEZONE, get_zone, parse_due
from assignment_tracker.models import Assignment

logger = logging.getLogger(__name__)

PRODID = "-//Assignment Tracker//EN"
UID_DOMAIN = "assignment-tracker"
GOOGLE_CALENDAR_URL = "https://www.google.com/calendar/render"
LINK_EVENT_MINUTES = 5


def _dated(assignments: list[Assignment], tz: ZoneInfo) -> list[tuple[datetime, Assignment]]:
    dated = []
    for a in assignments:
        try:
            dated.append((parse_due(a.due, tz), a))
        except ValueError:
            logger.warning("Not exporting %s: unparseable due date %r", a.id, a.due)
    dated.sort(key=lambda pair: pair[0])
    return dated


def build_ics(assignments: list[Assignment], tz: Optional[ZoneInfo] = None, stamp: Optional[datetime] = None) -> str:
    """Build a VCALENDAR with one zero-length event per assignment at its due time."""
    tz = tz or get_zone(DEFAULT_TIMEZONE)
    stamp = (stamp or datetime.now(timezone.utc)).astimezone(timezone.utc).replace(microsecond=0)

    cal = Calendar()
    cal.add("prodid", PRODID)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")

    for due, a in _dated(assignments, tz):
        due = due.replace(microsecond=0)
        event = Event()
        event.add("uid", f"{a.id}@{UID_DOMAIN}")
        event.add("dtstamp", stamp)
        event.add("dtstart", due)
        event.add("dtend", due)
        event.add("summary", a.display_title)
        if a.notes:
            event.add("description", a.notes)
        cal.add_component(event)

    return cal.to_ical().decode("utf-8")


def export_ics(assignments: list[Assignment], path: str, tz: Optional[ZoneInfo] = None) -> int:
    """Write the .ics file and return how many events it contains."""
    tz = tz or get_zone(DEFAULT_TIMEZONE)
    content = build_ics(assignments, tz)
    Path(path).write_text(content, encoding="utf-8", newline="")
    return len(_dated(assignments, tz))


def _utc_stamp(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def google_calendar_url(assignment: Assignment, tz: Optional[ZoneInfo] = None) -> str:
    """Create-event link for Google Calendar. Raises ValueError on a bad due date."""
    tz = tz or get_zone(DEFAULT_TIMEZONE)
    start = parse_due(assignment.due, tz)
    end = start + timedelta(minutes=LINK_EVENT_MINUTES)
    params = {
        "action": "TEMPLATE",
        "text": assignment.display_title.strip(),
        "dates": f"{_utc_stamp(start)}/{_utc_stamp(end)}",
        "details": assignment.notes,
    }
    return f"{GOOGLE_CALENDAR_URL}?{urlencode(params)}"
