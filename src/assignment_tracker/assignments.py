"""Assignment list management: add, edit, delete, filter and sort."""
import uuid
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from assignment_tracker.dates import DEFAULT_TIMEZONE, get_zone, local_now, parse_due
from assignment_tracker.models import Assignment
from assignment_tracker.overrides import OverrideStore
from assignment_tracker.settings import DUE_SOON_HOURS
from assignment_tracker.storage import load_assignments, save_assignments

STATUS_FILTERS = ("ALL", "OVERDUE", "DUESOON", "UPCOMING")
SORT_ORDERS = ("DUE_ASC", "DUE_DESC")


class AssignmentValidationError(ValueError):
    pass


def new_assignment_id() -> str:
    return str(uuid.uuid4())


def validate_assignment_fields(
    title: str,
    due: str,
    estimate_minutes: Optional[int] = None,
    tz: Optional[ZoneInfo] = None,
) -> datetime:
    """Check form input and return the parsed due datetime."""
    tz = tz or get_zone(DEFAULT_TIMEZONE)
    if not title or not title.strip():
        raise AssignmentValidationError("Title cannot be blank.")
    try:
        due_dt = parse_due(due, tz)
    except ValueError as e:
        raise AssignmentValidationError(f"Invalid due date: {due!r}") from e
    if estimate_minutes is not None:
        if isinstance(estimate_minutes, bool) or not isinstance(estimate_minutes, int) or estimate_minutes <= 0:
            raise AssignmentValidationError("Estimate must be a positive number of minutes.")
    return due_dt


def get_assignment(db_path: str, assignment_id: str) -> Assignment | None:
    for a in load_assignments(db_path):
        if a.id == assignment_id:
            return a
    return None


def add_assignment(
    db_path: str,
    title: str,
    due: str,
    course: str = "",
    notes: str = "",
    estimate_minutes: Optional[int] = None,
    tz: Optional[ZoneInfo] = None,
) -> Assignment:
    due_dt = validate_assignment_fields(title, due, estimate_minutes, tz)
    assignment = Assignment(
        id=new_assignment_id(),
        title=title.strip(),
        due=due_dt.isoformat(),
        course=(course or "").strip(),
        notes=(notes or "").strip(),
        estimate_minutes=estimate_minutes,
    )
    items = load_assignments(db_path)
    save_assignments(db_path, [assignment] + items)
    return assignment


def update_assignment(db_path: str, assignment_id: str, tz: Optional[ZoneInfo] = None, **fields) -> Assignment:
    """Apply `fields` (title, due, course, notes, estimate_minutes) to one assignment."""
    unknown = set(fields) - {"title", "due", "course", "notes", "estimate_minutes"}
    if unknown:
        raise TypeError(f"Unknown assignment fields: {', '.join(sorted(unknown))}")
    items = load_assignments(db_path)
    for i, current in enumerate(items):
        if current.id != assignment_id:
            continue
        title = fields.get("title", current.title)
        due = fields.get("due", current.due)
        estimate = fields.get("estimate_minutes", current.estimate_minutes)
        due_dt = validate_assignment_fields(title, due, estimate, tz)
        updated = Assignment(
            id=current.id,
            title=title.strip(),
            due=due_dt.isoformat() if "due" in fields else current.due,
            course=(fields.get("course", current.course) or "").strip(),
            notes=(fields.get("notes", current.notes) or "").strip(),
            estimate_minutes=estimate,
        )
        items[i] = updated
        save_assignments(db_path, items)
        return updated
    raise KeyError(assignment_id)


def delete_assignment(db_path: str, assignment_id: str, overrides: Optional[OverrideStore] = None) -> bool:
    items = load_assignments(db_path)
    remaining = [a for a in items if a.id != assignment_id]
    if len(remaining) == len(items):
        return False
    save_assignments(db_path, remaining)
    if overrides is not None:
        overrides.prune(a.id for a in remaining)
    return True


def due_status(assignment: Assignment, now: datetime, tz: Optional[ZoneInfo] = None) -> str:
    tz = tz or get_zone(DEFAULT_TIMEZONE)
    try:
        due = parse_due(assignment.due, tz)
    except ValueError:
        return "UNKNOWN"
    hours = (due - now).total_seconds() / 3600
    if hours < 0:
        return "OVERDUE"
    if hours <= DUE_SOON_HOURS:
        return "DUESOON"
    return "UPCOMING"


def status_label(status: str) -> str:
    return {
        "OVERDUE": "Overdue",
        "DUESOON": "Due soon",
        "UPCOMING": "Upcoming",
    }.get(status, "Unknown")


def status_color(status: str) -> str:
    return {
        "OVERDUE": "red",
        "DUESOON": "yellow",
        "UPCOMING": "cyan",
    }.get(status, "dim")


def course_options(items: list[Assignment]) -> list[str]:
    courses = sorted({a.course for a in items if a.course})
    return ["ALL"] + courses


def filters_active(query: str = "", course: str = "ALL", status: str = "ALL") -> bool:
    return bool(query.strip()) or course != "ALL" or status != "ALL"


def _matches_query(assignment: Assignment, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    haystack = " ".join([assignment.title, assignment.course, assignment.notes]).lower()
    return needle in haystack


def filter_assignments(
    items: list[Assignment],
    query: str = "",
    course: str = "ALL",
    status: str = "ALL",
    sort: str = "DUE_ASC",
    now: Optional[datetime] = None,
    tz: Optional[ZoneInfo] = None,
) -> list[Assignment]:
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status}")
    if sort not in SORT_ORDERS:
        raise ValueError(f"Unknown sort order: {sort}")
    tz = tz or get_zone(DEFAULT_TIMEZONE)
    now = now or local_now(tz)

    result = [
        a for a in items
        if _matches_query(a, query)
        and (course == "ALL" or a.course == course)
        and (status == "ALL" or due_status(a, now, tz) == status)
    ]

    dated, undated = [], []
    for a in result:
        try:
            dated.append((parse_due(a.due, tz), a))
        except ValueError:
            undated.append(a)
    dated.sort(key=lambda pair: pair[0], reverse=(sort == "DUE_DESC"))
    return [a for _, a in dated] + undated
