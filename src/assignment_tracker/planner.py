"""Day-plan scheduler: spread each assignment's estimated work over the next 7 days."""
import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from assignment_tracker.dates import (
    DEFAULT_TIMEZONE, add_days, clamp_day, day_diff, format_day_label, get_zone,
    local_day, parse_day, parse_due,
)
from assignment_tracker.models import Assignment, ChunkOverride, DayGroup, DayPlan, PlanChunk

logger = logging.getLogger(__name__)

CHUNK_MINUTES = 30
MIN_LAST_CHUNK = 10
MIN_TOTAL_MINUTES = 30
DEFAULT_ESTIMATE_MINUTES = 60
WINDOW_DAYS = 7
STALE_AFTER_DAYS = 30


def total_minutes(assignment: Assignment) -> int:
    estimate = assignment.estimate_minutes
    if estimate is None:
        estimate = DEFAULT_ESTIMATE_MINUTES
    return max(MIN_TOTAL_MINUTES, int(estimate))


def split_minutes(total: int) -> list[int]:
    """Split `total` into 30-minute chunks, folding a tiny remainder into the last one."""
    full, remainder = divmod(total, CHUNK_MINUTES)
    chunks = [CHUNK_MINUTES] * full
    if remainder:
        if chunks and remainder < MIN_LAST_CHUNK:
            chunks[-1] += remainder
        else:
            chunks.append(remainder)
    return chunks


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def spread_day_indices(n: int, length: int) -> list[int]:
    """Default day index for each of `n` chunks over a window of `length` days.

    The first chunk lands on day 0 and the last on day `length - 1`.
    """
    if n <= 1:
        return [0] * n
    return [_round_half_up(i / (n - 1) * (length - 1)) for i in range(n)]


def chunk_key(assignment_id: str, index: int) -> str:
    return f"{assignment_id}|{index}"


def _override_day(override: ChunkOverride, window_start: date, window_end: date) -> Optional[date]:
    if override.day is None:
        return None
    try:
        day = parse_day(override.day)
    except ValueError:
        logger.warning("Ignoring unparseable day override %r", override.day)
        return None
    return clamp_day(day, window_start, window_end)


def build_chunks(
    assignments: Iterable[Assignment],
    now: datetime,
    overrides: Mapping[str, ChunkOverride],
    tz: Optional[ZoneInfo] = None,
) -> tuple[list[PlanChunk], list[str]]:
    """Compute the ordered chunk list for the 7-day window starting today.

    Returns (chunks, skipped) where `skipped` holds the ids of assignments
    whose due date could not be parsed.
    """
    tz = tz or get_zone(DEFAULT_TIMEZONE)
    window_start = local_day(now, tz)
    window_end = add_days(window_start, WINDOW_DAYS - 1)

    dated = []
    skipped = []
    for assignment in assignments:
        try:
            due = parse_due(assignment.due, tz)
        except ValueError:
            logger.warning("Skipping assignment %s: unparseable due date %r", assignment.id, assignment.due)
            skipped.append(assignment.id)
            continue
        if day_diff(local_day(due, tz), window_start) > STALE_AFTER_DAYS:
            continue
        dated.append((assignment, due))

    # sorted() is stable, so equal due instants keep input order
    dated.sort(key=lambda pair: pair[1])

    chunks = []
    for assignment, due in dated:
        sizes = split_minutes(total_minutes(assignment))
        due_day = local_day(due, tz)
        if due_day < window_start:
            length = 1
        else:
            length = day_diff(window_start, min(due_day, window_end)) + 1
        offsets = spread_day_indices(len(sizes), length)

        for index, (minutes, offset) in enumerate(zip(sizes, offsets)):
            key = chunk_key(assignment.id, index)
            day = add_days(window_start, offset)
            done = False
            override = overrides.get(key)
            if override is not None:
                day = _override_day(override, window_start, window_end) or day
                if override.done is not None:
                    done = override.done
            chunks.append((due, PlanChunk(
                key=key,
                assignment_id=assignment.id,
                index=index,
                title=assignment.title,
                course=assignment.course,
                due=assignment.due,
                day=day,
                minutes=minutes,
                done=done,
            )))

    chunks.sort(key=lambda pair: (pair[1].day, pair[0]))
    return [chunk for _, chunk in chunks], skipped


def group_by_day(chunks: list[PlanChunk], today: date) -> list[DayGroup]:
    groups: dict[date, DayGroup] = {}
    for chunk in chunks:
        group = groups.get(chunk.day)
        if group is None:
            group = DayGroup(day=chunk.day, label=format_day_label(chunk.day, today), total_minutes=0)
            groups[chunk.day] = group
        group.chunks.append(chunk)
        group.total_minutes += chunk.minutes
    return [groups[day] for day in sorted(groups)]


def build_plan(
    assignments: Iterable[Assignment],
    now: datetime,
    overrides: Mapping[str, ChunkOverride],
    tz: Optional[ZoneInfo] = None,
) -> DayPlan:
    tz = tz or get_zone(DEFAULT_TIMEZONE)
    today = local_day(now, tz)
    chunks, skipped = build_chunks(assignments, now, overrides, tz)
    return DayPlan(
        window_start=today,
        window_end=add_days(today, WINDOW_DAYS - 1),
        chunks=chunks,
        groups=group_by_day(chunks, today),
        skipped=skipped,
    )
