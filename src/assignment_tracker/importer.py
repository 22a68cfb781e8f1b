"""Bulk import of assignments from JSON, YAML or CSV files."""
import csv
import json
import logging
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

import yaml

from assignment_tracker.assignments import AssignmentValidationError, add_assignment

logger = logging.getLogger(__name__)


def _unwrap(data) -> list:
    if isinstance(data, dict):
        data = data.get("assignments", [])
    if not isinstance(data, list):
        raise ValueError("Expected a list of assignments")
    return data


def read_records(file_path: str) -> list[dict]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _unwrap(json.loads(path.read_text()))
    elif suffix in (".yaml", ".yml"):
        return _unwrap(yaml.safe_load(path.read_text()) or [])
    elif suffix == ".csv":
        with path.open(newline="") as f:
            return list(csv.DictReader(f))
    raise ValueError(f"Unsupported file type: {suffix or path.name}")


def _field(record: dict, *names: str) -> str:
    for name in names:
        value = record.get(name)
        if value not in (None, ""):
            return value
    return ""


def _estimate(record: dict) -> int | None:
    value = _field(record, "estimate_minutes", "estimateMinutes", "estimate")
    if value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise AssignmentValidationError(f"Invalid estimate: {value!r}")


def import_file(db_path: str, file_path: str, tz: Optional[ZoneInfo] = None) -> dict:
    """Add every valid record in the file. Invalid records are counted and skipped."""
    imported = 0
    skipped = 0
    for record in read_records(file_path):
        if not isinstance(record, dict):
            skipped += 1
            continue
        try:
            add_assignment(
                db_path,
                title=str(_field(record, "title")),
                due=str(_field(record, "due", "dueISO", "due_date")),
                course=str(_field(record, "course")),
                notes=str(_field(record, "notes")),
                estimate_minutes=_estimate(record),
                tz=tz,
            )
            imported += 1
        except AssignmentValidationError as e:
            logger.warning("Skipping record %r: %s", record, e)
            skipped += 1
    return {"filename": Path(file_path).name, "imported": imported, "skipped": skipped}
