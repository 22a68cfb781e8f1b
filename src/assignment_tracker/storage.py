"""Key-value blob persistence for assignments and plan overrides."""
import json
import logging
from datetime import datetime

from assignment_tracker.db import get_connection
from assignment_tracker.models import Assignment, ChunkOverride

logger = logging.getLogger(__name__)

ASSIGNMENTS_KEY = "assignment_tracker_v1"
OVERRIDES_KEY = "assignment_plan_v2"


def read_blob(db_path: str, key: str) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM storage WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else None


def write_blob(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO storage (key, value, updated_at) VALUES (?, ?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
        (key, value, datetime.now().isoformat()),
    )
    conn.commit()
    conn.close()


def _read_json(db_path: str, key: str):
    raw = read_blob(db_path, key)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored value under %s is not valid JSON, ignoring it", key)
        return None


def load_assignments(db_path: str) -> list[Assignment]:
    data = _read_json(db_path, ASSIGNMENTS_KEY)
    if data is None:
        return []
    if not isinstance(data, list):
        logger.warning("Stored assignments are not a list, ignoring them")
        return []
    items = []
    for record in data:
        try:
            items.append(Assignment.from_dict(record))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed assignment record %r: %s", record, e)
    return items


def save_assignments(db_path: str, items: list[Assignment]) -> None:
    write_blob(db_path, ASSIGNMENTS_KEY, json.dumps([a.to_dict() for a in items]))


def load_overrides(db_path: str) -> dict[str, ChunkOverride]:
    data = _read_json(db_path, OVERRIDES_KEY)
    if not isinstance(data, dict):
        return {}
    overrides = {}
    for key, value in data.items():
        try:
            override = ChunkOverride.from_dict(value)
        except TypeError:
            logger.debug("Dropping malformed override for %s", key)
            continue
        if not override.is_empty():
            overrides[key] = override
    return overrides


def save_overrides(db_path: str, overrides: dict[str, ChunkOverride]) -> None:
    payload = {key: o.to_dict() for key, o in overrides.items() if not o.is_empty()}
    write_blob(db_path, OVERRIDES_KEY, json.dumps(payload, sort_keys=True))


class SqliteOverrideAdapter:
    """Loads and saves the override map under OVERRIDES_KEY."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def load(self) -> dict[str, ChunkOverride]:
        return load_overrides(self.db_path)

    def save(self, entries: dict[str, ChunkOverride]) -> None:
        save_overrides(self.db_path, entries)
