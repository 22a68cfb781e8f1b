# tests/test_storage.py
import json

from assignment_tracker.db import init_db
from assignment_tracker.models import Assignment, ChunkOverride
from assignment_tracker.storage import (
    ASSIGNMENTS_KEY, OVERRIDES_KEY, SqliteOverrideAdapter, load_assignments,
    load_overrides, read_blob, save_assignments, save_overrides, write_blob,
)


def test_read_missing_blob(tmp_db):
    init_db(tmp_db)
    assert read_blob(tmp_db, "nothing") is None


def test_write_blob_overwrites(tmp_db):
    init_db(tmp_db)
    write_blob(tmp_db, "k", "one")
    write_blob(tmp_db, "k", "two")
    assert read_blob(tmp_db, "k") == "two"


def test_assignments_round_trip(tmp_db):
    init_db(tmp_db)
    items = [
        Assignment(id="a", title="Essay", due="2026-10-20T23:59:00-04:00", course="ENG", notes="draft"),
        Assignment(id="b", title="Lab", due="2026-10-22T10:00:00-04:00", estimate_minutes=120),
    ]
    save_assignments(tmp_db, items)
    assert load_assignments(tmp_db) == items


def test_assignments_stored_in_persisted_format(tmp_db):
    init_db(tmp_db)
    save_assignments(tmp_db, [Assignment(id="a", title="Essay", due="2026-10-20T23:59:00-04:00")])
    data = json.loads(read_blob(tmp_db, ASSIGNMENTS_KEY))
    assert data[0]["dueISO"] == "2026-10-20T23:59:00-04:00"


def test_load_assignments_empty(tmp_db):
    init_db(tmp_db)
    assert load_assignments(tmp_db) == []


def test_load_assignments_malformed_blob(tmp_db, caplog):
    init_db(tmp_db)
    write_blob(tmp_db, ASSIGNMENTS_KEY, "{not json")
    with caplog.at_level("WARNING"):
        assert load_assignments(tmp_db) == []
    assert "not valid JSON" in caplog.text


def test_load_assignments_not_a_list(tmp_db):
    init_db(tmp_db)
    write_blob(tmp_db, ASSIGNMENTS_KEY, json.dumps({"id": "a"}))
    assert load_assignments(tmp_db) == []


def test_load_assignments_skips_bad_records(tmp_db):
    init_db(tmp_db)
    write_blob(tmp_db, ASSIGNMENTS_KEY, json.dumps([
        {"id": "a", "title": "Essay", "dueISO": "2026-10-20T23:59:00-04:00"},
        {"id": "b"},
        "junk",
    ]))
    items = load_assignments(tmp_db)
    assert [a.id for a in items] == ["a"]


def test_overrides_round_trip(tmp_db):
    init_db(tmp_db)
    overrides = {
        "a|0": ChunkOverride(done=True),
        "a|1": ChunkOverride(day="2026-10-22"),
    }
    save_overrides(tmp_db, overrides)
    assert load_overrides(tmp_db) == overrides


def test_overrides_empty_entries_not_saved(tmp_db):
    init_db(tmp_db)
    save_overrides(tmp_db, {"a|0": ChunkOverride()})
    assert json.loads(read_blob(tmp_db, OVERRIDES_KEY)) == {}


def test_malformed_overrides_treated_as_empty(tmp_db):
    init_db(tmp_db)
    write_blob(tmp_db, OVERRIDES_KEY, "[[[")
    assert load_overrides(tmp_db) == {}
    write_blob(tmp_db, OVERRIDES_KEY, json.dumps(["a|0"]))
    assert load_overrides(tmp_db) == {}


def test_malformed_override_entries_dropped(tmp_db):
    init_db(tmp_db)
    write_blob(tmp_db, OVERRIDES_KEY, json.dumps({"a|0": {"done": True}, "a|1": 7, "a|2": True}))
    overrides = load_overrides(tmp_db)
    assert set(overrides) == {"a|0"}
    assert overrides["a|0"].done is True


def test_sqlite_override_adapter(tmp_db):
    init_db(tmp_db)
    adapter = SqliteOverrideAdapter(tmp_db)
    adapter.save({"x|0": ChunkOverride(done=True)})
    assert adapter.load() == {"x|0": ChunkOverride(done=True)}
