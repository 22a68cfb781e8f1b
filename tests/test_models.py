"""Tests for data model classes."""
from datetime import date

import pytest

from assignment_tracker.models import Assignment, ChunkOverride, DayPlan, PlanChunk


def test_assignment_defaults():
    a = Assignment(id="a1", title="Essay", due="2026-10-20T23:59:00-04:00")
    assert a.course == ""
    assert a.notes == ""
    assert a.estimate_minutes is None


def test_display_title_with_course():
    a = Assignment(id="a1", title="Essay", due="x", course="ENG101")
    assert a.display_title == "[ENG101] Essay"


def test_display_title_without_course():
    a = Assignment(id="a1", title="Essay", due="x")
    assert a.display_title == "Essay"


def test_assignment_to_dict_uses_persisted_keys():
    a = Assignment(id="a1", title="Lab", due="2026-10-20T10:00:00-04:00", course="CHEM", estimate_minutes=90)
    data = a.to_dict()
    assert data["dueISO"] == "2026-10-20T10:00:00-04:00"
    assert data["estimateMinutes"] == 90
    assert "due" not in data


def test_assignment_to_dict_omits_missing_estimate():
    a = Assignment(id="a1", title="Lab", due="2026-10-20T10:00:00-04:00")
    assert "estimateMinutes" not in a.to_dict()


def test_assignment_from_dict():
    a = Assignment.from_dict({"id": "x", "title": "Quiz", "dueISO": "2026-10-21T09:00:00-04:00", "course": None})
    assert a.id == "x"
    assert a.due == "2026-10-21T09:00:00-04:00"
    assert a.course == ""
    assert a.estimate_minutes is None


def test_assignment_from_dict_missing_title():
    with pytest.raises(KeyError):
        Assignment.from_dict({"id": "x", "dueISO": "2026-10-21"})


def test_assignment_from_dict_rejects_non_object():
    with pytest.raises(TypeError):
        Assignment.from_dict(["x"])


def test_chunk_override_sparse_dict():
    assert ChunkOverride(done=True).to_dict() == {"done": True}
    assert ChunkOverride(day="2026-10-20").to_dict() == {"day": "2026-10-20"}
    assert ChunkOverride().to_dict() == {}
    assert ChunkOverride().is_empty()


def test_chunk_override_rejects_non_object():
    with pytest.raises(TypeError):
        ChunkOverride.from_dict(True)


def test_chunk_override_done_must_be_boolean():
    assert ChunkOverride.from_dict({"done": "false"}).done is None
    assert ChunkOverride.from_dict({"done": 1, "day": "2026-10-22"}) == ChunkOverride(day="2026-10-22")


def test_chunk_override_from_dict():
    o = ChunkOverride.from_dict({"done": False, "day": "2026-10-22"})
    assert o.done is False
    assert o.day == "2026-10-22"


def test_day_plan_counts():
    chunk = PlanChunk(
        key="a|0", assignment_id="a", index=0, title="Essay", due="x",
        day=date(2026, 10, 19), minutes=30, done=True,
    )
    plan = DayPlan(window_start=date(2026, 10, 19), window_end=date(2026, 10, 25), chunks=[chunk])
    assert plan.done_count == 1
    assert plan.total_count == 1
