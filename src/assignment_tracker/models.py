"""Data classes for assignments and the day plan."""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass
class Assignment:
    id: str
    title: str
    due: str  # ISO timestamp with offset
    course: str = ""
    notes: str = ""
    estimate_minutes: Optional[int] = None

    @property
    def display_title(self) -> str:
        return f"[{self.course}] {self.title}" if self.course else self.title

    def to_dict(self) -> dict:
        """Serialize to the persisted JSON shape."""
        data = {"id": self.id, "course": self.course, "title": self.title, "dueISO": self.due, "notes": self.notes}
        if self.estimate_minutes is not None:
            data["estimateMinutes"] = self.estimate_minutes
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Assignment":
        """Build from the persisted JSON shape. Raises KeyError/TypeError on bad records."""
        if not isinstance(data, dict):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        estimate = data.get("estimateMinutes")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            due=str(data["dueISO"]),
            course=data.get("course") or "",
            notes=data.get("notes") or "",
            estimate_minutes=int(estimate) if estimate is not None else None,
        )


@dataclass
class ChunkOverride:
    done: Optional[bool] = None
    day: Optional[str] = None  # ISO date

    def is_empty(self) -> bool:
        return self.done is None and self.day is None

    def to_dict(self) -> dict:
        data = {}
        if self.done is not None:
            data["done"] = self.done
        if self.day is not None:
            data["day"] = self.day
        return data

    @classmethod
    def from_dict(cls, data) -> "ChunkOverride":
        if not isinstance(data, dict):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        done = data.get("done")
        day = data.get("day")
        return cls(
            done=done if isinstance(done, bool) else None,
            day=str(day) if day is not None else None,
        )


@dataclass
class PlanChunk:
    key: str
    assignment_id: str
    index: int
    title: str
    due: str
    day: date
    minutes: int
    course: str = ""
    done: bool = False

    @property
    def display_title(self) -> str:
        return f"[{self.course}] {self.title}" if self.course else self.title


@dataclass
class DayGroup:
    day: date
    label: str
    total_minutes: int
    chunks: list[PlanChunk] = field(default_factory=list)


@dataclass
class DayPlan:
    window_start: date
    window_end: date
    chunks: list[PlanChunk] = field(default_factory=list)
    groups: list[DayGroup] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def done_count(self) -> int:
        return sum(1 for c in self.chunks if c.done)

    @property
    def total_count(self) -> int:
        return len(self.chunks)
