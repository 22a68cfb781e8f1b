"""User overrides for plan chunks (completion and day placement)."""
from collections.abc import Iterable, Iterator, Mapping
from datetime import date
from typing import Optional, Protocol

from assignment_tracker.models import ChunkOverride


class OverrideAdapter(Protocol):
    def load(self) -> dict[str, ChunkOverride]: ...

    def save(self, entries: dict[str, ChunkOverride]) -> None: ...


def assignment_id_of(key: str) -> str:
    """Chunk keys are '<assignmentId>|<index>'."""
    return key.rsplit("|", 1)[0]


class OverrideStore(Mapping):
    """Sparse map of chunk key -> ChunkOverride, saved on every change."""

    def __init__(self, entries: Optional[dict[str, ChunkOverride]] = None, adapter: Optional[OverrideAdapter] = None):
        self.entries = dict(entries or {})
        self.adapter = adapter

    @classmethod
    def load(cls, adapter: OverrideAdapter) -> "OverrideStore":
        return cls(adapter.load(), adapter=adapter)

    def __getitem__(self, key: str) -> ChunkOverride:
        return self.entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def save(self) -> None:
        if self.adapter is not None:
            self.adapter.save(self.entries)

    def _update(self, key: str, **changes) -> ChunkOverride:
        current = self.entries.get(key, ChunkOverride())
        updated = ChunkOverride(
            done=changes.get("done", current.done),
            day=changes.get("day", current.day),
        )
        if updated.is_empty():
            self.entries.pop(key, None)
        else:
            self.entries[key] = updated
        self.save()
        return updated

    def set_done(self, key: str, done: bool) -> None:
        self._update(key, done=done)

    def toggle_done(self, key: str, current: bool = False) -> bool:
        """Flip the chunk's done flag; `current` is its displayed state."""
        override = self.entries.get(key)
        if override is not None and override.done is not None:
            current = override.done
        self._update(key, done=not current)
        return not current

    def move(self, key: str, day: date | str) -> None:
        value = day.isoformat() if isinstance(day, date) else str(day)
        self._update(key, day=value)

    def clear(self, key: str) -> bool:
        if key not in self.entries:
            return False
        del self.entries[key]
        self.save()
        return True

    def prune(self, assignment_ids: Iterable[str]) -> int:
        """Drop overrides whose assignment no longer exists."""
        keep = set(assignment_ids)
        stale = [key for key in self.entries if assignment_id_of(key) not in keep]
        for key in stale:
            del self.entries[key]
        if stale:
            self.save()
        return len(stale)
