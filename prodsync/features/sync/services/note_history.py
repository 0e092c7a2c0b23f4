"""Append-only merging of timestamped note histories.

Histories are lists of ``{id, text, timestamp, type}`` entries stored on an
entity (``moreInfo`` and ``completionNote`` on checklist items). Entries are
never rewritten: a change either appends a new entry or removes one by id.
Every merge must start from the authoritative entity fetched from the server,
never from a cached copy, so concurrent additions from other sessions and
deletions already made are both preserved.
"""

import time
from typing import Any
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError

from prodsync.features.sync.models import EntityRecord, EntryType, TimestampedEntry

INFO_FIELD = "moreInfo"
COMPLETION_FIELD = "completionNote"

_history_adapter: TypeAdapter[list[TimestampedEntry]] = TypeAdapter(
    list[TimestampedEntry]
)


def _now_millis() -> int:
    return int(time.time() * 1000)


class NoteHistoryMerger:
    """Pure operations over note histories."""

    @staticmethod
    def entries(entity: EntityRecord, field: str) -> list[TimestampedEntry]:
        """Read a history field from an entity.

        Legacy plain-string notes and malformed values read as an empty
        history rather than failing the merge.
        """
        raw = entity.get_field(field)
        if not isinstance(raw, list):
            return []
        try:
            return _history_adapter.validate_python(raw)
        except ValidationError:
            return []

    @staticmethod
    def new_entry(
        text: str, entry_type: EntryType, now: int | None = None
    ) -> TimestampedEntry:
        timestamp = _now_millis() if now is None else now
        return TimestampedEntry(
            id=f"entry-{timestamp}-{uuid4().hex[:8]}",
            text=text.strip(),
            timestamp=timestamp,
            type=entry_type,
        )

    @classmethod
    def append(
        cls,
        history: list[TimestampedEntry],
        text: str,
        entry_type: EntryType = EntryType.INFO,
        now: int | None = None,
    ) -> list[TimestampedEntry]:
        """Return the history with one new entry appended.

        Blank text appends nothing.
        """
        if not text or not text.strip():
            return list(history)
        return [*history, cls.new_entry(text, entry_type, now)]

    @staticmethod
    def remove(
        history: list[TimestampedEntry], entry_id: str
    ) -> list[TimestampedEntry]:
        """Return the history without the entry ``entry_id``."""
        return [entry for entry in history if entry.id != entry_id]

    @staticmethod
    def for_display(history: list[TimestampedEntry]) -> list[TimestampedEntry]:
        """Sort by timestamp; appends from different sessions can interleave."""
        return sorted(history, key=lambda entry: entry.timestamp)

    @staticmethod
    def latest(history: list[TimestampedEntry]) -> TimestampedEntry | None:
        ordered = NoteHistoryMerger.for_display(history)
        return ordered[-1] if ordered else None

    @staticmethod
    def to_wire(history: list[TimestampedEntry]) -> list[dict[str, Any]]:
        return [entry.model_dump(mode="json") for entry in history]
