"""Numbering strategies for drag-to-reorder lists.

A list's order lives in the entities themselves: either in the display label
(``"FOH 2"``: a type code plus an ordinal) or in an explicit pair number
shared by a main/backup pair. A strategy turns entities into draggable rows
and derives every row's label from its position.
"""

import re
from collections.abc import Sequence
from typing import Any, Protocol

from prodsync.features.sync.dtos import SnapshotEntry
from prodsync.features.sync.models import EntityRecord

LABEL_PATTERN = re.compile(r"^([A-Za-z]+)\s*(\d+)$")

Row = tuple[SnapshotEntry, ...]


class NumberingStrategy(Protocol):
    """How a list encodes its order."""

    def rows(self, entities: Sequence[EntityRecord]) -> list[Row]:
        """Group displayed entities into draggable rows, in display order."""
        ...

    def relabel(self, rows: Sequence[Row]) -> list[tuple[SnapshotEntry, str]]:
        """Every entry paired with the label its row position implies."""
        ...

    def patch_for(self, new_label: str) -> dict[str, Any]:
        """The update patch that writes a label."""
        ...


def parse_label(label: str) -> tuple[str, int] | None:
    """Split ``"FOH 2"`` into ``("FOH", 2)``; None for free-form labels."""
    match = LABEL_PATTERN.match(label.strip())
    if match is None:
        return None
    return match.group(1).upper(), int(match.group(2))


class TypeCodeNumbering:
    """Labels ``<CODE> <n>``, numbered 1..N independently per type code.

    Cross-group order is whatever the array order is; only the ordinal within
    each group is derived.
    """

    def __init__(self, default_code: str = "MON", type_order: Sequence[str] = ()):
        """Initialize the strategy.

        Args:
            default_code: Code given to entities whose label has none
            type_order: Display order of type codes; unknown codes sort last
        """
        self.default_code: str = default_code.upper()
        self.type_order: tuple[str, ...] = tuple(code.upper() for code in type_order)

    def type_code(self, label: str) -> str:
        parsed = parse_label(label)
        return parsed[0] if parsed else self.default_code

    def sort_key(self, entity: EntityRecord) -> tuple[int, str, float, str]:
        """Display order: type order, then ordinal, then label.

        Codes missing from ``type_order`` sort after the known ones,
        alphabetically; free-form labels sort last.
        """
        unknown = len(self.type_order)
        parsed = parse_label(entity.id)
        if parsed is None:
            return (unknown + 1, "", float("inf"), entity.id)
        code, ordinal = parsed
        if code in self.type_order:
            return (self.type_order.index(code), "", float(ordinal), entity.id)
        return (unknown, code, float(ordinal), entity.id)

    def rows(self, entities: Sequence[EntityRecord]) -> list[Row]:
        return [
            (SnapshotEntry(uuid=e.uuid, label=e.id, version=e.version),)
            for e in entities
        ]

    def relabel(self, rows: Sequence[Row]) -> list[tuple[SnapshotEntry, str]]:
        counts: dict[str, int] = {}
        labelled: list[tuple[SnapshotEntry, str]] = []
        for row in rows:
            for entry in row:
                code = self.type_code(entry.label)
                counts[code] = counts.get(code, 0) + 1
                labelled.append((entry, f"{code} {counts[code]}"))
        return labelled

    def patch_for(self, new_label: str) -> dict[str, Any]:
        return {"id": new_label}


class PairNumbering:
    """Main/backup pairs sharing a pair number, dragged together.

    Rows are renumbered 1..N by position and both members of a row receive
    the row's number.
    """

    def __init__(self, field: str = "pairNumber"):
        self.field: str = field

    def pair_number(self, entity: EntityRecord) -> int | None:
        value = entity.get_field(self.field)
        if isinstance(value, bool) or value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None

    def sort_key(self, entity: EntityRecord) -> tuple[float, str]:
        number = self.pair_number(entity)
        return (float("inf") if number is None else float(number), entity.id)

    def rows(self, entities: Sequence[EntityRecord]) -> list[Row]:
        grouped: dict[int | str, list[SnapshotEntry]] = {}
        for entity in sorted(entities, key=self.sort_key):
            number = self.pair_number(entity)
            # Unpaired entities form their own row.
            key: int | str = entity.uuid if number is None else number
            label = "" if number is None else str(number)
            grouped.setdefault(key, []).append(
                SnapshotEntry(uuid=entity.uuid, label=label, version=entity.version)
            )
        return [tuple(members) for members in grouped.values()]

    def relabel(self, rows: Sequence[Row]) -> list[tuple[SnapshotEntry, str]]:
        return [
            (entry, str(position))
            for position, row in enumerate(rows, start=1)
            for entry in row
        ]

    def patch_for(self, new_label: str) -> dict[str, Any]:
        return {self.field: int(new_label)}
