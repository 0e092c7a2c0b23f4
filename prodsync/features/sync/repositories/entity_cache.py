"""In-memory cache of one entity kind, keyed by uuid.

The cache is the local view a session renders from. It never talks to the
network; the synced collection and the push reconciler are its only writers.
"""

from collections.abc import Callable, Iterable
from typing import Any

from prodsync.features.sync.models import EntityRecord

SortKey = Callable[[EntityRecord], Any]


class EntityCache:
    """Ordered collection of entity records with exactly one record per uuid."""

    def __init__(self, sort_key: SortKey | None = None):
        """Initialize an empty cache.

        Args:
            sort_key: Optional display ordering; insertion order when omitted.
        """
        self._records: dict[str, EntityRecord] = {}
        self.sort_key: SortKey | None = sort_key

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, uuid: object) -> bool:
        return uuid in self._records

    def get(self, uuid: str) -> EntityRecord | None:
        return self._records.get(uuid)

    def uuids(self) -> set[str]:
        return set(self._records)

    def upsert(self, entity: EntityRecord) -> bool:
        """Insert or replace by uuid.

        A replaced record keeps its insertion position.

        Returns:
            False when the stored record was already identical.
        """
        if self._records.get(entity.uuid) == entity:
            return False
        self._records[entity.uuid] = entity
        return True

    def remove(self, uuid: str) -> EntityRecord | None:
        """Delete by uuid, returning the removed record if there was one."""
        return self._records.pop(uuid, None)

    def replace_all(self, entities: Iterable[EntityRecord]) -> None:
        """Swap the whole contents for an authoritative list.

        Later duplicates of a uuid replace earlier ones.
        """
        records: dict[str, EntityRecord] = {}
        for entity in entities:
            records[entity.uuid] = entity
        self._records = records

    def list(self) -> list[EntityRecord]:
        """Current records in display order."""
        records = list(self._records.values())
        if self.sort_key is not None:
            records.sort(key=self.sort_key)
        return records
