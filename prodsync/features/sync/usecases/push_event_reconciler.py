"""Folding remote push events into an entity cache.

One reconciler is instantiated per entity kind. It is the only writer of the
cache besides the synced collection that owns it.
"""

import enum
import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from prodsync.features.sync.models import (
    EntityRecord,
    KindDescriptor,
    PushAction,
    PushEvent,
)
from prodsync.features.sync.repositories.entity_cache import EntityCache
from prodsync.features.sync.repositories.protocols import PushChannel

logger = logging.getLogger(__name__)


class ReconcileOutcome(enum.Enum):
    """What a single push event did to the cache."""

    APPLIED = "applied"
    REMOVED = "removed"
    DUPLICATE = "duplicate"
    STALE = "stale"
    SUPPRESSED = "suppressed"
    TOMBSTONED = "tombstoned"
    IGNORED = "ignored"


class PushEventReconciler:
    """Applies created/updated/deleted events idempotently.

    - ``created`` for a uuid already cached is a self-echo and does nothing.
    - ``updated`` overwrites when its version is >= the cached one and is
      dropped when lower.
    - ``deleted`` always removes, and the uuid is tombstoned so a late
      ``created``/``updated`` cannot bring it back.

    While suppression is raised, ``updated`` events are ignored.

    Authoritative lists are merged with :meth:`apply_authoritative`. A list
    may have been built before pushes that arrived while it was in flight;
    those pushes win over it.
    """

    def __init__(self, cache: EntityCache, kind: KindDescriptor):
        """Initialize the reconciler.

        Args:
            cache: Cache this reconciler keeps in step with remote changes
            kind: Descriptor used to filter events and entities
        """
        self.cache: EntityCache = cache
        self.kind: KindDescriptor = kind
        self._suppression_depth: int = 0
        self._sequence: int = 0
        # uuid -> sequence number of the deletion
        self._tombstones: dict[str, int] = {}
        # uuid -> sequence number of the last change applied during a fetch
        self._touched: dict[str, int] = {}
        self._open_fetches: set[int] = set()
        self._channel: PushChannel | None = None
        self._production_id: str | None = None

    @property
    def is_suppressed(self) -> bool:
        return self._suppression_depth > 0

    def raise_suppression(self) -> None:
        self._suppression_depth += 1

    def lower_suppression(self) -> None:
        if self._suppression_depth == 0:
            raise RuntimeError("Suppression lowered more times than it was raised")
        self._suppression_depth -= 1

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        """Ignore ``updated`` events for the duration of the block."""
        self.raise_suppression()
        try:
            yield
        finally:
            self.lower_suppression()

    def is_tombstoned(self, uuid: str) -> bool:
        return uuid in self._tombstones

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def touch(self, uuid: str) -> None:
        """Record that the cached state of ``uuid`` changed outside a fetch."""
        if self._open_fetches:
            self._touched[uuid] = self._next_sequence()

    def begin_fetch(self) -> int:
        """Mark the start of an authoritative fetch; pass the marker back."""
        marker = self._next_sequence()
        self._open_fetches.add(marker)
        return marker

    def end_fetch(self, marker: int) -> None:
        self._open_fetches.discard(marker)
        if not self._open_fetches:
            self._touched.clear()

    def apply_authoritative(
        self, entities: Iterable[EntityRecord], marker: int
    ) -> None:
        """Replace the cache with a fetched list, keeping newer pushed state.

        - A uuid deleted after ``marker`` stays deleted.
        - A uuid changed after ``marker`` keeps its cached state, unless the
          list carries a higher version.
        - A cached version is never lowered.
        - Tombstones from before ``marker`` are settled by the list and
          dropped.
        """
        fetched: dict[str, EntityRecord] = {}
        for entity in entities:
            if self._tombstones.get(entity.uuid, 0) > marker:
                continue
            fetched[entity.uuid] = entity

        merged: dict[str, EntityRecord] = {}
        for uuid, entity in fetched.items():
            cached = self.cache.get(uuid)
            if self._touched.get(uuid, 0) > marker and cached is None:
                continue
            if cached is not None and cached.version > entity.version:
                entity = cached
            merged[uuid] = entity
        for uuid, touched_at in self._touched.items():
            cached = self.cache.get(uuid)
            if touched_at > marker and cached is not None and uuid not in merged:
                merged[uuid] = cached

        self.cache.replace_all(merged.values())
        self._tombstones = {
            uuid: deleted_at
            for uuid, deleted_at in self._tombstones.items()
            if deleted_at > marker
        }

    def handle(self, event: PushEvent) -> ReconcileOutcome:
        """Fold one push event into the cache."""
        if event.entity_kind != self.kind.event_type:
            return ReconcileOutcome.IGNORED

        if event.action is PushAction.DELETED:
            outcome = self._on_deleted(event.target_uuid)
        else:
            assert event.entity is not None
            if event.action is PushAction.CREATED:
                outcome = self._on_created(event.entity)
            else:
                outcome = self._on_updated(event.entity)

        logger.debug(
            "%s %s %s by %s: %s",
            self.kind.kind.value,
            event.action.value,
            event.target_uuid,
            event.acting_user_name or event.acting_user_id,
            outcome.value,
        )
        return outcome

    def _on_created(self, entity: EntityRecord) -> ReconcileOutcome:
        if entity.uuid in self._tombstones:
            return ReconcileOutcome.TOMBSTONED
        if entity.uuid in self.cache:
            return ReconcileOutcome.DUPLICATE
        if not self.kind.accepts(entity):
            return ReconcileOutcome.IGNORED
        _ = self.cache.upsert(entity)
        self.touch(entity.uuid)
        return ReconcileOutcome.APPLIED

    def _on_updated(self, entity: EntityRecord) -> ReconcileOutcome:
        if self.is_suppressed:
            return ReconcileOutcome.SUPPRESSED
        if entity.uuid in self._tombstones:
            return ReconcileOutcome.TOMBSTONED

        cached = self.cache.get(entity.uuid)
        if cached is not None and entity.version < cached.version:
            return ReconcileOutcome.STALE

        if not self.kind.accepts(entity):
            # The entity moved out of this collection (e.g. a send retyped
            # away from MONITOR).
            if self.cache.remove(entity.uuid) is not None:
                self.touch(entity.uuid)
                return ReconcileOutcome.REMOVED
            return ReconcileOutcome.IGNORED

        if not self.cache.upsert(entity):
            return ReconcileOutcome.DUPLICATE
        self.touch(entity.uuid)
        return ReconcileOutcome.APPLIED

    def handle_local_delete(self, uuid: str) -> ReconcileOutcome:
        """Record a deletion this session observed outside the push channel."""
        return self._on_deleted(uuid)

    def _on_deleted(self, uuid: str) -> ReconcileOutcome:
        self._tombstones[uuid] = self._next_sequence()
        if self.cache.remove(uuid) is None:
            return ReconcileOutcome.IGNORED
        return ReconcileOutcome.REMOVED

    def attach(self, channel: PushChannel, production_id: str) -> None:
        """Subscribe to a production's push room, replacing any prior subscription."""
        self.detach()
        channel.subscribe(production_id, self.handle)
        self._channel = channel
        self._production_id = production_id

    def detach(self) -> None:
        if self._channel is not None and self._production_id is not None:
            self._channel.unsubscribe(self._production_id, self.handle)
        self._channel = None
        self._production_id = None
