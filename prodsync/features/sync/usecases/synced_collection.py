"""A locally cached, push-synchronised collection of one entity kind.

This is the single repository a page works against. It owns the cache and
the reconciler for its kind; nothing else writes the cache.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from prodsync.features.sync.errors import (
    EntityNotFoundError,
    MutationTransportError,
    UnknownEntityError,
)
from prodsync.features.sync.models import (
    ConflictResult,
    EntityKind,
    EntityRecord,
    EntryType,
    KindDescriptor,
    describe,
)
from prodsync.features.sync.repositories.entity_cache import EntityCache, SortKey
from prodsync.features.sync.repositories.protocols import (
    MutationTransport,
    PushChannel,
)
from prodsync.features.sync.services.note_history import (
    COMPLETION_FIELD,
    INFO_FIELD,
    NoteHistoryMerger,
)
from prodsync.features.sync.usecases.mutation_gateway import MutationGateway
from prodsync.features.sync.usecases.push_event_reconciler import PushEventReconciler

logger = logging.getLogger(__name__)


class SyncedCollection:
    """Entity collection kept consistent across local writes and push events.

    Local writes go through the gateway and are applied only once the server
    confirms them, guarded by version so a push echo that already delivered a
    newer state is never regressed. Conflicts are returned to the caller after
    the entity has been refetched; they are never retried automatically.
    """

    def __init__(
        self,
        gateway: MutationGateway,
        production_id: str,
        cache: EntityCache | None = None,
    ):
        """Initialize the collection.

        Args:
            gateway: Mutation gateway for this collection's kind
            production_id: Production whose entities are collected
            cache: Cache to fill; a fresh insertion-ordered one when omitted
        """
        self.gateway: MutationGateway = gateway
        self.production_id: str = production_id
        self.cache: EntityCache = cache if cache is not None else EntityCache()
        self.reconciler: PushEventReconciler = PushEventReconciler(
            self.cache, gateway.kind
        )
        self._closed: bool = False

    @classmethod
    def for_kind(
        cls,
        kind: EntityKind,
        transport: MutationTransport,
        production_id: str,
        sort_key: SortKey | None = None,
    ) -> "SyncedCollection":
        gateway = MutationGateway(transport, describe(kind))
        return cls(gateway, production_id, EntityCache(sort_key=sort_key))

    @property
    def kind(self) -> KindDescriptor:
        return self.gateway.kind

    @property
    def is_closed(self) -> bool:
        return self._closed

    def items(self) -> list[EntityRecord]:
        return self.cache.list()

    def get(self, uuid: str) -> EntityRecord | None:
        return self.cache.get(uuid)

    def _require(self, uuid: str) -> EntityRecord:
        entity = self.cache.get(uuid)
        if entity is None:
            raise UnknownEntityError(uuid)
        return entity

    def _apply_confirmed(self, entity: EntityRecord) -> bool:
        """Apply a server-confirmed entity unless something newer is cached."""
        if self._closed:
            logger.debug("Ignoring late response for %s after close", entity.uuid)
            return False
        if self.reconciler.is_tombstoned(entity.uuid):
            return False
        cached = self.cache.get(entity.uuid)
        if cached is not None and cached.version > entity.version:
            return False
        if not self.kind.accepts(entity):
            changed = self.cache.remove(entity.uuid) is not None
        else:
            changed = self.cache.upsert(entity)
        if changed:
            self.reconciler.touch(entity.uuid)
        return changed

    def attach(self, channel: PushChannel) -> None:
        """Start folding this production's push events into the cache."""
        self.reconciler.attach(channel, self.production_id)

    def close(self) -> None:
        """Stop listening; responses still in flight will be ignored."""
        self._closed = True
        self.reconciler.detach()

    async def load(self) -> list[EntityRecord]:
        """Fetch the authoritative list and replace the cache with it.

        Pushes and confirmed writes that land while the list is in flight are
        newer than it and are kept.
        """
        marker = self.reconciler.begin_fetch()
        try:
            entities = await self.gateway.fetch_all(self.production_id)
            if not self._closed:
                self.reconciler.apply_authoritative(entities, marker)
        finally:
            self.reconciler.end_fetch(marker)
        return entities

    async def refresh_one(self, uuid: str) -> EntityRecord | None:
        """Refetch one entity and apply it.

        Returns:
            The authoritative entity, or None when the server no longer has it
            (it is then dropped from the cache)
        """
        try:
            entity = await self.gateway.fetch_one(uuid)
        except EntityNotFoundError:
            if not self._closed:
                _ = self.reconciler.handle_local_delete(uuid)
            return None
        _ = self._apply_confirmed(entity)
        return entity

    async def create(self, payload: dict[str, Any]) -> EntityRecord:
        """Create an entity and cache the confirmed record.

        The push echo of this creation may arrive before or after the
        response; either way the cache ends up with a single record.
        """
        entity = await self.gateway.create(
            {"productionId": self.production_id, **payload}
        )
        _ = self._apply_confirmed(entity)
        return entity

    async def update(
        self,
        uuid: str,
        patch: dict[str, Any],
        expected_version: int | None = None,
    ) -> EntityRecord | ConflictResult:
        """Write a patch against the cached (or given) version.

        On conflict the cache is left as it was, the entity is refetched, and
        the ConflictResult is handed back for the caller to report, even when
        that refetch fails.

        Raises:
            UnknownEntityError: If no version is given and the uuid is not cached
            EntityNotFoundError: If the server no longer has the entity; it is
                dropped from the cache
            MutationTransportError: If the call fails; the cache is untouched
        """
        if expected_version is None:
            expected_version = self._require(uuid).version

        try:
            result = await self.gateway.update(uuid, patch, expected_version)
        except EntityNotFoundError:
            if not self._closed:
                _ = self.reconciler.handle_local_delete(uuid)
            raise
        if isinstance(result, ConflictResult):
            try:
                _ = await self.refresh_one(uuid)
            except MutationTransportError as e:
                logger.warning(
                    "Refetch after conflict on %s %s failed: %s",
                    self.kind.resource,
                    uuid,
                    e,
                )
            return result

        _ = self._apply_confirmed(result)
        return result

    async def delete(self, uuid: str) -> None:
        """Remove locally at once, restoring the record if the call fails.

        Raises:
            UnknownEntityError: If the uuid is not cached
            MutationTransportError: If the call fails
        """
        prior = self._require(uuid)
        _ = self.cache.remove(uuid)
        try:
            await self.gateway.delete(uuid)
        except EntityNotFoundError:
            # Already gone on the server; the local removal stands.
            _ = self.reconciler.handle_local_delete(uuid)
        except MutationTransportError:
            if not self._closed and not self.reconciler.is_tombstoned(uuid):
                if self.cache.upsert(prior):
                    self.reconciler.touch(uuid)
            raise
        else:
            _ = self.reconciler.handle_local_delete(uuid)

    async def _authoritative(self, uuid: str) -> EntityRecord:
        entity = await self.refresh_one(uuid)
        if entity is None:
            raise EntityNotFoundError(self.kind.resource, uuid)
        return entity

    async def append_note(
        self,
        uuid: str,
        text: str,
        field: str = INFO_FIELD,
        entry_type: EntryType = EntryType.INFO,
    ) -> EntityRecord | ConflictResult:
        """Append a note to a history, merging onto the server's copy."""
        authoritative = await self._authoritative(uuid)
        history = NoteHistoryMerger.append(
            NoteHistoryMerger.entries(authoritative, field), text, entry_type
        )
        return await self.update(
            uuid,
            {field: NoteHistoryMerger.to_wire(history)},
            expected_version=authoritative.version,
        )

    async def delete_note(
        self, uuid: str, entry_id: str, field: str = INFO_FIELD
    ) -> EntityRecord | ConflictResult:
        """Remove one entry from a history on the server's copy."""
        authoritative = await self._authoritative(uuid)
        history = NoteHistoryMerger.remove(
            NoteHistoryMerger.entries(authoritative, field), entry_id
        )
        return await self.update(
            uuid,
            {field: NoteHistoryMerger.to_wire(history)},
            expected_version=authoritative.version,
        )

    async def complete_item(
        self, uuid: str, completion_note: str = ""
    ) -> EntityRecord | ConflictResult:
        """Mark a checklist item done, appending an optional completion note."""
        authoritative = await self._authoritative(uuid)
        now = datetime.now(timezone.utc)
        now_millis = int(now.timestamp() * 1000)
        history = NoteHistoryMerger.append(
            NoteHistoryMerger.entries(authoritative, COMPLETION_FIELD),
            completion_note,
            EntryType.COMPLETION,
            now=now_millis,
        )
        patch = {
            "completed": True,
            "completionDate": now.isoformat(),
            "completedAt": now_millis,
            COMPLETION_FIELD: NoteHistoryMerger.to_wire(history),
        }
        return await self.update(uuid, patch, expected_version=authoritative.version)
