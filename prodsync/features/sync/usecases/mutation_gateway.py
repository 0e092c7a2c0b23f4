"""Versioned create/update/delete calls for one entity kind.

The gateway turns wire responses into typed results and never touches a
cache: callers decide what to apply.
"""

import logging
from typing import Any

from prodsync.core.context import acting_user_fields
from prodsync.features.sync.models import (
    ConflictResult,
    EntityRecord,
    KindDescriptor,
)
from prodsync.features.sync.repositories.protocols import MutationTransport

logger = logging.getLogger(__name__)


class MutationGateway:
    """Issues versioned mutations for a single kind."""

    def __init__(self, transport: MutationTransport, kind: KindDescriptor):
        """Initialize the gateway with dependencies.

        Args:
            transport: REST collaborator performing the calls
            kind: Descriptor of the entity kind this gateway writes
        """
        self.transport: MutationTransport = transport
        self.kind: KindDescriptor = kind

    @property
    def resource(self) -> str:
        return self.kind.resource

    async def fetch_all(self, production_id: str) -> list[EntityRecord]:
        """Fetch the authoritative list, narrowed to this kind.

        Raises:
            MutationTransportError: If the call fails
        """
        payloads = await self.transport.list_entities(self.resource, production_id)
        entities = [EntityRecord.model_validate(payload) for payload in payloads]
        return [entity for entity in entities if self.kind.accepts(entity)]

    async def fetch_one(self, uuid: str) -> EntityRecord:
        """Fetch the authoritative state of one entity.

        Raises:
            EntityNotFoundError: If the server no longer has it
            MutationTransportError: If the call fails
        """
        payload = await self.transport.get_entity(self.resource, uuid)
        return EntityRecord.model_validate(payload)

    async def create(self, payload: dict[str, Any]) -> EntityRecord:
        """Create an entity and return it as the server stored it.

        Args:
            payload: Domain fields plus ``productionId``; a provisional ``id``
                label may be included

        Returns:
            The server-confirmed entity with its assigned uuid and version
        """
        body = {**payload, **acting_user_fields()}
        created = await self.transport.create(self.resource, body)
        entity = EntityRecord.model_validate(created)
        logger.debug("Created %s %s (%s)", self.kind.kind.value, entity.uuid, entity.id)
        return entity

    async def update(
        self, uuid: str, patch: dict[str, Any], expected_version: int
    ) -> EntityRecord | ConflictResult:
        """Send a patch guarded by the last version this session saw.

        Args:
            uuid: Entity to update
            patch: Fields to change
            expected_version: Version the patch was computed against

        Returns:
            The updated entity, or a ConflictResult when the server has moved on
        """
        body = {**patch, "version": expected_version, **acting_user_fields()}
        response = await self.transport.update(self.resource, uuid, body)

        if ConflictResult.is_conflict_payload(response):
            conflict = ConflictResult.model_validate(response)
            logger.warning(
                "Version conflict on %s %s: sent %s, server at %s",
                self.kind.kind.value,
                uuid,
                expected_version,
                conflict.current_version,
            )
            return conflict

        return EntityRecord.model_validate(response)

    async def delete(self, uuid: str) -> None:
        """Delete an entity. Cache removal is left to the caller or the push echo."""
        await self.transport.delete(self.resource, uuid, acting_user_fields())
