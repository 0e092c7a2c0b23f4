"""In-memory versioned production store.

Backs the development server and offline/in-process use of the sync layer.
Mirrors the API's write rules: ``version`` starts at 1 and increments on
every write, a write naming a different ``version`` is rejected as a
conflict, deletes are soft, and every successful write is broadcast to the
production's push room. Nothing is persisted.
"""

import copy
import itertools
import logging
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from prodsync.features.sync.models import KIND_DESCRIPTORS, PushAction, PushEvent
from prodsync.features.sync.repositories.in_memory_push_hub import InMemoryPushHub

logger = logging.getLogger(__name__)

USER_FIELDS = ("userId", "userName")
PROTECTED_FIELDS = ("uuid", "version", "productionId", *USER_FIELDS)

RESOURCE_EVENT_TYPES: dict[str, str] = {
    descriptor.resource: descriptor.event_type
    for descriptor in KIND_DESCRIPTORS.values()
    if descriptor.predicate is None
}


class RecordNotFoundError(KeyError):
    """Raised when a uuid names no live record of the resource."""

    def __init__(self, resource: str, uuid: str):
        self.resource = resource
        self.uuid = uuid
        super().__init__(f"{resource}/{uuid}")


class MissingProductionError(ValueError):
    """Raised when a create payload does not say which production it is for."""

    def __init__(self):
        super().__init__("productionId is required")


@dataclass
class _StoredRecord:
    data: dict[str, Any]
    sequence: int
    is_deleted: bool = False


class ProductionStore:
    """Versioned records per resource, broadcasting every change."""

    def __init__(self, hub: InMemoryPushHub | None = None):
        """Initialize an empty store.

        Args:
            hub: Push hub that receives every change; a private one when omitted.
        """
        self.hub: InMemoryPushHub = hub or InMemoryPushHub()
        self._resources: dict[str, dict[str, _StoredRecord]] = {}
        self._sequence = itertools.count()

    def _table(self, resource: str) -> dict[str, _StoredRecord]:
        return self._resources.setdefault(resource, {})

    def _live(self, resource: str, uuid: str) -> _StoredRecord:
        record = self._table(resource).get(uuid)
        if record is None or record.is_deleted:
            raise RecordNotFoundError(resource, uuid)
        return record

    def _broadcast(
        self,
        resource: str,
        action: PushAction,
        data: dict[str, Any],
        body: dict[str, Any],
    ) -> None:
        event = PushEvent(
            entity_kind=RESOURCE_EVENT_TYPES.get(resource, resource),
            action=action,
            entity=None if action is PushAction.DELETED else copy.deepcopy(data),
            entity_id=data["uuid"],
            acting_user_id=body.get("userId") or "system",
            acting_user_name=body.get("userName") or "System",
        )
        _ = self.hub.publish(data["productionId"], event)

    def list_entities(self, resource: str, production_id: str) -> list[dict[str, Any]]:
        """Live records of a production in creation order."""
        records = [
            record
            for record in self._table(resource).values()
            if not record.is_deleted and record.data["productionId"] == production_id
        ]
        records.sort(key=lambda record: record.sequence)
        return [copy.deepcopy(record.data) for record in records]

    def get_entity(self, resource: str, uuid: str) -> dict[str, Any]:
        return copy.deepcopy(self._live(resource, uuid).data)

    def create(self, resource: str, payload: dict[str, Any]) -> dict[str, Any]:
        production_id = payload.get("productionId")
        if not production_id:
            raise MissingProductionError()

        data = {k: v for k, v in payload.items() if k not in PROTECTED_FIELDS}
        data.setdefault("id", "")
        data["uuid"] = str(uuid4())
        data["productionId"] = production_id
        data["version"] = 1

        self._table(resource)[data["uuid"]] = _StoredRecord(
            data=data, sequence=next(self._sequence)
        )
        logger.debug("Created %s/%s", resource, data["uuid"])
        self._broadcast(resource, PushAction.CREATED, data, payload)
        return copy.deepcopy(data)

    def update(
        self, resource: str, uuid: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        """Apply a patch, or return a conflict payload for a stale version."""
        record = self._live(resource, uuid)
        current_version = record.data["version"]
        client_version = body.get("version")

        if client_version is not None and client_version != current_version:
            logger.debug(
                "Conflict on %s/%s: client %s, current %s",
                resource,
                uuid,
                client_version,
                current_version,
            )
            return {
                "error": "Conflict detected",
                "message": "This record was modified by another user",
                "currentVersion": current_version,
                "clientVersion": client_version,
            }

        record.data.update(
            {k: copy.deepcopy(v) for k, v in body.items() if k not in PROTECTED_FIELDS}
        )
        record.data["version"] = current_version + 1
        self._broadcast(resource, PushAction.UPDATED, record.data, body)
        return copy.deepcopy(record.data)

    def delete(self, resource: str, uuid: str, body: dict[str, Any]) -> None:
        record = self._live(resource, uuid)
        record.is_deleted = True
        record.data["version"] += 1
        self._broadcast(resource, PushAction.DELETED, record.data, body)
