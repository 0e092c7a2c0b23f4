"""In-process implementation of the MutationTransport protocol."""

from typing import override

from prodsync.features.sync.errors import EntityNotFoundError
from prodsync.features.sync.repositories.protocols import (
    MutationTransport,
    WirePayload,
)
from prodsync.server.store import ProductionStore, RecordNotFoundError


class InMemoryMutationTransport(MutationTransport):
    """Transport that talks straight to a ProductionStore.

    Used for offline sessions and tests; follows the same result contract as
    the HTTP transport.
    """

    def __init__(self, store: ProductionStore):
        self.store: ProductionStore = store

    @override
    async def list_entities(
        self, resource: str, production_id: str
    ) -> list[WirePayload]:
        return self.store.list_entities(resource, production_id)

    @override
    async def get_entity(self, resource: str, uuid: str) -> WirePayload:
        try:
            return self.store.get_entity(resource, uuid)
        except RecordNotFoundError as e:
            raise EntityNotFoundError(resource, uuid) from e

    @override
    async def create(self, resource: str, payload: WirePayload) -> WirePayload:
        return self.store.create(resource, payload)

    @override
    async def update(
        self, resource: str, uuid: str, body: WirePayload
    ) -> WirePayload:
        try:
            return self.store.update(resource, uuid, body)
        except RecordNotFoundError as e:
            raise EntityNotFoundError(resource, uuid) from e

    @override
    async def delete(self, resource: str, uuid: str, body: WirePayload) -> None:
        try:
            self.store.delete(resource, uuid, body)
        except RecordNotFoundError as e:
            raise EntityNotFoundError(resource, uuid) from e
