"""Transport wrappers for injecting failures and conflicts in tests."""

from typing import override

from prodsync.features.sync.errors import MutationTransportError
from prodsync.features.sync.repositories.protocols import (
    MutationTransport,
    WirePayload,
)


class FlakyTransport(MutationTransport):
    """Delegates to a real transport, failing the calls it is told to fail."""

    def __init__(self, inner: MutationTransport):
        self.inner: MutationTransport = inner
        self.fail_updates_for: set[str] = set()
        self.fail_deletes: bool = False
        self.fail_creates: bool = False
        self.fail_lists: int = 0
        self.fail_gets: bool = False
        self.update_calls: list[tuple[str, WirePayload]] = []

    @override
    async def list_entities(
        self, resource: str, production_id: str
    ) -> list[WirePayload]:
        if self.fail_lists > 0:
            self.fail_lists -= 1
            raise MutationTransportError("fetch", resource, "connection reset")
        return await self.inner.list_entities(resource, production_id)

    @override
    async def get_entity(self, resource: str, uuid: str) -> WirePayload:
        if self.fail_gets:
            raise MutationTransportError("fetch", resource, "timeout")
        return await self.inner.get_entity(resource, uuid)

    @override
    async def create(self, resource: str, payload: WirePayload) -> WirePayload:
        if self.fail_creates:
            raise MutationTransportError("create", resource, "timeout")
        return await self.inner.create(resource, payload)

    @override
    async def update(
        self, resource: str, uuid: str, body: WirePayload
    ) -> WirePayload:
        self.update_calls.append((uuid, body))
        if uuid in self.fail_updates_for:
            raise MutationTransportError("update", resource, "timeout")
        return await self.inner.update(resource, uuid, body)

    @override
    async def delete(self, resource: str, uuid: str, body: WirePayload) -> None:
        if self.fail_deletes:
            raise MutationTransportError("delete", resource, "timeout")
        await self.inner.delete(resource, uuid, body)
