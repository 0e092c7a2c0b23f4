"""Protocol definition for the REST mutation transport."""

from typing import Any, Protocol

WirePayload = dict[str, Any]


class MutationTransport(Protocol):
    """Protocol for request/response calls against the production API.

    Implementations return raw wire dictionaries. ``update`` returns either the
    updated entity or a conflict payload (tagged by an ``error`` key); every
    other failure is raised as ``MutationTransportError``.
    """

    async def list_entities(
        self, resource: str, production_id: str
    ) -> list[WirePayload]:
        """Fetch every live entity of a resource for a production."""
        ...

    async def get_entity(self, resource: str, uuid: str) -> WirePayload:
        """Fetch one entity by uuid."""
        ...

    async def create(self, resource: str, payload: WirePayload) -> WirePayload:
        """Create an entity and return it as stored."""
        ...

    async def update(
        self, resource: str, uuid: str, body: WirePayload
    ) -> WirePayload:
        """Apply a versioned patch; returns the entity or a conflict payload."""
        ...

    async def delete(self, resource: str, uuid: str, body: WirePayload) -> None:
        """Delete an entity."""
        ...
