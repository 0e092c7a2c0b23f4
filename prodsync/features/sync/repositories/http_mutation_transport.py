"""httpx implementation of the MutationTransport protocol."""

import logging
from typing import Any, override

import httpx

from prodsync.core.settings import Settings, get_settings
from prodsync.features.sync.errors import EntityNotFoundError, MutationTransportError
from prodsync.features.sync.repositories.protocols import (
    MutationTransport,
    WirePayload,
)

logger = logging.getLogger(__name__)


class HttpMutationTransport(MutationTransport):
    """REST transport against the production API.

    A 409 response body is handed back as a conflict payload. A 404 raises
    ``EntityNotFoundError`` and anything else that is not a 2xx, or never got
    a response, raises ``MutationTransportError``.
    """

    def __init__(self, client: httpx.AsyncClient):
        """Initialize the transport.

        Args:
            client: The AsyncClient, already pointed at the API base URL.
        """
        self.client: httpx.AsyncClient = client

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None
    ) -> "HttpMutationTransport":
        """Build a transport with its own client from settings."""
        settings = settings or get_settings()
        client = httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout_seconds,
            headers={"Content-Type": "application/json"},
        )
        return cls(client)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(
        self,
        operation: str,
        resource: str,
        method: str,
        url: str,
        *,
        json: Any = None,
        uuid: str | None = None,
        allow_conflict: bool = False,
    ) -> Any:
        try:
            response = await self.client.request(method, url, json=json)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise MutationTransportError(operation, resource, str(e)) from e

        if response.status_code == 409 and allow_conflict:
            return response.json()
        if response.status_code == 404 and uuid is not None:
            raise EntityNotFoundError(resource, uuid)
        if response.is_error:
            detail = _error_detail(response)
            logger.warning(
                "%s %s returned %s: %s", method, url, response.status_code, detail
            )
            raise MutationTransportError(operation, resource, detail)

        if not response.content:
            return None
        return response.json()

    @override
    async def list_entities(
        self, resource: str, production_id: str
    ) -> list[WirePayload]:
        return await self._request(
            "fetch", resource, "GET", f"/{resource}/production/{production_id}"
        )

    @override
    async def get_entity(self, resource: str, uuid: str) -> WirePayload:
        return await self._request(
            "fetch", resource, "GET", f"/{resource}/{uuid}", uuid=uuid
        )

    @override
    async def create(self, resource: str, payload: WirePayload) -> WirePayload:
        return await self._request(
            "create", resource, "POST", f"/{resource}", json=payload
        )

    @override
    async def update(
        self, resource: str, uuid: str, body: WirePayload
    ) -> WirePayload:
        return await self._request(
            "update",
            resource,
            "PUT",
            f"/{resource}/{uuid}",
            json=body,
            uuid=uuid,
            allow_conflict=True,
        )

    @override
    async def delete(self, resource: str, uuid: str, body: WirePayload) -> None:
        # DELETE with a body needs the generic request API.
        _ = await self._request(
            "delete", resource, "DELETE", f"/{resource}/{uuid}", json=body, uuid=uuid
        )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("detail") or body)
    return str(body)
