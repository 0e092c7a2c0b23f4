"""REST routes for every production resource, backed by the in-memory store."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Request, status
from fastapi.responses import JSONResponse

from prodsync.features.sync.models import KIND_DESCRIPTORS
from prodsync.server.store import (
    MissingProductionError,
    ProductionStore,
    RecordNotFoundError,
)

RESOURCES: frozenset[str] = frozenset(
    descriptor.resource for descriptor in KIND_DESCRIPTORS.values()
)


def get_store(request: Request) -> ProductionStore:
    """Dependency injection for the app's store."""
    return request.app.state.store


def known_resource(
    resource: str = Path(..., description="Resource path, e.g. 'cameras'"),
) -> str:
    if resource not in RESOURCES:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown resource '{resource}'",
        )
    return resource


def _not_found(resource: str, uuid: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{resource} record '{uuid}' not found",
    )


router = APIRouter()


@router.get("/{resource}/production/{production_id}")
async def list_entities(
    production_id: str = Path(..., description="Production id"),
    resource: str = Depends(known_resource),
    store: ProductionStore = Depends(get_store),
) -> list[dict[str, Any]]:
    """List the live records of a production in creation order."""
    return store.list_entities(resource, production_id)


@router.get("/{resource}/{uuid}")
async def get_entity(
    uuid: str = Path(..., description="Record uuid"),
    resource: str = Depends(known_resource),
    store: ProductionStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        return store.get_entity(resource, uuid)
    except RecordNotFoundError as e:
        raise _not_found(resource, uuid) from e


@router.post("/{resource}", status_code=status.HTTP_201_CREATED)
async def create_entity(
    payload: dict[str, Any] = Body(...),
    resource: str = Depends(known_resource),
    store: ProductionStore = Depends(get_store),
) -> dict[str, Any]:
    try:
        return store.create(resource, payload)
    except MissingProductionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)
        ) from e


@router.put("/{resource}/{uuid}")
async def update_entity(
    uuid: str = Path(..., description="Record uuid"),
    body: dict[str, Any] = Body(...),
    resource: str = Depends(known_resource),
    store: ProductionStore = Depends(get_store),
) -> Any:
    """Apply a versioned patch.

    Returns 409 with the conflict body when ``version`` is stale.
    """
    try:
        result = store.update(resource, uuid, body)
    except RecordNotFoundError as e:
        raise _not_found(resource, uuid) from e

    if "error" in result:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=result)
    return result


@router.delete("/{resource}/{uuid}")
async def delete_entity(
    uuid: str = Path(..., description="Record uuid"),
    body: dict[str, Any] | None = Body(default=None),
    resource: str = Depends(known_resource),
    store: ProductionStore = Depends(get_store),
) -> dict[str, bool]:
    try:
        store.delete(resource, uuid, body or {})
    except RecordNotFoundError as e:
        raise _not_found(resource, uuid) from e
    return {"success": True}
