"""Pytest configuration and shared fixtures for all tests.

This module provides function-scoped fixtures for:
- An in-memory production store with its push hub
- Transports and collections wired to that store
- Session context cleanup between tests
"""

from collections.abc import Generator

import pytest

from prodsync.core.context import clear_sync_context, set_acting_user
from prodsync.features.sync.models import EntityKind
from prodsync.features.sync.repositories.in_memory_push_hub import InMemoryPushHub
from prodsync.features.sync.repositories.in_memory_transport import (
    InMemoryMutationTransport,
)
from prodsync.features.sync.usecases.synced_collection import SyncedCollection
from prodsync.server.store import ProductionStore
from tests.utils.factories import PRODUCTION_ID
from tests.utils.transports import FlakyTransport


@pytest.fixture(autouse=True)
def sync_context() -> Generator[None, None, None]:
    """Act as a known user and reset the context afterwards."""
    set_acting_user("user-local", "Local User")
    yield
    clear_sync_context()


@pytest.fixture
def hub() -> InMemoryPushHub:
    return InMemoryPushHub()


@pytest.fixture
def store(hub: InMemoryPushHub) -> ProductionStore:
    return ProductionStore(hub=hub)


@pytest.fixture
def transport(store: ProductionStore) -> FlakyTransport:
    """In-memory transport with failure injection switched off."""
    return FlakyTransport(InMemoryMutationTransport(store))


@pytest.fixture
def cameras(transport: FlakyTransport, hub: InMemoryPushHub) -> SyncedCollection:
    """A camera collection attached to the production's push room."""
    collection = SyncedCollection.for_kind(EntityKind.CAMERA, transport, PRODUCTION_ID)
    collection.attach(hub)
    return collection
