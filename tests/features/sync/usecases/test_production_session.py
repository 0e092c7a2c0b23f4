"""Tests for ProductionSyncSession."""

import pytest

from prodsync.core.context import set_production_id
from prodsync.features.sync.models import EntityKind
from prodsync.features.sync.usecases.production_session import (
    ProductionSyncSession,
)
from prodsync.features.sync.usecases.reorder_planner import ReorderPlanner
from tests.utils.factories import PRODUCTION_ID


@pytest.fixture
def session(transport, hub) -> ProductionSyncSession:
    return ProductionSyncSession(transport, channel=hub, production_id=PRODUCTION_ID)


def test_production_id_falls_back_to_context(transport):
    set_production_id("prod-ctx")

    session = ProductionSyncSession(transport)

    assert session.production_id == "prod-ctx"


def test_collection_is_created_once_and_attached(session, hub):
    cameras = session.collection(EntityKind.CAMERA)

    assert session.collection(EntityKind.CAMERA) is cameras
    assert hub.subscriber_count(PRODUCTION_ID) == 1


@pytest.mark.asyncio
async def test_open_loads_and_sorts_by_label(session, store):
    for label in ("CAM 2", "CAM 1"):
        _ = store.create("cameras", {"productionId": PRODUCTION_ID, "id": label})

    await session.open(EntityKind.CAMERA, EntityKind.CCU)

    assert [e.id for e in session.collection(EntityKind.CAMERA).items()] == [
        "CAM 1",
        "CAM 2",
    ]
    assert session.collection(EntityKind.CCU).items() == []


def test_reorder_planner_only_for_numbered_lists(session):
    assert isinstance(
        session.reorder_planner(EntityKind.MEDIA_SERVER), ReorderPlanner
    )

    with pytest.raises(ValueError):
        session.reorder_planner(EntityKind.CHECKLIST_ITEM)


def test_close_detaches_every_collection(session, hub):
    cameras = session.collection(EntityKind.CAMERA)
    _ = session.collection(EntityKind.MONITOR)

    session.close()

    assert cameras.is_closed
    assert hub.subscriber_count(PRODUCTION_ID) == 0


@pytest.mark.asyncio
async def test_monitors_open_in_type_order(session, store):
    for label in ("BSM 1", "FOH 2", "DSM 1", "FOH 1"):
        _ = store.create(
            "sends", {"productionId": PRODUCTION_ID, "id": label, "type": "MONITOR"}
        )

    await session.open(EntityKind.MONITOR)

    assert [e.id for e in session.collection(EntityKind.MONITOR).items()] == [
        "FOH 1",
        "FOH 2",
        "BSM 1",
        "DSM 1",
    ]
