"""One session's view of a production: a synced collection per entity kind."""

import logging

from prodsync.core.context import get_production_id
from prodsync.features.sync.models import EntityKind
from prodsync.features.sync.repositories.protocols import (
    MutationTransport,
    PushChannel,
)
from prodsync.features.sync.services.label_numbering import (
    NumberingStrategy,
    PairNumbering,
    TypeCodeNumbering,
)
from prodsync.features.sync.usecases.reorder_planner import ReorderPlanner
from prodsync.features.sync.usecases.synced_collection import SyncedCollection

logger = logging.getLogger(__name__)

# Display order of monitor type codes.
MONITOR_TYPE_ORDER = ("FOH", "BSM", "OPMON", "DSM", "PROD", "GRN", "DIG", "DIS")

# How each reorderable list encodes its order.
DEFAULT_NUMBERING: dict[EntityKind, NumberingStrategy] = {
    EntityKind.CAMERA: TypeCodeNumbering(default_code="CAM"),
    EntityKind.MONITOR: TypeCodeNumbering(
        default_code="MON", type_order=MONITOR_TYPE_ORDER
    ),
    EntityKind.MEDIA_SERVER: PairNumbering(),
}


class ProductionSyncSession:
    """Owns every collection the session has opened for one production."""

    def __init__(
        self,
        transport: MutationTransport,
        channel: PushChannel | None = None,
        production_id: str | None = None,
        numbering: dict[EntityKind, NumberingStrategy] | None = None,
    ):
        """Initialize the session.

        Args:
            transport: REST collaborator shared by all collections
            channel: Push channel; collections are not live-updated without one
            production_id: Production to open; the session context's when omitted
            numbering: Per-kind numbering strategies for reorderable lists

        Raises:
            ValueError: If no production id is given or configured
        """
        production_id = production_id or get_production_id()
        if not production_id:
            raise ValueError("A production id is required to open a sync session")

        self.transport: MutationTransport = transport
        self.channel: PushChannel | None = channel
        self.production_id: str = production_id
        self.numbering: dict[EntityKind, NumberingStrategy] = (
            numbering if numbering is not None else DEFAULT_NUMBERING
        )
        self._collections: dict[EntityKind, SyncedCollection] = {}

    def collection(self, kind: EntityKind) -> SyncedCollection:
        """The session's collection for a kind, created and attached on first use."""
        existing = self._collections.get(kind)
        if existing is not None:
            return existing

        strategy = self.numbering.get(kind)
        sort_key = getattr(strategy, "sort_key", None)
        collection = SyncedCollection.for_kind(
            kind, self.transport, self.production_id, sort_key=sort_key
        )
        if self.channel is not None:
            collection.attach(self.channel)
        self._collections[kind] = collection
        return collection

    async def open(self, *kinds: EntityKind) -> None:
        """Create and load collections for the given kinds."""
        for kind in kinds:
            entities = await self.collection(kind).load()
            logger.debug("Loaded %s %s entities", len(entities), kind.value)

    def reorder_planner(self, kind: EntityKind) -> ReorderPlanner:
        strategy = self.numbering.get(kind)
        if strategy is None:
            raise ValueError(f"{kind.value} lists are not reorderable")
        return ReorderPlanner(self.collection(kind), strategy)

    def close(self) -> None:
        """Detach every collection; late responses will be ignored."""
        for collection in self._collections.values():
            collection.close()
        self._collections.clear()
