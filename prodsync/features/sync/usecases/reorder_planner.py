"""Drag-to-reorder for lists whose order is encoded in labels.

A drop is turned into the minimal set of relabelling writes, the writes are
issued concurrently against the versioned API, and the collection is then
refetched wholesale. The refetch is what makes the operation converge: a
write that conflicts or is lost simply does not take effect, and the list
shows the server's real order afterwards.
"""

import asyncio
import enum
import logging
from collections.abc import Sequence

from prodsync.features.sync.dtos import (
    ReorderOutcome,
    ReorderPlan,
    ReorderUpdate,
)
from prodsync.features.sync.errors import InvalidReorderError, MutationTransportError
from prodsync.features.sync.models import ConflictResult
from prodsync.features.sync.services.label_numbering import NumberingStrategy, Row
from prodsync.features.sync.usecases.synced_collection import SyncedCollection

logger = logging.getLogger(__name__)


class DragState(enum.Enum):
    """Lifecycle of one drag."""

    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"


def plan_reorder(
    rows: Sequence[Row],
    source_index: int,
    target_index: int,
    strategy: NumberingStrategy,
) -> ReorderPlan:
    """Plan the writes for moving one row from ``source_index`` to ``target_index``.

    Only the dragged row moves; every other row keeps its relative order.
    Labels are re-derived from the new positions and only entries whose label
    changes get a write.

    Raises:
        InvalidReorderError: If either index is out of range
    """
    for name, index in (("source", source_index), ("target", target_index)):
        if not 0 <= index < len(rows):
            raise InvalidReorderError(
                f"{name} index {index} is outside a list of {len(rows)} rows"
            )

    if source_index == target_index:
        return ReorderPlan(source_index=source_index, target_index=target_index)

    reordered = list(rows)
    moved = reordered.pop(source_index)
    reordered.insert(target_index, moved)

    updates = tuple(
        ReorderUpdate(uuid=entry.uuid, new_label=new_label, version=entry.version)
        for entry, new_label in strategy.relabel(reordered)
        if new_label != entry.label
    )
    return ReorderPlan(
        source_index=source_index, target_index=target_index, updates=updates
    )


class ReorderPlanner:
    """State machine ``IDLE -> DRAGGING -> COMMITTING -> IDLE`` for one list.

    Push ``updated`` events for the collection are suppressed only while
    committing, and suppression is always lowered when the commit ends.
    """

    def __init__(self, collection: SyncedCollection, strategy: NumberingStrategy):
        """Initialize the planner.

        Args:
            collection: Collection whose displayed order is being changed
            strategy: How the list encodes its order
        """
        self.collection: SyncedCollection = collection
        self.strategy: NumberingStrategy = strategy
        self._state: DragState = DragState.IDLE
        self._source_index: int | None = None
        self._active_plan: ReorderPlan | None = None

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def source_index(self) -> int | None:
        return self._source_index

    @property
    def active_plan(self) -> ReorderPlan | None:
        return self._active_plan

    def rows(self) -> list[Row]:
        """The rows currently displayed, in order."""
        return self.strategy.rows(self.collection.items())

    def begin_drag(self, source_index: int) -> None:
        if self._state is not DragState.IDLE:
            raise InvalidReorderError(f"Cannot start a drag while {self._state.value}")
        row_count = len(self.rows())
        if not 0 <= source_index < row_count:
            raise InvalidReorderError(
                f"source index {source_index} is outside a list of {row_count} rows"
            )
        self._state = DragState.DRAGGING
        self._source_index = source_index

    def cancel_drag(self) -> None:
        if self._state is DragState.DRAGGING:
            self._reset()

    def _reset(self) -> None:
        self._state = DragState.IDLE
        self._source_index = None
        self._active_plan = None

    async def commit(self, drop_index: int) -> ReorderOutcome:
        """Drop the dragged row at ``drop_index`` and apply the renumbering.

        The snapshot is taken now, at drag end, so remote edits that arrived
        during the drag are part of it.

        Raises:
            InvalidReorderError: If no drag is in progress or the index is bad
            Exception: The first write error that is not a transport failure,
                re-raised once the list has been refetched
        """
        if self._state is not DragState.DRAGGING or self._source_index is None:
            raise InvalidReorderError(f"Cannot commit while {self._state.value}")

        try:
            plan = plan_reorder(
                self.rows(), self._source_index, drop_index, self.strategy
            )
        except InvalidReorderError:
            self._reset()
            raise

        if plan.is_empty:
            self._reset()
            return ReorderOutcome(plan=plan)

        self._state = DragState.COMMITTING
        self._active_plan = plan
        kind = self.collection.kind.kind.value
        logger.info(
            "Reordering %s: row %s -> %s, %s write(s)",
            kind,
            plan.source_index,
            plan.target_index,
            len(plan.updates),
        )

        try:
            with self.collection.reconciler.suppressed():
                results = await asyncio.gather(
                    *(self._write(update) for update in plan.updates),
                    return_exceptions=True,
                )
                applied, conflicts, failures, unexpected = _tally(results)
                if conflicts or failures:
                    logger.warning(
                        "Reorder of %s partially failed: %s applied, %s conflicted, "
                        "%s failed; refetching",
                        kind,
                        applied,
                        conflicts,
                        failures,
                    )
                refreshed = await self._refetch()
        finally:
            self._reset()

        if unexpected is not None:
            raise unexpected

        return ReorderOutcome(
            plan=plan,
            applied=applied,
            conflicts=conflicts,
            failures=failures,
            refreshed=refreshed,
        )

    async def _write(self, update: ReorderUpdate) -> object:
        return await self.collection.gateway.update(
            update.uuid,
            self.strategy.patch_for(update.new_label),
            update.version,
        )

    async def _refetch(self) -> bool:
        try:
            _ = await self.collection.load()
        except MutationTransportError as e:
            logger.warning(
                "Refetch after reordering %s failed: %s",
                self.collection.kind.kind.value,
                e,
            )
            return False
        return True


def _tally(
    results: list[object],
) -> tuple[int, int, int, BaseException | None]:
    applied = conflicts = failures = 0
    unexpected: BaseException | None = None
    for result in results:
        if isinstance(result, MutationTransportError):
            failures += 1
        elif isinstance(result, BaseException):
            failures += 1
            if unexpected is None:
                unexpected = result
        elif isinstance(result, ConflictResult):
            conflicts += 1
        else:
            applied += 1
    return applied, conflicts, failures, unexpected
