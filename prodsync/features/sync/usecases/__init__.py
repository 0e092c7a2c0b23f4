"""Sync feature use cases."""

from .mutation_gateway import MutationGateway
from .production_session import ProductionSyncSession
from .push_event_reconciler import PushEventReconciler, ReconcileOutcome
from .reorder_planner import DragState, ReorderPlanner, plan_reorder
from .synced_collection import SyncedCollection

__all__ = [
    "DragState",
    "MutationGateway",
    "ProductionSyncSession",
    "PushEventReconciler",
    "ReconcileOutcome",
    "ReorderPlanner",
    "SyncedCollection",
    "plan_reorder",
]
