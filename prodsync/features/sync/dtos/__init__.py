"""Sync feature DTOs."""

from .reorder_dto import ReorderOutcome, ReorderPlan, ReorderUpdate, SnapshotEntry

__all__ = [
    "ReorderOutcome",
    "ReorderPlan",
    "ReorderUpdate",
    "SnapshotEntry",
]
