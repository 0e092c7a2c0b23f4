"""Sync feature models."""

from .entity_kind import KIND_DESCRIPTORS, EntityKind, KindDescriptor, describe
from .entity_model import ConflictResult, EntityRecord, EntryType, TimestampedEntry
from .push_event_model import PushAction, PushEvent

__all__ = [
    "KIND_DESCRIPTORS",
    "ConflictResult",
    "EntityKind",
    "EntityRecord",
    "EntryType",
    "KindDescriptor",
    "PushAction",
    "PushEvent",
    "TimestampedEntry",
    "describe",
]
