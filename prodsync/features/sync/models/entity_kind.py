"""Entity kinds and how each one maps onto the REST and push wire formats."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .entity_model import EntityRecord


class EntityKind(str, enum.Enum):
    """Production entity kinds kept in sync between sessions."""

    CAMERA = "camera"
    CCU = "ccu"
    MONITOR = "monitor"
    MEDIA_SERVER = "media-server"
    CHECKLIST_ITEM = "checklist-item"
    SEND = "send"
    SOURCE = "source"
    IP_ADDRESS = "ip-address"


@dataclass(frozen=True, slots=True)
class KindDescriptor:
    """Static description of one entity kind.

    Several kinds may share a resource: monitors are sends narrowed by
    ``predicate``.
    """

    kind: EntityKind
    resource: str
    event_type: str
    predicate: Callable[["EntityRecord"], bool] | None = None

    def accepts(self, entity: "EntityRecord") -> bool:
        """Whether the entity belongs to this kind's collection."""
        if self.predicate is None:
            return True
        return self.predicate(entity)


def _is_monitor(entity: "EntityRecord") -> bool:
    return entity.get_field("type") == "MONITOR"


KIND_DESCRIPTORS: dict[EntityKind, KindDescriptor] = {
    EntityKind.CAMERA: KindDescriptor(EntityKind.CAMERA, "cameras", "camera"),
    EntityKind.CCU: KindDescriptor(EntityKind.CCU, "ccus", "ccu"),
    EntityKind.MONITOR: KindDescriptor(
        EntityKind.MONITOR, "sends", "send", predicate=_is_monitor
    ),
    EntityKind.MEDIA_SERVER: KindDescriptor(
        EntityKind.MEDIA_SERVER, "media-servers", "media-server"
    ),
    EntityKind.CHECKLIST_ITEM: KindDescriptor(
        EntityKind.CHECKLIST_ITEM, "checklist-items", "checklist-item"
    ),
    EntityKind.SEND: KindDescriptor(EntityKind.SEND, "sends", "send"),
    EntityKind.SOURCE: KindDescriptor(EntityKind.SOURCE, "sources", "source"),
    EntityKind.IP_ADDRESS: KindDescriptor(
        EntityKind.IP_ADDRESS, "ip-addresses", "ip-address"
    ),
}


def describe(kind: EntityKind | str) -> KindDescriptor:
    """Look up the descriptor for a kind (enum member or its value)."""
    return KIND_DESCRIPTORS[EntityKind(kind)]
