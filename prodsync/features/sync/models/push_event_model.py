"""Push channel events describing changes made by any session."""

import enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from prodsync.features.sync.errors import InvalidPushEventError

from .entity_model import EntityRecord


class PushAction(str, enum.Enum):
    """What happened to the entity."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class PushEvent(BaseModel):
    """A created/updated/deleted notification for one entity."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, populate_by_name=True)

    entity_kind: str = Field(
        ..., alias="entityKind", description="Push type, e.g. 'camera' or 'send'"
    )
    action: PushAction = Field(..., description="Change that was made")
    entity: EntityRecord | None = Field(
        default=None, description="Full entity for created/updated events"
    )
    entity_id: str | None = Field(
        default=None, alias="entityId", description="Entity uuid for deleted events"
    )
    acting_user_id: str | None = Field(default=None, alias="actingUserId")
    acting_user_name: str | None = Field(default=None, alias="actingUserName")

    @model_validator(mode="after")
    def check_payload(self) -> "PushEvent":
        """Require the payload each action needs and fill in ``entity_id``."""
        if self.action is not PushAction.DELETED and self.entity is None:
            raise ValueError(f"'{self.action.value}' events must carry the entity")
        if self.entity_id is None:
            if self.entity is None:
                raise ValueError("'deleted' events must carry an entity id")
            # Frozen model: computed field is assigned directly.
            object.__setattr__(self, "entity_id", self.entity.uuid)
        return self

    @property
    def target_uuid(self) -> str:
        """Identity of the entity the event is about."""
        assert self.entity_id is not None
        return self.entity_id

    @classmethod
    def from_socket(cls, event_name: str, payload: dict[str, Any]) -> "PushEvent":
        """Build an event from the socket wire shape.

        The socket emits ``entity:created`` / ``entity:updated`` /
        ``entity:deleted`` with ``{entityType, entity, entityId, userId,
        userName}``.
        """
        prefix, _, action = event_name.partition(":")
        if prefix != "entity" or action not in PushAction._value2member_map_:
            raise InvalidPushEventError(f"Unknown push event '{event_name}'")
        if "entityType" not in payload:
            raise InvalidPushEventError(f"Push event '{event_name}' has no entityType")

        return cls(
            entity_kind=payload["entityType"],
            action=PushAction(action),
            entity=payload.get("entity"),
            entity_id=payload.get("entityId"),
            acting_user_id=payload.get("userId"),
            acting_user_name=payload.get("userName"),
        )

    def to_socket(self) -> tuple[str, dict[str, Any]]:
        """Inverse of :meth:`from_socket`."""
        payload: dict[str, Any] = {
            "entityType": self.entity_kind,
            "userId": self.acting_user_id,
            "userName": self.acting_user_name,
        }
        if self.entity is not None:
            payload["entity"] = self.entity.to_wire()
        if self.action is PushAction.DELETED:
            payload["entityId"] = self.entity_id
        return f"entity:{self.action.value}", payload
