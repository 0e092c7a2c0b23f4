"""Entity records as held in the client-side cache.

Only ``uuid``, ``id`` and ``version`` mean anything to the sync layer. Every
other wire field (resolution, equipment reference, note histories, ...) is
carried through untouched as a pydantic extra.
"""

import enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EntityRecord(BaseModel):
    """One production entity (camera, monitor, send, ...)."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="allow")

    uuid: str = Field(..., description="Immutable server-assigned identity")
    id: str = Field(default="", description="Display label, e.g. 'FOH 2'")
    version: int = Field(default=1, ge=0, description="Optimistic-concurrency counter")

    @field_validator("uuid")
    @classmethod
    def validate_uuid(cls, v: str) -> str:
        """Ensure the identity key is usable."""
        if not v or not v.strip():
            raise ValueError("Entity uuid cannot be empty")
        return v

    def get_field(self, name: str, default: Any = None) -> Any:
        """Read an opaque domain field by its wire name."""
        extra = self.model_extra or {}
        return extra.get(name, default)

    def to_wire(self) -> dict[str, Any]:
        """Dump back to the JSON shape the API speaks."""
        return self.model_dump(mode="json")


class EntryType(str, enum.Enum):
    """Kinds of note history entries."""

    INFO = "info"
    COMPLETION = "completion"


class TimestampedEntry(BaseModel):
    """An append-only note or completion comment."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    id: str = Field(..., description="Entry id, unique within its history")
    text: str = Field(..., description="Note text")
    timestamp: int = Field(..., ge=0, description="Creation time in epoch millis")
    type: EntryType = Field(default=EntryType.INFO, description="Entry kind")


class ConflictResult(BaseModel):
    """The server rejected a write made against a stale version.

    Carries no entity data: the caller must refetch before trying again.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, populate_by_name=True)

    error: str = Field(..., description="Conflict tag; its presence marks a conflict")
    message: str = Field(default="", description="Human readable explanation")
    current_version: int | None = Field(default=None, alias="currentVersion")
    client_version: int | None = Field(default=None, alias="clientVersion")

    @classmethod
    def is_conflict_payload(cls, payload: dict[str, Any]) -> bool:
        """Whether a wire response is a conflict rather than an entity."""
        return "error" in payload
