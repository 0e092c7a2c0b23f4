"""Reorder DTOs.

This module defines the snapshot, plan and outcome objects exchanged between
the reorder planner and its callers, and the per-entity wire shape of a
scheduled renumbering write.
"""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class SnapshotEntry(BaseModel):
    """One entity as it was displayed when the drag ended."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    uuid: str = Field(..., description="Entity identity")
    label: str = Field(..., description="Current display label or pair number")
    version: int = Field(..., description="Version captured for the write")


class ReorderUpdate(BaseModel):
    """A single renumbering write: ``{uuid, newLabel, version}`` on the wire."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, populate_by_name=True)

    uuid: str = Field(..., description="Entity to relabel")
    new_label: str = Field(..., alias="newLabel", description="Label to write")
    version: int = Field(..., description="Expected version for the write")


class ReorderPlan(BaseModel):
    """Minimal set of writes realising one single-row move."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    source_index: int = Field(..., ge=0, description="Row index the drag started on")
    target_index: int = Field(..., ge=0, description="Row index the drag ended on")
    updates: tuple[ReorderUpdate, ...] = Field(
        default=(), description="Writes for rows whose label changes"
    )

    @property
    def is_empty(self) -> bool:
        """True when the drop leaves every label as it was."""
        return not self.updates


class ReorderOutcome(BaseModel):
    """Summary of a committed reorder."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    plan: ReorderPlan
    applied: int = Field(default=0, ge=0, description="Writes the server accepted")
    conflicts: int = Field(default=0, ge=0, description="Writes rejected as stale")
    failures: int = Field(
        default=0, ge=0, description="Writes lost to transport errors"
    )
    refreshed: bool = Field(
        default=False, description="Whether the authoritative refetch succeeded"
    )

    @property
    def fully_applied(self) -> bool:
        return self.applied == len(self.plan.updates)
