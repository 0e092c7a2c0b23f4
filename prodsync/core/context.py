"""Session-scoped sync context.

We use `contextvars` so every write can be stamped with the acting user and
production without threading them through each call.
"""

from __future__ import annotations

import contextvars

from prodsync.core.settings import get_settings

acting_user_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "acting_user_id", default=None
)
acting_user_name_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "acting_user_name", default=None
)
production_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "production_id", default=None
)


def get_acting_user_id() -> str:
    user_id = acting_user_id_var.get()
    if user_id is None:
        return get_settings().user_id
    return user_id


def get_acting_user_name() -> str:
    user_name = acting_user_name_var.get()
    if user_name is None:
        return get_settings().user_name
    return user_name


def get_production_id() -> str | None:
    production_id = production_id_var.get()
    if production_id is None:
        return get_settings().production_id
    return production_id


def set_acting_user(user_id: str | None, user_name: str | None = None) -> None:
    _ = acting_user_id_var.set(user_id)
    _ = acting_user_name_var.set(user_name)


def set_production_id(production_id: str | None) -> None:
    _ = production_id_var.set(production_id)


def acting_user_fields() -> dict[str, str]:
    """Wire fields identifying who made a change."""
    return {"userId": get_acting_user_id(), "userName": get_acting_user_name()}


def clear_sync_context() -> None:
    """Reset to the settings defaults."""
    _ = acting_user_id_var.set(None)
    _ = acting_user_name_var.set(None)
    _ = production_id_var.set(None)
