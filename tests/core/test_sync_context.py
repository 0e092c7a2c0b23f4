"""Tests for settings and the session sync context."""

from prodsync.core.context import (
    acting_user_fields,
    clear_sync_context,
    get_production_id,
    set_acting_user,
    set_production_id,
)
from prodsync.core.settings import Settings, get_settings


def test_settings_defaults_match_local_api():
    settings = Settings()

    assert settings.api_base_url == "http://localhost:3010"
    assert settings.request_timeout_seconds == 10.0
    assert settings.port == 3010


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "http://api.example:9000")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "2.5")

    settings = Settings()

    assert settings.api_base_url == "http://api.example:9000"
    assert settings.request_timeout_seconds == 2.5


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_acting_user_fields_use_context():
    set_acting_user("u-7", "Robin")

    assert acting_user_fields() == {"userId": "u-7", "userName": "Robin"}


def test_cleared_context_falls_back_to_settings():
    clear_sync_context()

    fields = acting_user_fields()

    assert fields["userId"] == get_settings().user_id
    assert fields["userName"] == get_settings().user_name


def test_production_id_from_context():
    set_production_id("prod-9")

    assert get_production_id() == "prod-9"

