"""Application settings and configuration."""

from functools import lru_cache
from typing import ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Sync client settings loaded from environment variables."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Production Sync", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    host: str = Field(default="0.0.0.0", description="Dev server host to bind to")
    port: int = Field(default=3010, description="Dev server port to bind to")
    log_level: str = Field(default="INFO", description="Root logging level")

    # REST API
    api_base_url: str = Field(
        default="http://localhost:3010", description="Base URL of the production API"
    )
    request_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for a single REST call"
    )

    # Session identity
    production_id: str | None = Field(
        default=None, description="Production the session is editing"
    )
    user_id: str = Field(default="anonymous", description="Acting user id")
    user_name: str = Field(default="Anonymous", description="Acting user display name")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
