"""Pydantic Settings: typed configuration with .env auto-loading."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    service_port: int = 5000
    cors_origins: list[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"

    # ── Google Classroom API ─────────────────────────────────
    classroom_base_url: str = "https://classroom.googleapis.com"
    classroom_api_prefix: str = "/v1"
    classroom_timeout: int = 15  # seconds
    classroom_page_size: int = 100
    # Upper bound on courses loaded at the same time per request
    classroom_max_concurrency: int = 8


@lru_cache
def get_settings() -> Settings:
    """Singleton accessor for application settings."""
    return Settings()
