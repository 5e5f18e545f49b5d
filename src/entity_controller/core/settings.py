"""Environment-driven settings for entity-controller.

``ControllerSettings`` gathers the few knobs an application needs to wire
controllers to a database: the SQLAlchemy URL, SQL echo and logging.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at first query
    - **Environment-driven:** ``ENTITY_CONTROLLER_*`` env vars and ``.env``
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> import os
    >>> os.environ["ENTITY_CONTROLLER_DATABASE_URL"] = "sqlite:///app.db"
    >>> get_settings(_force_reload=True).database_url
    'sqlite:///app.db'

Tags:
    settings, configuration, pydantic, environment, entity-controller
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ControllerSettings(BaseSettings):
    """Settings shared by every application built on entity-controller.

    Fields
    ──────
    database_url : SQLAlchemy URL the default engine connects to
    echo_sql     : Log every SQL statement emitted by SQLAlchemy
    log_level    : Structlog log level
    json_logs    : JSON log output; ``None`` auto-detects from the TTY
    """

    model_config = SettingsConfigDict(
        env_prefix="ENTITY_CONTROLLER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="sqlite:///:memory:")
    echo_sql: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}, got {value!r}")
        return level


_settings_cache: dict[str, ControllerSettings] = {}


def get_settings(*, _force_reload: bool = False) -> ControllerSettings:
    """Load, validate, and cache a :class:`ControllerSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = ControllerSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Drop the cached settings (tests, reconfiguration)."""
    _settings_cache.clear()


__all__ = ["ControllerSettings", "LOG_LEVELS", "get_settings", "clear_settings_cache"]
