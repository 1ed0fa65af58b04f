"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages


class DatabaseSettings(BaseModel):
    """Local cache database configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/rivo.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        le=30000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: int = Field(
        default=10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )
    ledger_retention_days: int = Field(default=90, ge=1)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://") and v != ":memory:":
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class BackendSettings(BaseModel):
    """Rivo REST backend configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(
        default="http://127.0.0.1:5000",
        validation_alias=AliasChoices("base_url", "url", "api_url"),
    )
    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "api_token")
    )
    user_id: str = ""
    timeout_seconds: float = Field(default=30.0, gt=0.0, le=300.0)
    report_max_attempts: int = Field(default=3, ge=1, le=10)
    report_backoff_base_seconds: float = Field(default=0.35, ge=0.0, le=30.0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Backend URL must start with http:// or https://")
        return v.rstrip("/")


class PlaybackSettings(BaseModel):
    """Playback and play-count heuristic configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    play_count_threshold_seconds: float = Field(
        default=45.0,
        gt=0.0,
        validation_alias=AliasChoices("play_count_threshold_seconds", "play_count_threshold"),
    )
    seek_tolerance_seconds: float = Field(
        default=1.5,
        gt=0.0,
        validation_alias=AliasChoices("seek_tolerance_seconds", "seek_tolerance"),
    )
    tick_interval_seconds: float = Field(default=1.0, gt=0.0, le=10.0)
    restart_threshold_seconds: float = Field(default=3.0, ge=0.0)
    fallback_retry_delay_seconds: float = Field(default=1.0, ge=0.0, le=30.0)
    cache_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "rivo_player" / "music_cache"
    )
    audio_device: str | None = None

    @model_validator(mode="after")
    def validate_tolerance(self) -> PlaybackSettings:
        if self.seek_tolerance_seconds >= self.play_count_threshold_seconds:
            raise ValueError("seek_tolerance_seconds must be smaller than the play-count threshold")
        return self


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - BACKEND__BASE_URL, BACKEND__TOKEN, etc. (nested with delimiter)
    - PLAYBACK__PLAY_COUNT_THRESHOLD_SECONDS, PLAYBACK__CACHE_DIR, etc.
    - DATABASE__URL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    backend: BackendSettings = Field(default_factory=BackendSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
