"""
Configuration settings for the learnpath progression engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / ".learnpath"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Storage
    # ========================================
    database_url: str = Field(
        default=f"sqlite:///{DEFAULT_DATA_DIR / 'progress.db'}",
        description="SQLAlchemy URL for the progress / card-state / review-log store",
    )
    content_manifest: Path | None = Field(
        default=None,
        description="JSON manifest describing modules, lessons and card ids",
    )

    # ========================================
    # Analytics windows
    # ========================================
    timezone: str | None = Field(
        default=None,
        description="IANA zone used for local-midnight day boundaries (system local if unset)",
    )
    weekly_window_days: int = Field(
        default=7,
        ge=1,
        description="Number of calendar days in the weekly activity series",
    )
    heatmap_window_days: int = Field(
        default=28,
        ge=1,
        description="Number of calendar days in the activity heatmap",
    )

    # ========================================
    # Mastery
    # ========================================
    mastery_rule: Literal["graded", "coarse"] = Field(
        default="graded",
        description="Module mastery rule: 'graded' distinguishes mastered, 'coarse' never does",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper() if isinstance(value, str) else value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
