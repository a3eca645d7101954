"""Configuration management for slotwise."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/slotwise.db",
        description="SQLAlchemy async DSN for the scheduling database",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log",
    )
    auto_create_tables: bool = Field(
        default=True,
        description="Create missing tables on API startup (dev only)",
    )

    # API Settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8080)

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins",
    )

    # Activity log
    activity_log_enabled: bool = Field(
        default=True,
        description="Record scheduling activity (queue assignments, cancellations, ...)",
    )
    activity_log_dir: Optional[Path] = Field(
        default=None,
        description="Directory for the JSONL activity mirror; disabled when unset",
    )

    # Debug
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (exposes error details in responses)",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
