"""Centralized configuration for the movie dump ETL.

Configuration strategy:
- DATABASE settings: DATABASE_URL or POSTGRES_* parts. The writer refuses
  to run without them.
- INFRASTRUCTURE settings (Logging, ETL workers, paths): safe defaults,
  override via .env as needed.

All configuration values are sourced from environment variables (.env file).

Usage:
    from src.settings import settings

    settings.etl.max_workers
    settings.database.sync_url
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.settings.base import ETLSettings, LoggingSettings, PathsSettings
from src.settings.database import DatabaseSettings

__all__ = [
    # Main
    "Settings",
    "settings",
    # Base
    "PathsSettings",
    "LoggingSettings",
    "ETLSettings",
    # Database
    "DatabaseSettings",
]


# =============================================================================
# GLOBAL SETTINGS
# =============================================================================


class Settings(BaseSettings):
    """Global application settings.

    Aggregates all configuration sections into a single object.
    Access via the singleton: `from src.settings import settings`
    """

    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Paths and logging
    paths: PathsSettings = Field(default_factory=PathsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    etl: ETLSettings = Field(default_factory=ETLSettings)

    # Database
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"development", "production", "test"}
        v_lower = v.lower()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid ENVIRONMENT. Valid: {valid_envs}")
        return v_lower

    def model_post_init(self, _: Any) -> None:
        """Initialize directories after settings are loaded."""
        self.paths.ensure_directories()


# =============================================================================
# SINGLETON INSTANCE
# =============================================================================

settings = Settings()

