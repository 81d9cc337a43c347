"""Base configuration settings.

Contains foundational settings for paths, logging, and the XML ETL.
"""

import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# PROJECT ROOT DETECTION
# =============================================================================

_PROJECT_ROOT = Path(__file__).parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


def get_project_root() -> Path:
    """Get project root directory."""
    return _PROJECT_ROOT


def get_env_file() -> Path:
    """Get .env file path."""
    return _ENV_FILE


# =============================================================================
# PATH SETTINGS
# =============================================================================


class PathsSettings(BaseSettings):
    """Data and logs paths configuration.

    Automatically creates required directories on initialization.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def project_root(self) -> Path:
        """Project root directory."""
        return _PROJECT_ROOT

    @property
    def data_dir(self) -> Path:
        """Root data directory, also searched for DTD files."""
        return _PROJECT_ROOT / "data"

    @property
    def xml_dir(self) -> Path:
        """Default directory scanned for XML dumps."""
        return self.data_dir / "xml"

    @property
    def logs_dir(self) -> Path:
        """Application logs."""
        return _PROJECT_ROOT / "logs"

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        directories = [
            self.data_dir,
            self.xml_dir,
            self.logs_dir,
        ]
        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)


# =============================================================================
# LOGGING SETTINGS
# =============================================================================


class LoggingSettings(BaseSettings):
    """Logging configuration.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Log files directory.
    """

    level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default="logs", alias="LOG_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid LOG_LEVEL. Valid: {valid_levels}")
        return v_upper


# =============================================================================
# ETL SETTINGS
# =============================================================================


class ETLSettings(BaseSettings):
    """XML ETL pipeline configuration.

    Attributes:
        input_dir: Directory scanned recursively for XML files.
        max_workers: Worker threads (0 means one per CPU).
        root_tag: Root element override (blank means inferred).
        row_tag: Record element override (blank means inferred).
        shutdown_timeout: Seconds to wait for a graceful pool shutdown.
        quality_log: Append-only data quality log file.
        quality_echo: Echo quality rejections to stderr.
    """

    input_dir: str | None = Field(default=None, alias="ETL_INPUT_DIR")
    max_workers: int = Field(default=0, alias="ETL_MAX_WORKERS")
    root_tag: str = Field(default="", alias="ETL_ROOT_TAG")
    row_tag: str = Field(default="", alias="ETL_ROW_TAG")
    shutdown_timeout: float = Field(default=60.0, alias="ETL_SHUTDOWN_TIMEOUT")
    quality_log: str = Field(default="data-quality.log", alias="ETL_QUALITY_LOG")
    quality_echo: bool = Field(default=True, alias="ETL_QUALITY_ECHO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        """Reject negative worker counts."""
        if v < 0:
            raise ValueError("ETL_MAX_WORKERS must be >= 0")
        return v

    @property
    def effective_workers(self) -> int:
        """Worker count with 0 resolved to the CPU count."""
        return self.max_workers or (os.cpu_count() or 1)
