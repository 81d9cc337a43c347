"""Database configuration settings.

Connection parameters, SQLAlchemy driver, and pool settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Target database configuration.

    Attributes:
        driver: SQLAlchemy dialect+driver name.
        host: Database host.
        port: Database port.
        database: Database name.
        user: Database user.
        password: Database password.
        url: Full connection URL (overrides individual settings).
    """

    driver: str = Field(default="postgresql+psycopg2", alias="DB_DRIVER")
    host: str = Field(default="localhost", alias="POSTGRES_HOST")
    port: int = Field(default=5432, alias="POSTGRES_PORT")
    database: str = Field(default="moviedb", alias="POSTGRES_DB")
    user: str = Field(default="moviedb_user", alias="POSTGRES_USER")
    password: str = Field(default="", alias="POSTGRES_PASSWORD")
    url: str | None = Field(default=None, alias="DATABASE_URL")

    # Pool settings
    pool_size: int = Field(default=5, alias="DB_POOL_SIZE")
    pool_overflow: int = Field(default=10, alias="DB_POOL_OVERFLOW")
    pool_timeout: int = Field(default=30, alias="DB_POOL_TIMEOUT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_configured(self) -> bool:
        """Check if database credentials are configured."""
        return bool(self.password or self.url)

    @property
    def sync_url(self) -> str:
        """Generate synchronous connection URL."""
        if self.url:
            return self.url
        return (
            f"{self.driver}://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )
