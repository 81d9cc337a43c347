"""Database connection management with SQLAlchemy 2.0.

Provides an engine, a session factory and a transactional session
scope for the writer. SQLite targets get foreign key enforcement and
working SAVEPOINTs.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from src.etl.errors import ConfigurationError
from src.settings import DatabaseSettings, settings

SUPPORTED_DIALECTS = frozenset({"postgresql", "sqlite", "mysql"})
"""Dialects with an upsert statement the writer knows how to build."""


class DatabaseConnection:
    """Manages one engine and its session factory.

    One instance per pipeline run; nothing is shared between runs.

    Attributes:
        url: Connection URL in use.

    Example:
        ```python
        db = DatabaseConnection(url="sqlite:///movies.db")
        with db.session() as session:
            result = session.execute(text("SELECT 1"))
        ```
    """

    def __init__(
        self,
        db_settings: DatabaseSettings | None = None,
        url: str | None = None,
        echo: bool | None = None,
    ) -> None:
        """Create the engine.

        Args:
            db_settings: Database section of the settings (global one by default).
            url: Explicit URL, overriding db_settings.
            echo: Log SQL statements (defaults to the DEBUG setting).

        Raises:
            ConfigurationError: URL missing or invalid, driver unavailable,
                or dialect unsupported.
        """
        self._db_settings = db_settings or settings.database
        self.url = url or self._resolve_url(self._db_settings)
        self._echo = settings.debug if echo is None else echo
        self._sync_engine = self._create_sync_engine()
        self._sync_session_factory = self._create_sync_session_factory()

    @staticmethod
    def _resolve_url(db_settings: DatabaseSettings) -> str:
        if not db_settings.is_configured:
            raise ConfigurationError(
                "Database connection is not configured: set DATABASE_URL or POSTGRES_PASSWORD"
            )
        return db_settings.sync_url

    def _create_sync_engine(self) -> Engine:
        """Create synchronous SQLAlchemy engine.

        Returns:
            SQLAlchemy Engine, pooled for server databases.

        Raises:
            ConfigurationError: If the URL or driver cannot be used.
        """
        try:
            url = make_url(self.url)
            if url.get_backend_name() not in SUPPORTED_DIALECTS:
                raise ConfigurationError(
                    f"Unsupported database dialect '{url.get_backend_name()}'"
                )

            if url.get_backend_name() == "sqlite":
                engine = create_engine(url, echo=self._echo)
                _enable_sqlite_savepoints(engine)
                return engine

            return create_engine(
                url,
                pool_size=self._db_settings.pool_size,
                max_overflow=self._db_settings.pool_overflow,
                pool_timeout=self._db_settings.pool_timeout,
                pool_pre_ping=True,
                echo=self._echo,
            )
        except (ArgumentError, NoSuchModuleError, ImportError) as e:
            raise ConfigurationError(f"Cannot create database engine: {e}") from e

    def _create_sync_session_factory(self) -> sessionmaker[Session]:
        """Create synchronous session factory.

        Returns:
            Configured sessionmaker for sync sessions.
        """
        return sessionmaker(
            bind=self._sync_engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Provide a transactional sync session scope.

        Automatically commits on success, rolls back on exception,
        and closes the session when done.

        Yields:
            SQLAlchemy Session instance.

        Raises:
            Exception: Re-raises any exception after rollback.
        """
        session = self._sync_session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def check_connection(self) -> bool:
        """Test database connectivity with a simple query.

        Returns:
            True if connection successful, False otherwise.
        """
        try:
            with self.session() as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def dispose(self) -> None:
        """Dispose the connection pool and release resources."""
        self._sync_engine.dispose()

    @property
    def sync_engine(self) -> Engine:
        """Get the underlying sync engine."""
        return self._sync_engine

    @property
    def dialect_name(self) -> str:
        """Name of the engine dialect (postgresql, sqlite, mysql)."""
        return self._sync_engine.dialect.name


# =============================================================================
# SQLITE SUPPORT
# =============================================================================


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy own transactions on pysqlite connections.

    pysqlite issues its own BEGIN lazily, which breaks SAVEPOINT; the
    driver's transaction handling is switched off and BEGIN is emitted
    explicitly. Foreign keys are off by default in SQLite.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):  # noqa: ANN001, ARG001
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")
