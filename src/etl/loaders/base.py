"""Base loader abstract class.

Provides common interface and utilities for all ETL loaders writing
aggregated records into the target database. Every row is written in
its own SAVEPOINT so a failing row never aborts the rest of the batch.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from sqlalchemy import Executable
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.etl.errors import PersistenceConflict
from src.etl.utils.logger import setup_logger

PROGRESS_INTERVAL = 1000
"""Rows between two progress log lines."""


@dataclass
class LoaderStats:
    """Statistics for a loader operation.

    Attributes:
        inserted: Rows written (inserted or updated in place).
        skipped: Rows filtered out or already present.
        errors: Rows whose statement failed.
        error_messages: Descriptions of skips and failures.
    """

    inserted: int = 0
    skipped: int = 0
    errors: int = 0
    error_messages: list[str] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        """Total records processed."""
        return self.inserted + self.skipped + self.errors

    @property
    def success_rate(self) -> float:
        """Calculate success rate as percentage.

        Returns:
            Success rate between 0.0 and 100.0.
        """
        if self.total_processed == 0:
            return 100.0
        return round((1 - self.errors / self.total_processed) * 100, 2)

    def merge(self, other: "LoaderStats") -> "LoaderStats":
        """Merge statistics from another LoaderStats.

        Args:
            other: LoaderStats to merge.

        Returns:
            New LoaderStats with combined values.
        """
        return LoaderStats(
            inserted=self.inserted + other.inserted,
            skipped=self.skipped + other.skipped,
            errors=self.errors + other.errors,
            error_messages=self.error_messages + other.error_messages,
        )


class BaseLoader(ABC):
    """Abstract base class for all ETL loaders.

    Provides common functionality for database operations,
    logging, and statistics tracking.

    Attributes:
        name: Loader identifier for logging.
        table: Target table name, used in failure messages.
    """

    name: str = "base"
    table: str = ""

    def __init__(self, session: Session, dialect: str) -> None:
        """Initialize loader with database session.

        Args:
            session: SQLAlchemy session, one transaction per load call.
            dialect: Dialect name used to build upserts.
        """
        self._session = session
        self._dialect = dialect
        self._logger = setup_logger(f"etl.loader.{self.name}")
        self._stats = LoaderStats()

    @property
    def session(self) -> Session:
        """Get the SQLAlchemy session."""
        return self._session

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger

    @property
    def stats(self) -> LoaderStats:
        """Get current loader statistics."""
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics for a new load operation."""
        self._stats = LoaderStats()

    @abstractmethod
    def load(self, data: object) -> LoaderStats:
        """Execute the load operation.

        Args:
            data: Data to load (type depends on implementation).

        Returns:
            LoaderStats with operation results.
        """
        pass

    def _execute_row(self, stmt: Executable, key: object) -> None:
        """Execute one row statement inside its own SAVEPOINT.

        Failures roll back the SAVEPOINT only and are recorded.

        Args:
            stmt: Insert/upsert statement for one row.
            key: Row identity for failure messages.
        """
        try:
            with self._session.begin_nested():
                result = self._session.execute(stmt)
        except SQLAlchemyError as e:
            self._record_error(PersistenceConflict(self.table, key, e))
            return

        # rowcount is 0 when an insert-or-ignore found the row already present
        if result.rowcount == 0:
            self._record_skip()
        else:
            self._record_insert()

    def _record_insert(self) -> None:
        """Record a successful write."""
        self._stats.inserted += 1

    def _record_skip(self, message: str | None = None) -> None:
        """Record a skipped record.

        Args:
            message: Reason, logged when given.
        """
        self._stats.skipped += 1
        if message:
            self._stats.error_messages.append(message)
            self._logger.warning(message)

    def _record_error(self, error: Exception) -> None:
        """Record a failed row.

        Args:
            error: Failure description.
        """
        self._stats.errors += 1
        self._stats.error_messages.append(str(error))
        self._logger.warning("Row write failed: %s", error)

    def _log_progress(self, current: int, total: int) -> None:
        """Log loading progress at regular intervals.

        Args:
            current: Current item count.
            total: Total items to process.
        """
        if total > 0 and current % PROGRESS_INTERVAL == 0:
            pct = (current / total) * 100
            self._logger.info(f"Progress: {current}/{total} ({pct:.1f}%)")

    def _log_summary(self) -> None:
        """Log final statistics summary."""
        self._logger.info(
            f"{self.name} complete: "
            f"inserted={self._stats.inserted}, "
            f"skipped={self._stats.skipped}, "
            f"errors={self._stats.errors}"
        )
