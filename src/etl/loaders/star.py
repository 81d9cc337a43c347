"""Star loader.

Upserts stars keyed by their synthetic id.
"""

from collections.abc import Iterable

from src.database.models import Star
from src.etl.loaders.base import BaseLoader, LoaderStats
from src.etl.loaders.upsert import build_upsert
from src.etl.types import StarRecord


class StarLoader(BaseLoader):
    """Loader for the stars table."""

    name = "stars"
    table = "stars"

    def load(self, stars: Iterable[StarRecord]) -> LoaderStats:
        """Upsert stars.

        Args:
            stars: Aggregated star records.

        Returns:
            LoaderStats with operation results.
        """
        self.reset_stats()
        stars = list(stars)
        if not stars:
            return self.stats

        self._logger.info(f"Loading {len(stars)} stars")
        for idx, star in enumerate(stars, 1):
            stmt = build_upsert(
                self._dialect,
                Star,
                {"id": star.id, "name": star.name, "birth_year": star.birth_year},
                key_columns=("id",),
                update_columns=("name", "birth_year"),
            )
            self._execute_row(stmt, star.id)
            self._log_progress(idx, len(stars))

        self._log_summary()
        return self.stats
