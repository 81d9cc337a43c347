"""Movie loader.

Upserts movies keyed by film id. Movies without a release year are
filtered out before any statement is issued.
"""

from collections.abc import Iterable

from src.database.models import Movie
from src.etl.loaders.base import BaseLoader, LoaderStats
from src.etl.loaders.upsert import build_upsert
from src.etl.types import MovieRecord


class MovieLoader(BaseLoader):
    """Loader for the movies table."""

    name = "movies"
    table = "movies"

    def load(self, movies: Iterable[MovieRecord]) -> LoaderStats:
        """Upsert movies.

        Args:
            movies: Aggregated movie records.

        Returns:
            LoaderStats with operation results.
        """
        self.reset_stats()
        movies = list(movies)
        if not movies:
            return self.stats

        self._logger.info(f"Loading {len(movies)} movies")
        for idx, movie in enumerate(movies, 1):
            if movie.year is None:
                self._record_skip(f"Skipping movie {movie.id!r}: release year is missing")
                continue
            self._execute_row(self._build_statement(movie), movie.id)
            self._log_progress(idx, len(movies))

        self._log_summary()
        return self.stats

    def _build_statement(self, movie: MovieRecord):
        return build_upsert(
            self._dialect,
            Movie,
            {
                "id": movie.id,
                "title": movie.title,
                "year": movie.year,
                "director": movie.director,
            },
            key_columns=("id",),
            update_columns=("title", "year", "director"),
        )
