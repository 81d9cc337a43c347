"""Association loaders: stars_in_movies and genres_in_movies.

Both tables are insert-or-ignore: a pair already present is skipped.
Pairs are written in sorted order so runs are reproducible.
"""

from collections.abc import Iterable

from sqlalchemy.orm import Session

from src.database.models import GenreInMovie, StarInMovie
from src.etl.errors import PersistenceConflict
from src.etl.loaders.base import BaseLoader, LoaderStats
from src.etl.loaders.genre import GenreIdCache
from src.etl.loaders.upsert import build_upsert
from src.etl.types import GenreMovieRelationRecord, StarMovieRelation


class StarMovieLoader(BaseLoader):
    """Loader for star/movie pairs."""

    name = "stars_in_movies"
    table = "stars_in_movies"

    def load(self, relations: Iterable[StarMovieRelation]) -> LoaderStats:
        """Insert star/movie pairs.

        Args:
            relations: Aggregated cast pairs.

        Returns:
            LoaderStats with operation results.
        """
        self.reset_stats()
        relations = sorted(relations)
        if not relations:
            return self.stats

        self._logger.info(f"Loading {len(relations)} star-movie pairs")
        for idx, relation in enumerate(relations, 1):
            stmt = build_upsert(
                self._dialect,
                StarInMovie,
                {"star_id": relation.star_id, "movie_id": relation.movie_id},
                key_columns=("star_id", "movie_id"),
            )
            self._execute_row(stmt, (relation.star_id, relation.movie_id))
            self._log_progress(idx, len(relations))

        self._log_summary()
        return self.stats


class GenreMovieLoader(BaseLoader):
    """Loader for genre/movie pairs.

    Genre names are resolved through the writer's GenreIdCache, which
    inserts genres it has not seen yet.
    """

    name = "genres_in_movies"
    table = "genres_in_movies"

    def __init__(self, session: Session, dialect: str, cache: GenreIdCache) -> None:
        """Initialize with session, dialect and the writer's cache.

        Args:
            session: SQLAlchemy session.
            dialect: Dialect name.
            cache: Genre id cache owned by the writer.
        """
        super().__init__(session, dialect)
        self._cache = cache

    def load(self, relations: Iterable[GenreMovieRelationRecord]) -> LoaderStats:
        """Insert genre/movie pairs.

        Args:
            relations: Aggregated genre pairs.

        Returns:
            LoaderStats with operation results.
        """
        self.reset_stats()
        relations = sorted(relations)
        if not relations:
            return self.stats

        self._logger.info(f"Loading {len(relations)} genre-movie pairs")
        for idx, relation in enumerate(relations, 1):
            try:
                genre_id, _ = self._cache.resolve(self._session, relation.genre_name)
            except PersistenceConflict as e:
                self._record_skip(
                    f"Skipping genre pair ({relation.movie_id!r}, {relation.genre_name!r}): "
                    f"genre could not be resolved ({e})"
                )
                continue

            stmt = build_upsert(
                self._dialect,
                GenreInMovie,
                {"genre_id": genre_id, "movie_id": relation.movie_id},
                key_columns=("genre_id", "movie_id"),
            )
            self._execute_row(stmt, (relation.genre_name, relation.movie_id))
            self._log_progress(idx, len(relations))

        self._log_summary()
        return self.stats
