"""Database writer facade.

Persists an aggregated batch table by table. Every ``write_*`` call
runs in one session and one transaction; the rows inside it are
isolated from each other by SAVEPOINTs.
"""

from collections.abc import Iterable

from src.database.connection import DatabaseConnection
from src.etl.loaders.base import LoaderStats
from src.etl.loaders.genre import GenreIdCache, GenreLoader
from src.etl.loaders.movie import MovieLoader
from src.etl.loaders.relations import GenreMovieLoader, StarMovieLoader
from src.etl.loaders.star import StarLoader
from src.etl.types import (
    GenreMovieRelationRecord,
    MovieRecord,
    StarMovieRelation,
    StarRecord,
    TransformedBatch,
)
from src.etl.utils.logger import setup_logger
from src.settings import DatabaseSettings

WRITE_ORDER = ("movies", "stars", "genres", "stars_in_movies", "genres_in_movies")
"""Tables in foreign key order."""


class DatabaseWriter:
    """Writes aggregated records with idempotent upserts.

    The connection is opened on the first write, so a missing or
    invalid configuration surfaces as ConfigurationError from that
    write. Nothing is retried.

    Attributes:
        genre_cache: Genre name to id cache shared by genre writes.
    """

    def __init__(
        self,
        db_settings: DatabaseSettings | None = None,
        connection: DatabaseConnection | None = None,
    ) -> None:
        """Initialize the writer.

        Args:
            db_settings: Database settings used to open a connection.
            connection: Existing connection, used as is and not disposed.
        """
        self._db_settings = db_settings
        self._connection = connection
        self._owns_connection = connection is None
        self.genre_cache = GenreIdCache()
        self._logger = setup_logger("etl.writer")

    @property
    def connection(self) -> DatabaseConnection:
        """Database connection, created on first access.

        Raises:
            ConfigurationError: If the connection cannot be configured.
        """
        if self._connection is None:
            self._connection = DatabaseConnection(db_settings=self._db_settings)
            self._logger.info(f"Connected writer to {self._connection.dialect_name} database")
        return self._connection

    # =========================================================================
    # Per-table writes
    # =========================================================================

    def write_movies(self, movies: Iterable[MovieRecord]) -> LoaderStats:
        """Upsert movies, skipping those without a release year."""
        connection = self.connection
        with connection.session() as session:
            return MovieLoader(session, connection.dialect_name).load(movies)

    def write_stars(self, stars: Iterable[StarRecord]) -> LoaderStats:
        """Upsert stars."""
        connection = self.connection
        with connection.session() as session:
            return StarLoader(session, connection.dialect_name).load(stars)

    def write_genres(self, genres: Iterable[str]) -> LoaderStats:
        """Insert unseen genres and cache their ids."""
        connection = self.connection
        with connection.session() as session:
            return GenreLoader(session, connection.dialect_name, self.genre_cache).load(genres)

    def write_star_relations(self, relations: Iterable[StarMovieRelation]) -> LoaderStats:
        """Insert star/movie pairs that are not present yet."""
        connection = self.connection
        with connection.session() as session:
            return StarMovieLoader(session, connection.dialect_name).load(relations)

    def write_genre_relations(
        self, relations: Iterable[GenreMovieRelationRecord]
    ) -> LoaderStats:
        """Insert genre/movie pairs, creating unseen genres first."""
        connection = self.connection
        with connection.session() as session:
            loader = GenreMovieLoader(session, connection.dialect_name, self.genre_cache)
            return loader.load(relations)

    # =========================================================================
    # Whole batch
    # =========================================================================

    def write_all(self, batch: TransformedBatch) -> dict[str, LoaderStats]:
        """Write every table of batch in foreign key order.

        Args:
            batch: Aggregated batch.

        Returns:
            LoaderStats per table name, in write order.
        """
        writes = {
            "movies": lambda: self.write_movies(batch.movies.values()),
            "stars": lambda: self.write_stars(batch.stars.values()),
            "genres": lambda: self.write_genres(batch.genres),
            "stars_in_movies": lambda: self.write_star_relations(batch.star_relations),
            "genres_in_movies": lambda: self.write_genre_relations(batch.genre_relations),
        }

        results: dict[str, LoaderStats] = {}
        for table in WRITE_ORDER:
            results[table] = writes[table]()
        return results

    def close(self) -> None:
        """Dispose the connection if the writer opened it."""
        if self._connection is not None and self._owns_connection:
            self._connection.dispose()
            self._connection = None

    def __enter__(self) -> "DatabaseWriter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
