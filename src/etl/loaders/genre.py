"""Genre loader and genre id cache.

Genres are keyed by name but referenced by a generated id, so the
writer keeps a name to id cache filled from the table on first use.
"""

from collections.abc import Iterable

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.database.models import Genre
from src.etl.errors import PersistenceConflict
from src.etl.loaders.base import BaseLoader, LoaderStats
from src.etl.utils.logger import setup_logger


class GenreIdCache:
    """Name to id map of the genres table.

    Owned by one writer for one run. Loaded from all existing genre
    rows on first use; unseen names are inserted and their generated id
    cached.
    """

    def __init__(self) -> None:
        self._ids: dict[str, int] | None = None
        self._logger = setup_logger("etl.loader.genre_cache")

    def __len__(self) -> int:
        return len(self._ids or {})

    def get(self, name: str) -> int | None:
        """Cached id for name, without touching the database."""
        return (self._ids or {}).get(name)

    def load(self, session: Session) -> None:
        """Read every genre row into the cache."""
        rows = session.execute(select(Genre.id, Genre.name)).all()
        self._ids = {name: genre_id for genre_id, name in rows}
        self._logger.info(f"Genre cache loaded with {len(self._ids)} genres")

    def resolve(self, session: Session, name: str) -> tuple[int, bool]:
        """Return the id for name, inserting the genre when unseen.

        Args:
            session: Session of the current write call.
            name: Canonical genre name.

        Returns:
            Tuple of (genre id, whether a row was inserted).

        Raises:
            PersistenceConflict: If the genre can be neither inserted nor found.
        """
        if self._ids is None:
            self.load(session)

        cached = self._ids.get(name)
        if cached is not None:
            return cached, False

        try:
            with session.begin_nested():
                result = session.execute(insert(Genre).values(name=name))
            genre_id = result.inserted_primary_key[0]
            inserted = True
        except IntegrityError as e:
            # Inserted concurrently since the cache was loaded
            genre_id = session.execute(
                select(Genre.id).where(Genre.name == name)
            ).scalar_one_or_none()
            if genre_id is None:
                raise PersistenceConflict("genres", name, e) from e
            inserted = False
        except SQLAlchemyError as e:
            raise PersistenceConflict("genres", name, e) from e

        self._ids[name] = genre_id
        return genre_id, inserted


class GenreLoader(BaseLoader):
    """Loader for the genres table, through the shared id cache."""

    name = "genres"
    table = "genres"

    def __init__(self, session: Session, dialect: str, cache: GenreIdCache) -> None:
        """Initialize with session, dialect and the writer's cache.

        Args:
            session: SQLAlchemy session.
            dialect: Dialect name.
            cache: Genre id cache owned by the writer.
        """
        super().__init__(session, dialect)
        self._cache = cache

    def load(self, genres: Iterable[str]) -> LoaderStats:
        """Ensure every genre name has a row.

        Args:
            genres: Canonical genre names.

        Returns:
            LoaderStats where existing genres count as skipped.
        """
        self.reset_stats()
        names = sorted(set(genres))
        if not names:
            return self.stats

        self._logger.info(f"Loading {len(names)} genres")
        for name in names:
            try:
                _, inserted = self._cache.resolve(self._session, name)
            except PersistenceConflict as e:
                self._record_error(e)
                continue
            if inserted:
                self._record_insert()
            else:
                self._record_skip()

        self._log_summary()
        return self.stats
