"""Typed domain records produced by the transformer.

Movies and stars are entities: equality and hashing use the id only.
Relations are value types compared on every field.
"""

from dataclasses import dataclass, field
from pathlib import Path

from src.etl.types.raw import RawTree


@dataclass(frozen=True)
class RawFileResult:
    """Records parsed from one XML file, in document order.

    Attributes:
        source_path: File the records were read from.
        records: One RawTree per row element.
        issues: Recoverable parsing issues (missing DTD, tag mismatches).
    """

    source_path: Path
    records: tuple[RawTree, ...] = ()
    issues: tuple[str, ...] = ()

    @property
    def record_count(self) -> int:
        """Number of row elements parsed."""
        return len(self.records)


@dataclass(frozen=True)
class MovieRecord:
    """Movie row candidate.

    Attributes:
        id: External movie identifier (``fid``).
        title: Movie title.
        year: Release year, required for persistence.
        director: Director name if known.
    """

    id: str
    title: str | None = field(default=None, compare=False)
    year: int | None = field(default=None, compare=False)
    director: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class StarRecord:
    """Star row candidate identified by a synthetic name-derived id."""

    id: str
    name: str | None = field(default=None, compare=False)
    birth_year: int | None = field(default=None, compare=False)

    def coalesce(self, other: "StarRecord") -> "StarRecord":
        """Fill missing fields from a duplicate of the same star.

        The first non-blank name and first non-null birth year win.

        Args:
            other: Later record with the same id.

        Returns:
            Merged record (self when nothing changes).
        """
        name = self.name if self.name and self.name.strip() else other.name
        birth_year = self.birth_year if self.birth_year is not None else other.birth_year
        if name == self.name and birth_year == self.birth_year:
            return self
        return StarRecord(id=self.id, name=name, birth_year=birth_year)


@dataclass(frozen=True, order=True)
class StarMovieRelation:
    """Star appears in movie."""

    star_id: str
    movie_id: str


@dataclass(frozen=True, order=True)
class GenreMovieRelationRecord:
    """Movie is classified under a canonical genre name."""

    movie_id: str
    genre_name: str


# =============================================================================
# BATCH
# =============================================================================


@dataclass
class TransformedBatch:
    """Typed records of one file, or of a whole run once aggregated.

    Movies and stars are keyed by id and keep insertion order. Adding a
    movie twice keeps the first one; adding a star twice coalesces.

    Attributes:
        movies: Movie records keyed by id.
        stars: Star records keyed by id.
        star_relations: Distinct star/movie pairs.
        genres: Distinct canonical genre names.
        genre_relations: Distinct movie/genre pairs.
    """

    movies: dict[str, MovieRecord] = field(default_factory=dict)
    stars: dict[str, StarRecord] = field(default_factory=dict)
    star_relations: set[StarMovieRelation] = field(default_factory=set)
    genres: set[str] = field(default_factory=set)
    genre_relations: set[GenreMovieRelationRecord] = field(default_factory=set)

    def add_movie(self, movie: MovieRecord) -> None:
        """Add movie unless its id is already present."""
        self.movies.setdefault(movie.id, movie)

    def add_star(self, star: StarRecord) -> None:
        """Add star, coalescing with an existing record of the same id."""
        existing = self.stars.get(star.id)
        self.stars[star.id] = star if existing is None else existing.coalesce(star)

    def add_star_relation(self, relation: StarMovieRelation) -> None:
        self.star_relations.add(relation)

    def add_genre(self, genre_name: str) -> None:
        self.genres.add(genre_name)

    def add_genre_relation(self, relation: GenreMovieRelationRecord) -> None:
        self.genre_relations.add(relation)

    @property
    def record_count(self) -> int:
        """Total typed records across all collections."""
        return (
            len(self.movies)
            + len(self.stars)
            + len(self.star_relations)
            + len(self.genres)
            + len(self.genre_relations)
        )

    def is_empty(self) -> bool:
        """Check whether the batch carries no record at all."""
        return self.record_count == 0
