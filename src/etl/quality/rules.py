"""Quality gates for each entity kind and the per-run quality services."""

from dataclasses import dataclass, field
from pathlib import Path

from src.etl.quality.gate import QualityGate, QualityRule
from src.etl.quality.genres import (
    GenreEvidenceTracker,
    GenreNormalizer,
    contains_suspicious_characters,
)
from src.etl.quality.sink import QualityLogSink
from src.etl.types import GenreMovieRelationRecord, MovieRecord, StarMovieRelation, StarRecord


def _present(value: str | None) -> bool:
    return value is not None and bool(value.strip())


# =============================================================================
# GATE FACTORIES
# =============================================================================


def movie_gate(sink: QualityLogSink) -> QualityGate[MovieRecord]:
    """Movies need an id, a title, and a release year."""
    return QualityGate(
        "movie",
        [
            QualityRule("Missing movie id", lambda m: _present(m.id), "fid", lambda m: m.id),
            QualityRule("Missing movie title", lambda m: _present(m.title), "t", lambda m: m.title),
            QualityRule(
                "Missing or invalid release year",
                lambda m: m.year is not None,
                "year",
                lambda m: m.year,
            ),
        ],
        sink,
    )


def star_gate(sink: QualityLogSink) -> QualityGate[StarRecord]:
    """Stars need an id and a name."""
    return QualityGate(
        "star",
        [
            QualityRule("Missing star id", lambda s: _present(s.id), "id", lambda s: s.id),
            QualityRule("Missing star name", lambda s: _present(s.name), "name", lambda s: s.name),
        ],
        sink,
    )


def star_relation_gate(sink: QualityLogSink) -> QualityGate[StarMovieRelation]:
    return QualityGate(
        "star-movie relation",
        [
            QualityRule(
                "Missing star id", lambda r: _present(r.star_id), "starId", lambda r: r.star_id
            ),
            QualityRule(
                "Missing movie id", lambda r: _present(r.movie_id), "movieId", lambda r: r.movie_id
            ),
        ],
        sink,
    )


def genre_relation_gate(sink: QualityLogSink) -> QualityGate[GenreMovieRelationRecord]:
    """Genre relations need both ends and a genre free of stray separators."""
    return QualityGate(
        "genre-movie relation",
        [
            QualityRule(
                "Missing movie id", lambda r: _present(r.movie_id), "movieId", lambda r: r.movie_id
            ),
            QualityRule(
                "Missing genre name",
                lambda r: _present(r.genre_name),
                "genre",
                lambda r: r.genre_name,
            ),
            QualityRule(
                "Suspicious characters in genre name (possible data entry error)",
                lambda r: not contains_suspicious_characters(r.genre_name),
                "genre",
                lambda r: r.genre_name,
            ),
        ],
        sink,
    )


# =============================================================================
# PER-RUN SERVICES
# =============================================================================


@dataclass
class QualityServices:
    """Shared quality state for one run, injected into the transformer.

    Created once per run and never reset mid-run. The gates and the
    normalizer are read-only; the sink and the tracker synchronize
    themselves.
    """

    sink: QualityLogSink
    normalizer: GenreNormalizer = field(init=False)
    evidence: GenreEvidenceTracker = field(init=False)
    movies: QualityGate[MovieRecord] = field(init=False)
    stars: QualityGate[StarRecord] = field(init=False)
    star_relations: QualityGate[StarMovieRelation] = field(init=False)
    genre_relations: QualityGate[GenreMovieRelationRecord] = field(init=False)

    def __post_init__(self) -> None:
        self.normalizer = GenreNormalizer(sink=self.sink)
        self.evidence = GenreEvidenceTracker(self.sink)
        self.movies = movie_gate(self.sink)
        self.stars = star_gate(self.sink)
        self.star_relations = star_relation_gate(self.sink)
        self.genre_relations = genre_relation_gate(self.sink)

    @classmethod
    def create(cls, log_path: Path, echo: bool = False) -> "QualityServices":
        """Build services writing to the given quality log."""
        return cls(QualityLogSink(log_path, echo=echo))
