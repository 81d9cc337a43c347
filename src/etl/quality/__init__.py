"""Data quality package: rule gates, genre normalization, quality log.

Usage:
    from src.etl.quality import QualityServices

    quality = QualityServices.create(Path("data-quality.log"))
    quality.movies.accept(movie, "mains243.xml", element="film")
"""

from src.etl.quality.gate import QualityGate, QualityRule, preview
from src.etl.quality.genres import (
    CANONICAL_GENRES,
    GENRE_ALIASES,
    GenreEvidence,
    GenreEvidenceTracker,
    GenreNormalizer,
    comparison_key,
    sanitize_genre,
    to_display_case,
)
from src.etl.quality.rules import (
    QualityServices,
    genre_relation_gate,
    movie_gate,
    star_gate,
    star_relation_gate,
)
from src.etl.quality.sink import QualityLogSink, compact_source

__all__ = [
    # Gates
    "QualityGate",
    "QualityRule",
    "preview",
    "movie_gate",
    "star_gate",
    "star_relation_gate",
    "genre_relation_gate",
    "QualityServices",
    # Genres
    "CANONICAL_GENRES",
    "GENRE_ALIASES",
    "GenreEvidence",
    "GenreEvidenceTracker",
    "GenreNormalizer",
    "comparison_key",
    "sanitize_genre",
    "to_display_case",
    # Log
    "QualityLogSink",
    "compact_source",
]
