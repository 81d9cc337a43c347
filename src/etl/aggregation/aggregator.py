"""Run-wide aggregation of transformed batches.

Merges the per-file batches, then enforces referential consistency:
cast pairs pointing at unknown movies are dropped, and movies left
without any cast pair are removed together with their genre pairs.
"""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.etl.aggregation.merger import BatchMerger
from src.etl.types import TransformedBatch

logger = logging.getLogger(__name__)


# =============================================================================
# AGGREGATION STATISTICS
# =============================================================================


@dataclass
class AggregationStats:
    """Complete aggregation statistics.

    Attributes:
        start_time: Aggregation start timestamp.
        end_time: Aggregation end timestamp.
        input_batches: Per-file batches received.
        dangling_relations_removed: Cast pairs whose movie is unknown.
        orphan_movies_removed: Movies without any cast pair.
        orphan_genre_relations_removed: Genre pairs of removed movies.
        movies: Movies in the final batch.
        stars: Stars in the final batch.
        star_relations: Cast pairs in the final batch.
        genres: Genres in the final batch.
        genre_relations: Genre pairs in the final batch.
    """

    start_time: datetime | None = None
    end_time: datetime | None = None
    input_batches: int = 0
    dangling_relations_removed: int = 0
    orphan_movies_removed: int = 0
    orphan_genre_relations_removed: int = 0
    movies: int = 0
    stars: int = 0
    star_relations: int = 0
    genres: int = 0
    genre_relations: int = 0

    @property
    def duration_seconds(self) -> float:
        """Calculate aggregation duration in seconds."""
        if not self.start_time or not self.end_time:
            return 0.0
        delta = self.end_time - self.start_time
        return round(delta.total_seconds(), 2)

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary."""
        return {
            "duration_seconds": self.duration_seconds,
            "input_batches": self.input_batches,
            "removed": {
                "dangling_relations": self.dangling_relations_removed,
                "orphan_movies": self.orphan_movies_removed,
                "orphan_genre_relations": self.orphan_genre_relations_removed,
            },
            "output": {
                "movies": self.movies,
                "stars": self.stars,
                "star_relations": self.star_relations,
                "genres": self.genres,
                "genre_relations": self.genre_relations,
            },
        }

    def log_summary(self) -> None:
        """Log complete aggregation summary."""
        logger.info(
            "Aggregation complete in %.2fs: movies=%d stars=%d cast=%d genres=%d "
            "genre links=%d (orphan movies removed=%d, dangling cast removed=%d)",
            self.duration_seconds,
            self.movies,
            self.stars,
            self.star_relations,
            self.genres,
            self.genre_relations,
            self.orphan_movies_removed,
            self.dangling_relations_removed,
        )


# =============================================================================
# AGGREGATOR
# =============================================================================


class BatchAggregator:
    """Builds the single consistent batch written to the database.

    Attributes:
        stats: Statistics of the last aggregation.
    """

    def __init__(self) -> None:
        self.stats = AggregationStats()
        self._merger = BatchMerger()

    def aggregate(self, batches: Iterable[TransformedBatch]) -> TransformedBatch:
        """Merge batches and remove inconsistent records.

        Args:
            batches: Per-file batches in submission order.

        Returns:
            Aggregated batch.
        """
        batches = list(batches)
        self.stats = AggregationStats(start_time=datetime.now(), input_batches=len(batches))

        aggregate = self._merger.merge(batches)
        self._remove_dangling_relations(aggregate)
        self._remove_orphan_movies(aggregate)

        self._finish(aggregate)
        return aggregate

    # =========================================================================
    # Referential cleanup
    # =========================================================================

    def _remove_dangling_relations(self, aggregate: TransformedBatch) -> None:
        """Drop cast pairs whose movie is not part of the aggregate."""
        dangling = {r for r in aggregate.star_relations if r.movie_id not in aggregate.movies}
        if not dangling:
            return

        aggregate.star_relations -= dangling
        self.stats.dangling_relations_removed = len(dangling)
        logger.info("Removed %d cast pairs referencing unknown movies", len(dangling))

    def _remove_orphan_movies(self, aggregate: TransformedBatch) -> None:
        """Drop movies without cast pairs, with their genre pairs."""
        cast_counts = Counter(r.movie_id for r in aggregate.star_relations)
        orphans = [movie_id for movie_id in aggregate.movies if cast_counts[movie_id] == 0]
        if not orphans:
            return

        orphan_ids = set(orphans)
        for movie_id in orphans:
            del aggregate.movies[movie_id]

        orphan_links = {r for r in aggregate.genre_relations if r.movie_id in orphan_ids}
        aggregate.genre_relations -= orphan_links

        self.stats.orphan_movies_removed = len(orphans)
        self.stats.orphan_genre_relations_removed = len(orphan_links)
        logger.info(
            "Removed %d movies without cast (and %d genre pairs)",
            len(orphans),
            len(orphan_links),
        )
        logger.debug("Orphan movies: %s", ", ".join(sorted(orphan_ids)))

    def _finish(self, aggregate: TransformedBatch) -> None:
        self.stats.end_time = datetime.now()
        self.stats.movies = len(aggregate.movies)
        self.stats.stars = len(aggregate.stars)
        self.stats.star_relations = len(aggregate.star_relations)
        self.stats.genres = len(aggregate.genres)
        self.stats.genre_relations = len(aggregate.genre_relations)
        self.stats.log_summary()


def aggregate(batches: Iterable[TransformedBatch]) -> TransformedBatch:
    """Aggregate batches with a fresh BatchAggregator."""
    return BatchAggregator().aggregate(batches)
