"""Batch merging module.

Folds per-file batches into one run-wide batch: movies first-wins by
id, stars coalesced by id, relations and genres unioned.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from src.etl.types import TransformedBatch

logger = logging.getLogger(__name__)


# =============================================================================
# MERGE STATISTICS
# =============================================================================


@dataclass
class MergeStats:
    """Statistics for merge operations.

    Attributes:
        batches: Per-file batches merged.
        movies_in: Movie records received.
        stars_in: Star records received.
        duplicate_movies: Movies discarded because an earlier batch had the id.
        duplicate_stars: Stars folded into an earlier record with the same id.
    """

    batches: int = 0
    movies_in: int = 0
    stars_in: int = 0
    duplicate_movies: int = 0
    duplicate_stars: int = 0

    def log_summary(self) -> None:
        """Log merge statistics summary."""
        logger.info(
            "Merge: %d batches, movies %d (-%d duplicates), stars %d (-%d coalesced)",
            self.batches,
            self.movies_in,
            self.duplicate_movies,
            self.stars_in,
            self.duplicate_stars,
        )


# =============================================================================
# MERGER
# =============================================================================


class BatchMerger:
    """Merges batches in the order given.

    Attributes:
        stats: Statistics of the last merge.
    """

    def __init__(self) -> None:
        self.stats = MergeStats()

    def merge(self, batches: Iterable[TransformedBatch]) -> TransformedBatch:
        """Merge batches into a new batch.

        Inputs are not modified. First-wins and coalescing follow the
        iteration order of batches.

        Args:
            batches: Per-file batches in submission order.

        Returns:
            Merged batch.
        """
        self.stats = MergeStats()
        merged = TransformedBatch()

        for batch in batches:
            self.stats.batches += 1
            self._merge_entities(batch, merged)
            merged.star_relations.update(batch.star_relations)
            merged.genres.update(batch.genres)
            merged.genre_relations.update(batch.genre_relations)

        self.stats.log_summary()
        return merged

    def _merge_entities(self, batch: TransformedBatch, merged: TransformedBatch) -> None:
        """Fold movies and stars of one batch into merged."""
        for movie in batch.movies.values():
            self.stats.movies_in += 1
            if movie.id in merged.movies:
                self.stats.duplicate_movies += 1
            merged.add_movie(movie)

        for star in batch.stars.values():
            self.stats.stars_in += 1
            if star.id in merged.stars:
                self.stats.duplicate_stars += 1
            merged.add_star(star)
