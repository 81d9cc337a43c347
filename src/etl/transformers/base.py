"""Base mapper and per-file transformation statistics."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.etl.quality import QualityServices
from src.etl.types import RawFileResult, TransformedBatch
from src.etl.utils.logger import setup_logger


@dataclass
class TransformStats:
    """Accept/reject counters for one file.

    Attributes:
        source: File name.
        kind: Transformation path applied.
        records: Raw records read.
        movies_accepted: Movies passing the movie gate.
        movies_rejected: Movies rejected by the movie gate.
        stars_accepted: Stars passing the star gate.
        stars_rejected: Stars rejected by the star gate.
        star_relations_accepted: Cast pairs passing their gate.
        star_relations_rejected: Cast pairs rejected by their gate.
        genre_relations_accepted: Genre pairs added to the batch.
        genre_relations_rejected: Genre values rejected or not normalizable.
        genres_normalized: Genre values rewritten by normalization.
        genres_unknown: Genre values outside the canonical table.
    """

    source: str = ""
    kind: str = ""
    records: int = 0
    movies_accepted: int = 0
    movies_rejected: int = 0
    stars_accepted: int = 0
    stars_rejected: int = 0
    star_relations_accepted: int = 0
    star_relations_rejected: int = 0
    genre_relations_accepted: int = 0
    genre_relations_rejected: int = 0
    genres_normalized: int = 0
    genres_unknown: int = 0

    @property
    def total_rejected(self) -> int:
        """Candidates rejected across all gates."""
        return (
            self.movies_rejected
            + self.stars_rejected
            + self.star_relations_rejected
            + self.genre_relations_rejected
        )

    def log_summary(self, logger: logging.Logger) -> None:
        """Log transformation statistics for the file."""
        logger.info(
            "Transformed %s (%s): %d records -> movies=%d stars=%d cast=%d genres=%d "
            "(rejected=%d, genres normalized=%d, unknown=%d)",
            self.source,
            self.kind,
            self.records,
            self.movies_accepted,
            self.stars_accepted,
            self.star_relations_accepted,
            self.genre_relations_accepted,
            self.total_rejected,
            self.genres_normalized,
            self.genres_unknown,
        )


class BaseMapper(ABC):
    """Maps the raw records of one source kind into typed records.

    Mappers hold only the shared, thread-safe quality services; every
    call works on its own batch and statistics.

    Attributes:
        name: Mapper identifier for logging.
    """

    name: str = "base"

    def __init__(self, quality: QualityServices) -> None:
        self._quality = quality
        self._logger = setup_logger(f"etl.transformer.{self.name}")

    @abstractmethod
    def map(self, result: RawFileResult, batch: TransformedBatch, stats: TransformStats) -> None:
        """Add the accepted records of a parsed file to batch.

        Args:
            result: Parsed file.
            batch: Batch receiving accepted records.
            stats: Counters updated in place.
        """
        pass
