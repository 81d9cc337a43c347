"""Per-file transformation entry point.

Dispatches a parsed file to the mapper matching its source kind and
logs the per-file counters. Safe to call from several worker threads:
each call builds its own batch and statistics.
"""

from src.etl.quality import QualityServices
from src.etl.transformers.base import BaseMapper, TransformStats
from src.etl.transformers.casts import CastMapper
from src.etl.transformers.helpers import SourceKind, classify_source
from src.etl.transformers.movies import MovieMapper
from src.etl.transformers.stars import StarMapper
from src.etl.types import RawFileResult, TransformedBatch
from src.etl.utils.logger import setup_logger


class Transformer:
    """Turns RawFileResult into TransformedBatch.

    Attributes:
        quality: Shared quality services for the run.
    """

    def __init__(self, quality: QualityServices) -> None:
        self.quality = quality
        self._mappers: dict[SourceKind, BaseMapper] = {
            SourceKind.MOVIES: MovieMapper(quality),
            SourceKind.STARS: StarMapper(quality),
            SourceKind.CASTS: CastMapper(quality),
        }
        self.logger = setup_logger("etl.transformer")

    def transform(self, result: RawFileResult) -> TransformedBatch:
        """Transform one parsed file.

        Args:
            result: Parsed file.

        Returns:
            Batch of accepted records, empty for unrecognized files.
        """
        batch, _ = self.transform_with_stats(result)
        return batch

    def transform_with_stats(
        self, result: RawFileResult
    ) -> tuple[TransformedBatch, TransformStats]:
        """Transform one parsed file and return its counters too."""
        kind = classify_source(result.source_path)
        batch = TransformedBatch()
        stats = TransformStats(
            source=result.source_path.name,
            kind=kind.value,
            records=result.record_count,
        )

        mapper = self._mappers.get(kind)
        if mapper is None:
            self.logger.warning(
                "Unrecognized source %s: expected 'mains', 'actors' or 'casts' in the "
                "file name, skipping %d records",
                result.source_path.name,
                result.record_count,
            )
            return batch, stats

        mapper.map(result, batch, stats)
        stats.log_summary(self.logger)
        return batch, stats
