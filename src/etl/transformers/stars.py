"""Star mapper for ``actors`` dumps."""

from src.etl.transformers.base import BaseMapper, TransformStats
from src.etl.transformers.helpers import clean_text, parse_year, star_id_for
from src.etl.types import Node, RawFileResult, StarRecord, TransformedBatch, text_of


class StarMapper(BaseMapper):
    """Build StarRecord from ``actor`` elements (stage name, birth year)."""

    name = "stars"

    def map(self, result: RawFileResult, batch: TransformedBatch, stats: TransformStats) -> None:
        for record in result.records:
            if not isinstance(record, Node):
                continue

            stage_name = clean_text(text_of(record.get("stagename")))
            star = StarRecord(
                id=star_id_for(stage_name) or "",
                name=stage_name,
                birth_year=parse_year(text_of(record.get("dob"))),
            )
            if self._quality.stars.accept(star, result.source_path, stage_name, "actor"):
                batch.add_star(star)
                stats.stars_accepted += 1
            else:
                stats.stars_rejected += 1
