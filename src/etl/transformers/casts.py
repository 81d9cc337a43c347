"""Cast mapper for ``casts`` dumps.

Each record lists films (``filmc``) and their actor entries (``m``):
``f`` is the movie id and ``a`` the actor's stage name.
"""

from src.etl.transformers.base import BaseMapper, TransformStats
from src.etl.transformers.helpers import clean_text, star_id_for
from src.etl.types import (
    Node,
    RawFileResult,
    StarMovieRelation,
    StarRecord,
    TransformedBatch,
    nodes_of,
    text_of,
)


class CastMapper(BaseMapper):
    """Emit a name-only star and a star/movie pair for every cast entry.

    Star and pair pass their gates independently.
    """

    name = "casts"

    def map(self, result: RawFileResult, batch: TransformedBatch, stats: TransformStats) -> None:
        for record in result.records:
            if not isinstance(record, Node):
                continue
            for film in nodes_of(record.get("filmc")):
                for entry in nodes_of(film.get("m")):
                    self._map_entry(entry, result, batch, stats)

    def _map_entry(
        self,
        entry: Node,
        result: RawFileResult,
        batch: TransformedBatch,
        stats: TransformStats,
    ) -> None:
        movie_id = clean_text(text_of(entry.get("f")))
        actor_name = clean_text(text_of(entry.get("a")))
        star_id = star_id_for(actor_name)
        context = f"fid={movie_id}" if movie_id else None

        star = StarRecord(id=star_id or "", name=actor_name)
        if self._quality.stars.accept(star, result.source_path, context, "m"):
            batch.add_star(star)
            stats.stars_accepted += 1
        else:
            stats.stars_rejected += 1

        relation = StarMovieRelation(star_id=star_id or "", movie_id=movie_id or "")
        if self._quality.star_relations.accept(relation, result.source_path, context, "m"):
            batch.add_star_relation(relation)
            stats.star_relations_accepted += 1
        else:
            stats.star_relations_rejected += 1
