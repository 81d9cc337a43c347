"""Movie mapper for ``mains`` dumps.

Each record is a ``directorfilms`` element: a default director plus a
list of films, each with its own genre categories.
"""

from src.etl.transformers.base import BaseMapper, TransformStats
from src.etl.transformers.helpers import clean_text, parse_year
from src.etl.types import (
    GenreMovieRelationRecord,
    MovieRecord,
    Node,
    RawFileResult,
    RawTree,
    TransformedBatch,
    child,
    nodes_of,
    scalars_of,
    text_of,
)


class MovieMapper(BaseMapper):
    """Build MovieRecord and genre relations from director film lists."""

    name = "movies"

    def map(self, result: RawFileResult, batch: TransformedBatch, stats: TransformStats) -> None:
        for record in result.records:
            if not isinstance(record, Node):
                continue
            default_director = self._default_director(record)
            for film in nodes_of(self._films_of(record)):
                self._map_film(film, default_director, result, batch, stats)

    # -------------------------------------------------------------------------
    # Films
    # -------------------------------------------------------------------------

    def _map_film(
        self,
        film: Node,
        default_director: str | None,
        result: RawFileResult,
        batch: TransformedBatch,
        stats: TransformStats,
    ) -> None:
        movie_id = clean_text(text_of(film.get("fid")))
        movie = MovieRecord(
            id=movie_id or "",
            title=clean_text(text_of(film.get("t"))),
            year=parse_year(text_of(film.get("year"))),
            director=self._film_director(film) or default_director,
        )
        context = f"fid={movie_id}" if movie_id else None

        if not self._quality.movies.accept(movie, result.source_path, context, "film"):
            stats.movies_rejected += 1
            return

        batch.add_movie(movie)
        stats.movies_accepted += 1
        for raw_genre in scalars_of(self._categories_of(film)):
            self._map_genre(movie.id, raw_genre, result, batch, stats)

    @staticmethod
    def _films_of(record: Node) -> RawTree:
        wrapper = record.get("films")
        if isinstance(wrapper, Node):
            return wrapper.get("film")
        return record.get("film")

    @staticmethod
    def _default_director(record: Node) -> str | None:
        return clean_text(text_of(child(record, "director", "dirname"))) or clean_text(
            text_of(child(record, "director", "dirn"))
        )

    @staticmethod
    def _film_director(film: Node) -> str | None:
        """First named director listed on the film itself."""
        for director in nodes_of(child(film, "dirs", "dir")):
            name = clean_text(text_of(director.get("dirn")))
            if name:
                return name
        return None

    # -------------------------------------------------------------------------
    # Genres
    # -------------------------------------------------------------------------

    @staticmethod
    def _categories_of(film: Node) -> RawTree:
        wrapper = film.get("cats")
        if isinstance(wrapper, Node):
            return wrapper.get("cat")
        return film.get("cat")

    def _map_genre(
        self,
        movie_id: str,
        raw_genre: str,
        result: RawFileResult,
        batch: TransformedBatch,
        stats: TransformStats,
    ) -> None:
        """Gate, normalize and add one raw genre value of an accepted movie."""
        quality = self._quality
        candidate = GenreMovieRelationRecord(movie_id=movie_id, genre_name=raw_genre)
        if not quality.genre_relations.accept(
            candidate, result.source_path, f"fid={movie_id}", "cat"
        ):
            stats.genre_relations_rejected += 1
            return

        normalized, canonical = quality.normalizer.normalize(
            raw_genre, movie_id, result.source_path
        )
        if not canonical:
            quality.evidence.record_unknown(raw_genre, movie_id)
            stats.genres_unknown += 1
        if normalized is None:
            stats.genre_relations_rejected += 1
            return

        if normalized != raw_genre.strip():
            quality.normalizer.log_normalization(
                result.source_path, movie_id, raw_genre, normalized
            )
            stats.genres_normalized += 1

        batch.add_genre(normalized)
        batch.add_genre_relation(GenreMovieRelationRecord(movie_id=movie_id, genre_name=normalized))
        stats.genre_relations_accepted += 1
