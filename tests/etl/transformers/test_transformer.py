"""Tests for per-file transformation of mains, actors and casts records."""

from collections.abc import Callable
from pathlib import Path

import pytest

from src.etl.extractors import StreamingRecordParser
from src.etl.quality import QualityServices
from src.etl.transformers import Transformer
from src.etl.transformers.helpers import star_id_for
from src.etl.types import (
    GenreMovieRelationRecord,
    Node,
    RawFileResult,
    RawList,
    Scalar,
    StarMovieRelation,
    StarRecord,
)


def _lines(path: Path) -> list[str]:
    if not path.exists():
        return []
    return path.read_text(encoding="utf-8").splitlines()


def _repeat(*items: object) -> object:
    return items[0] if len(items) == 1 else RawList(tuple(items))


def _make_film(
    fid: str | None,
    title: str | None = "Metropolis",
    year: str | None = "1927",
    cats: tuple[str, ...] = (),
    director: str | None = None,
) -> Node:
    entries: dict[str, object] = {
        "fid": Scalar(fid) if fid else None,
        "t": Scalar(title) if title else None,
        "year": Scalar(year) if year else None,
    }
    if director:
        entries["dirs"] = Node({"dir": Node({"dirn": Scalar(director)})})
    if cats:
        entries["cats"] = Node({"cat": _repeat(*(Scalar(cat) for cat in cats))})
    return Node(entries)


def _make_mains(
    *films: Node, director: str = "Fritz Lang", name: str = "mains243.xml"
) -> RawFileResult:
    record = Node(
        {
            "director": Node({"dirid": Scalar("d1"), "dirname": Scalar(director)}),
            "films": Node({"film": _repeat(*films)}),
        }
    )
    return RawFileResult(Path("/dump") / name, records=(record,))


def _make_actor(name: str | None, dob: str | None = None) -> Node:
    return Node(
        {
            "stagename": Scalar(name) if name else None,
            "dob": Scalar(dob) if dob else None,
        }
    )


def _make_cast_entry(fid: str | None, actor: str | None) -> Node:
    return Node(
        {
            "f": Scalar(fid) if fid else None,
            "t": Scalar("Some Title"),
            "a": Scalar(actor) if actor else None,
        }
    )


def _make_casts(*entries: Node) -> RawFileResult:
    record = Node({"is": Scalar("Fritz Lang"), "filmc": Node({"m": _repeat(*entries)})})
    return RawFileResult(Path("/dump/casts124.xml"), records=(record,))


# -------------------------------------------------------------------------
# Movies
# -------------------------------------------------------------------------


class TestMovieTransformation:
    @staticmethod
    def test_sci_fi_spellings_collapse(transformer: Transformer, quality_log: Path) -> None:
        result = _make_mains(_make_film("tt0001", cats=("Sci-Fi", "scifi")))

        batch, stats = transformer.transform_with_stats(result)

        assert batch.genre_relations == {GenreMovieRelationRecord("tt0001", "Sci-Fi")}
        assert batch.genres == {"Sci-Fi"}
        assert stats.genre_relations_accepted == 2
        assert stats.genres_normalized == 1
        assert _lines(quality_log) == [
            "[QUALITY][genre-fixed] source=mains243.xml movieId=tt0001 original=scifi"
            " normalized=Sci-Fi"
        ]

    @staticmethod
    def test_movie_fields(transformer: Transformer) -> None:
        batch = transformer.transform(_make_mains(_make_film("tt0001", year="c. 1927?")))

        movie = batch.movies["tt0001"]
        assert movie.title == "Metropolis"
        assert movie.year == 1927
        assert movie.director == "Fritz Lang"

    @staticmethod
    def test_title_and_director_whitespace_collapsed(transformer: Transformer) -> None:
        film = _make_film("tt0001", title="Das  Testament", director="Fritz\n  Lang")

        movie = transformer.transform(_make_mains(film)).movies["tt0001"]

        assert (movie.title, movie.director) == ("Das Testament", "Fritz Lang")

    @staticmethod
    def test_film_director_overrides_default(transformer: Transformer) -> None:
        batch = transformer.transform(
            _make_mains(_make_film("tt0001", director="Thea von Harbou"))
        )
        assert batch.movies["tt0001"].director == "Thea von Harbou"

    @staticmethod
    def test_films_without_wrapper(transformer: Transformer) -> None:
        record = Node(
            {
                "director": Node({"dirn": Scalar("Fritz Lang")}),
                "film": _make_film("tt0002", title="M", year="1931"),
            }
        )
        batch = transformer.transform(RawFileResult(Path("mains243.xml"), records=(record,)))
        assert batch.movies["tt0002"].director == "Fritz Lang"

    @staticmethod
    def test_missing_year_rejected(transformer: Transformer, quality_log: Path) -> None:
        result = _make_mains(_make_film("tt0003", year="19xx", cats=("Drama",)))

        batch, stats = transformer.transform_with_stats(result)

        assert batch.is_empty()
        assert stats.movies_rejected == 1
        assert _lines(quality_log) == [
            "[QUALITY][movie] source=mains243.xml [fid=tt0003] element=film field=year"
            " value=null -> Missing or invalid release year"
        ]

    @staticmethod
    def test_missing_id_rejected(transformer: Transformer) -> None:
        batch, stats = transformer.transform_with_stats(_make_mains(_make_film(None)))
        assert batch.movies == {}
        assert stats.movies_rejected == 1

    @staticmethod
    def test_genre_codes_normalized(transformer: Transformer) -> None:
        result = _make_mains(_make_film("tt0004", cats=("Dram", "Romt Comd", "Horr")))

        batch, stats = transformer.transform_with_stats(result)

        assert batch.genres == {"Drama", "Romance Comedy", "Horror"}
        assert stats.genres_normalized == 3
        assert stats.genres_unknown == 0

    @staticmethod
    def test_unknown_genre_kept_and_counted(
        transformer: Transformer, quality: QualityServices
    ) -> None:
        result = _make_mains(
            _make_film("tt0001", cats=("Cyberpunk",)),
            _make_film("tt0002", cats=("cyberpunk",)),
        )

        batch, stats = transformer.transform_with_stats(result)

        assert batch.genres == {"Cyberpunk"}
        assert stats.genres_unknown == 2
        assert quality.evidence.evidence_count("Cyberpunk") == 2

    @staticmethod
    def test_suspicious_genre_rejected(transformer: Transformer, quality_log: Path) -> None:
        result = _make_mains(_make_film("tt0001", cats=("Drama;Comd",)))

        batch, stats = transformer.transform_with_stats(result)

        assert batch.genre_relations == set()
        assert "tt0001" in batch.movies
        assert stats.genre_relations_rejected == 1
        assert _lines(quality_log)[0].startswith(
            "[QUALITY][genre-movie relation] source=mains243.xml [fid=tt0001] element=cat"
        )


# -------------------------------------------------------------------------
# Stars
# -------------------------------------------------------------------------


class TestStarTransformation:
    @staticmethod
    def test_actor_mapped(transformer: Transformer) -> None:
        result = RawFileResult(
            Path("actors63.xml"), records=(_make_actor(" Peter Lorre ", "1904-06-26"),)
        )

        batch = transformer.transform(result)

        star_id = star_id_for("Peter Lorre")
        assert batch.stars[star_id] == StarRecord(star_id, "Peter Lorre", 1904)
        assert batch.stars[star_id].birth_year == 1904

    @staticmethod
    def test_blank_stage_name_rejected(transformer: Transformer, quality_log: Path) -> None:
        result = RawFileResult(Path("actors63.xml"), records=(_make_actor(None, "1950"),))

        batch, stats = transformer.transform_with_stats(result)

        assert batch.stars == {}
        assert stats.stars_rejected == 1
        line = _lines(quality_log)[0]
        assert line.startswith("[QUALITY][star] source=actors63.xml element=actor field=id")

    @staticmethod
    def test_duplicate_names_coalesce(transformer: Transformer) -> None:
        result = RawFileResult(
            Path("actors63.xml"),
            records=(_make_actor("Peter Lorre"), _make_actor("peter lorre", "1904")),
        )

        batch = transformer.transform(result)

        (star,) = batch.stars.values()
        assert (star.name, star.birth_year) == ("Peter Lorre", 1904)

    @staticmethod
    def test_dropped_entity_leaves_single_space(
        transformer: Transformer, write_xml: Callable[..., Path]
    ) -> None:
        path = write_xml(
            "actors63.xml",
            "<actors><actor><stagename>Peter &eacute; Lorre</stagename></actor></actors>",
        )

        batch = transformer.transform(StreamingRecordParser().parse(path))

        (star,) = batch.stars.values()
        assert star.name == "Peter Lorre"
        assert star.id == star_id_for("Peter Lorre")


# -------------------------------------------------------------------------
# Casts
# -------------------------------------------------------------------------


class TestCastTransformation:
    @staticmethod
    def test_star_and_relation_emitted(transformer: Transformer) -> None:
        batch = transformer.transform(_make_casts(_make_cast_entry("tt0001", "Brigitte Helm")))

        star_id = star_id_for("Brigitte Helm")
        assert batch.stars[star_id].name == "Brigitte Helm"
        assert batch.stars[star_id].birth_year is None
        assert batch.star_relations == {StarMovieRelation(star_id, "tt0001")}
        assert batch.movies == {}

    @staticmethod
    def test_missing_movie_keeps_star(transformer: Transformer, quality_log: Path) -> None:
        batch, stats = transformer.transform_with_stats(
            _make_casts(_make_cast_entry(None, "Brigitte Helm"))
        )

        assert len(batch.stars) == 1
        assert batch.star_relations == set()
        assert stats.star_relations_rejected == 1
        assert "field=movieId" in _lines(quality_log)[0]

    @staticmethod
    def test_missing_actor_rejects_both(transformer: Transformer) -> None:
        batch, stats = transformer.transform_with_stats(
            _make_casts(_make_cast_entry("tt0001", None))
        )

        assert batch.is_empty()
        assert stats.stars_rejected == 1
        assert stats.star_relations_rejected == 1

    @staticmethod
    def test_several_entries(transformer: Transformer) -> None:
        batch = transformer.transform(
            _make_casts(
                _make_cast_entry("tt0004", "Holly Hunter"),
                _make_cast_entry("tt0004", "Harvey Keitel"),
                _make_cast_entry("tt0004", "Holly Hunter"),
            )
        )
        assert len(batch.stars) == 2
        assert len(batch.star_relations) == 2


# -------------------------------------------------------------------------
# Dispatch
# -------------------------------------------------------------------------


class TestDispatch:
    @staticmethod
    def test_unknown_source_yields_empty_batch(transformer: Transformer) -> None:
        result = RawFileResult(Path("directors.xml"), records=(_make_actor("Peter Lorre"),))

        batch, stats = transformer.transform_with_stats(result)

        assert batch.is_empty()
        assert stats.kind == "unknown"
        assert stats.records == 1

    @staticmethod
    def test_non_node_records_ignored(transformer: Transformer) -> None:
        result = RawFileResult(Path("actors63.xml"), records=(Scalar("noise"), None))
        assert transformer.transform(result).is_empty()

    @staticmethod
    @pytest.mark.parametrize("name", ["mains243.xml", "actors63.xml", "casts124.xml"])
    def test_empty_file(transformer: Transformer, name: str) -> None:
        assert transformer.transform(RawFileResult(Path(name))).is_empty()
