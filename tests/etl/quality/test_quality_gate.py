"""Tests for the quality log sink, rule gates and entity gate factories."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from src.etl.quality import (
    QualityGate,
    QualityLogSink,
    QualityRule,
    QualityServices,
    compact_source,
    genre_relation_gate,
    movie_gate,
    preview,
    star_gate,
    star_relation_gate,
)
from src.etl.types import GenreMovieRelationRecord, MovieRecord, StarMovieRelation, StarRecord


def _lines(path: Path) -> list[str]:
    return path.read_text(encoding="utf-8").splitlines()


@pytest.fixture
def sink(quality_log: Path) -> QualityLogSink:
    return QualityLogSink(quality_log)


# -------------------------------------------------------------------------
# Sink
# -------------------------------------------------------------------------


class TestQualityLogSink:
    @staticmethod
    def test_appends_tagged_line(sink: QualityLogSink, quality_log: Path) -> None:
        line = sink.log("[movie]", "source=mains243.xml -> Missing movie title")
        assert line == "[QUALITY][movie] source=mains243.xml -> Missing movie title"
        assert _lines(quality_log) == [line]

    @staticmethod
    def test_appends_across_instances(quality_log: Path) -> None:
        QualityLogSink(quality_log).log("[a]", "one")
        QualityLogSink(quality_log).log("[b]", "two")
        assert _lines(quality_log) == ["[QUALITY][a] one", "[QUALITY][b] two"]

    @staticmethod
    def test_echo_to_stderr(quality_log: Path, capsys: pytest.CaptureFixture[str]) -> None:
        sink = QualityLogSink(quality_log, echo=True)
        sink.log("[star]", "shown")
        sink.log("[genre-fixed]", "hidden", echo=False)
        err = capsys.readouterr().err
        assert "[QUALITY][star] shown" in err
        assert "hidden" not in err

    @staticmethod
    def test_no_echo_by_default(sink: QualityLogSink, capsys: pytest.CaptureFixture[str]) -> None:
        sink.log("[star]", "quiet")
        assert capsys.readouterr().err == ""

    @staticmethod
    def test_unwritable_path_does_not_raise(
        tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        sink = QualityLogSink(tmp_path / "missing" / "q.log")
        sink.log("[movie]", "lost")
        assert "Failed to append to log file" in capsys.readouterr().err

    @staticmethod
    def test_concurrent_lines_not_interleaved(sink: QualityLogSink, quality_log: Path) -> None:
        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(lambda i: sink.log("[star]", f"line {i}"), range(200)))
        lines = _lines(quality_log)
        assert len(lines) == 200
        assert all(line.startswith("[QUALITY][star] line ") for line in lines)


class TestCompactSource:
    @staticmethod
    def test_basename() -> None:
        assert compact_source(Path("/data/xml/mains243.xml")) == "mains243.xml"

    @staticmethod
    def test_windows_separators() -> None:
        assert compact_source("C:\\dumps\\casts124.xml") == "casts124.xml"

    @staticmethod
    def test_missing_source() -> None:
        assert compact_source(None) == "unknown-source"
        assert compact_source("  ") == "unknown-source"


class TestPreview:
    @staticmethod
    def test_null() -> None:
        assert preview(None) == "null"

    @staticmethod
    def test_truncates_long_values() -> None:
        rendered = preview("x" * 500)
        assert len(rendered) == 200
        assert rendered.endswith("...")

    @staticmethod
    def test_short_value_unchanged() -> None:
        assert preview(1927) == "1927"


# -------------------------------------------------------------------------
# Gate
# -------------------------------------------------------------------------


class TestQualityGate:
    @staticmethod
    def test_accepts_valid_candidate(sink: QualityLogSink, quality_log: Path) -> None:
        gate = movie_gate(sink)
        assert gate.accept(MovieRecord("tt1", "M", 1931), "mains243.xml", "fid=tt1", "film")
        assert not quality_log.exists()

    @staticmethod
    def test_rejection_line_format(sink: QualityLogSink, quality_log: Path) -> None:
        gate = movie_gate(sink)

        accepted = gate.accept(
            MovieRecord("tt1", None, 1931), "/data/xml/mains243.xml", "fid=tt1", "film"
        )

        assert not accepted
        assert _lines(quality_log) == [
            "[QUALITY][movie] source=mains243.xml [fid=tt1] element=film field=t value=null"
            " -> Missing movie title"
        ]

    @staticmethod
    def test_first_failing_rule_reported(sink: QualityLogSink) -> None:
        rejection = movie_gate(sink).check(MovieRecord("", None, None))
        assert rejection is not None
        assert rejection.reason == "Missing movie id"
        assert rejection.field_name == "fid"

    @staticmethod
    def test_missing_year(sink: QualityLogSink) -> None:
        rejection = movie_gate(sink).check(MovieRecord("tt1", "M", None))
        assert rejection is not None
        assert rejection.reason == "Missing or invalid release year"

    @staticmethod
    def test_null_candidate(sink: QualityLogSink, quality_log: Path) -> None:
        assert not star_gate(sink).accept(None, "actors63.xml", element="actor")
        assert _lines(quality_log) == [
            "[QUALITY][star] source=actors63.xml element=actor field=actor value=null"
            " -> value is null"
        ]

    @staticmethod
    def test_unknown_source_and_element(sink: QualityLogSink, quality_log: Path) -> None:
        star_gate(sink).accept(StarRecord("", None))
        assert _lines(quality_log)[0].startswith(
            "[QUALITY][star] source=unknown-source element=unknown field=id"
        )

    @staticmethod
    def test_raising_predicate_is_a_failure(sink: QualityLogSink) -> None:
        def explode(_: object) -> bool:
            raise ValueError("boom")

        gate = QualityGate("thing", [QualityRule("Broken rule", explode)], sink)

        assert not gate.accept(object(), "x.xml")

    @staticmethod
    def test_long_value_truncated_in_log(sink: QualityLogSink, quality_log: Path) -> None:
        gate = QualityGate(
            "thing", [QualityRule("Too long", lambda v: len(v) < 10, "value", lambda v: v)], sink
        )
        gate.accept("y" * 300, "x.xml")
        assert "y" * 197 + "... -> Too long" in _lines(quality_log)[0]


class TestEntityGates:
    @staticmethod
    def test_star_needs_name(sink: QualityLogSink) -> None:
        rejection = star_gate(sink).check(StarRecord("nm00000001", "  "))
        assert rejection is not None
        assert rejection.reason == "Missing star name"

    @staticmethod
    def test_star_relation_needs_movie(sink: QualityLogSink) -> None:
        rejection = star_relation_gate(sink).check(StarMovieRelation("nm00000001", ""))
        assert rejection is not None
        assert rejection.field_name == "movieId"

    @staticmethod
    def test_genre_relation_suspicious_characters(sink: QualityLogSink) -> None:
        rejection = genre_relation_gate(sink).check(GenreMovieRelationRecord("tt1", "Drama;Comd"))
        assert rejection is not None
        assert rejection.reason == "Suspicious characters in genre name (possible data entry error)"

    @staticmethod
    def test_genre_relation_valid(sink: QualityLogSink) -> None:
        assert genre_relation_gate(sink).check(GenreMovieRelationRecord("tt1", "Dram")) is None


class TestQualityServices:
    @staticmethod
    def test_create_shares_sink(quality_log: Path) -> None:
        services = QualityServices.create(quality_log, echo=True)
        assert services.sink.path == quality_log
        assert services.sink.echo is True
        assert services.movies.entity_name == "movie"
        assert services.genre_relations.entity_name == "genre-movie relation"
