"""Unit tests for the lxml parser target building RawTree records."""

from src.etl.extractors.xml import RecordTreeBuilder, local_name
from src.etl.types import Node, RawList, Scalar


def _leaf(builder: RecordTreeBuilder, tag: str, text: str | None = None) -> None:
    builder.start(tag, {})
    if text is not None:
        builder.data(text)
    builder.end(tag)


def _actor(builder: RecordTreeBuilder, name: str, dob: str | None) -> None:
    builder.start("actor", {})
    _leaf(builder, "stagename", name)
    _leaf(builder, "dob", dob)
    builder.end("actor")


class TestLocalName:
    @staticmethod
    def test_strips_namespace() -> None:
        assert local_name("{urn:movies}film") == "film"

    @staticmethod
    def test_plain_name() -> None:
        assert local_name("film") == "film"


# -------------------------------------------------------------------------
# Record collection
# -------------------------------------------------------------------------


class TestRecordTreeBuilder:
    @staticmethod
    def test_collects_row_elements() -> None:
        builder = RecordTreeBuilder("actor")
        builder.start("actors", {})
        _actor(builder, "Peter Lorre", "1904")
        _actor(builder, "Holly Hunter", None)
        builder.end("actors")

        records = builder.close()

        assert builder.root_tag == "actors"
        assert records == (
            Node({"stagename": Scalar("Peter Lorre"), "dob": Scalar("1904")}),
            Node({"stagename": Scalar("Holly Hunter"), "dob": None}),
        )
        assert builder.issues == []

    @staticmethod
    def test_ignores_text_outside_records() -> None:
        builder = RecordTreeBuilder("actor")
        builder.start("actors", {})
        builder.data("\n  stray text\n")
        _actor(builder, "Peter Lorre", "1904")
        builder.end("actors")
        assert len(builder.close()) == 1

    @staticmethod
    def test_repeated_children_become_list() -> None:
        builder = RecordTreeBuilder("film")
        builder.start("films", {})
        builder.start("film", {})
        builder.start("cats", {})
        _leaf(builder, "cat", "Drama")
        _leaf(builder, "cat", "Comd")
        builder.end("cats")
        builder.end("film")
        builder.end("films")

        (film,) = builder.close()

        assert film["cats"] == Node({"cat": RawList((Scalar("Drama"), Scalar("Comd")))})

    @staticmethod
    def test_empty_child_does_not_replace_value() -> None:
        builder = RecordTreeBuilder("film")
        builder.start("film", {})
        _leaf(builder, "t", "Metropolis")
        _leaf(builder, "t")
        builder.end("film")

        (film,) = builder.close()

        assert film["t"] == Scalar("Metropolis")

    @staticmethod
    def test_attributes_and_mixed_text() -> None:
        builder = RecordTreeBuilder("cat")
        builder.start("cats", {})
        builder.start("{urn:movies}cat", {"{urn:movies}lang": "en"})
        builder.data(" Drama ")
        builder.end("{urn:movies}cat")
        builder.end("cats")

        (cat,) = builder.close()

        assert cat == Node({"@lang": Scalar("en"), "$text": Scalar("Drama")})

    @staticmethod
    def test_leaf_record_is_scalar() -> None:
        builder = RecordTreeBuilder("cat")
        builder.start("cats", {})
        _leaf(builder, "cat", "Horr")
        _leaf(builder, "cat", "   ")
        builder.end("cats")
        assert builder.close() == (Scalar("Horr"), None)

    @staticmethod
    def test_nested_row_name_kept_as_child() -> None:
        builder = RecordTreeBuilder("m")
        builder.start("filmc", {})
        builder.start("m", {})
        _leaf(builder, "m", "inner")
        builder.end("m")
        builder.end("filmc")

        (entry,) = builder.close()

        assert entry == Node({"m": Scalar("inner")})


# -------------------------------------------------------------------------
# Issues
# -------------------------------------------------------------------------


class TestRecordTreeBuilderIssues:
    @staticmethod
    def test_mismatched_end_tag() -> None:
        builder = RecordTreeBuilder("actor")
        builder.start("actor", {})
        builder.start("stagename", {})
        builder.data("Peter Lorre")
        builder.end("name")
        builder.end("actor")

        records = builder.close()

        assert records == (Node({"stagename": Scalar("Peter Lorre")}),)
        assert builder.issues == ["Mismatched element: expected 'stagename' but found 'name'."]

    @staticmethod
    def test_unterminated_record_discarded() -> None:
        builder = RecordTreeBuilder("actor")
        builder.start("actors", {})
        _actor(builder, "Peter Lorre", "1904")
        builder.start("actor", {})
        _leaf(builder, "stagename", "Holly Hunter")

        records = builder.close()

        assert len(records) == 1
        assert builder.issues == ["Unterminated record element 'actor' discarded."]

    @staticmethod
    def test_close_twice_keeps_records() -> None:
        builder = RecordTreeBuilder("actor")
        _actor(builder, "Peter Lorre", "1904")
        assert builder.close() == builder.close()
