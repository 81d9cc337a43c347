"""Unit tests for dialect-aware upsert statements."""

import pytest
from sqlalchemy.dialects import mysql, postgresql, sqlite

from src.database.models import Movie, StarInMovie
from src.etl.errors import ConfigurationError
from src.etl.loaders.upsert import build_upsert

_DIALECTS = {
    "postgresql": postgresql.dialect(),
    "sqlite": sqlite.dialect(),
    "mysql": mysql.dialect(),
}


def _compile(dialect: str, update: bool) -> str:
    if update:
        stmt = build_upsert(
            dialect,
            Movie,
            {"id": "tt1", "title": "M", "year": 1931, "director": "Fritz Lang"},
            key_columns=("id",),
            update_columns=("title", "year", "director"),
        )
    else:
        stmt = build_upsert(
            dialect,
            StarInMovie,
            {"star_id": "nm00000001", "movie_id": "tt1"},
            key_columns=("star_id", "movie_id"),
        )
    return str(stmt.compile(dialect=_DIALECTS[dialect])).upper()


class TestBuildUpsert:
    @staticmethod
    @pytest.mark.parametrize("dialect", ["postgresql", "sqlite"])
    def test_on_conflict_update(dialect: str) -> None:
        sql = _compile(dialect, update=True)
        assert "ON CONFLICT (ID) DO UPDATE" in sql
        assert "DIRECTOR = EXCLUDED.DIRECTOR" in sql

    @staticmethod
    @pytest.mark.parametrize("dialect", ["postgresql", "sqlite"])
    def test_on_conflict_ignore(dialect: str) -> None:
        sql = _compile(dialect, update=False)
        assert "ON CONFLICT (STAR_ID, MOVIE_ID) DO NOTHING" in sql

    @staticmethod
    def test_mysql_update() -> None:
        sql = _compile("mysql", update=True)
        assert "ON DUPLICATE KEY UPDATE" in sql
        assert "TITLE" in sql.split("ON DUPLICATE KEY UPDATE")[1]

    @staticmethod
    def test_mysql_ignore_reassigns_key() -> None:
        sql = _compile("mysql", update=False)
        tail = sql.split("ON DUPLICATE KEY UPDATE")[1]
        assert "STAR_ID" in tail
        assert "MOVIE_ID" not in tail

    @staticmethod
    def test_unknown_dialect() -> None:
        with pytest.raises(ConfigurationError, match="oracle"):
            build_upsert("oracle", Movie, {"id": "tt1"}, key_columns=("id",))
