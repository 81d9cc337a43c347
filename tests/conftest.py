"""Shared pytest fixtures for the ETL tests."""

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from src.database.connection import DatabaseConnection
from src.database.models import Base
from src.etl.quality import QualityServices
from src.etl.transformers import Transformer


@pytest.fixture(autouse=True, scope="function")
def mock_env_for_tests(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reproducible environment: no database, no overrides."""
    for var in (
        "DATABASE_URL",
        "DB_DRIVER",
        "POSTGRES_PASSWORD",
        "ETL_INPUT_DIR",
        "ETL_MAX_WORKERS",
        "ETL_ROOT_TAG",
        "ETL_ROW_TAG",
        "ETL_QUALITY_LOG",
        "ETL_QUALITY_ECHO",
    ):
        monkeypatch.delenv(var, raising=False)

    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "INFO")


# =============================================================================
# XML FILES
# =============================================================================


@pytest.fixture
def write_xml(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing an XML document under tmp_path."""

    def _write(name: str, body: str, directory: Path | None = None) -> Path:
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(body, encoding="utf-8")
        return target

    return _write


MAINS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<movies>
  <directorfilms>
    <director><dirid>d1</dirid><dirname>Fritz Lang</dirname></director>
    <films>
      <film>
        <fid>tt0001</fid><t>Metropolis</t><year>1927</year>
        <cats><cat>Sci-Fi</cat><cat>scifi</cat></cats>
      </film>
      <film>
        <fid>tt0002</fid><t>M</t><year>1931</year>
        <cats><cat>Crim</cat></cats>
      </film>
      <film>
        <fid>tt0003</fid><t>Lost Reel</t><year>19xx</year>
      </film>
    </films>
  </directorfilms>
  <directorfilms>
    <director><dirid>d2</dirid><dirname>Jane Campion</dirname></director>
    <films>
      <film>
        <fid>tt0004</fid><t>The Piano</t><year>1993</year>
        <cats><cat>Dram</cat><cat>Romt Comd</cat></cats>
      </film>
      <film>
        <fid>tt0005</fid><t>Nobody Cast Me</t><year>2001</year>
        <cats><cat>Horr</cat></cats>
      </film>
    </films>
  </directorfilms>
</movies>
"""

ACTORS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<actors>
  <actor><stagename>Brigitte Helm</stagename><dob>1906</dob></actor>
  <actor><stagename>Peter Lorre</stagename><dob>1904</dob></actor>
  <actor><stagename>Holly Hunter</stagename><dob></dob></actor>
  <actor><stagename></stagename><dob>1950</dob></actor>
</actors>
"""

CASTS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<casts>
  <dirfilms>
    <is>Fritz Lang</is>
    <filmc>
      <m><f>tt0001</f><t>Metropolis</t><a>Brigitte Helm</a></m>
    </filmc>
    <filmc>
      <m><f>tt0002</f><t>M</t><a>Peter Lorre</a></m>
    </filmc>
  </dirfilms>
  <dirfilms>
    <is>Jane Campion</is>
    <filmc>
      <m><f>tt0004</f><t>The Piano</t><a>Holly Hunter</a></m>
      <m><f>tt0004</f><t>The Piano</t><a>Harvey Keitel</a></m>
      <m><f>tt9999</f><t>Unknown</t><a>Harvey Keitel</a></m>
    </filmc>
  </dirfilms>
</casts>
"""


@pytest.fixture
def dump_dir(tmp_path: Path, write_xml: Callable[..., Path]) -> Path:
    """Input directory holding one mains, actors and casts file."""
    directory = tmp_path / "dump"
    write_xml("mains243.xml", MAINS_XML, directory)
    write_xml("actors63.xml", ACTORS_XML, directory)
    write_xml("casts124.xml", CASTS_XML, directory)
    return directory


# =============================================================================
# QUALITY / TRANSFORM
# =============================================================================


@pytest.fixture
def quality_log(tmp_path: Path) -> Path:
    """Path of the data quality log for one test."""
    return tmp_path / "data-quality.log"


@pytest.fixture
def quality(quality_log: Path) -> QualityServices:
    """Quality services writing to quality_log, without stderr echo."""
    return QualityServices.create(quality_log)


@pytest.fixture
def transformer(quality: QualityServices) -> Transformer:
    """Transformer sharing the quality fixture."""
    return Transformer(quality)


# =============================================================================
# DATABASE
# =============================================================================


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """URL of a file backed SQLite database."""
    return f"sqlite:///{tmp_path / 'movies.db'}"


@pytest.fixture
def database(sqlite_url: str) -> Iterator[DatabaseConnection]:
    """SQLite connection with the schema created."""
    db = DatabaseConnection(url=sqlite_url)
    Base.metadata.create_all(bind=db.sync_engine)
    yield db
    db.dispose()
