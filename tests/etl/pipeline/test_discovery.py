"""Tests for XML input discovery."""

from pathlib import Path

import pytest

from src.etl.errors import ConfigurationError
from src.etl.pipeline import discover_xml_files


class TestDiscoverXmlFiles:
    @staticmethod
    def test_recursive_and_sorted(tmp_path: Path) -> None:
        (tmp_path / "b").mkdir()
        (tmp_path / "a" / "nested").mkdir(parents=True)
        for relative in ("b/casts124.xml", "a/nested/actors63.xml", "mains243.xml"):
            (tmp_path / relative).write_text("<x/>", encoding="utf-8")

        files = discover_xml_files(tmp_path)

        assert files == [
            tmp_path / "a" / "nested" / "actors63.xml",
            tmp_path / "b" / "casts124.xml",
            tmp_path / "mains243.xml",
        ]

    @staticmethod
    def test_suffix_case_insensitive(tmp_path: Path) -> None:
        (tmp_path / "MAINS243.XML").write_text("<x/>", encoding="utf-8")
        assert discover_xml_files(tmp_path) == [tmp_path / "MAINS243.XML"]

    @staticmethod
    def test_other_files_ignored(tmp_path: Path) -> None:
        (tmp_path / "mains243.xml").write_text("<x/>", encoding="utf-8")
        (tmp_path / "mains243.dtd").write_text("<!ELEMENT x ANY>", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("", encoding="utf-8")
        (tmp_path / "old.xml.bak").write_text("", encoding="utf-8")

        assert discover_xml_files(tmp_path) == [tmp_path / "mains243.xml"]

    @staticmethod
    def test_missing_directory(tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Input directory not found"):
            discover_xml_files(tmp_path / "nowhere")

    @staticmethod
    def test_no_xml_files(tmp_path: Path) -> None:
        (tmp_path / "readme.md").write_text("", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="No XML files found"):
            discover_xml_files(tmp_path)
