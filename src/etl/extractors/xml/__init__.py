"""Streaming XML extraction: structure inspection and record parsing."""

from src.etl.extractors.xml.builder import RecordTreeBuilder, local_name
from src.etl.extractors.xml.parser import (
    LocalDtdResolver,
    StreamingRecordParser,
    inspect_structure,
)

__all__ = [
    "LocalDtdResolver",
    "RecordTreeBuilder",
    "StreamingRecordParser",
    "inspect_structure",
    "local_name",
]
