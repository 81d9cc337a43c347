"""ETL extractors package.

Provides record extraction from XML dump files.

Classes:
    StreamingRecordParser: Streaming, structure-sniffing XML record reader.
"""

from src.etl.extractors.xml import StreamingRecordParser, inspect_structure

__all__ = [
    "StreamingRecordParser",
    "inspect_structure",
]
