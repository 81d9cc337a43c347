"""ETL pipeline package for movie XML dumps.

Discovers the XML files of a directory, parses and transforms them on
a bounded worker pool, aggregates the results and writes them to the
target database.

Public API:
    - PipelineOrchestrator: Run the pipeline over a directory or file list
    - discover_xml_files: Input discovery
    - main: CLI entry point
"""

from src.etl.pipeline.cli import main
from src.etl.pipeline.discovery import discover_xml_files
from src.etl.pipeline.orchestrator import PipelineOrchestrator

__all__ = [
    "PipelineOrchestrator",
    "discover_xml_files",
    "main",
]
