"""Input file discovery."""

from pathlib import Path

from src.etl.errors import ConfigurationError

XML_SUFFIX = ".xml"


def discover_xml_files(input_dir: Path) -> list[Path]:
    """List XML files under input_dir, recursively.

    The suffix match is case-insensitive. Paths are sorted so every run
    submits files in the same order.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted XML file paths.

    Raises:
        ConfigurationError: If the directory is missing or holds no XML file.
    """
    if not input_dir.is_dir():
        raise ConfigurationError(f"Input directory not found: {input_dir}")

    files = sorted(
        path
        for path in input_dir.rglob("*")
        if path.is_file() and path.suffix.lower() == XML_SUFFIX
    )
    if not files:
        raise ConfigurationError(f"No XML files found under {input_dir}")
    return files
