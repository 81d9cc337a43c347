"""Source classification and value derivation shared by the mappers."""

import re
import zlib
from enum import Enum
from pathlib import Path

# =============================================================================
# CONSTANTS
# =============================================================================

STAR_ID_PREFIX = "nm"
STAR_ID_MODULUS = 100_000_000
"""Keeps the checksum within eight decimal digits."""

_YEAR = re.compile(r"(\d{4})")
_WHITESPACE = re.compile(r"\s+")


class SourceKind(Enum):
    """Transformation path selected by the file path."""

    MOVIES = "movies"
    STARS = "stars"
    CASTS = "casts"
    UNKNOWN = "unknown"


_SOURCE_MARKERS: tuple[tuple[str, SourceKind], ...] = (
    ("mains", SourceKind.MOVIES),
    ("actors", SourceKind.STARS),
    ("casts", SourceKind.CASTS),
)


def classify_source(path: Path | str) -> SourceKind:
    """Pick the transformation path from the file path.

    Matching is a case-insensitive substring test on the whole path,
    checked in the order mains, actors, casts.

    Args:
        path: Source file path.

    Returns:
        Matching SourceKind, UNKNOWN when nothing matches.
    """
    lowered = str(path).lower()
    for marker, kind in _SOURCE_MARKERS:
        if marker in lowered:
            return kind
    return SourceKind.UNKNOWN


def parse_year(value: str | None) -> int | None:
    """Return the first four-digit run in a free-text field."""
    if not value:
        return None
    match = _YEAR.search(value)
    return int(match.group(1)) if match else None


def star_id_for(name: str | None) -> str | None:
    """Derive the synthetic star id from a stage name.

    CRC-32 of the trimmed, lower-cased UTF-8 name, reduced modulo
    100,000,000 and rendered as ``nm`` plus eight zero-padded digits.
    The same name always gives the same id.

    Args:
        name: Stage name as found in the dump.

    Returns:
        Star id, or None for blank names.
    """
    if name is None:
        return None
    normalized = name.strip().lower()
    if not normalized:
        return None
    checksum = zlib.crc32(normalized.encode("utf-8")) % STAR_ID_MODULUS
    return f"{STAR_ID_PREFIX}{checksum:08d}"


def clean_text(value: str | None) -> str | None:
    """Trim a value and collapse inner whitespace runs, mapping blanks to None."""
    if value is None:
        return None
    collapsed = _WHITESPACE.sub(" ", value).strip()
    return collapsed or None
