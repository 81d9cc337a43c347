"""Genre canonicalization and unknown-genre evidence tracking.

Raw genre codes in the dumps are a mix of full names ("Drama"), short
codes ("Dram", "Susp"), typos ("Dramma") and compounds ("Romt Comd").
Resolution runs through fixed stages against a read-only canonical table:

1. Direct match on the comparison key.
2. Near match: one inserted, deleted or replaced character.
3. Alias code ("SCFI" -> "Sci-Fi").
4. Compound alias: every alias word replaced ("Romt Comd" -> "Romance Comedy").

Values that match nothing are normalized as emerging genres instead of
being dropped, and counted by GenreEvidenceTracker.
"""

import re
import threading
from dataclasses import dataclass

from src.etl.quality.sink import QualityLogSink, compact_source

# =============================================================================
# CONSTANTS
# =============================================================================

CANONICAL_GENRES: tuple[str, ...] = (
    "Action",
    "Adult",
    "Adventure",
    "Animation",
    "Biography",
    "Comedy",
    "Crime",
    "Documentary",
    "Drama",
    "Family",
    "Fantasy",
    "History",
    "Horror",
    "Music",
    "Musical",
    "Mystery",
    "Reality-TV",
    "Romance",
    "Sci-Fi",
    "Sport",
    "Thriller",
    "War",
    "Western",
)

GENRE_ALIASES: dict[str, str] = {
    "ACTN": "Action",
    "ADVT": "Adventure",
    "ANIM": "Animation",
    "BIOP": "Biography",
    "COMD": "Comedy",
    "CRIM": "Crime",
    "DOCU": "Documentary",
    "DRAM": "Drama",
    "FAMI": "Family",
    "FANT": "Fantasy",
    "HIST": "History",
    "HORR": "Horror",
    "MUSI": "Music",
    "MUSC": "Musical",
    "MYST": "Mystery",
    "ROMT": "Romance",
    "SCFI": "Sci-Fi",
    "SF": "Sci-Fi",
    "SUSP": "Thriller",
    "THRL": "Thriller",
    "WEST": "Western",
    "WAR": "War",
}
"""Upper-case alphanumeric codes found in the dumps."""

SUSPICIOUS_CHARACTERS = frozenset("*;:|")
MAX_EMERGING_LENGTH = 32
NEAR_MATCH_MIN_LENGTH = 4
"""Shorter keys are too ambiguous for one-edit matching."""

_PLAUSIBLE_GENRE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9 ,'&/+\-]*$")
_WORD = re.compile(r"[A-Za-z0-9]+")
_WHITESPACE = re.compile(r"\s+")
_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")
_WORD_BREAKS = frozenset(" -/&")


# =============================================================================
# STRING HELPERS
# =============================================================================


def sanitize_genre(value: str | None) -> str | None:
    """Trim, blank out ``< > .`` and collapse Unicode whitespace."""
    if value is None:
        return None
    cleaned = value.strip().translate(str.maketrans("<>.", "   "))
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned or None


def comparison_key(value: str | None) -> str | None:
    """Lower-case alphanumeric key used to compare genre spellings."""
    sanitized = sanitize_genre(value)
    if sanitized is None:
        return None
    key = _NON_ALPHANUMERIC.sub("", sanitized).lower()
    return key or None


def to_display_case(value: str) -> str:
    """Lower-case, then capitalize the first letter of every word."""
    chars: list[str] = []
    capitalize_next = True
    for char in value.lower():
        if char.isalpha():
            chars.append(char.upper() if capitalize_next else char)
            capitalize_next = False
        else:
            chars.append(char)
            capitalize_next = char in _WORD_BREAKS
    return "".join(chars).strip()


def contains_suspicious_characters(value: str | None) -> bool:
    """Check for characters that signal a data entry error."""
    return value is not None and any(char in SUSPICIOUS_CHARACTERS for char in value)


def _is_single_edit(known: str, candidate: str) -> bool:
    """True when the strings differ by exactly one insertion, deletion or replacement."""
    if len(known) == len(candidate):
        return sum(1 for a, b in zip(known, candidate) if a != b) == 1
    if abs(len(known) - len(candidate)) != 1:
        return False

    longer, shorter = (known, candidate) if len(known) > len(candidate) else (candidate, known)
    i = j = 0
    skipped = False
    while i < len(longer) and j < len(shorter):
        if longer[i] == shorter[j]:
            i += 1
            j += 1
            continue
        if skipped:
            return False
        skipped = True
        i += 1
    return True


# =============================================================================
# NORMALIZER
# =============================================================================


class GenreNormalizer:
    """Map raw genre strings to canonical or emerging display names.

    The canonical table is never modified after construction, so results
    do not depend on the order in which files are processed.
    """

    def __init__(
        self,
        canonical: tuple[str, ...] = CANONICAL_GENRES,
        aliases: dict[str, str] | None = None,
        sink: QualityLogSink | None = None,
    ) -> None:
        self._known: dict[str, str] = {}
        for name in canonical:
            key = comparison_key(name)
            if key is not None:
                self._known.setdefault(key, name)
        self._near_keys = sorted(self._known)
        self._aliases = dict(GENRE_ALIASES if aliases is None else aliases)
        self._sink = sink

    def canonicalize(self, value: str | None) -> str | None:
        """Resolve a raw value against the canonical table.

        Returns:
            Canonical display name, or None when no stage matches.
        """
        sanitized = sanitize_genre(value)
        if sanitized is None:
            return None
        key = comparison_key(sanitized)
        if key is None:
            return None

        return (
            self._known.get(key)
            or self._match_alias(sanitized)
            or self._match_near(key)
            or self._match_compound_alias(sanitized)
        )

    def normalize_emerging(
        self,
        value: str | None,
        movie_id: str | None = None,
        source: object = None,
    ) -> str | None:
        """Normalize a value that is not canonical.

        Implausible values are logged as genre anomalies and yield None.

        Args:
            value: Raw genre string.
            movie_id: Movie the value was attached to, for diagnostics.
            source: Source file, for diagnostics.

        Returns:
            Display-cased genre name or None.
        """
        sanitized = sanitize_genre(value)
        if sanitized is None:
            return None
        if contains_suspicious_characters(sanitized):
            self._log_anomaly(
                "Suspicious characters in emerging genre", source, movie_id, sanitized
            )
            return None
        if len(sanitized) > MAX_EMERGING_LENGTH:
            self._log_anomaly("Emerging genre name too long", source, movie_id, sanitized)
            return None
        if not _PLAUSIBLE_GENRE.match(sanitized):
            self._log_anomaly("Implausible emerging genre name", source, movie_id, sanitized)
            return None
        return self.canonicalize(sanitized) or to_display_case(sanitized)

    def normalize(
        self,
        value: str | None,
        movie_id: str | None = None,
        source: object = None,
    ) -> tuple[str | None, bool]:
        """Canonicalize, falling back to emerging normalization.

        Returns:
            Tuple of (normalized name or None, whether it is canonical).
        """
        canonical = self.canonicalize(value)
        if canonical is not None:
            return canonical, True
        return self.normalize_emerging(value, movie_id, source), False

    def log_normalization(
        self,
        source: object,
        movie_id: str | None,
        original: str | None,
        normalized: str | None,
    ) -> None:
        """Record a raw value that was rewritten during normalization."""
        if self._sink is None:
            return
        body = (
            f"source={compact_source(source)}"
            f" movieId={movie_id or 'unknown'}"
            f" original={original if original is not None else 'null'}"
            f" normalized={normalized if normalized is not None else 'null'}"
        )
        self._sink.log("[genre-fixed]", body, echo=False)

    # =========================================================================
    # Resolution stages
    # =========================================================================

    def _match_near(self, key: str) -> str | None:
        if len(key) < NEAR_MATCH_MIN_LENGTH:
            return None
        for known_key in self._near_keys:
            if _is_single_edit(known_key, key):
                return self._known[known_key]
        return None

    def _match_alias(self, value: str) -> str | None:
        code = _NON_ALPHANUMERIC.sub("", value).upper()
        return self._aliases.get(code) if code else None

    def _match_compound_alias(self, value: str) -> str | None:
        replaced = False

        def substitute(match: re.Match[str]) -> str:
            nonlocal replaced
            resolved = self._match_alias(match.group())
            if resolved is None:
                return match.group()
            replaced = True
            return resolved

        rewritten = _WORD.sub(substitute, value)
        return to_display_case(rewritten) if replaced else None

    def _log_anomaly(
        self,
        message: str,
        source: object,
        movie_id: str | None,
        value: str | None,
    ) -> None:
        if self._sink is None:
            return
        body = (
            f"source={compact_source(source)}"
            f" movieId={movie_id or 'unknown'}"
            f" value={value if value is not None else 'null'} -> {message}"
        )
        self._sink.log("[genre]", body, echo=True)


# =============================================================================
# EVIDENCE TRACKER
# =============================================================================


@dataclass
class GenreEvidence:
    """Occurrences of one unknown genre spelling family."""

    count: int
    first_movie_id: str | None


class GenreEvidenceTracker:
    """Count unknown genre values per comparison key.

    Keeps the first movie id seen with each key, so frequent unknown
    genres can be reviewed for promotion to the canonical table. Safe for
    concurrent writers; never raises.
    """

    def __init__(self, sink: QualityLogSink | None = None) -> None:
        self._sink = sink
        self._lock = threading.Lock()
        self._evidence: dict[str, GenreEvidence] = {}

    def record_unknown(self, genre_name: str | None, movie_id: str | None) -> int:
        """Count one occurrence of an unknown genre.

        Args:
            genre_name: Raw genre value.
            movie_id: Movie carrying the value.

        Returns:
            Occurrence count for the value's key (0 when it has no key).
        """
        sanitized = sanitize_genre(genre_name)
        key = comparison_key(sanitized)
        if sanitized is None or key is None:
            return 0

        with self._lock:
            evidence = self._evidence.setdefault(key, GenreEvidence(0, movie_id))
            evidence.count += 1
            count = evidence.count
            first_movie_id = evidence.first_movie_id

        if self._sink is not None:
            body = (
                f"genre={sanitized} normalizedKey={key}"
                f" evidenceCount={count} firstMovieId={first_movie_id}"
            )
            self._sink.log("[genre-unknown]", body, echo=False)
        return count

    def evidence_count(self, genre_name: str | None) -> int:
        """Occurrences recorded for the value's comparison key."""
        key = comparison_key(genre_name)
        if key is None:
            return 0
        with self._lock:
            evidence = self._evidence.get(key)
            return evidence.count if evidence else 0

    def snapshot(self) -> dict[str, GenreEvidence]:
        """Copy of the evidence collected so far, keyed by comparison key."""
        with self._lock:
            return {
                key: GenreEvidence(evidence.count, evidence.first_movie_id)
                for key, evidence in self._evidence.items()
            }
