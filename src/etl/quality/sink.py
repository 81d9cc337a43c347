"""Append-only data quality log shared by every worker thread."""

import sys
import threading
from pathlib import Path

QUALITY_TAG = "[QUALITY]"


class QualityLogSink:
    """Thread-safe appender for the data quality log.

    Each line is ``[QUALITY]<prefix> <body>``. Appends are serialized by a
    lock; the file is opened per line so nothing stays open between runs.

    Attributes:
        path: Log file location.
        echo: Whether echo-eligible lines are also written to stderr.
    """

    def __init__(self, path: Path, echo: bool = False) -> None:
        self.path = Path(path)
        self.echo = echo
        self._lock = threading.Lock()

    def log(self, prefix: str, body: str, echo: bool = True) -> str:
        """Append one line.

        Args:
            prefix: Bracketed category, e.g. ``[movie]``.
            body: Diagnostic body.
            echo: Echo to stderr when the sink echoes.

        Returns:
            The formatted line.
        """
        line = f"{QUALITY_TAG}{prefix} {body}"
        if echo and self.echo:
            print(line, file=sys.stderr)
        with self._lock:
            try:
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(line + "\n")
            except OSError as e:
                print(f"{QUALITY_TAG}[logger] Failed to append to log file: {e}", file=sys.stderr)
        return line


def compact_source(source: object) -> str:
    """Reduce a source path to its file name."""
    if source is None:
        return "unknown-source"
    text = str(source).strip().replace("\\", "/")
    if not text:
        return "unknown-source"
    return text.rstrip("/").rsplit("/", 1)[-1] or text
