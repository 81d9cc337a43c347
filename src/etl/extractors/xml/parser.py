"""Streaming XML record parser.

Turns one list-style XML document into a sequence of RawTree records,
one per row element, without keeping the document tree in memory.

Parsing is lenient: a DTD that cannot be found locally, mismatched close
tags, and stray entity references are logged as issues and parsing goes
on. Any other well-formedness error aborts the file with
StructuralParseError.
"""

from collections.abc import Sequence
from pathlib import Path
from types import TracebackType

from lxml import etree

from src.etl.errors import ETLError, StructuralParseError
from src.etl.extractors.xml.builder import RecordTreeBuilder, local_name
from src.etl.types import RawFileResult, StructureOverride
from src.etl.utils import setup_logger

# =============================================================================
# CONSTANTS
# =============================================================================

RECOVERABLE_ERRORS = frozenset(
    {
        etree.ErrorTypes.ERR_TAG_NAME_MISMATCH,
        etree.ErrorTypes.ERR_UNDECLARED_ENTITY,
        etree.ErrorTypes.WAR_UNDECLARED_ENTITY,
        etree.ErrorTypes.ERR_ENTITYREF_SEMICOL_MISSING,
        etree.ErrorTypes.ERR_NAME_REQUIRED,
        etree.ErrorTypes.ERR_INVALID_CHARREF,
        etree.ErrorTypes.ERR_INVALID_DEC_CHARREF,
    }
)
"""Fatal-level libxml2 errors the recovering parser repairs in place."""


# =============================================================================
# DTD RESOLUTION
# =============================================================================


class LocalDtdResolver(etree.Resolver):
    """Resolve external DTDs from disk only.

    Looks next to the XML file first, then in each fallback directory.
    A DTD that cannot be found is replaced by an empty one and reported.
    """

    def __init__(self, base_dir: Path, search_dirs: Sequence[Path], issues: list[str]) -> None:
        super().__init__()
        self._base_dir = base_dir
        self._search_dirs = tuple(search_dirs)
        self._issues = issues

    def resolve(self, system_url, public_id, context):  # noqa: ANN001, ANN201
        if not system_url:
            return None

        candidate = self.find(system_url)
        if candidate is not None:
            return self.resolve_filename(str(candidate), context)

        self._issues.append(
            f"DTD not found for system identifier '{system_url}'; continuing without validation."
        )
        return self.resolve_string("", context)

    def find(self, system_url: str) -> Path | None:
        """Locate a DTD on disk.

        Args:
            system_url: System identifier from the DOCTYPE.

        Returns:
            Existing file path or None.
        """
        reference = Path(system_url.removeprefix("file://"))
        candidates = [reference] if reference.is_absolute() else [self._base_dir / reference]
        candidates.extend(directory / reference.name for directory in self._search_dirs)
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None


# =============================================================================
# STRUCTURE INSPECTION
# =============================================================================


def inspect_structure(path: Path) -> StructureOverride:
    """Read the first two nesting levels to find the root and row elements.

    Args:
        path: XML file to inspect.

    Returns:
        Detected root and row element names.

    Raises:
        StructuralParseError: If the file is unreadable or has no row element.
    """
    root_tag: str | None = None
    row_tag: str | None = None
    depth = 0

    try:
        context = etree.iterparse(
            str(path),
            events=("start", "end"),
            recover=True,
            load_dtd=False,
            no_network=True,
            resolve_entities=False,
        )
        for event, element in context:
            if event == "end":
                depth -= 1
                continue
            if depth == 0 and root_tag is None:
                root_tag = local_name(element.tag)
            elif depth == 1:
                row_tag = local_name(element.tag)
                break
            depth += 1
        del context
    except etree.XMLSyntaxError as e:
        raise StructuralParseError(path, f"Failed to inspect XML structure: {e}") from e
    except OSError as e:
        raise StructuralParseError(path, f"Cannot read file: {e}") from e

    if row_tag is None:
        raise StructuralParseError(path, "Unable to determine XML row element")
    return StructureOverride(root_tag=root_tag, row_tag=row_tag)


# =============================================================================
# PARSER
# =============================================================================


class StreamingRecordParser:
    """Parse XML dumps into RawFileResult objects.

    One instance is shared by all worker threads: every call to parse()
    builds its own lxml parser and keeps no state on the instance.

    Example:
        ```python
        with StreamingRecordParser(dtd_dirs=[Path("data")]) as parser:
            result = parser.parse(Path("data/xml/mains243.xml"))
        ```
    """

    def __init__(self, dtd_dirs: Sequence[Path] = ()) -> None:
        """Initialize parser.

        Args:
            dtd_dirs: Fallback directories searched for DTD files.
        """
        self._dtd_dirs = tuple(dtd_dirs)
        self._closed = False
        self._logger = setup_logger("etl.parser")

    def parse(self, path: Path, override: StructureOverride | None = None) -> RawFileResult:
        """Parse one XML file.

        Args:
            path: XML file to parse.
            override: Explicit root/row names; inferred when absent.

        Returns:
            Records of the file in document order.

        Raises:
            StructuralParseError: On unreadable or malformed input.
        """
        if self._closed:
            raise ETLError("Parser is closed")

        path = Path(path)
        if not path.is_file():
            raise StructuralParseError(path, "XML file not found")

        structure = self._resolve_structure(path, override)
        issues: list[str] = []
        builder = RecordTreeBuilder(structure.row_tag or "")
        parser = self._create_parser(path, builder, issues)

        try:
            # With a target, parse() returns the target's close() result
            records = etree.parse(str(path), parser)
        except etree.XMLSyntaxError as e:
            raise StructuralParseError(path, f"Fatal parser error: {e}") from e
        except OSError as e:
            raise StructuralParseError(path, f"Cannot read file: {e}") from e

        self._check_error_log(path, parser.error_log, issues)
        issues.extend(builder.issues)
        if structure.root_tag and builder.root_tag and structure.root_tag != builder.root_tag:
            issues.append(
                f"Root element '{builder.root_tag}' does not match expected '{structure.root_tag}'."
            )

        self._report_issues(path, issues)
        self._logger.info(f"Parsed {path.name}: {len(records)} '{structure.row_tag}' records")
        return RawFileResult(source_path=path, records=records, issues=tuple(issues))

    def close(self) -> None:
        """Release the parser. Later parse() calls fail."""
        self._closed = True

    def __enter__(self) -> "StreamingRecordParser":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _resolve_structure(path: Path, override: StructureOverride | None) -> StructureOverride:
        """Combine configured tags with inspected ones; configured tags win."""
        if override is not None and override.row_tag:
            return override
        inspected = inspect_structure(path)
        if override is not None and override.root_tag:
            return StructureOverride(root_tag=override.root_tag, row_tag=inspected.row_tag)
        return inspected

    def _create_parser(
        self,
        path: Path,
        builder: RecordTreeBuilder,
        issues: list[str],
    ) -> etree.XMLParser:
        """Build a recovering parser writing into builder."""
        parser = etree.XMLParser(
            target=builder,
            recover=True,
            load_dtd=True,
            no_network=True,
            huge_tree=False,
        )
        parser.resolvers.add(LocalDtdResolver(path.parent, self._dtd_dirs, issues))
        return parser

    @staticmethod
    def _check_error_log(path: Path, error_log: etree._ListErrorLog, issues: list[str]) -> None:
        """Record parser messages as issues; fail on unrecoverable errors.

        Raises:
            StructuralParseError: On the first fatal error that is not repairable.
        """
        for entry in error_log:
            message = (
                f"{entry.level_name} while parsing {path.name} at line {entry.line} "
                f"column {entry.column}: {(entry.message or '').strip()}"
            )
            if entry.level == etree.ErrorLevels.FATAL and entry.type not in RECOVERABLE_ERRORS:
                raise StructuralParseError(path, message)
            issues.append(message)

    def _report_issues(self, path: Path, issues: list[str]) -> None:
        if not issues:
            return
        self._logger.warning(f"Parsing issues detected in {path.name}: {len(issues)}")
        for issue in issues:
            self._logger.warning(f"  - {issue}")
