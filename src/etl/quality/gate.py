"""Rule-based accept/reject gate for typed candidate records."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from src.etl.errors import ValidationRejection
from src.etl.quality.sink import QualityLogSink, compact_source

T = TypeVar("T")

VALUE_PREVIEW_LENGTH = 200
"""Maximum characters of the offending value written to the log."""

NULL_CANDIDATE_REASON = "value is null"


@dataclass(frozen=True)
class QualityRule(Generic[T]):
    """One named check of a gate.

    Attributes:
        description: Reason logged when the rule fails.
        predicate: Returns True when the candidate passes.
        field_name: Field blamed in the log.
        extractor: Pulls the blamed value out of the candidate.
    """

    description: str
    predicate: Callable[[T], bool]
    field_name: str | None = None
    extractor: Callable[[T], object] | None = None

    def passes(self, candidate: T) -> bool:
        """Evaluate the rule; a predicate that raises counts as a failure."""
        try:
            return bool(self.predicate(candidate))
        except Exception:  # noqa: BLE001
            return False

    def offending_value(self, candidate: T) -> object:
        if self.extractor is None:
            return candidate
        try:
            return self.extractor(candidate)
        except Exception:  # noqa: BLE001
            return None


class QualityGate(Generic[T]):
    """Ordered rule set for one entity kind.

    The first failing rule rejects the candidate and is written to the
    quality log. accept() never raises.

    Example:
        ```python
        gate = QualityGate("movie", [QualityRule("Missing movie id", lambda m: bool(m.id))], sink)
        gate.accept(movie, "mains243.xml", context="film", element="film")
        ```
    """

    def __init__(
        self, entity_name: str, rules: Sequence[QualityRule[T]], sink: QualityLogSink
    ) -> None:
        self.entity_name = entity_name or "entity"
        self.rules = tuple(rules)
        self._sink = sink

    def check(self, candidate: T | None, element: str | None = None) -> ValidationRejection | None:
        """Find the first failing rule without logging.

        Args:
            candidate: Record to check.
            element: XML element the record came from.

        Returns:
            Rejection details, or None when every rule passes.
        """
        if candidate is None:
            return ValidationRejection(
                self.entity_name, NULL_CANDIDATE_REASON, element or "value", None
            )
        for rule in self.rules:
            if not rule.passes(candidate):
                return ValidationRejection(
                    self.entity_name,
                    rule.description,
                    rule.field_name or element or "value",
                    rule.offending_value(candidate),
                )
        return None

    def accept(
        self,
        candidate: T | None,
        source: object = None,
        context: str | None = None,
        element: str | None = None,
    ) -> bool:
        """Accept or reject a candidate, logging rejections.

        Args:
            candidate: Record to check.
            source: Source file path or label.
            context: Optional bracketed context label.
            element: XML element the record came from.

        Returns:
            True when the candidate passes every rule.
        """
        rejection = self.check(candidate, element)
        if rejection is None:
            return True
        self._log(rejection, source, context, element)
        return False

    def _log(
        self,
        rejection: ValidationRejection,
        source: object,
        context: str | None,
        element: str | None,
    ) -> None:
        context_label = f" [{context}]" if context and context.strip() else ""
        body = (
            f"source={compact_source(source)}{context_label}"
            f" element={element or 'unknown'}"
            f" field={rejection.field_name}"
            f" value={preview(rejection.value)}"
            f" -> {rejection.reason}"
        )
        self._sink.log(f"[{self.entity_name}]", body, echo=True)


def preview(value: object) -> str:
    """Render a value for the log, truncated to VALUE_PREVIEW_LENGTH."""
    text = "null" if value is None else str(value)
    if len(text) > VALUE_PREVIEW_LENGTH:
        return text[: VALUE_PREVIEW_LENGTH - 3] + "..."
    return text
