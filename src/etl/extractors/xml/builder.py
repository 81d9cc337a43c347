"""lxml parser target turning row elements into RawTree records.

The target only keeps the element stack of the record being read, so the
document is never materialized as a whole.
"""

from dataclasses import dataclass, field

from src.etl.types.raw import ATTRIBUTE_PREFIX, TEXT_KEY, Node, RawList, RawTree, Scalar


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from an element or attribute name."""
    if tag.startswith("{"):
        return tag.rsplit("}", 1)[-1]
    return tag


@dataclass
class _OpenElement:
    """Element whose end tag has not been seen yet."""

    name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: dict[str, RawTree | list[RawTree]] = field(default_factory=dict)
    text: list[str] = field(default_factory=list)

    def add_child(self, name: str, value: RawTree) -> None:
        """Attach a finished child, collapsing repeated names into a list.

        Empty children only claim the name when nothing else has.
        """
        if value is None:
            self.children.setdefault(name, None)
            return

        existing = self.children.get(name)
        if existing is None:
            self.children[name] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            self.children[name] = [existing, value]

    def build(self) -> RawTree:
        """Freeze the element into its RawTree value."""
        text = "".join(self.text).strip()
        if not self.children and not self.attributes:
            return Scalar(text) if text else None

        entries: dict[str, RawTree] = {}
        for key, value in self.attributes.items():
            entries[f"{ATTRIBUTE_PREFIX}{key}"] = Scalar(value)
        for key, value in self.children.items():
            entries[key] = RawList(tuple(value)) if isinstance(value, list) else value
        if text:
            entries[TEXT_KEY] = Scalar(text)
        return Node(entries)


class RecordTreeBuilder:
    """Parser target collecting one RawTree per row element.

    Attributes:
        row_tag: Record element name.
        root_tag: First element seen in the document.
        records: Finished records in document order.
        issues: Structural issues found while building.
    """

    def __init__(self, row_tag: str) -> None:
        self.row_tag = row_tag
        self.root_tag: str | None = None
        self.records: list[RawTree] = []
        self.issues: list[str] = []
        self._stack: list[_OpenElement] = []

    def start(self, tag: str, attrib: dict[str, str]) -> None:
        name = local_name(tag)
        if self.root_tag is None:
            self.root_tag = name
        if not self._stack and name != self.row_tag:
            return

        element = _OpenElement(name)
        for key, value in attrib.items():
            if value is not None:
                element.attributes[local_name(key)] = value
        self._stack.append(element)

    def data(self, text: str) -> None:
        if self._stack:
            self._stack[-1].text.append(text)

    def end(self, tag: str) -> None:
        if not self._stack:
            return

        name = local_name(tag)
        element = self._stack.pop()
        if element.name != name:
            self.issues.append(
                f"Mismatched element: expected '{element.name}' but found '{name}'."
            )

        value = element.build()
        if self._stack:
            self._stack[-1].add_child(element.name, value)
        else:
            self.records.append(value)

    def close(self) -> tuple[RawTree, ...]:
        """Return collected records; unfinished records are discarded."""
        if self._stack:
            self.issues.append(
                f"Unterminated record element '{self._stack[0].name}' discarded."
            )
            self._stack.clear()
        return tuple(self.records)
