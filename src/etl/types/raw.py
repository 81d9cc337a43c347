"""Loosely-typed record trees produced by the XML parser.

A record element is reduced to a RawTree:

- ``Scalar``: a leaf element with text only.
- ``Node``: an ordered, read-only mapping of child names to RawTree.
  Attributes are stored under ``@name``, text next to children under
  ``$text``.
- ``RawList``: repeated child elements sharing one name, in document order.
- ``None``: an empty leaf.

The helpers below are total: they accept any RawTree and never raise.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

ATTRIBUTE_PREFIX = "@"
TEXT_KEY = "$text"


@dataclass(frozen=True, slots=True)
class Scalar:
    """Leaf element text."""

    value: str


class Node(Mapping[str, "RawTree"]):
    """Immutable ordered mapping of child element names to subtrees."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, "RawTree"] | None = None) -> None:
        self._entries = MappingProxyType(dict(entries or {}))

    def __getitem__(self, key: str) -> "RawTree":
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Node({dict(self._entries)!r})"


@dataclass(frozen=True, slots=True)
class RawList:
    """Repeated sibling elements sharing one name."""

    items: tuple["RawTree", ...]

    def __iter__(self) -> Iterator["RawTree"]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


RawTree = Union[Scalar, Node, RawList, None]


# =============================================================================
# TOTAL ACCESSORS
# =============================================================================


def text_of(tree: RawTree) -> str | None:
    """Extract trimmed text from a subtree.

    Scalars yield their text, nodes their ``$text`` entry or the text of
    their only entry. Blank text and lists yield None.

    Args:
        tree: Any RawTree.

    Returns:
        Trimmed non-empty text or None.
    """
    if isinstance(tree, Scalar):
        value = tree.value.strip()
        return value or None
    if isinstance(tree, Node):
        if TEXT_KEY in tree:
            return text_of(tree[TEXT_KEY])
        if len(tree) == 1:
            return text_of(next(iter(tree.values())))
    return None


def child(tree: RawTree, *path: str) -> RawTree:
    """Follow nested element names through nodes.

    Args:
        tree: Starting subtree.
        *path: Element names to descend through.

    Returns:
        Subtree at path, or None when any step is missing.
    """
    current = tree
    for name in path:
        if not isinstance(current, Node):
            return None
        current = current.get(name)
    return current


def nodes_of(tree: RawTree) -> list[Node]:
    """Return the node children of a subtree as a list.

    A single node becomes a one-element list; list items that are not
    nodes are dropped.
    """
    if isinstance(tree, Node):
        return [tree]
    if isinstance(tree, RawList):
        return [item for item in tree if isinstance(item, Node)]
    return []


def scalars_of(tree: RawTree) -> list[str]:
    """Collect text values from a subtree, flattening lists recursively."""
    if isinstance(tree, RawList):
        values: list[str] = []
        for item in tree:
            values.extend(scalars_of(item))
        return values
    value = text_of(tree)
    return [value] if value is not None else []
