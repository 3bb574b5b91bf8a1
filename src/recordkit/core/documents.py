# documents.py
# SPDX-License-Identifier: MIT
"""Tagged tree representation of decoded semi-structured documents.

Decoders (JSON, YAML, XML, ...) hand back plain Python containers; this
module converts them into a closed set of node types so path resolution can
dispatch on the node kind instead of probing arbitrary objects.
"""

from __future__ import annotations

import datetime as _dt
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

__all__ = [
    "TextNode",
    "NumberNode",
    "BoolNode",
    "NullNode",
    "MapNode",
    "ListNode",
    "Node",
    "to_node",
    "to_document",
]


@dataclass(frozen=True, slots=True)
class TextNode:
    value: str
    kind = "text"


@dataclass(frozen=True, slots=True)
class NumberNode:
    value: int | float
    kind = "number"

    def as_text(self) -> str:
        """Canonical text form: ``str`` for ints, ``repr`` for floats."""
        if isinstance(self.value, float):
            return repr(self.value)
        return str(self.value)


@dataclass(frozen=True, slots=True)
class BoolNode:
    value: bool
    kind = "boolean"


@dataclass(frozen=True, slots=True)
class NullNode:
    kind = "null"

    @property
    def value(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class MapNode:
    """Mapping of string keys to child nodes (insertion order preserved)."""

    entries: Mapping[str, "Node"]
    kind = "map"

    def get(self, key: str) -> "Node | None":
        return self.entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def value(self) -> dict[str, Any]:
        return {k: v.value for k, v in self.entries.items()}


@dataclass(frozen=True, slots=True)
class ListNode:
    items: tuple["Node", ...]
    kind = "list"

    def __len__(self) -> int:
        return len(self.items)

    @property
    def value(self) -> list[Any]:
        return [item.value for item in self.items]


Node = Union[TextNode, NumberNode, BoolNode, NullNode, MapNode, ListNode]


def to_node(obj: Any) -> Node:
    """Convert a plain Python value into a document node.

    Strings, numbers, booleans, ``None``, mappings and sequences map onto
    their node types. Dates (as produced by YAML loaders) become ISO text.

    Raises:
        TypeError: For values that have no document representation.
    """
    if obj is None:
        return NullNode()
    # bool is an int subclass; check it first.
    if isinstance(obj, bool):
        return BoolNode(obj)
    if isinstance(obj, (int, float)):
        return NumberNode(obj)
    if isinstance(obj, str):
        return TextNode(obj)
    if isinstance(obj, (_dt.date, _dt.datetime, _dt.time)):
        return TextNode(obj.isoformat())
    if isinstance(obj, Mapping):
        return MapNode({str(k): to_node(v) for k, v in obj.items()})
    if isinstance(obj, Sequence) and not isinstance(obj, (bytes, bytearray)):
        return ListNode(tuple(to_node(v) for v in obj))
    raise TypeError(f"Cannot represent {type(obj).__name__} in a document tree")


def to_document(obj: Any) -> MapNode:
    """Convert a decoded top-level object into a document root.

    Raises:
        TypeError: If the top-level value is not a mapping.
    """
    if isinstance(obj, MapNode):
        return obj
    if not isinstance(obj, Mapping):
        raise TypeError(f"Top-level document must be a mapping; got {type(obj).__name__}")
    return MapNode({str(k): to_node(v) for k, v in obj.items()})
