# selection.py
# SPDX-License-Identifier: MIT
"""Field selection and path resolution over decoded documents.

A :class:`FieldSelection` lists the nested paths to pull out of each
document, in output order, together with the value to emit when a path is
absent. This lets one selection serve documents whose fields arrive in any
order, are nested arbitrarily deep, or are optional::

    selection = (
        FieldSelection.builder()
        .add_field("a", fallback=Text("MISSING_A"))
        .add_field("b.c", fallback=Text("MISSING_BC"))
        .build()
    )

Absent paths are expected and never raise. A path that *is* present but
ends on a map, list, boolean or null means the selection does not match the
documents, and raises :class:`ConfigurationMismatch`.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Union

from .documents import MapNode, Node, NumberNode, TextNode
from .errors import ConfigurationMismatch
from .values import Record, Text, Value

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .labels import LabelGenerator

__all__ = [
    "LABEL_LAST",
    "FieldPath",
    "FieldSelection",
    "FieldSelectionBuilder",
    "as_field_path",
    "resolve_path",
    "extract_record",
    "validate_label_position",
]

# Label position meaning "after every extracted field".
LABEL_LAST = -1

FieldPath = tuple[str, ...]


def as_field_path(path: Union[str, Sequence[str]]) -> FieldPath:
    """Normalize a dotted string or a key sequence into a FieldPath.

    Keys that themselves contain dots must be passed as a sequence.

    Raises:
        ValueError: If the path is empty or contains an empty key.
    """
    keys = tuple(path.split(".")) if isinstance(path, str) else tuple(str(k) for k in path)
    if not keys or any(k == "" for k in keys):
        raise ValueError(f"Invalid field path: {path!r}")
    return keys


@dataclass(frozen=True, slots=True)
class FieldSelection:
    """Ordered field paths paired one-to-one with fallback values."""

    paths: tuple[FieldPath, ...]
    fallbacks: tuple[Optional[Value], ...]

    def __post_init__(self) -> None:
        paths = tuple(as_field_path(p) for p in self.paths)
        fallbacks = tuple(self.fallbacks)
        if len(paths) != len(fallbacks):
            raise ValueError(
                f"FieldSelection needs one fallback per path; got {len(paths)} paths "
                f"and {len(fallbacks)} fallbacks"
            )
        object.__setattr__(self, "paths", paths)
        object.__setattr__(self, "fallbacks", fallbacks)

    def __len__(self) -> int:
        return len(self.paths)

    @staticmethod
    def builder() -> "FieldSelectionBuilder":
        return FieldSelectionBuilder()


@dataclass
class FieldSelectionBuilder:
    """Accumulates fields, then freezes them into a FieldSelection."""

    _paths: list[FieldPath] = field(default_factory=list)
    _fallbacks: list[Optional[Value]] = field(default_factory=list)

    def add_field(
        self,
        path: Union[str, Sequence[str]],
        fallback: Optional[Value] = None,
    ) -> "FieldSelectionBuilder":
        self._paths.append(as_field_path(path))
        self._fallbacks.append(fallback)
        return self

    def build(self) -> FieldSelection:
        return FieldSelection(tuple(self._paths), tuple(self._fallbacks))


def resolve_path(document: MapNode, path: FieldPath) -> Optional[str]:
    """Resolve ``path`` against ``document`` to scalar text.

    Returns:
        str | None: The text at the end of the path, or None when any key on
        the path is absent or an intermediate value is not a map.

    Raises:
        ConfigurationMismatch: If the terminal value is not a string or number.
    """
    node: Node = document
    last = len(path) - 1
    for depth, key in enumerate(path):
        if not isinstance(node, MapNode):
            return None
        child = node.get(key)
        if child is None:
            return None
        if depth < last:
            node = child
            continue
        if isinstance(child, TextNode):
            return child.value
        if isinstance(child, NumberNode):
            return child.as_text()
        raise ConfigurationMismatch(
            f"Expected a string or number at path {list(path)}, found {child.kind} "
            f"with value {child.value!r}",
            path=path,
        )
    return None


def validate_label_position(position: int) -> int:
    """Reject negative label positions other than LABEL_LAST."""
    if position < 0 and position != LABEL_LAST:
        raise ValueError(f"label_position must be >= 0 or LABEL_LAST ({LABEL_LAST}); got {position}")
    return position


def extract_record(
    document: MapNode,
    location: str,
    selection: FieldSelection,
    label_generator: Optional["LabelGenerator"] = None,
    label_position: int = LABEL_LAST,
) -> Record:
    """Build one output record from a decoded document.

    Fields are emitted in selection order. When a label generator is given,
    its value for ``location`` is inserted before field ``label_position``,
    or appended after the last field when the position is LABEL_LAST or past
    the end of the selection.
    """
    out: Record = []
    label_pending = label_generator is not None
    for i, (path, fallback) in enumerate(zip(selection.paths, selection.fallbacks)):
        if label_pending and i == label_position:
            out.append(label_generator.label_for_location(location))  # type: ignore[union-attr]
            label_pending = False
        value = resolve_path(document, path)
        out.append(fallback if value is None else Text(value))
    if label_pending:
        out.append(label_generator.label_for_location(location))  # type: ignore[union-attr]
    return out
