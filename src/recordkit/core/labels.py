# labels.py
# SPDX-License-Identifier: MIT
"""Label generators derive a label value from a source location alone."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .splits import location_to_path
from .values import IntValue, Text, Value, as_value

__all__ = [
    "LabelGenerator",
    "ParentDirLabelGenerator",
    "IndexedParentDirLabelGenerator",
    "FileNamePatternLabelGenerator",
    "IndexedFileNamePatternLabelGenerator",
    "FunctionLabelGenerator",
    "parent_dir_name",
    "file_name_label",
    "label_vocabulary",
]


@runtime_checkable
class LabelGenerator(Protocol):
    """Pure mapping from a location to a label value."""

    def label_for_location(self, location: str) -> Value:
        ...


def parent_dir_name(location: str) -> str:
    """Name of the directory immediately containing ``location``."""
    return location_to_path(location).parent.name


@dataclass(frozen=True, slots=True)
class ParentDirLabelGenerator:
    """Labels ``.../cats/001.png`` as ``Text("cats")``."""

    def label_for_location(self, location: str) -> Value:
        return Text(parent_dir_name(location))


@dataclass(frozen=True, slots=True)
class IndexedParentDirLabelGenerator:
    """Labels a location by the index of its parent directory in ``labels``.

    Suited to image trees with one subdirectory per class, where the
    downstream model wants a class index instead of a name.
    """

    labels: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(self.labels))

    @classmethod
    def from_locations(cls, locations: Iterable[str]) -> "IndexedParentDirLabelGenerator":
        """Build the label vocabulary from the sorted parent directory names."""
        return cls(tuple(sorted({parent_dir_name(loc) for loc in locations})))

    def label_for_location(self, location: str) -> Value:
        name = parent_dir_name(location)
        try:
            return IntValue(self.labels.index(name))
        except ValueError:
            raise ValueError(f"Directory {name!r} of {location} is not one of the known labels") from None


def file_name_label(location: str, pattern: str, position: int = 0) -> str:
    """Piece ``position`` of the file's stem split on regex ``pattern``.

    ``cat_001.png`` with pattern ``"_"`` gives ``"cat"`` at position 0.

    Raises:
        ValueError: If the stem has no piece at ``position``.
    """
    stem = location_to_path(location).stem
    pieces = re.split(pattern, stem)
    try:
        return pieces[position]
    except IndexError:
        raise ValueError(
            f"File name {stem!r} of {location} has no piece {position} when split on {pattern!r}"
        ) from None


@dataclass(frozen=True, slots=True)
class FileNamePatternLabelGenerator:
    """Labels by a piece of the file name, for flat trees like ``cat_001.png``."""

    pattern: str
    position: int = 0

    def label_for_location(self, location: str) -> Value:
        return Text(file_name_label(location, self.pattern, self.position))


@dataclass(frozen=True, slots=True)
class IndexedFileNamePatternLabelGenerator:
    """Labels by the index of a file-name piece within ``labels``."""

    labels: tuple[str, ...]
    pattern: str
    position: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(self.labels))

    @classmethod
    def from_locations(
        cls, locations: Iterable[str], pattern: str, position: int = 0
    ) -> "IndexedFileNamePatternLabelGenerator":
        names = {file_name_label(loc, pattern, position) for loc in locations}
        return cls(tuple(sorted(names)), pattern, position)

    def label_for_location(self, location: str) -> Value:
        name = file_name_label(location, self.pattern, self.position)
        try:
            return IntValue(self.labels.index(name))
        except ValueError:
            raise ValueError(f"Label {name!r} of {location} is not one of the known labels") from None


@dataclass(frozen=True, slots=True)
class FunctionLabelGenerator:
    """Adapts a plain callable; non-value results are wrapped with as_value."""

    fn: Callable[[str], Any]

    def label_for_location(self, location: str) -> Value:
        value = as_value(self.fn(location))
        if value is None:
            raise ValueError(f"Label function returned None for {location}")
        return value


def label_vocabulary(generator: LabelGenerator | None) -> Sequence[str] | None:
    """Return the known labels of a generator, when it has a fixed set."""
    return getattr(generator, "labels", None)
