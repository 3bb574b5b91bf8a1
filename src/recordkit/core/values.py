# values.py
# SPDX-License-Identifier: MIT
"""Output value types carried by records.

A record is a flat ``list`` of these values: extracted fields become
:class:`Text`, labels are typically :class:`Text` or :class:`IntValue`, and
media readers emit pixel data as :class:`ArrayValue`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import numpy as np

__all__ = [
    "Text",
    "IntValue",
    "FloatValue",
    "ArrayValue",
    "Value",
    "Record",
    "as_value",
    "record_to_json",
]


@dataclass(frozen=True, slots=True)
class Text:
    value: str

    def __str__(self) -> str:
        return self.value

    def to_json(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class IntValue:
    value: int

    def __str__(self) -> str:
        return str(self.value)

    def to_json(self) -> int:
        return self.value


@dataclass(frozen=True, slots=True)
class FloatValue:
    value: float

    def __str__(self) -> str:
        return repr(self.value)

    def to_json(self) -> float:
        return self.value


@dataclass(frozen=True, slots=True, eq=False)
class ArrayValue:
    """Numeric array payload (pixels, frames)."""

    array: np.ndarray

    def __len__(self) -> int:
        return int(self.array.size)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self.array.shape)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArrayValue):
            return NotImplemented
        return self.array.shape == other.array.shape and bool(np.array_equal(self.array, other.array))

    __hash__ = None  # type: ignore[assignment]

    def to_json(self) -> list[Any]:
        return self.array.tolist()


Value = Union[Text, IntValue, FloatValue, ArrayValue]
# Fallbacks may be None, so a record slot may be None as well.
Record = list[Union[Value, None]]


def as_value(obj: Any) -> Value | None:
    """Wrap a plain Python object as an output value.

    Values that are already output values pass through unchanged.
    """
    if obj is None or isinstance(obj, (Text, IntValue, FloatValue, ArrayValue)):
        return obj
    if isinstance(obj, bool):
        return Text(str(obj).lower())
    if isinstance(obj, int):
        return IntValue(obj)
    if isinstance(obj, float):
        return FloatValue(obj)
    if isinstance(obj, str):
        return Text(obj)
    if isinstance(obj, np.ndarray):
        return ArrayValue(obj)
    raise TypeError(f"Cannot convert {type(obj).__name__} to a record value")


def record_to_json(record: Record) -> list[Any]:
    """Return a JSON-serializable list for a record."""
    return [None if v is None else v.to_json() for v in record]
