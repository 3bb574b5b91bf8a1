# interfaces.py
# SPDX-License-Identifier: MIT
"""Protocols shared by record readers and the decoders they are given."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from typing import IO, Optional, Protocol, runtime_checkable

import numpy as np

from .documents import MapNode
from .splits import InputSplit
from .values import Record

__all__ = [
    "RecordShape",
    "RecordReader",
    "SequenceRecordReader",
    "DocumentDecoder",
    "ImageDecoder",
    "FrameDecoder",
]


class RecordShape(enum.Enum):
    """How many records one source location turns into."""

    SINGLE = "single"      # one record per location (documents, images)
    SEQUENCE = "sequence"  # an ordered list of records per location (video frames)


# -----------------------------------------------------------------------------
# Reader capability set
# -----------------------------------------------------------------------------

@runtime_checkable
class RecordReader(Protocol):
    """Pull-based reader producing one record per location.

    Readers move from uninitialized to ready on :meth:`initialize`, then
    serve records until exhausted. They are not thread-safe; concurrent
    consumers each need their own reader (splits and selections may be
    shared).
    """

    shape: RecordShape

    def initialize(self, split: InputSplit) -> None:
        """Capture the split's locations and prepare the traversal order."""
        ...

    def has_next(self) -> bool:
        ...

    def next(self) -> Record:
        """Decode the next location and return its record.

        Raises:
            IllegalState: Before initialize().
            NoSuchElement: When exhausted.
            DecodeFailure: When reading or decoding fails.
        """
        ...

    def reset(self) -> None:
        """Rewind to the first record, reshuffling when enabled."""
        ...

    def record(self, location: str, stream: IO[bytes]) -> Record:
        """Build a record from a caller-supplied stream, bypassing the cursor."""
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class SequenceRecordReader(Protocol):
    """Pull-based reader producing an ordered list of records per location."""

    shape: RecordShape

    def initialize(self, split: InputSplit) -> None:
        ...

    def has_next(self) -> bool:
        ...

    def next(self) -> list[Record]:
        ...

    def reset(self) -> None:
        ...

    def sequence_record(self, location: Optional[str], stream: IO[bytes]) -> list[Record]:
        ...

    def close(self) -> None:
        ...


# -----------------------------------------------------------------------------
# Decoder boundary
# -----------------------------------------------------------------------------

class DocumentDecoder(Protocol):
    """Turns raw bytes into a document tree."""

    def __call__(self, data: bytes) -> MapNode:  # pragma: no cover - interface
        ...


class ImageDecoder(Protocol):
    """Turns raw image bytes into a ``(height, width, channels)`` array."""

    def __call__(self, data: bytes, height: int, width: int, channels: int) -> np.ndarray:  # pragma: no cover
        ...


class FrameDecoder(Protocol):
    """Turns raw video bytes into frames of shape ``(rows, columns, channels)``.

    ``rows``/``columns`` are the requested frame size; None keeps the native
    size. Frames must be yielded in presentation order.
    """

    def __call__(
        self, data: bytes, rows: Optional[int], columns: Optional[int]
    ) -> Iterable[np.ndarray] | Sequence[np.ndarray]:  # pragma: no cover - interface
        ...
