# document.py
# SPDX-License-Identifier: MIT
"""Record reader for JSON, YAML and XML documents, one record per file.

The reader pulls a fixed, ordered set of fields out of each document via a
:class:`FieldSelection`, so it copes with files where:

- fields come in any order (the selection defines the output order);
- some fields are missing (the selection's fallback is emitted instead);
- fields are nested arbitrarily deep (``a.b.c.d``).

An optional label generator adds a label derived from each file's location,
and traversal can be shuffled with a seeded RNG.

Example::

    reader = DocumentRecordReader(selection, decode_yaml, shuffle=True, rng_seed=42)
    reader.initialize(CollectionInputSplit(uris))
    while reader.has_next():
        record = reader.next()
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import IO, Callable, Optional

from ..core.documents import MapNode
from ..core.errors import UnsupportedOperation
from ..core.interfaces import RecordShape
from ..core.iteration import ReshufflePolicy, TraversalState
from ..core.labels import LabelGenerator
from ..core.log import get_logger
from ..core.selection import LABEL_LAST, FieldSelection, extract_record, validate_label_position
from ..core.splits import FileSplit, InputSplit
from ..core.values import Record
from ._io import decode_or_fail, read_location, read_stream
from .formats import FormatRegistry, decode_json

__all__ = ["DocumentRecordReader"]

log = get_logger(__name__)


class DocumentRecordReader:
    """Single-record reader over semi-structured documents.

    Args:
        selection: Fields to extract, in output order, with fallbacks.
        decoder: Callable turning file bytes into a document tree.
        formats: Pick each location's decoder by its suffix from this
            registry instead of using ``decoder``.
        shuffle: Visit locations in a seeded random order.
        rng_seed: Seed for the shuffle RNG; time-based when omitted.
        label_generator: Optional location-to-label function.
        label_position: Output index for the label, or ``LABEL_LAST``.
        reshuffle: What reset() does to a shuffled order
            (``"advance"`` or ``"replay"``).
    """

    shape = RecordShape.SINGLE

    def __init__(
        self,
        selection: FieldSelection,
        decoder: Callable[[bytes], MapNode] = decode_json,
        *,
        formats: Optional[FormatRegistry] = None,
        shuffle: bool = False,
        rng_seed: Optional[int] = None,
        label_generator: Optional[LabelGenerator] = None,
        label_position: int = LABEL_LAST,
        reshuffle: str = ReshufflePolicy.ADVANCE,
    ) -> None:
        self.selection = selection
        self.decoder = decoder
        self.formats = formats
        self.label_generator = label_generator
        self.label_position = validate_label_position(label_position)
        self._state = TraversalState(shuffle=shuffle, seed=rng_seed, reshuffle=reshuffle)

    @property
    def shuffle(self) -> bool:
        return self._state.shuffle

    @property
    def rng_seed(self) -> int:
        return self._state.seed

    def initialize(self, split: InputSplit) -> None:
        """Capture the split's locations, shuffling them when enabled.

        Raises:
            UnsupportedOperation: For a :class:`FileSplit`; document readers
                need an explicit collection of locations.
        """
        if isinstance(split, FileSplit):
            raise UnsupportedOperation("Cannot use DocumentRecordReader with FileSplit")
        self._state.load(split.locations())
        log.debug(
            "DocumentRecordReader initialized with %d locations (shuffle=%s)",
            len(self._state),
            self._state.shuffle,
        )

    def has_next(self) -> bool:
        return self._state.has_next()

    def next(self) -> Record:
        location = self._state.advance()
        return self._read_values(location, read_location(location))

    def reset(self) -> None:
        self._state.reset()

    def record(self, location: str, stream: IO[bytes]) -> Record:
        """Build the record for ``location`` from an already open stream.

        Produces exactly what :meth:`next` would for the same bytes.
        """
        return self._read_values(location, read_stream(stream, location))

    def labels(self) -> list[str]:
        raise UnsupportedOperation("DocumentRecordReader has no fixed label set")

    def _read_values(self, location: str, data: bytes) -> Record:
        document = decode_or_fail(self._decoder_for(location), data, location)
        return extract_record(
            document,
            location,
            self.selection,
            label_generator=self.label_generator,
            label_position=self.label_position,
        )

    def _decoder_for(self, location: str) -> Callable[[bytes], MapNode]:
        if self.formats is None:
            return self.decoder
        formats = self.formats
        # Unknown suffixes surface as DecodeFailure for that location.
        return lambda data: formats.decoder_for_location(location)(data)

    def __iter__(self) -> Iterator[Record]:
        while self.has_next():
            yield self.next()

    def close(self) -> None:
        # Streams are scoped to each next() call; nothing stays open.
        return None

    def __enter__(self) -> "DocumentRecordReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
