# image.py
# SPDX-License-Identifier: MIT
"""Record reader for image files, one record per image.

Each record holds the image's pixels flattened to ``height * width *
channels`` values, optionally followed by a label. Pixel decoding is
delegated to an injected :class:`ImageDecoder`, which is expected to scale
the image to the requested size.

With ``append_label=True`` and no explicit generator, images laid out as
``root/<class>/<file>`` are labeled by the index of ``<class>`` within the
sorted class directory names (or within ``labels`` when given). Flat
trees such as ``cat_001.png`` are labeled from the file name instead by
passing ``label_pattern='_'``; the piece at ``label_pattern_position`` is
the class.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import IO, Optional

import numpy as np

from ..core.errors import ConfigurationMismatch, UnsupportedOperation
from ..core.interfaces import ImageDecoder, RecordShape
from ..core.iteration import ReshufflePolicy, TraversalState
from ..core.labels import (
    IndexedFileNamePatternLabelGenerator,
    IndexedParentDirLabelGenerator,
    LabelGenerator,
    label_vocabulary,
)
from ..core.log import get_logger
from ..core.splits import InputSplit
from ..core.values import ArrayValue, Record
from ._io import decode_or_fail, read_location, read_stream

__all__ = ["ImageRecordReader"]

log = get_logger(__name__)


class ImageRecordReader:
    shape = RecordShape.SINGLE

    def __init__(
        self,
        height: int,
        width: int,
        channels: int = 1,
        *,
        decoder: ImageDecoder,
        append_label: bool = False,
        labels: Optional[Sequence[str]] = None,
        label_pattern: Optional[str] = None,
        label_pattern_position: int = 0,
        label_generator: Optional[LabelGenerator] = None,
        shuffle: bool = False,
        rng_seed: Optional[int] = None,
        reshuffle: str = ReshufflePolicy.ADVANCE,
    ) -> None:
        if height <= 0 or width <= 0 or channels <= 0:
            raise ValueError(f"Image dimensions must be positive; got {height}x{width}x{channels}")
        self.height = height
        self.width = width
        self.channels = channels
        self.decoder = decoder
        self.label_pattern = label_pattern
        self.label_pattern_position = label_pattern_position
        self.append_label = append_label or label_generator is not None
        self.label_generator = label_generator
        # Inferred vocabularies are rebuilt from every split passed to initialize().
        self._infer_labels = self.append_label and label_generator is None and labels is None
        if label_generator is None and labels is not None:
            self.label_generator = self._indexed_generator(tuple(labels))
        self._state = TraversalState(shuffle=shuffle, seed=rng_seed, reshuffle=reshuffle)

    def _indexed_generator(self, labels: tuple[str, ...]) -> LabelGenerator:
        if self.label_pattern is not None:
            return IndexedFileNamePatternLabelGenerator(labels, self.label_pattern, self.label_pattern_position)
        return IndexedParentDirLabelGenerator(labels)

    def _infer_generator(self, locations: Sequence[str]) -> LabelGenerator:
        if self.label_pattern is not None:
            return IndexedFileNamePatternLabelGenerator.from_locations(
                locations, self.label_pattern, self.label_pattern_position
            )
        return IndexedParentDirLabelGenerator.from_locations(locations)

    def initialize(self, split: InputSplit) -> None:
        """Capture the split's locations; builds the label set when needed."""
        self._state.load(split.locations())
        if self._infer_labels:
            self.label_generator = self._infer_generator(self._state.order)
            log.debug("Inferred %d image labels", len(self.labels()))
        log.debug(
            "ImageRecordReader initialized with %d locations (%dx%dx%d)",
            len(self._state),
            self.height,
            self.width,
            self.channels,
        )

    def has_next(self) -> bool:
        return self._state.has_next()

    def next(self) -> Record:
        location = self._state.advance()
        return self._read_values(location, read_location(location))

    def reset(self) -> None:
        self._state.reset()

    def record(self, location: str, stream: IO[bytes]) -> Record:
        return self._read_values(location, read_stream(stream, location))

    def labels(self) -> list[str]:
        vocab = label_vocabulary(self.label_generator)
        if vocab is None:
            raise UnsupportedOperation("This reader has no fixed label set")
        return list(vocab)

    def _decode(self, data: bytes) -> np.ndarray:
        return np.asarray(self.decoder(data, self.height, self.width, self.channels))

    def _read_values(self, location: str, data: bytes) -> Record:
        pixels = decode_or_fail(self._decode, data, location)
        expected = (self.height, self.width, self.channels)
        # Single-channel decoders may drop the channel axis.
        if pixels.shape != expected and not (self.channels == 1 and pixels.shape == expected[:2]):
            raise ConfigurationMismatch(
                f"Decoded image {location} has shape {pixels.shape}; expected {expected}"
            )
        out: Record = [ArrayValue(pixels.reshape(-1))]
        if self.append_label and self.label_generator is not None:
            out.append(self.label_generator.label_for_location(location))
        return out

    def __iter__(self) -> Iterator[Record]:
        while self.has_next():
            yield self.next()

    def close(self) -> None:
        return None

    def __enter__(self) -> "ImageRecordReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
