# codec.py
# SPDX-License-Identifier: MIT
"""Sequence record reader for video files: one record per decoded frame.

Frame decoding is delegated to an injected :class:`FrameDecoder`. The reader
selects a window of frames (``start_frame``, ``total_frames``), checks their
size against ``rows``/``columns`` when given, and optionally ravels each
frame to a flat vector. A 80x46 RGB frame ravelled has 80 * 46 * 3 values.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterator
from typing import IO, Optional

import numpy as np

from ..core.errors import ConfigurationMismatch
from ..core.interfaces import FrameDecoder, RecordShape
from ..core.iteration import ReshufflePolicy, TraversalState
from ..core.log import get_logger
from ..core.splits import InputSplit
from ..core.values import ArrayValue, Record
from ._io import decode_or_fail, read_location, read_stream

__all__ = ["CodecRecordReader"]

log = get_logger(__name__)


class CodecRecordReader:
    """Reader yielding, per video, the list of its frame records.

    Args:
        decoder: Callable turning video bytes into frames.
        start_frame: Index of the first frame to keep.
        total_frames: Number of frames to keep; None keeps the rest.
        rows: Requested frame height, forwarded to the decoder.
        columns: Requested frame width, forwarded to the decoder.
        ravel: Flatten each frame to one dimension.
        shuffle, rng_seed, reshuffle: Traversal controls, as for the
            document reader.
    """

    shape = RecordShape.SEQUENCE

    def __init__(
        self,
        *,
        decoder: FrameDecoder,
        start_frame: int = 0,
        total_frames: Optional[int] = None,
        rows: Optional[int] = None,
        columns: Optional[int] = None,
        ravel: bool = False,
        shuffle: bool = False,
        rng_seed: Optional[int] = None,
        reshuffle: str = ReshufflePolicy.ADVANCE,
    ) -> None:
        if start_frame < 0:
            raise ValueError(f"start_frame must be >= 0; got {start_frame}")
        if total_frames is not None and total_frames < 0:
            raise ValueError(f"total_frames must be >= 0; got {total_frames}")
        self.decoder = decoder
        self.start_frame = start_frame
        self.total_frames = total_frames
        self.rows = rows
        self.columns = columns
        self.ravel = ravel
        self._state = TraversalState(shuffle=shuffle, seed=rng_seed, reshuffle=reshuffle)

    def initialize(self, split: InputSplit) -> None:
        self._state.load(split.locations())
        log.debug(
            "CodecRecordReader initialized with %d locations (frames %d..%s)",
            len(self._state),
            self.start_frame,
            "end" if self.total_frames is None else self.start_frame + self.total_frames,
        )

    def has_next(self) -> bool:
        return self._state.has_next()

    def next(self) -> list[Record]:
        location = self._state.advance()
        return self._read_sequence(location, read_location(location))

    def reset(self) -> None:
        self._state.reset()

    def sequence_record(self, location: Optional[str], stream: IO[bytes]) -> list[Record]:
        """Build the frame records from an open stream; equal to :meth:`next`."""
        return self._read_sequence(location, read_stream(stream, location))

    def _decode(self, data: bytes) -> list[np.ndarray]:
        stop = None if self.total_frames is None else self.start_frame + self.total_frames
        frames = self.decoder(data, self.rows, self.columns)
        return [np.asarray(f) for f in itertools.islice(frames, self.start_frame, stop)]

    def _read_sequence(self, location: Optional[str], data: bytes) -> list[Record]:
        frames = decode_or_fail(self._decode, data, location)
        out: list[Record] = []
        for index, frame in enumerate(frames, start=self.start_frame):
            self._check_frame(frame, index, location)
            out.append([ArrayValue(frame.reshape(-1) if self.ravel else frame)])
        return out

    def _check_frame(self, frame: np.ndarray, index: int, location: Optional[str]) -> None:
        if frame.ndim < 2:
            raise ConfigurationMismatch(f"Frame {index} of {location} is not two-dimensional: {frame.shape}")
        if self.rows is not None and frame.shape[0] != self.rows:
            raise ConfigurationMismatch(
                f"Frame {index} of {location} has {frame.shape[0]} rows; expected {self.rows}"
            )
        if self.columns is not None and frame.shape[1] != self.columns:
            raise ConfigurationMismatch(
                f"Frame {index} of {location} has {frame.shape[1]} columns; expected {self.columns}"
            )

    def __iter__(self) -> Iterator[list[Record]]:
        while self.has_next():
            yield self.next()

    def close(self) -> None:
        return None

    def __enter__(self) -> "CodecRecordReader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
