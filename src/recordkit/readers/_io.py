# _io.py
# SPDX-License-Identifier: MIT
"""Byte acquisition and decode wrapping shared by the readers."""

from __future__ import annotations

from collections.abc import Callable
from typing import IO, Optional, TypeVar

from ..core.errors import DecodeFailure, RecordKitError
from ..core.splits import open_location

T = TypeVar("T")


def read_location(location: str) -> bytes:
    """Read every byte behind ``location``; the handle is closed on all paths."""
    try:
        with open_location(location) as fp:
            return fp.read()
    except OSError as exc:
        raise DecodeFailure(location, f"Error reading location: {exc}") from exc


def read_stream(stream: IO[bytes], location: Optional[str]) -> bytes:
    """Drain a caller-supplied stream. The caller keeps ownership of it."""
    try:
        return stream.read()
    except (OSError, ValueError) as exc:  # ValueError: stream already closed
        raise DecodeFailure(location, f"Error reading stream: {exc}") from exc


def decode_or_fail(decode: Callable[[bytes], T], data: bytes, location: Optional[str]) -> T:
    """Run a decoder, re-raising any parser error as DecodeFailure."""
    try:
        return decode(data)
    except RecordKitError:
        raise
    except Exception as exc:  # noqa: BLE001 - decoders raise library-specific errors
        raise DecodeFailure(location, f"Error decoding content: {exc}") from exc
