# errors.py
# SPDX-License-Identifier: MIT
"""Exception taxonomy raised by splits, selections, and record readers.

Every error is fatal to the call that raised it; readers never retry or
skip. A path that is merely absent from a document is *not* an error and
never reaches this module.
"""

from __future__ import annotations

__all__ = [
    "RecordKitError",
    "UnsupportedOperation",
    "IllegalState",
    "NoSuchElement",
    "ConfigurationMismatch",
    "DecodeFailure",
]


class RecordKitError(Exception):
    """Base class for all recordkit errors."""


class UnsupportedOperation(RecordKitError, NotImplementedError):
    """The object does not support the requested operation or input kind."""


class IllegalState(RecordKitError, RuntimeError):
    """A method was called before the object was ready for it."""


class NoSuchElement(RecordKitError, LookupError):
    """Iteration was advanced past the last record."""


class ConfigurationMismatch(RecordKitError, ValueError):
    """Decoded content does not have the shape the reader was configured for.

    Raised when a field path resolves to a map or list instead of a scalar,
    or when a decoded pixel buffer disagrees with the configured dimensions.
    """

    def __init__(self, message: str, *, path: tuple[str, ...] | None = None) -> None:
        self.path = path
        super().__init__(message)


class DecodeFailure(RecordKitError, RuntimeError):
    """Reading or decoding the bytes behind a location failed."""

    def __init__(self, location: str | None, message: str) -> None:
        self.location = location
        where = f" ({location})" if location else ""
        super().__init__(f"{message}{where}")
