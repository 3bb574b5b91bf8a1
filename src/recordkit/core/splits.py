# splits.py
# SPDX-License-Identifier: MIT
"""Input splits: ordered, read-only collections of source locations.

A location is a URI string (``file:///data/a.json``) or a plain filesystem
path. Splits never open anything themselves; readers resolve locations with
:func:`open_location` inside a ``with`` block.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import IO, Protocol, runtime_checkable
from urllib.parse import urlsplit
from urllib.request import url2pathname

from .errors import IllegalState, UnsupportedOperation

__all__ = [
    "DEFAULT_SKIP_DIRS",
    "DEFAULT_SKIP_FILES",
    "InputSplit",
    "CollectionInputSplit",
    "FileSplit",
    "StreamingInputSplit",
    "normalize_extensions",
    "location_to_path",
    "open_location",
]

# Directories and files that never hold input documents.
DEFAULT_SKIP_DIRS: set[str] = {
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    ".pytest_cache",
    ".venv",
    "node_modules",
}

DEFAULT_SKIP_FILES: set[str] = {
    ".DS_Store",
    "Thumbs.db",
}


@runtime_checkable
class InputSplit(Protocol):
    """Ordered collection of source locations.

    Implementations are read-only after construction and may be shared by
    several readers.
    """

    def length(self) -> int:
        """Number of locations; streaming splits raise UnsupportedOperation."""
        ...

    def locations(self) -> Sequence[str] | Iterable[str]:
        """Locations in traversal order."""
        ...


class _NoSerialization:
    """Split serialization hooks; none of the bundled splits persist state."""

    __slots__ = ()

    def write(self, out: IO[bytes]) -> None:
        raise UnsupportedOperation(f"{type(self).__name__} cannot be serialized")

    def read_fields(self, inp: IO[bytes]) -> None:
        raise UnsupportedOperation(f"{type(self).__name__} cannot be deserialized")

    def to_int(self) -> int:
        raise UnsupportedOperation("Not supported")

    def to_float(self) -> float:
        raise UnsupportedOperation("Not supported")


class CollectionInputSplit(_NoSerialization):
    """Split over an externally supplied collection of locations.

    Order is fixed at construction in the collection's own iteration order;
    nothing is sorted.
    """

    __slots__ = ("_locations",)

    def __init__(self, locations: Iterable[str | os.PathLike[str]]) -> None:
        self._locations: tuple[str, ...] = tuple(os.fspath(loc) for loc in locations)

    def length(self) -> int:
        return len(self._locations)

    def locations(self) -> tuple[str, ...]:
        return self._locations

    def __len__(self) -> int:
        return len(self._locations)

    def __repr__(self) -> str:
        return f"CollectionInputSplit(n={len(self._locations)})"


def normalize_extensions(exts: Iterable[str] | None) -> frozenset[str] | None:
    """Normalize extension strings into dotted lowercase values.

    Returns None when nothing remains after cleaning.
    """
    if not exts:
        return None
    out: set[str] = set()
    for ext in exts:
        cleaned = (ext or "").strip().lower()
        if not cleaned:
            continue
        out.add(cleaned if cleaned.startswith(".") else f".{cleaned}")
    return frozenset(out) or None


class FileSplit(_NoSerialization):
    """Split over the files below a local root directory (or a single file).

    Files are listed once at construction, in case-insensitive sorted order
    per directory, skipping dotfiles, dot-directories and common junk. Each
    location is an absolute ``file://`` URI.

    Args:
        root: Directory to walk, or a single file.
        allowed_extensions: Keep only files with these suffixes.
        recursive: Descend into subdirectories.
    """

    __slots__ = ("root", "allowed_extensions", "recursive", "_locations")

    def __init__(
        self,
        root: str | os.PathLike[str],
        allowed_extensions: Iterable[str] | None = None,
        recursive: bool = True,
    ) -> None:
        self.root = Path(root)
        self.allowed_extensions = normalize_extensions(allowed_extensions)
        self.recursive = recursive
        self._locations = tuple(p.as_uri() for p in self._list_files())

    def _accept(self, path: Path) -> bool:
        if path.name in DEFAULT_SKIP_FILES or path.name.startswith("."):
            return False
        if self.allowed_extensions is None:
            return True
        return path.suffix.lower() in self.allowed_extensions

    def _list_files(self) -> Iterator[Path]:
        root = self.root.resolve()
        if root.is_file():
            if self._accept(root):
                yield root
            return
        if not root.is_dir():
            raise FileNotFoundError(root)
        for dirpath, dirnames, filenames in os.walk(root, topdown=True):
            # Deterministic order across platforms.
            dirnames.sort(key=str.casefold)
            filenames.sort(key=str.casefold)
            if not self.recursive:
                dirnames[:] = []
            else:
                dirnames[:] = [
                    d for d in dirnames if not d.startswith(".") and d not in DEFAULT_SKIP_DIRS
                ]
            dpath = Path(dirpath)
            for name in filenames:
                candidate = dpath / name
                if self._accept(candidate):
                    yield candidate

    def length(self) -> int:
        return len(self._locations)

    def locations(self) -> tuple[str, ...]:
        return self._locations

    def __len__(self) -> int:
        return len(self._locations)

    def __repr__(self) -> str:
        return f"FileSplit(root={str(self.root)!r}, n={len(self._locations)})"


class StreamingInputSplit(_NoSerialization):
    """Forward-only split over an iterable of locations.

    The size is unknown until the iterable is drained, so :meth:`length`
    is unsupported, and :meth:`locations` can be traversed only once.
    """

    __slots__ = ("_source", "_consumed")

    def __init__(self, locations: Iterable[str | os.PathLike[str]]) -> None:
        self._source = locations
        self._consumed = False

    def length(self) -> int:
        raise UnsupportedOperation("StreamingInputSplit has no length before it is read")

    def locations(self) -> Iterator[str]:
        if self._consumed:
            raise IllegalState("StreamingInputSplit locations were already consumed")
        self._consumed = True
        return (os.fspath(loc) for loc in self._source)


def location_to_path(location: str | os.PathLike[str]) -> Path:
    """Resolve a ``file://`` URI or plain path to a local Path.

    Raises:
        UnsupportedOperation: For URI schemes other than ``file``.
    """
    loc = os.fspath(location)
    parts = urlsplit(loc)
    # One-letter schemes are Windows drive letters, not URI schemes.
    if not parts.scheme or len(parts.scheme) == 1:
        return Path(loc)
    if parts.scheme != "file":
        raise UnsupportedOperation(f"Unsupported location scheme {parts.scheme!r}: {loc}")
    if parts.netloc and parts.netloc != "localhost":
        return Path(url2pathname(f"//{parts.netloc}{parts.path}"))
    return Path(url2pathname(parts.path))


def open_location(location: str | os.PathLike[str]) -> IO[bytes]:
    """Open a location for binary reading. The caller must close the stream."""
    return location_to_path(location).open("rb")
