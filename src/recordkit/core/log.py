# log.py
# SPDX-License-Identifier: MIT
"""Logging for recordkit.

Every module logs through ``get_logger(__name__)``, below the ``recordkit``
package logger. The package logger carries a NullHandler, so nothing is
printed until an application calls :func:`configure_logging` (directly, via
:class:`recordkit.core.config.LoggingConfig`, or through the CLI's
``--log-level``). Readers only log at DEBUG: initialization, shuffle seeds
and resets, never individual records.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import IO, Iterator, Optional, Union

__all__ = [
    "PACKAGE_LOGGER_NAME",
    "DEFAULT_FORMAT",
    "get_logger",
    "configure_logging",
    "temp_level",
]

PACKAGE_LOGGER_NAME = "recordkit"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Tags the one handler configure_logging installs per logger.
_OWNED_ATTR = "_recordkit_owned"

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())

LevelLike = Union[int, str]


def _coerce_level(level: LevelLike) -> int:
    """Map a level name such as ``"debug"`` to its number; unknown names mean INFO."""
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        return value if isinstance(value, int) else logging.INFO
    return int(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``name``'s logger, or the package logger when omitted."""
    return logging.getLogger(name or PACKAGE_LOGGER_NAME)


def _owned_handler(logger: logging.Logger) -> Optional[logging.StreamHandler]:
    for handler in logger.handlers:
        if getattr(handler, _OWNED_ATTR, False):
            return handler  # type: ignore[return-value]
    return None


def configure_logging(
    *,
    level: LevelLike = logging.INFO,
    stream: Optional[IO[str]] = None,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    propagate: Optional[bool] = None,
    logger_name: str = PACKAGE_LOGGER_NAME,
) -> logging.Logger:
    """Route a recordkit logger to a stream.

    Calling this again reuses the handler installed by the first call: the
    level always changes, the formatter only when ``fmt`` or ``datefmt`` is
    given, and the stream only when ``stream`` is given or the old one was
    closed (as happens with pytest's capture streams).

    Args:
        level (int | str): Level number or name; unknown names fall back to
            INFO.
        stream (IO[str] | None): Destination; ``sys.stderr`` when omitted.
        fmt (str | None): Format string; :data:`DEFAULT_FORMAT` when omitted.
        datefmt (str | None): ``asctime`` format.
        propagate (bool | None): Forward records to ancestor loggers. None
            means True, so host handlers and pytest's caplog still see them.
        logger_name (str): Logger to configure.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = get_logger(logger_name)
    logger.setLevel(_coerce_level(level))
    logger.propagate = True if propagate is None else bool(propagate)

    handler = _owned_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        setattr(handler, _OWNED_ATTR, True)
        handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT, datefmt))
        logger.addHandler(handler)
        return logger

    if stream is not None or getattr(handler.stream, "closed", False):
        handler.setStream(stream or sys.stderr)
    if fmt is not None or datefmt is not None:
        handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT, datefmt))
    return logger


@contextmanager
def temp_level(level: LevelLike, name: Optional[str] = None) -> Iterator[logging.Logger]:
    """Raise or lower a logger's level for the duration of a ``with`` block."""
    logger = get_logger(name)
    previous = logger.level
    logger.setLevel(_coerce_level(level))
    try:
        yield logger
    finally:
        logger.setLevel(previous)
