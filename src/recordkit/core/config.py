# config.py
# SPDX-License-Identifier: MIT
"""Configuration models and helpers for recordkit readers.

This module defines declarative dataclasses for the document, image and
video readers plus logging, along with helpers for serializing and loading
configurations from JSON and TOML. Runtime objects (decoders, label
generators, readers) are built from these specs by
:mod:`recordkit.readers.factories`; they never live on the config itself.

A TOML config looks like::

    [reader]
    format = "yaml"

    [[reader.fields]]
    path = "a"
    fallback = "MISSING_A"

    [[reader.fields]]
    path = "b.c"

    [reader.shuffle]
    enabled = true
    seed = 42

    [reader.label]
    generator = "parent_dir"
    position = 1
"""
from __future__ import annotations

import json
import os
import re
import types
try:  # pragma: no cover - optional dependency
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, Dict, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from .iteration import ReshufflePolicy
from .log import DEFAULT_FORMAT, PACKAGE_LOGGER_NAME, configure_logging
from .selection import LABEL_LAST, as_field_path, validate_label_position

__all__ = [
    "FieldSpec",
    "ShuffleConfig",
    "LabelConfig",
    "DocumentReaderConfig",
    "ImageReaderConfig",
    "CodecReaderConfig",
    "LabelGeneratorKind",
    "LoggingConfig",
    "RecordKitConfig",
    "load_config_from_path",
]


class LabelGeneratorKind:
    """Label generators that can be named in a config."""

    NONE = "none"
    PARENT_DIR = "parent_dir"
    ALL = {NONE, PARENT_DIR}

    @classmethod
    def normalize(cls, value: Optional[str]) -> str:
        kind = (value or cls.NONE).strip().lower()
        if kind not in cls.ALL:
            raise ValueError(f"Invalid label generator: {value!r}. Expected one of {sorted(cls.ALL)}")
        return kind


# ---------------------------------------------------------------------------
# Reader configs
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class FieldSpec:
    """One field to extract.

    Attributes:
        path (str): Dotted path into the document, e.g. ``"b.c"``.
        fallback (str | None): Text emitted when the path is absent; None
            leaves the slot empty.
    """
    path: str
    fallback: Optional[str] = None


@dataclass(slots=True)
class ShuffleConfig:
    """Traversal order controls.

    Attributes:
        enabled (bool): Visit locations in a seeded random order.
        seed (int | None): RNG seed; a time-based seed is drawn when None.
        reshuffle_on_reset (str): ``"advance"`` keeps drawing new orders on
            every reset; ``"replay"`` reproduces the initial order.
    """
    enabled: bool = False
    seed: Optional[int] = None
    reshuffle_on_reset: str = ReshufflePolicy.ADVANCE


@dataclass(slots=True)
class LabelConfig:
    """Label injection for document readers.

    Attributes:
        generator (str): ``"none"`` or ``"parent_dir"``.
        position (int): Output index of the label, or -1 for after all
            fields.
    """
    generator: str = LabelGeneratorKind.NONE
    position: int = LABEL_LAST


@dataclass(slots=True)
class DocumentReaderConfig:
    format: str = "json"
    fields: Tuple[FieldSpec, ...] = ()
    shuffle: ShuffleConfig = field(default_factory=ShuffleConfig)
    label: LabelConfig = field(default_factory=LabelConfig)


@dataclass(slots=True)
class ImageReaderConfig:
    """Image reader dimensions and labeling.

    ``labels`` fixes the class vocabulary; when None and ``append_label`` is
    set, it is inferred from the split's directory names, or from file names
    split on the ``label_pattern`` regex when one is given.
    """
    height: int = 28
    width: int = 28
    channels: int = 1
    append_label: bool = False
    labels: Optional[Tuple[str, ...]] = None
    label_pattern: Optional[str] = None
    label_pattern_position: int = 0
    shuffle: ShuffleConfig = field(default_factory=ShuffleConfig)


@dataclass(slots=True)
class CodecReaderConfig:
    start_frame: int = 0
    total_frames: Optional[int] = None
    rows: Optional[int] = None
    columns: Optional[int] = None
    ravel: bool = False
    shuffle: ShuffleConfig = field(default_factory=ShuffleConfig)


@dataclass(slots=True)
class LoggingConfig:
    """Package logger settings applied by the CLI and by host applications.

    ``propagate`` stays False for the CLI; set it (and ``logger_name``) when
    recordkit runs inside an application with its own handlers.
    """
    level: Union[int, str] = "INFO"
    propagate: bool = False
    fmt: Optional[str] = DEFAULT_FORMAT
    logger_name: str = PACKAGE_LOGGER_NAME

    def apply(self) -> None:
        configure_logging(
            level=self.level,
            fmt=self.fmt,
            propagate=self.propagate,
            logger_name=self.logger_name or PACKAGE_LOGGER_NAME,
        )


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class RecordKitConfig:
    """Declarative spec for recordkit readers.

    Holds only serializable knobs; decoders, label generators and readers
    are runtime objects built from it.
    """
    reader: DocumentReaderConfig = field(default_factory=DocumentReaderConfig)
    image: ImageReaderConfig = field(default_factory=ImageReaderConfig)
    codec: CodecReaderConfig = field(default_factory=CodecReaderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """Validate and normalize the configuration in place.

        Raises:
            ValueError: On invalid paths, positions, policies or dimensions.
        """
        reader = self.reader
        reader.format = (reader.format or "").strip().lower()
        if not reader.format:
            raise ValueError("reader.format must not be empty.")
        for spec in reader.fields:
            as_field_path(spec.path)
        reader.label.generator = LabelGeneratorKind.normalize(reader.label.generator)
        validate_label_position(reader.label.position)
        for shuffle in (reader.shuffle, self.image.shuffle, self.codec.shuffle):
            shuffle.reshuffle_on_reset = ReshufflePolicy.normalize(shuffle.reshuffle_on_reset)

        image = self.image
        if min(image.height, image.width, image.channels) <= 0:
            raise ValueError("image.height, image.width and image.channels must be positive.")
        if image.label_pattern is not None:
            try:
                re.compile(image.label_pattern)
            except re.error as exc:
                raise ValueError(f"image.label_pattern is not a valid regex: {exc}") from exc

        codec = self.codec
        if codec.start_frame < 0:
            raise ValueError("codec.start_frame must be >= 0.")
        if codec.total_frames is not None and codec.total_frames < 0:
            raise ValueError("codec.total_frames must be >= 0 when set.")

    def to_dict(self) -> Dict[str, Any]:
        """Nested plain-dict form, with unset (None) options left out."""
        return _section_to_dict(self)

    def to_json(self, path: Union[str, os.PathLike], *, indent: int = 2) -> str:
        """Write :meth:`to_dict` as JSON and return the path written."""
        with open(path, "w", encoding="utf-8") as fp:
            json.dump(self.to_dict(), fp, indent=indent, sort_keys=True)
            fp.write("\n")
        return os.fspath(path)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RecordKitConfig":
        """Build a config from nested mappings; omitted options keep defaults.

        Raises:
            ValueError: For options no section defines, or values of the
                wrong shape; the message names the dotted section.
        """
        return _section_from_dict(cls, data, "")

    @classmethod
    def from_json(cls, path: Union[str, os.PathLike]) -> "RecordKitConfig":
        with open(path, "r", encoding="utf-8") as fp:
            return cls.from_dict(json.load(fp))

    @classmethod
    def from_toml(cls, path: Union[str, os.PathLike]) -> "RecordKitConfig":
        """Load a TOML file whose tables mirror the sections above."""
        with open(path, "rb") as fp:
            return cls.from_dict(tomllib.load(fp))


def load_config_from_path(path: Union[str, os.PathLike]) -> RecordKitConfig:
    """Load a RecordKitConfig, choosing the parser by file suffix.

    Raises:
        ValueError: If the suffix is neither ``.toml`` nor ``.json``.
    """
    loaders = {".toml": RecordKitConfig.from_toml, ".json": RecordKitConfig.from_json}
    suffix = os.path.splitext(os.fspath(path))[1].lower()
    try:
        loader = loaders[suffix]
    except KeyError:
        raise ValueError(f"Unsupported config file {os.fspath(path)!r}; expected .toml or .json.") from None
    return loader(path)


# ---------------------------------------------------------------------------
# Section (de)serialization
# ---------------------------------------------------------------------------

def _section_to_dict(section: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in fields(section):
        value = _plain(getattr(section, f.name))
        if value is not None:
            out[f.name] = value
    return out


def _plain(value: Any) -> Any:
    if is_dataclass(value):
        return _section_to_dict(value)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _section_from_dict(cls: Any, data: Any, where: str) -> Any:
    label = where or "config"
    if not isinstance(data, Mapping):
        raise ValueError(f"{label} must be a table/object; got {type(data).__name__}.")
    known = {f.name: f for f in fields(cls)}
    unknown = sorted(k for k in data if k not in known)
    if unknown:
        raise ValueError(f"Unsupported options for {cls.__name__} ({label}): {', '.join(unknown)}")

    hints = get_type_hints(cls)
    kwargs: Dict[str, Any] = {}
    for name, raw in data.items():
        dotted = f"{where}.{name}" if where else name
        kwargs[name] = _coerce(hints[name], raw, dotted)
    return cls(**kwargs)


def _coerce(annotation: Any, raw: Any, where: str) -> Any:
    """Shape a parsed JSON/TOML value after a field's annotation."""
    if raw is None:
        if _is_optional(annotation):
            return None
        raise ValueError(f"{where} must not be null.")
    target = _strip_optional(annotation)
    if isinstance(target, type) and is_dataclass(target):
        return _section_from_dict(target, raw, where)
    if get_origin(target) is tuple:
        if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
            raise ValueError(f"{where} must be a list; got {type(raw).__name__}.")
        item_type = next((a for a in get_args(target) if a is not Ellipsis), Any)
        return tuple(_coerce(item_type, item, f"{where}[{i}]") for i, item in enumerate(raw))
    if target is bool:
        if not isinstance(raw, bool):
            raise ValueError(f"{where} must be true or false; got {raw!r}.")
        return raw
    if target is int:
        return _coerce_int(raw, where)
    if target is str:
        # Scalars only; a TOML `fallback = 0` means the text "0".
        if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
            raise ValueError(f"{where} must be a string; got {raw!r}.")
        return str(raw)
    return raw


def _coerce_int(raw: Any, where: str) -> int:
    if isinstance(raw, bool):
        raise ValueError(f"{where} must be an integer; got {raw!r}.")
    if isinstance(raw, float):
        if not raw.is_integer():
            raise ValueError(f"{where} must be an integer; got {raw!r}.")
        return int(raw)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{where} must be an integer; got {raw!r}.") from None


def _is_optional(annotation: Any) -> bool:
    return get_origin(annotation) in (Union, types.UnionType) and type(None) in get_args(annotation)


def _strip_optional(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation
