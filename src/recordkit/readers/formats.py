# formats.py
# SPDX-License-Identifier: MIT
"""Built-in document decoders (JSON, YAML, XML) and a registry keyed by format.

Decoders take raw bytes and return a :class:`MapNode`. They raise whatever
their parser raises; readers wrap those errors in ``DecodeFailure``.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

import yaml

from ..core.documents import MapNode, to_document
from ..core.interfaces import DocumentDecoder
from ..core.splits import normalize_extensions

__all__ = [
    "decode_json",
    "decode_yaml",
    "decode_xml",
    "AUTO_FORMAT",
    "FormatRegistry",
    "default_formats",
]

# Format name meaning "choose the decoder per location from its suffix".
AUTO_FORMAT = "auto"


def decode_json(data: bytes) -> MapNode:
    """Decode a JSON object (UTF-8/16/32 detected by :func:`json.loads`)."""
    return to_document(json.loads(data))


def decode_yaml(data: bytes) -> MapNode:
    """Decode a single YAML mapping with ``yaml.safe_load``."""
    return to_document(yaml.safe_load(data))


# -----------------------------------------------------------------------------
# XML
# -----------------------------------------------------------------------------

def _local_name(tag: str) -> str:
    """Drop a ``{namespace}`` prefix from an element or attribute name."""
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _element_to_obj(elem: ET.Element) -> Any:
    children = list(elem)
    text = (elem.text or "").strip()
    if not children and not elem.attrib:
        return text

    out: dict[str, Any] = {}
    for name, value in elem.attrib.items():
        out[f"@{_local_name(name)}"] = value
    for child in children:
        key = _local_name(child.tag)
        value = _element_to_obj(child)
        if key not in out:
            out[key] = value
        elif isinstance(out[key], list):
            out[key].append(value)
        else:
            # Repeated child elements collapse into a list.
            out[key] = [out[key], value]
    if text:
        out["#text"] = text
    return out


def decode_xml(data: bytes) -> MapNode:
    """Decode an XML document; the root element's content is the document.

    Child elements become keys, repeated children become lists, attributes
    become ``@name`` keys and element text of mixed elements ``#text``.
    """
    root = ET.fromstring(data)
    obj = _element_to_obj(root)
    if isinstance(obj, str):
        # Text-only root: expose it under the root's own name.
        obj = {_local_name(root.tag): obj}
    return to_document(obj)


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

@dataclass
class FormatRegistry:
    """Maps format names and file suffixes to document decoders."""

    _decoders: dict[str, DocumentDecoder] = field(default_factory=dict)
    _suffixes: dict[str, str] = field(default_factory=dict)

    def register(
        self,
        name: str,
        decoder: DocumentDecoder | Callable[[bytes], MapNode],
        *,
        suffixes: Iterable[str] = (),
        replace: bool = False,
    ) -> None:
        """Register a decoder under ``name`` and the given file suffixes."""
        key = name.strip().lower()
        if not replace and key in self._decoders:
            raise ValueError(f"Document format {key!r} is already registered")
        self._decoders[key] = decoder  # type: ignore[assignment]
        for suffix in normalize_extensions(suffixes) or ():
            self._suffixes[suffix] = key

    def names(self) -> list[str]:
        return sorted(self._decoders)

    def suffixes_for(self, name: str) -> list[str]:
        key = name.strip().lower()
        return sorted(s for s, fmt in self._suffixes.items() if fmt == key)

    def suffixes(self) -> list[str]:
        """Every registered suffix, across all formats."""
        return sorted(self._suffixes)

    def get(self, name: str) -> DocumentDecoder:
        """Return the decoder registered for ``name``.

        Raises:
            ValueError: If no decoder is registered under that name.
        """
        key = name.strip().lower()
        try:
            return self._decoders[key]
        except KeyError:
            raise ValueError(f"Unknown document format {name!r}; known: {self.names()}") from None

    def format_for_location(self, location: str) -> str:
        """Infer a format name from a location's suffix.

        Raises:
            ValueError: If the suffix is not registered.
        """
        suffix = PurePosixPath(location).suffix.lower()
        try:
            return self._suffixes[suffix]
        except KeyError:
            raise ValueError(f"Cannot infer document format for {location!r}") from None

    def decoder_for_location(self, location: str) -> DocumentDecoder:
        """Return the decoder registered for ``location``'s suffix.

        Raises:
            ValueError: If the suffix is not registered.
        """
        return self._decoders[self.format_for_location(location)]


def default_formats() -> FormatRegistry:
    """Return a fresh registry holding the built-in JSON, YAML and XML decoders."""
    registry = FormatRegistry()
    registry.register("json", decode_json, suffixes=(".json",))
    registry.register("yaml", decode_yaml, suffixes=(".yaml", ".yml"))
    registry.register("xml", decode_xml, suffixes=(".xml",))
    return registry
