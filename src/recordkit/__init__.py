# __init__.py
# SPDX-License-Identifier: MIT
"""
Top-level package exports for :mod:`recordkit`.

recordkit turns semi-structured documents (JSON, YAML, XML), image trees and
video files into flat, optionally labeled records for a learning pipeline.
Every reader shares one pull-based contract::

    reader.initialize(split)
    while reader.has_next():
        record = reader.next()
    reader.reset()

Public surface
--------------
The symbols in :data:`PRIMARY_API` are the supported public surface and are
exported via :data:`__all__`. In general, callers should:

- Describe the fields to extract with :class:`FieldSelection`.
- Wrap their locations in a :class:`CollectionInputSplit` (or a
  :class:`FileSplit` for image and video trees).
- Build a reader directly, or from a :class:`RecordKitConfig` with
  :func:`build_document_reader`.

Examples:
    >>> from recordkit import CollectionInputSplit, DocumentRecordReader, FieldSelection, Text
    >>> selection = (
    ...     FieldSelection.builder()
    ...     .add_field("a", fallback=Text("MISSING_A"))
    ...     .add_field("b.c", fallback=Text("MISSING_BC"))
    ...     .build()
    ... )
    >>> reader = DocumentRecordReader(selection)
    >>> reader.initialize(CollectionInputSplit(["data/1.json", "data/2.json"]))
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Package version
# ---------------------------------------------------------------------------
try:
    from importlib.metadata import version as _pkg_version

    __version__ = _pkg_version("recordkit")
except Exception:  # PackageNotFoundError or runtime env oddities
    __version__ = "0.0.0+unknown"


from .core.config import (
    CodecReaderConfig,
    DocumentReaderConfig,
    FieldSpec,
    ImageReaderConfig,
    LabelConfig,
    LoggingConfig,
    RecordKitConfig,
    ShuffleConfig,
    load_config_from_path,
)
from .core.documents import ListNode, MapNode, NumberNode, TextNode, to_document
from .core.errors import (
    ConfigurationMismatch,
    DecodeFailure,
    IllegalState,
    NoSuchElement,
    RecordKitError,
    UnsupportedOperation,
)
from .core.interfaces import RecordReader, RecordShape, SequenceRecordReader
from .core.iteration import ReshufflePolicy, TraversalState
from .core.labels import (
    FileNamePatternLabelGenerator,
    FunctionLabelGenerator,
    IndexedFileNamePatternLabelGenerator,
    IndexedParentDirLabelGenerator,
    LabelGenerator,
    ParentDirLabelGenerator,
)
from .core.log import configure_logging, get_logger, temp_level
from .core.selection import LABEL_LAST, FieldSelection, extract_record, resolve_path
from .core.splits import CollectionInputSplit, FileSplit, InputSplit, StreamingInputSplit
from .core.values import ArrayValue, FloatValue, IntValue, Text
from .readers.codec import CodecRecordReader
from .readers.document import DocumentRecordReader
from .readers.factories import build_codec_reader, build_document_reader, build_image_reader
from .readers.formats import decode_json, decode_xml, decode_yaml, default_formats
from .readers.image import ImageRecordReader

PRIMARY_API = [
    "__version__",
    # errors
    "RecordKitError",
    "UnsupportedOperation",
    "IllegalState",
    "NoSuchElement",
    "ConfigurationMismatch",
    "DecodeFailure",
    # values and documents
    "Text",
    "IntValue",
    "FloatValue",
    "ArrayValue",
    "MapNode",
    "ListNode",
    "TextNode",
    "NumberNode",
    "to_document",
    # splits
    "InputSplit",
    "CollectionInputSplit",
    "FileSplit",
    "StreamingInputSplit",
    # selection and labels
    "LABEL_LAST",
    "FieldSelection",
    "resolve_path",
    "extract_record",
    "LabelGenerator",
    "ParentDirLabelGenerator",
    "IndexedParentDirLabelGenerator",
    "FunctionLabelGenerator",
    "FileNamePatternLabelGenerator",
    "IndexedFileNamePatternLabelGenerator",
    # readers
    "RecordShape",
    "RecordReader",
    "SequenceRecordReader",
    "ReshufflePolicy",
    "TraversalState",
    "DocumentRecordReader",
    "ImageRecordReader",
    "CodecRecordReader",
    "decode_json",
    "decode_yaml",
    "decode_xml",
    "default_formats",
    # configuration
    "RecordKitConfig",
    "DocumentReaderConfig",
    "ImageReaderConfig",
    "CodecReaderConfig",
    "FieldSpec",
    "ShuffleConfig",
    "LabelConfig",
    "LoggingConfig",
    "load_config_from_path",
    "build_document_reader",
    "build_image_reader",
    "build_codec_reader",
    # logging
    "configure_logging",
    "get_logger",
    "temp_level",
]

__all__ = list(PRIMARY_API)
