# factories.py
# SPDX-License-Identifier: MIT
"""Build runtime readers from declarative configuration."""

from __future__ import annotations

from typing import Optional, Union

from ..core.config import (
    CodecReaderConfig,
    DocumentReaderConfig,
    ImageReaderConfig,
    LabelConfig,
    LabelGeneratorKind,
    RecordKitConfig,
)
from ..core.interfaces import FrameDecoder, ImageDecoder
from ..core.labels import LabelGenerator, ParentDirLabelGenerator
from ..core.selection import FieldSelection
from ..core.values import Text
from .codec import CodecRecordReader
from .document import DocumentRecordReader
from .formats import AUTO_FORMAT, FormatRegistry, default_formats
from .image import ImageRecordReader

__all__ = [
    "build_field_selection",
    "build_label_generator",
    "build_document_reader",
    "build_image_reader",
    "build_codec_reader",
]


def build_field_selection(cfg: DocumentReaderConfig) -> FieldSelection:
    """Turn ``cfg.fields`` into a FieldSelection with Text fallbacks."""
    builder = FieldSelection.builder()
    for spec in cfg.fields:
        builder.add_field(spec.path, fallback=None if spec.fallback is None else Text(spec.fallback))
    return builder.build()


def build_label_generator(cfg: LabelConfig) -> Optional[LabelGenerator]:
    kind = LabelGeneratorKind.normalize(cfg.generator)
    if kind == LabelGeneratorKind.PARENT_DIR:
        return ParentDirLabelGenerator()
    return None


def build_document_reader(
    cfg: Union[RecordKitConfig, DocumentReaderConfig],
    *,
    formats: Optional[FormatRegistry] = None,
) -> DocumentRecordReader:
    """Build a document reader; the decoder is looked up by ``cfg.format``.

    Format ``"auto"`` picks the decoder per location from its suffix.

    Raises:
        ValueError: If the format is unknown or the selection is empty.
    """
    reader_cfg = cfg.reader if isinstance(cfg, RecordKitConfig) else cfg
    if not reader_cfg.fields:
        raise ValueError("reader.fields must list at least one field path.")
    registry = formats or default_formats()
    if reader_cfg.format == AUTO_FORMAT:
        decoder_kwargs = {"formats": registry}
    else:
        decoder_kwargs = {"decoder": registry.get(reader_cfg.format)}
    return DocumentRecordReader(
        build_field_selection(reader_cfg),
        **decoder_kwargs,
        shuffle=reader_cfg.shuffle.enabled,
        rng_seed=reader_cfg.shuffle.seed,
        label_generator=build_label_generator(reader_cfg.label),
        label_position=reader_cfg.label.position,
        reshuffle=reader_cfg.shuffle.reshuffle_on_reset,
    )


def build_image_reader(
    cfg: Union[RecordKitConfig, ImageReaderConfig],
    decoder: ImageDecoder,
) -> ImageRecordReader:
    image_cfg = cfg.image if isinstance(cfg, RecordKitConfig) else cfg
    return ImageRecordReader(
        image_cfg.height,
        image_cfg.width,
        image_cfg.channels,
        decoder=decoder,
        append_label=image_cfg.append_label,
        labels=image_cfg.labels,
        label_pattern=image_cfg.label_pattern,
        label_pattern_position=image_cfg.label_pattern_position,
        shuffle=image_cfg.shuffle.enabled,
        rng_seed=image_cfg.shuffle.seed,
        reshuffle=image_cfg.shuffle.reshuffle_on_reset,
    )


def build_codec_reader(
    cfg: Union[RecordKitConfig, CodecReaderConfig],
    decoder: FrameDecoder,
) -> CodecRecordReader:
    codec_cfg = cfg.codec if isinstance(cfg, RecordKitConfig) else cfg
    return CodecRecordReader(
        decoder=decoder,
        start_frame=codec_cfg.start_frame,
        total_frames=codec_cfg.total_frames,
        rows=codec_cfg.rows,
        columns=codec_cfg.columns,
        ravel=codec_cfg.ravel,
        shuffle=codec_cfg.shuffle.enabled,
        rng_seed=codec_cfg.shuffle.seed,
        reshuffle=codec_cfg.shuffle.reshuffle_on_reset,
    )
