import io
import json
import logging
from pathlib import Path

import numpy as np
import pytest

from recordkit.core.config import (
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
from recordkit.core.labels import ParentDirLabelGenerator
from recordkit.core.splits import CollectionInputSplit, FileSplit
from recordkit.core.values import IntValue, Text
from recordkit.readers.factories import (
    build_codec_reader,
    build_document_reader,
    build_field_selection,
    build_image_reader,
    build_label_generator,
)
from recordkit.readers.formats import decode_yaml

TOML_CONFIG = """
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

[image]
height = 8
width = 8
labels = ["cats", "dogs"]

[codec]
start_frame = 2
ravel = true
"""


def test_defaults_validate():
    cfg = RecordKitConfig()
    cfg.validate()

    assert cfg.reader.format == "json"
    assert cfg.reader.label.position == -1
    assert cfg.reader.shuffle.reshuffle_on_reset == "advance"


def test_load_toml(tmp_path: Path):
    path = tmp_path / "recordkit.toml"
    path.write_text(TOML_CONFIG, encoding="utf-8")

    cfg = load_config_from_path(path)

    assert cfg.reader.format == "yaml"
    assert cfg.reader.fields == (FieldSpec("a", "MISSING_A"), FieldSpec("b.c", None))
    assert cfg.reader.shuffle == ShuffleConfig(enabled=True, seed=42)
    assert cfg.reader.label == LabelConfig(generator="parent_dir", position=1)
    assert cfg.image.labels == ("cats", "dogs")
    assert cfg.codec.start_frame == 2
    assert cfg.codec.ravel is True
    assert cfg.codec.total_frames is None


def test_json_round_trip(tmp_path: Path):
    cfg = RecordKitConfig(
        reader=DocumentReaderConfig(
            format="xml",
            fields=(FieldSpec("x.y", "0"), FieldSpec("z")),
            shuffle=ShuffleConfig(enabled=True, seed=3, reshuffle_on_reset="replay"),
        ),
        image=ImageReaderConfig(height=4, width=5, channels=3, append_label=True, labels=("a", "b")),
        codec=CodecReaderConfig(total_frames=10, rows=80, columns=46),
    )
    path = tmp_path / "cfg.json"
    cfg.to_json(path)

    loaded = load_config_from_path(path)

    assert loaded == cfg
    assert "seed" not in json.loads(path.read_text(encoding="utf-8"))["image"]["shuffle"]


def test_unknown_keys_are_rejected():
    with pytest.raises(ValueError, match="Unsupported options for DocumentReaderConfig"):
        RecordKitConfig.from_dict({"reader": {"fromat": "json"}})


def test_wrongly_typed_values_name_their_section():
    with pytest.raises(ValueError, match=r"reader\.shuffle\.enabled"):
        RecordKitConfig.from_dict({"reader": {"shuffle": {"enabled": "yes"}}})
    with pytest.raises(ValueError, match=r"reader\.fields must be a list"):
        RecordKitConfig.from_dict({"reader": {"fields": "a.b"}})
    with pytest.raises(ValueError, match=r"image\.height"):
        RecordKitConfig.from_dict({"image": {"height": "tall"}})


def test_scalar_fallbacks_become_text():
    cfg = RecordKitConfig.from_dict({"reader": {"fields": [{"path": "a", "fallback": 0}]}})

    assert cfg.reader.fields == (FieldSpec("a", "0"),)


def test_unsupported_extension(tmp_path: Path):
    path = tmp_path / "cfg.yaml"
    path.write_text("reader: {}", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config_from_path(path)


@pytest.mark.parametrize(
    "data",
    [
        {"reader": {"format": " "}},
        {"reader": {"fields": [{"path": "a..b"}]}},
        {"reader": {"label": {"generator": "filename"}}},
        {"reader": {"label": {"position": -3}}},
        {"reader": {"shuffle": {"reshuffle_on_reset": "never"}}},
        {"image": {"height": 0}},
        {"codec": {"start_frame": -1}},
        {"codec": {"total_frames": -1}},
    ],
)
def test_validate_rejects_bad_values(data):
    cfg = RecordKitConfig.from_dict(data)

    with pytest.raises(ValueError):
        cfg.validate()


def test_validate_normalizes_names():
    cfg = RecordKitConfig.from_dict(
        {"reader": {"format": " YAML ", "label": {"generator": "Parent_Dir"}, "shuffle": {"reshuffle_on_reset": "REPLAY"}}}
    )
    cfg.validate()

    assert cfg.reader.format == "yaml"
    assert cfg.reader.label.generator == "parent_dir"
    assert cfg.reader.shuffle.reshuffle_on_reset == "replay"


def test_logging_config_apply():
    name = "recordkit.test.config"
    LoggingConfig(level="DEBUG", propagate=True, logger_name=name).apply()

    logger = logging.getLogger(name)
    assert logger.level == logging.DEBUG
    assert logger.propagate is True


def test_build_field_selection_wraps_fallbacks():
    selection = build_field_selection(DocumentReaderConfig(fields=(FieldSpec("a", "x"), FieldSpec("b.c"))))

    assert selection.paths == (("a",), ("b", "c"))
    assert selection.fallbacks == (Text("x"), None)


def test_build_label_generator():
    assert build_label_generator(LabelConfig()) is None
    assert isinstance(build_label_generator(LabelConfig(generator="parent_dir")), ParentDirLabelGenerator)


def test_build_document_reader_from_config(tmp_path: Path):
    docs = tmp_path / "cat"
    docs.mkdir()
    path = docs / "1.yaml"
    path.write_text("a: 1\nb:\n  c: two\n", encoding="utf-8")
    config_path = tmp_path / "recordkit.toml"
    config_path.write_text(TOML_CONFIG, encoding="utf-8")

    reader = build_document_reader(load_config_from_path(config_path))
    reader.initialize(CollectionInputSplit([path.as_uri()]))

    assert reader.decoder is decode_yaml
    assert reader.shuffle and reader.rng_seed == 42
    assert reader.next() == [Text("1"), Text("cat"), Text("two")]


def test_build_document_reader_errors():
    with pytest.raises(ValueError, match="at least one field"):
        build_document_reader(DocumentReaderConfig())
    with pytest.raises(ValueError, match="Unknown document format"):
        build_document_reader(DocumentReaderConfig(format="csv", fields=(FieldSpec("a"),)))


def test_build_image_reader_from_config(tmp_path: Path):
    (tmp_path / "dogs").mkdir()
    (tmp_path / "dogs" / "1.img").write_bytes(b"\x07")
    cfg = RecordKitConfig(image=ImageReaderConfig(height=2, width=3, append_label=True, labels=("cats", "dogs")))

    reader = build_image_reader(cfg, lambda data, h, w, c: np.full((h, w, c), data[0]))
    reader.initialize(FileSplit(tmp_path))
    pixels, label = reader.next()

    assert pixels.shape == (6,)
    assert label == IntValue(1)


def test_build_codec_reader_from_config():
    cfg = CodecReaderConfig(start_frame=1, total_frames=2, rows=2, columns=2, ravel=True)

    reader = build_codec_reader(cfg, lambda data, rows, columns: (np.zeros((rows, columns)) for _ in range(5)))
    sequence = reader.sequence_record(None, io.BytesIO(b"video"))

    assert len(sequence) == 2
    assert sequence[0][0].shape == (4,)


def test_integer_options_reject_fractions():
    with pytest.raises(ValueError, match=r"reader\.shuffle\.seed must be an integer"):
        RecordKitConfig.from_dict({"reader": {"shuffle": {"seed": 1.9}}})
    with pytest.raises(ValueError, match=r"image\.height"):
        RecordKitConfig.from_dict({"image": {"height": True}})

    cfg = RecordKitConfig.from_dict({"reader": {"shuffle": {"seed": 2.0}}})
    assert cfg.reader.shuffle.seed == 2
    assert isinstance(cfg.reader.shuffle.seed, int)


def test_null_only_allowed_for_optional_options():
    with pytest.raises(ValueError, match="must not be null"):
        RecordKitConfig.from_dict({"reader": None})
    with pytest.raises(ValueError, match=r"image\.height must not be null"):
        RecordKitConfig.from_dict({"image": {"height": None}})

    cfg = RecordKitConfig.from_dict({"reader": {"shuffle": {"seed": None}}, "codec": {"total_frames": None}})
    assert cfg.reader.shuffle.seed is None
    assert cfg.codec.total_frames is None


def test_label_pattern_must_be_a_valid_regex():
    cfg = RecordKitConfig.from_dict({"image": {"label_pattern": "(unclosed"}})

    with pytest.raises(ValueError, match=r"image\.label_pattern"):
        cfg.validate()


def test_build_image_reader_with_label_pattern(tmp_path: Path):
    (tmp_path / "dog_1.img").write_bytes(b"\x01")
    (tmp_path / "cat_2.img").write_bytes(b"\x02")
    cfg = RecordKitConfig.from_dict({"image": {"height": 1, "width": 1, "append_label": True, "label_pattern": "_"}})
    cfg.validate()

    reader = build_image_reader(cfg, lambda data, h, w, c: np.full((h, w, c), data[0]))
    reader.initialize(FileSplit(tmp_path))

    assert reader.labels() == ["cat", "dog"]
    assert [label for _, label in reader] == [IntValue(0), IntValue(1)]


def test_build_document_reader_auto_format(tmp_path: Path):
    path = tmp_path / "1.xml"
    path.write_text("<doc><a>7</a></doc>", encoding="utf-8")

    reader = build_document_reader(DocumentReaderConfig(format="auto", fields=(FieldSpec("a"),)))
    reader.initialize(CollectionInputSplit([path.as_uri()]))

    assert reader.formats is not None
    assert reader.next() == [Text("7")]
