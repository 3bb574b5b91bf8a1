import pytest

from recordkit.core.labels import (
    FileNamePatternLabelGenerator,
    FunctionLabelGenerator,
    IndexedFileNamePatternLabelGenerator,
    IndexedParentDirLabelGenerator,
    LabelGenerator,
    ParentDirLabelGenerator,
    file_name_label,
    label_vocabulary,
    parent_dir_name,
)
from recordkit.core.values import FloatValue, IntValue, Text


def test_parent_dir_label_from_uri_and_path():
    gen = ParentDirLabelGenerator()

    assert isinstance(gen, LabelGenerator)
    assert gen.label_for_location("file:///data/cats/001.png") == Text("cats")
    assert gen.label_for_location("data/dogs/002.png") == Text("dogs")


def test_parent_dir_name_decodes_uri_escapes():
    assert parent_dir_name("file:///data/big%20cats/1.png") == "big cats"


def test_indexed_labels_from_locations_are_sorted_and_unique():
    gen = IndexedParentDirLabelGenerator.from_locations(
        ["file:///d/dogs/1.png", "file:///d/cats/2.png", "file:///d/dogs/3.png"]
    )

    assert gen.labels == ("cats", "dogs")
    assert gen.label_for_location("file:///d/dogs/9.png") == IntValue(1)
    assert label_vocabulary(gen) == ("cats", "dogs")


def test_indexed_label_for_unknown_directory():
    gen = IndexedParentDirLabelGenerator(("cats",))

    with pytest.raises(ValueError, match="birds"):
        gen.label_for_location("file:///d/birds/1.png")


def test_function_label_generator_wraps_results():
    assert FunctionLabelGenerator(lambda loc: 3).label_for_location("x") == IntValue(3)
    assert FunctionLabelGenerator(lambda loc: 0.5).label_for_location("x") == FloatValue(0.5)
    assert FunctionLabelGenerator(lambda loc: loc.upper()).label_for_location("x") == Text("X")
    with pytest.raises(ValueError):
        FunctionLabelGenerator(lambda loc: None).label_for_location("x")


def test_label_vocabulary_absent_for_open_generators():
    assert label_vocabulary(ParentDirLabelGenerator()) is None
    assert label_vocabulary(None) is None


def test_file_name_label_splits_the_stem():
    assert file_name_label("file:///d/cat_01.png", "_") == "cat"
    assert file_name_label("d/2024-cat-01.png", "-", 1) == "cat"
    assert file_name_label("d/cat1dog.png", r"\d+", 1) == "dog"


def test_file_name_label_position_out_of_range():
    with pytest.raises(ValueError, match="has no piece 2"):
        file_name_label("d/cat_01.png", "_", 2)


def test_file_name_pattern_generators():
    locations = ["file:///d/dog_1.png", "file:///d/cat_2.png", "file:///d/dog_3.png"]

    assert FileNamePatternLabelGenerator("_").label_for_location(locations[0]) == Text("dog")
    indexed = IndexedFileNamePatternLabelGenerator.from_locations(locations, "_")
    assert isinstance(indexed, LabelGenerator)
    assert indexed.labels == ("cat", "dog")
    assert indexed.label_for_location(locations[1]) == IntValue(0)
    with pytest.raises(ValueError, match="bird"):
        indexed.label_for_location("file:///d/bird_4.png")
