from pathlib import Path

import pytest

from recordkit.core.errors import IllegalState, UnsupportedOperation
from recordkit.core.splits import (
    CollectionInputSplit,
    FileSplit,
    InputSplit,
    StreamingInputSplit,
    location_to_path,
    normalize_extensions,
    open_location,
)


def test_collection_split_keeps_insertion_order():
    split = CollectionInputSplit(["file:///c.json", "file:///a.json", "file:///b.json"])

    assert split.locations() == ("file:///c.json", "file:///a.json", "file:///b.json")
    assert split.length() == 3
    assert isinstance(split, InputSplit)


def test_collection_split_accepts_paths(tmp_path: Path):
    split = CollectionInputSplit([tmp_path / "x.json"])

    assert split.locations() == (str(tmp_path / "x.json"),)


def test_collection_split_is_not_serializable():
    split = CollectionInputSplit([])

    for call in (lambda: split.write(None), lambda: split.read_fields(None), split.to_int, split.to_float):
        with pytest.raises(UnsupportedOperation):
            call()
    # Also catchable as the builtin it extends.
    with pytest.raises(NotImplementedError):
        split.to_int()


def test_streaming_split_has_no_length_and_reads_once():
    split = StreamingInputSplit(iter(["a", "b"]))

    with pytest.raises(UnsupportedOperation):
        split.length()
    assert list(split.locations()) == ["a", "b"]
    with pytest.raises(IllegalState):
        split.locations()


def _make_tree(root: Path) -> None:
    (root / "sub").mkdir()
    (root / ".git").mkdir()
    for rel in ("b.json", "A.json", "sub/c.json", ".hidden.json", "notes.txt", ".git/d.json"):
        (root / rel).write_text("{}", encoding="utf-8")


def test_file_split_lists_sorted_files_with_extension_filter(tmp_path: Path):
    _make_tree(tmp_path)
    root = tmp_path.resolve()

    split = FileSplit(tmp_path, allowed_extensions=["JSON"])

    assert split.locations() == (
        (root / "A.json").as_uri(),
        (root / "b.json").as_uri(),
        (root / "sub" / "c.json").as_uri(),
    )
    assert split.length() == 3


def test_file_split_non_recursive_and_unfiltered(tmp_path: Path):
    _make_tree(tmp_path)
    root = tmp_path.resolve()

    split = FileSplit(tmp_path, recursive=False)

    assert split.locations() == (
        (root / "A.json").as_uri(),
        (root / "b.json").as_uri(),
        (root / "notes.txt").as_uri(),
    )


def test_file_split_single_file(tmp_path: Path):
    target = tmp_path / "one.json"
    target.write_text("{}", encoding="utf-8")

    assert FileSplit(target).locations() == (target.resolve().as_uri(),)


def test_file_split_missing_root(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        FileSplit(tmp_path / "nope")


def test_location_to_path_handles_uris_and_plain_paths(tmp_path: Path):
    target = tmp_path / "with space" / "doc.json"

    assert location_to_path(target.as_uri()) == target
    assert location_to_path(str(target)) == target
    assert location_to_path("rel/doc.json") == Path("rel/doc.json")
    with pytest.raises(UnsupportedOperation):
        location_to_path("https://example.com/doc.json")


def test_open_location_reads_bytes(tmp_path: Path):
    target = tmp_path / "doc.json"
    target.write_bytes(b'{"a": 1}')

    with open_location(target.as_uri()) as fp:
        assert fp.read() == b'{"a": 1}'


def test_normalize_extensions():
    assert normalize_extensions(["JSON", ".yml", " ", ""]) == frozenset({".json", ".yml"})
    assert normalize_extensions(None) is None
    assert normalize_extensions(["  "]) is None
