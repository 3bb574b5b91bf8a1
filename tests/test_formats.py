import datetime as dt

import pytest
import yaml

from recordkit.core.documents import (
    BoolNode,
    ListNode,
    MapNode,
    NullNode,
    NumberNode,
    TextNode,
    to_document,
    to_node,
)
from recordkit.readers.formats import FormatRegistry, decode_json, decode_xml, decode_yaml, default_formats


def test_to_node_maps_python_values():
    assert to_node("x") == TextNode("x")
    assert to_node(3) == NumberNode(3)
    assert to_node(True) == BoolNode(True)
    assert to_node(None) == NullNode()
    assert to_node(dt.date(2024, 1, 2)) == TextNode("2024-01-02")
    assert isinstance(to_node([1, "a"]), ListNode)
    with pytest.raises(TypeError):
        to_node(b"raw")


def test_to_document_requires_mapping():
    doc = to_document({"a": {"b": 1}})

    assert isinstance(doc, MapNode)
    assert isinstance(doc.get("a"), MapNode)
    assert doc.value == {"a": {"b": 1}}
    with pytest.raises(TypeError):
        to_document([1, 2])


def test_number_text_form():
    assert NumberNode(5).as_text() == "5"
    assert NumberNode(2.5).as_text() == "2.5"


def test_decode_json():
    doc = decode_json(b'{"a": "5", "b": {"c": 1.5}}')

    assert doc.get("a") == TextNode("5")
    assert doc.get("b").get("c") == NumberNode(1.5)


def test_decode_yaml():
    doc = decode_yaml(b"a: 5\nwhen: 2024-01-02\nb:\n  c: [1, 2]\n")

    assert doc.get("a") == NumberNode(5)
    assert doc.get("when") == TextNode("2024-01-02")
    assert isinstance(doc.get("b").get("c"), ListNode)


def test_decode_yaml_errors_propagate():
    with pytest.raises(yaml.YAMLError):
        decode_yaml(b"a: [unclosed")
    with pytest.raises(TypeError):
        decode_yaml(b"- just\n- a list\n")


def test_decode_xml_structure():
    doc = decode_xml(
        b'<doc id="7" xmlns:x="urn:x"><a>5</a><b><c>x</c></b>'
        b"<item>1</item><item>2</item><x:tagged>t</x:tagged></doc>"
    )

    assert doc.get("@id") == TextNode("7")
    assert doc.get("a") == TextNode("5")
    assert doc.get("b").get("c") == TextNode("x")
    assert doc.get("item") == ListNode((TextNode("1"), TextNode("2")))
    assert doc.get("tagged") == TextNode("t")


def test_decode_xml_mixed_content_and_text_root():
    doc = decode_xml(b'<doc><p lang="en">hello</p></doc>')

    assert doc.get("p").get("@lang") == TextNode("en")
    assert doc.get("p").get("#text") == TextNode("hello")
    assert decode_xml(b"<title>hi</title>").get("title") == TextNode("hi")


def test_default_registry():
    formats = default_formats()

    assert formats.names() == ["json", "xml", "yaml"]
    assert formats.get("JSON") is decode_json
    assert formats.suffixes_for("yaml") == [".yaml", ".yml"]
    assert formats.format_for_location("file:///d/a.YML") == "yaml"
    with pytest.raises(ValueError):
        formats.get("csv")
    with pytest.raises(ValueError):
        formats.format_for_location("file:///d/a.csv")


def test_registry_register_and_replace():
    formats = FormatRegistry()
    formats.register("json", decode_json, suffixes=["json"])

    with pytest.raises(ValueError):
        formats.register("json", decode_yaml)
    formats.register("json", decode_yaml, replace=True)

    assert formats.get("json") is decode_yaml
    assert formats.format_for_location("x.json") == "json"


def test_registry_lookup_by_location():
    formats = default_formats()

    assert formats.suffixes() == [".json", ".xml", ".yaml", ".yml"]
    assert formats.decoder_for_location("file:///d/a.xml") is decode_xml
    assert formats.decoder_for_location("d/a.Yaml") is decode_yaml
    with pytest.raises(ValueError, match="Cannot infer"):
        formats.decoder_for_location("d/README")
