from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from schemafun.errors import SchemaError
from schemafun.schema import (
    AllOfNode,
    ArrayNode,
    LeafNode,
    ObjectNode,
    OneOfNode,
    RefNode,
    parse_schema,
)


def test_parse_picks_variant_by_keyword_precedence():
    assert isinstance(parse_schema({"$ref": "X", "type": "object"}), RefNode)
    assert isinstance(parse_schema({"allOf": [], "oneOf": []}), AllOfNode)
    assert isinstance(parse_schema({"oneOf": [{"type": "string"}]}), OneOfNode)
    assert isinstance(parse_schema({"type": "object"}), ObjectNode)
    assert isinstance(parse_schema({"type": "array"}), ArrayNode)
    assert isinstance(parse_schema({"type": "string"}), LeafNode)
    assert isinstance(parse_schema({}), LeafNode)


def test_ref_node_keeps_relationship_keywords():
    node = parse_schema({"$ref": "Order", "storage": "inverse-ref", "foreignKey": "customerId", "title": "x"})
    assert isinstance(node, RefNode)
    assert node.ref == "Order"
    assert node.storage == "inverse-ref"
    assert node.foreign_key == "customerId"
    assert node.extra["title"] == "x"


def test_to_json_reproduces_input():
    data = {
        "$id": "Customer",
        "type": "object",
        "required": ["a"],
        "additionalProperties": False,
        "properties": {
            "a": {"type": "string", "transient": True},
            "b": {"$ref": "B", "storage": "ref", "entityType": "B"},
            "c": {"type": "array", "items": {"type": "integer"}},
            "d": {"oneOf": [{"type": "string"}, {"type": ["integer", "null"]}]},
        },
    }
    assert parse_schema(data).to_json() == data


def test_nodes_compare_by_identity_and_get_distinct_ids():
    data = {"type": "object", "properties": {"a": {"type": "string"}}}
    first = parse_schema(data)
    second = parse_schema(data)
    assert first != second
    assert first.node_id != second.node_id
    assert first.properties["a"].node_id != first.node_id
    assert parse_schema(first) is first


def test_nodes_are_immutable():
    node = parse_schema({"type": "object", "properties": {"a": {"type": "string"}}, "examples": [{"a": "x"}]})
    with pytest.raises(FrozenInstanceError):
        node.transient = True
    with pytest.raises(TypeError):
        node.properties["b"] = parse_schema({"type": "string"})
    with pytest.raises(TypeError):
        node.extra["examples"][0]["a"] = "y"


def test_parse_copies_input():
    data = {"type": "object", "properties": {"a": {"type": "string"}}}
    node = parse_schema(data)
    data["properties"]["b"] = {"type": "string"}
    assert list(node.properties) == ["a"]


def test_tuple_items_are_kept_as_extra():
    node = parse_schema({"type": "array", "items": [{"type": "string"}]})
    assert isinstance(node, ArrayNode)
    assert node.items is None
    assert node.to_json() == {"type": "array", "items": [{"type": "string"}]}


def test_parse_rejects_non_mapping():
    with pytest.raises(SchemaError, match="must be a mapping"):
        parse_schema({"type": "object", "properties": {"a": True}})


@pytest.mark.parametrize(
    "data",
    [
        {"type": "object", "properties": {}},
        {"type": "object", "required": []},
        {"type": "object", "properties": {}, "required": []},
        {"type": "object", "properties": {"a": {"type": "object", "properties": {}, "required": []}}},
        {"allOf": [{"allOf": [{"type": "object", "properties": {}}]}, {"$ref": "X", "storage": "ref"}]},
        {"type": "array", "items": [{"type": "string"}, {"type": "object", "required": []}]},
    ],
)
def test_to_json_keeps_empty_keywords(data):
    assert parse_schema(data).to_json() == data


def test_nodes_built_directly_get_empty_defaults():
    first = ObjectNode()
    second = ObjectNode()
    assert dict(first.properties) == {}
    assert first.extra == {}
    assert first.to_json() == {"type": "object"}
    assert first.node_id != second.node_id
