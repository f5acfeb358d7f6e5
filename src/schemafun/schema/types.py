from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, Mapping, Optional, Tuple, Union

from ..errors import SchemaError

_node_ids = itertools.count(1)

# Keywords with a dedicated field on every node variant.
_ANNOTATION_KEYS = {
    "transient": "transient",
    "storage": "storage",
    "entityType": "entity_type",
    "foreignKey": "foreign_key",
}

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def _next_node_id() -> int:
    return next(_node_ids)


def _empty_mapping() -> Mapping[str, Any]:
    return _EMPTY


@dataclass(frozen=True, eq=False, kw_only=True)
class SchemaNode:
    """Immutable schema node.

    Nodes compare and hash by identity. ``node_id`` is assigned once, when the
    node is built, and is what traversals record to detect cycles.
    Keywords the engine does not interpret are kept verbatim in ``extra``.
    """

    transient: Optional[bool] = None
    storage: Optional[str] = None
    entity_type: Optional[str] = None
    foreign_key: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=_empty_mapping)
    node_id: int = field(default_factory=_next_node_id, init=False)

    def _own_json(self) -> Dict[str, Any]:
        return {}

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = _thaw(self.extra)
        data.update(self._own_json())
        for key, attr in _ANNOTATION_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data

    def children(self) -> Iterator["SchemaNode"]:
        return iter(())


@dataclass(frozen=True, eq=False, kw_only=True)
class RefNode(SchemaNode):
    ref: str

    def _own_json(self) -> Dict[str, Any]:
        return {"$ref": self.ref}


@dataclass(frozen=True, eq=False, kw_only=True)
class CompositionNode(SchemaNode):
    options: Tuple[SchemaNode, ...] = ()

    def children(self) -> Iterator[SchemaNode]:
        return iter(self.options)


@dataclass(frozen=True, eq=False, kw_only=True)
class AllOfNode(CompositionNode):
    def _own_json(self) -> Dict[str, Any]:
        return {"allOf": [o.to_json() for o in self.options]}


@dataclass(frozen=True, eq=False, kw_only=True)
class OneOfNode(CompositionNode):
    def _own_json(self) -> Dict[str, Any]:
        return {"oneOf": [o.to_json() for o in self.options]}


@dataclass(frozen=True, eq=False, kw_only=True)
class ObjectNode(SchemaNode):
    properties: Mapping[str, SchemaNode] = field(default_factory=_empty_mapping)
    required: Tuple[str, ...] = ()
    # "properties" and "required" keywords present in the source, even if empty.
    declared: FrozenSet[str] = frozenset()

    def _own_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": "object"}
        if self.properties or "properties" in self.declared:
            data["properties"] = {name: node.to_json() for name, node in self.properties.items()}
        if self.required or "required" in self.declared:
            data["required"] = list(self.required)
        return data

    def children(self) -> Iterator[SchemaNode]:
        return iter(self.properties.values())


@dataclass(frozen=True, eq=False, kw_only=True)
class ArrayNode(SchemaNode):
    items: Optional[SchemaNode] = None

    def _own_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": "array"}
        if self.items is not None:
            data["items"] = self.items.to_json()
        return data

    def children(self) -> Iterator[SchemaNode]:
        return iter(() if self.items is None else (self.items,))


@dataclass(frozen=True, eq=False, kw_only=True)
class LeafNode(SchemaNode):
    type: Any = None

    def _own_json(self) -> Dict[str, Any]:
        return {} if self.type is None else {"type": _thaw(self.type)}


SchemaLike = Union[SchemaNode, Mapping[str, Any]]


def _parse_options(value: Any) -> Tuple[SchemaNode, ...]:
    return tuple(parse_schema(option) for option in value)


def parse_schema(data: SchemaLike) -> SchemaNode:
    """Build an immutable node tree from a JSON-shaped mapping.

    The first matching rule picks the variant: ``$ref``, ``allOf``,
    ``oneOf``, ``type: object``, ``type: array``, anything else. Nodes are
    returned unchanged.
    """
    if isinstance(data, SchemaNode):
        return data
    if not isinstance(data, Mapping):
        raise SchemaError(
            f"Schema node must be a mapping, got {type(data).__name__}",
            context={"value": data},
        )

    annotations = {attr: data[key] for key, attr in _ANNOTATION_KEYS.items() if key in data}
    consumed = set(_ANNOTATION_KEYS)

    ref = data.get("$ref")
    if isinstance(ref, str):
        consumed.add("$ref")
        return RefNode(ref=ref, extra=_extra(data, consumed), **annotations)

    for keyword, node_cls in (("allOf", AllOfNode), ("oneOf", OneOfNode)):
        options = data.get(keyword)
        if isinstance(options, (list, tuple)):
            consumed.add(keyword)
            return node_cls(
                options=_parse_options(options),
                extra=_extra(data, consumed),
                **annotations,
            )

    schema_type = data.get("type")
    if schema_type == "object":
        raw_properties = data.get("properties")
        raw_required = data.get("required")
        if isinstance(raw_properties, Mapping):
            consumed.add("properties")
            properties = {str(name): parse_schema(sub) for name, sub in raw_properties.items()}
        else:
            properties = {}
        if isinstance(raw_required, (list, tuple)):
            consumed.add("required")
            required = tuple(str(name) for name in raw_required)
        else:
            required = ()
        consumed.add("type")
        return ObjectNode(
            properties=MappingProxyType(properties),
            required=required,
            declared=frozenset(consumed & {"properties", "required"}),
            extra=_extra(data, consumed),
            **annotations,
        )

    if schema_type == "array":
        raw_items = data.get("items")
        items = None
        if isinstance(raw_items, Mapping):
            # Tuple-form "items" (a list) is left in extra.
            consumed.add("items")
            items = parse_schema(raw_items)
        consumed.add("type")
        return ArrayNode(items=items, extra=_extra(data, consumed), **annotations)

    consumed.add("type")
    return LeafNode(type=_freeze(schema_type), extra=_extra(data, consumed), **annotations)


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


def _extra(data: Mapping[str, Any], consumed: set[str]) -> Mapping[str, Any]:
    rest = {key: _freeze(value) for key, value in data.items() if key not in consumed}
    return MappingProxyType(rest) if rest else _EMPTY


__all__ = [
    "SchemaNode",
    "RefNode",
    "AllOfNode",
    "OneOfNode",
    "CompositionNode",
    "ObjectNode",
    "ArrayNode",
    "LeafNode",
    "SchemaLike",
    "parse_schema",
]
