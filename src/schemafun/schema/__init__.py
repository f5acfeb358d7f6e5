"""Schema traversal and reference resolution."""

from .types import (
    AllOfNode,
    ArrayNode,
    CompositionNode,
    LeafNode,
    ObjectNode,
    OneOfNode,
    RefNode,
    SchemaLike,
    SchemaNode,
    parse_schema,
)
from .resolution import RefChain, ResolutionScope, SchemaRefResolver
from .find_property import find_property
from .relationships import Relationship, RelationshipStorage, find_relationships
from .transient import find_transient
from .required import is_required
from .expand import AsyncSchemaRefResolver, expand
from .registry import SchemaId, SchemaRefTranslator, SchemaRegistry

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
    "SchemaRefResolver",
    "AsyncSchemaRefResolver",
    "RefChain",
    "ResolutionScope",
    "find_property",
    "Relationship",
    "RelationshipStorage",
    "find_relationships",
    "find_transient",
    "is_required",
    "expand",
    "SchemaId",
    "SchemaRefTranslator",
    "SchemaRegistry",
]
