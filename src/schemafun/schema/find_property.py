from __future__ import annotations

import logging
from typing import FrozenSet, Optional

from ..paths import PathSegments, PropertyPath, to_segments
from .resolution import ResolutionScope, SchemaRefResolver
from .types import AllOfNode, ArrayNode, ObjectNode, OneOfNode, RefNode, SchemaLike, SchemaNode

logger = logging.getLogger(__name__)


def find_property(
    schema: SchemaLike,
    path: PropertyPath,
    resolve: SchemaRefResolver,
) -> Optional[SchemaNode]:
    """Find the schema of one property, following references as needed.

    ``allOf`` alternatives are searched from last to first, so the last
    alternative wins when several define the same property. ``oneOf``
    alternatives are searched in order. Returns ``None`` when the property
    cannot be reached.
    """
    scope = ResolutionScope.of(resolve)
    return _find(scope.node(schema), to_segments(path), scope, frozenset())


def _find(
    node: SchemaNode,
    segments: PathSegments,
    scope: ResolutionScope,
    refs_seen: FrozenSet[int],
) -> Optional[SchemaNode]:
    # refs_seen only holds references followed since the last consumed segment.
    if isinstance(node, RefNode):
        if node.node_id in refs_seen:
            logger.debug("find_property: reference loop through %r", node.ref)
            return None
        target = scope.resolve(node.ref)
        if target is None:
            return None
        return _find(target, segments, scope, refs_seen | {node.node_id})

    if not segments:
        return node

    if isinstance(node, AllOfNode):
        for option in reversed(node.options):
            result = _find(option, segments, scope, refs_seen)
            if result is not None:
                return result
        return None

    if isinstance(node, OneOfNode):
        for option in node.options:
            result = _find(option, segments, scope, refs_seen)
            if result is not None:
                return result
        return None

    head, rest = segments[0], segments[1:]

    if isinstance(node, ObjectNode):
        if not isinstance(head, str):
            return None
        subschema = node.properties.get(head)
        if subschema is None:
            return None
        return _find(subschema, rest, scope, frozenset())

    if isinstance(node, ArrayNode):
        if isinstance(head, str):
            logger.debug("find_property: %r is not an array index", head)
            return None
        if node.items is None:
            logger.debug("find_property: array schema has no items")
            return None
        return _find(node.items, rest, scope, frozenset())

    return None


__all__ = ["find_property"]
