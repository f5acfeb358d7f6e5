from __future__ import annotations

import logging
from typing import FrozenSet

from ..paths import PathSegments, PropertyPath, to_segments
from .resolution import ResolutionScope, SchemaRefResolver
from .types import ArrayNode, CompositionNode, ObjectNode, RefNode, SchemaLike, SchemaNode

logger = logging.getLogger(__name__)


def is_required(schema: SchemaLike, path: PropertyPath, resolve: SchemaRefResolver) -> bool:
    """Determine whether a property is required by a schema.

    A property is required only if every ancestor object lists the next path
    component in its ``required`` keyword, so the answer for a subschema can
    differ from the answer for its parent. Array elements are never required.

    The walk stops at the first optional ancestor without checking that the
    rest of the path exists: a property that does not exist is reported as
    not required, and so is one whose parent is optional.
    """
    scope = ResolutionScope.of(resolve)
    return _is_required(scope.node(schema), to_segments(path), scope, frozenset())


def _is_required(
    node: SchemaNode,
    segments: PathSegments,
    scope: ResolutionScope,
    refs_seen: FrozenSet[int],
) -> bool:
    if isinstance(node, RefNode):
        if node.node_id in refs_seen:
            logger.debug("is_required: reference loop through %r", node.ref)
            return False
        target = scope.resolve(node.ref)
        if target is None:
            return False
        return _is_required(target, segments, scope, refs_seen | {node.node_id})

    if not segments:
        return True

    if isinstance(node, CompositionNode):
        return any(_is_required(option, segments, scope, refs_seen) for option in node.options)

    head, rest = segments[0], segments[1:]

    if isinstance(node, ObjectNode):
        if head not in node.required:
            return False
        subschema = node.properties.get(head)
        if not rest or subschema is None:
            return True
        return _is_required(subschema, rest, scope, frozenset())

    if isinstance(node, ArrayNode):
        if not rest:
            return False
        if node.items is None:
            return True
        return _is_required(node.items, rest, scope, frozenset())

    return True


__all__ = ["is_required"]
