from __future__ import annotations

import logging
from typing import FrozenSet, Generic, List, Optional, TypeVar

from ..paths import WILDCARD, PathSegments, PropertyPath, to_segments, to_string
from .resolution import RefChain, ResolutionScope, SchemaRefResolver
from .types import ArrayNode, CompositionNode, ObjectNode, SchemaLike, SchemaNode

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SchemaWalk(Generic[T]):
    """Depth-first walk over a schema that may be cyclic through ``$ref``.

    At every node the walk follows references, lets :meth:`collect` report
    results for the current path, and then descends unless one of these
    holds:

    * ``limit_to_path`` is set and has been consumed (no further object or
      array steps);
    * ``limit_to_path`` is unset, ``max_depth`` is set and the path is longer
      than ``max_depth``;
    * ``limit_to_path`` is unset and the node already occurs on the current
      branch.

    Composition alternatives are visited at the same path. A node that
    reappears at the same path through composition is never revisited.
    Visited sets are immutable and per branch; siblings do not share them.

    ``depth`` is the distance from the nearest document boundary: a node
    whose parent is a boundary has depth 0. The root is a boundary, and
    subclasses decide which other nodes are (:meth:`is_boundary`).
    """

    def __init__(
        self,
        resolve: SchemaRefResolver,
        limit_to_path: Optional[PropertyPath] = None,
        max_depth: Optional[int] = None,
    ):
        self.scope = ResolutionScope.of(resolve)
        self.limit_to_path = None if limit_to_path is None else to_segments(limit_to_path)
        self.max_depth = max_depth

    def collect(self, chain: RefChain, path: PathSegments, depth: int) -> List[T]:
        raise NotImplementedError

    def is_boundary(self, chain: RefChain) -> bool:
        return False

    def run(self, schema: SchemaLike) -> List[T]:
        root = self.scope.node(schema)
        return self._visit(root, (), self.limit_to_path, frozenset(), frozenset(), 0, True)

    def _should_stop(
        self,
        target: SchemaNode,
        path: PathSegments,
        limit: Optional[PathSegments],
        ancestors: FrozenSet[int],
    ) -> bool:
        if limit is not None:
            return False
        if self.max_depth is not None and len(path) > self.max_depth:
            return True
        if target.node_id in ancestors:
            logger.debug("Not descending into %s again: cycle on this branch", to_string(path) or "<root>")
            return True
        return False

    def _visit(
        self,
        node: SchemaNode,
        path: PathSegments,
        limit: Optional[PathSegments],
        ancestors: FrozenSet[int],
        same_path: FrozenSet[int],
        depth: int,
        inherited_boundary: bool,
    ) -> List[T]:
        chain = self.scope.follow(node)
        target = chain.target
        if target is None or target.node_id in same_path:
            return []

        results = list(self.collect(chain, path, depth))
        if self._should_stop(target, path, limit, ancestors):
            return results

        boundary = inherited_boundary or self.is_boundary(chain)
        branch = ancestors | {target.node_id}

        if isinstance(target, CompositionNode):
            here = same_path | {target.node_id}
            for option in target.options:
                results.extend(self._visit(option, path, limit, branch, here, depth, boundary))
            return results

        child_depth = 0 if boundary else depth + 1
        child_limit = None if limit is None else limit[1:]

        if isinstance(target, ObjectNode):
            if limit is None:
                names = list(target.properties)
            elif limit and isinstance(limit[0], str) and limit[0] in target.properties:
                names = [limit[0]]
            else:
                names = []
            for name in names:
                results.extend(
                    self._visit(
                        target.properties[name],
                        path + (name,),
                        child_limit,
                        branch,
                        frozenset(),
                        child_depth,
                        False,
                    )
                )
        elif isinstance(target, ArrayNode):
            # The limit's array segment is expected to be an index or wildcard; it is not checked.
            if target.items is not None and (limit is None or limit):
                results.extend(
                    self._visit(
                        target.items,
                        path + (WILDCARD,),
                        child_limit,
                        branch,
                        frozenset(),
                        child_depth,
                        False,
                    )
                )
        return results


__all__ = ["SchemaWalk"]
