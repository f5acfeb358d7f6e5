from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from .types import RefNode, SchemaLike, SchemaNode, parse_schema

logger = logging.getLogger(__name__)

SchemaRefResolver = Callable[[str], Optional[SchemaLike]]


@dataclass(frozen=True)
class RefChain:
    """Nodes visited while following ``$ref`` hops, referencing node first."""

    nodes: Tuple[SchemaNode, ...]
    target: Optional[SchemaNode]

    def first(self, attr: str) -> Any:
        """Value of ``attr`` on the first node in the chain that sets it."""
        for node in self.nodes:
            value = getattr(node, attr)
            if value is not None:
                return value
        return None

    @property
    def ref(self) -> Optional[str]:
        for node in self.nodes:
            if isinstance(node, RefNode):
                return node.ref
        return None


class ResolutionScope:
    """A resolver bound to a single traversal.

    Raw mappings are parsed into nodes once per scope, and each reference
    string is resolved once per scope. Both keep node identity stable for the
    duration of the call, which the cycle guards depend on. Nothing outlives
    the scope.
    """

    def __init__(self, resolve: SchemaRefResolver):
        self._resolve = resolve
        # id(mapping) -> (mapping, node); the mapping is held so its id stays unique.
        self._parsed: Dict[int, Tuple[Any, SchemaNode]] = {}
        self._refs: Dict[str, Optional[SchemaNode]] = {}

    @classmethod
    def of(cls, resolve: "SchemaRefResolver | ResolutionScope") -> "ResolutionScope":
        if isinstance(resolve, ResolutionScope):
            return resolve
        return cls(resolve)

    def node(self, schema: SchemaLike) -> SchemaNode:
        if isinstance(schema, SchemaNode):
            return schema
        cached = self._parsed.get(id(schema))
        if cached is not None:
            return cached[1]
        node = parse_schema(schema)
        self._parsed[id(schema)] = (schema, node)
        return node

    def resolve(self, ref: str) -> Optional[SchemaNode]:
        if ref in self._refs:
            return self._refs[ref]
        target = self._resolve(ref)
        node = None if target is None else self.node(target)
        if node is None:
            logger.debug("Unresolved schema reference %r", ref)
        self._refs[ref] = node
        return node

    def follow(self, node: SchemaNode) -> RefChain:
        """Follow ``$ref`` hops until a non-reference node is reached.

        ``target`` is ``None`` when a reference cannot be resolved or the
        references loop back on themselves.
        """
        chain = [node]
        seen: set[int] = set()
        while isinstance(node, RefNode):
            if node.node_id in seen:
                logger.debug("Reference loop through %r", node.ref)
                return RefChain(tuple(chain), None)
            seen.add(node.node_id)
            resolved = self.resolve(node.ref)
            if resolved is None:
                return RefChain(tuple(chain), None)
            chain.append(resolved)
            node = resolved
        return RefChain(tuple(chain), node)


__all__ = ["SchemaRefResolver", "RefChain", "ResolutionScope"]
