from __future__ import annotations

from typing import List, Optional

from ..paths import PathSegments, PropertyPath, to_string
from .resolution import RefChain, SchemaRefResolver
from .traversal import SchemaWalk
from .types import SchemaLike


class _TransientWalk(SchemaWalk[str]):
    def collect(self, chain: RefChain, path: PathSegments, depth: int) -> List[str]:
        # The root of a schema cannot be transient.
        if path and chain.first("transient"):
            return [to_string(path)]
        return []


def find_transient(
    schema: SchemaLike,
    resolve: SchemaRefResolver,
    limit_to_path: Optional[PropertyPath] = None,
    max_depth: Optional[int] = None,
) -> List[str]:
    """List the paths of properties marked ``transient: true``.

    An explicit ``transient`` on a referencing node overrides the value of
    the schema it references. Traversal limits and cycle handling are the
    same as for :func:`~schemafun.schema.relationships.find_relationships`.
    Each path is reported once, in the order it was found.
    """
    paths = _TransientWalk(resolve, limit_to_path, max_depth).run(schema)
    return list(dict.fromkeys(paths))


__all__ = ["find_transient"]
