"""Relationship discovery.

A relationship is a schema node with a ``storage`` keyword. It describes a
link between two documents, usually through a ``$ref`` to the related
document's schema, although the related schema may also be embedded. The
storage class says how related documents are kept:

* ``copy``: embedded in the parent document;
* ``ref``: stored separately, the parent records ``{"$ref": <id>}``;
* ``inverse-ref``: stored separately, each related document holds a foreign
  key pointing back at the parent.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Union

from ..errors import SchemaError
from ..paths import WILDCARD, PathSegments, PropertyPath, to_string
from .resolution import RefChain, SchemaRefResolver
from .traversal import SchemaWalk
from .types import ArrayNode, SchemaLike, SchemaNode


class RelationshipStorage(str, Enum):
    COPY = "copy"
    REF = "ref"
    INVERSE_REF = "inverse-ref"


_REFERENCE_STORAGE = {RelationshipStorage.REF, RelationshipStorage.INVERSE_REF}


@dataclass(frozen=True)
class Relationship:
    path: str
    to_many: bool
    storage: RelationshipStorage
    schema: SchemaNode
    entity_type_name: Optional[str] = None
    schema_ref: Optional[str] = None
    # Dot-and-bracket path of the foreign key; only set for inverse-ref.
    foreign_key_path: Optional[str] = None
    # Number of path components that live in the nearest containing document.
    depth_from_parent: int = 0


def _storage_class(value: object, path: PathSegments) -> RelationshipStorage:
    try:
        return RelationshipStorage(value)
    except ValueError as exc:
        raise SchemaError(
            f"Unknown relationship storage class {value!r}",
            context={"path": to_string(path)},
            inner_error=exc,
        ) from exc


class _RelationshipWalk(SchemaWalk[Relationship]):
    def __init__(
        self,
        resolve: SchemaRefResolver,
        allowed_storage: Optional[Iterable[Union[str, RelationshipStorage]]],
        limit_to_path: Optional[PropertyPath],
        max_depth: Optional[int],
    ):
        super().__init__(resolve, limit_to_path, max_depth)
        self.allowed_storage = (
            None if allowed_storage is None else {RelationshipStorage(s) for s in allowed_storage}
        )

    def is_boundary(self, chain: RefChain) -> bool:
        storage = chain.first("storage")
        return storage is not None and RelationshipStorage(storage) in _REFERENCE_STORAGE

    def collect(self, chain: RefChain, path: PathSegments, depth: int) -> List[Relationship]:
        raw_storage = chain.first("storage")
        if raw_storage is None:
            return []
        storage = _storage_class(raw_storage, path)
        if self.allowed_storage is not None and storage not in self.allowed_storage:
            return []

        foreign_key_path = None
        if storage is RelationshipStorage.INVERSE_REF:
            foreign_key_path = chain.first("foreign_key")
            if not foreign_key_path:
                raise SchemaError(
                    "Missing foreign key path in relationship with storage type inverse-ref",
                    context={"path": to_string(path), "schema_ref": chain.ref},
                )

        target = chain.target
        return [
            Relationship(
                path=to_string(path),
                to_many=isinstance(target, ArrayNode) or (bool(path) and path[-1] is WILDCARD),
                storage=storage,
                schema=target,
                entity_type_name=chain.first("entity_type"),
                schema_ref=chain.ref,
                foreign_key_path=foreign_key_path,
                depth_from_parent=depth,
            )
        ]


def find_relationships(
    schema: SchemaLike,
    resolve: SchemaRefResolver,
    allowed_storage: Optional[Iterable[Union[str, RelationshipStorage]]] = None,
    limit_to_path: Optional[PropertyPath] = None,
    max_depth: Optional[int] = None,
) -> List[Relationship]:
    """Find the relationships declared anywhere in a schema.

    Referencing nodes override the ``storage``, ``entityType`` and
    ``foreignKey`` of the schemas they reference. Every ``allOf``/``oneOf``
    alternative contributes its own relationships.

    :param allowed_storage: if given, relationships with other storage classes
        are skipped (their subtrees are still searched).
    :param limit_to_path: only walk this path; relationships along it are
        returned. ``max_depth`` is ignored when this is set.
    :param max_depth: stop descending below paths longer than this.
    :raises SchemaError: for an ``inverse-ref`` relationship without a
        foreign key, or an unknown storage class.
    """
    walk = _RelationshipWalk(resolve, allowed_storage, limit_to_path, max_depth)
    return walk.run(schema)


__all__ = ["RelationshipStorage", "Relationship", "find_relationships"]
