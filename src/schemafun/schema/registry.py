from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..loader import IdExtractor, load_schemas_from_directory
from ..paths import PropertyPath
from ..settings import LoaderSettings
from .expand import expand
from .find_property import find_property
from .relationships import Relationship, RelationshipStorage, find_relationships
from .required import is_required
from .transient import find_transient
from .types import SchemaLike, SchemaNode, parse_schema

SchemaId = str
SchemaRefTranslator = Callable[[str], SchemaId]


def _identity(ref: str) -> SchemaId:
    return ref


class SchemaRegistry:
    """A collection of schemas that may reference one another.

    Ids are arbitrary strings; retrieval URIs are the usual choice. The
    translator maps ``$ref`` values to ids (identity by default), and the
    registry uses it to resolve references for the bound search methods,
    which therefore assume every referenced schema lives in this registry.

    Registered schemas are parsed into immutable nodes. Mutating the registry
    from several threads needs external locking; lookups do not.
    """

    def __init__(self, translator: Optional[SchemaRefTranslator] = None):
        self._schemas: Dict[SchemaId, SchemaNode] = {}
        self.translator: SchemaRefTranslator = translator or _identity

    # Registering and getting schemas

    def register(self, schema_id: SchemaId, schema: SchemaLike) -> SchemaNode:
        """Register a schema, replacing any schema with the same id."""
        node = parse_schema(schema)
        self._schemas[schema_id] = node
        return node

    def deregister(self, schema_id: SchemaId) -> None:
        self._schemas.pop(schema_id, None)

    def get(self, schema_id: SchemaId) -> Optional[SchemaNode]:
        return self._schemas.get(schema_id)

    def clear(self) -> None:
        self._schemas.clear()

    def ids(self) -> List[SchemaId]:
        return list(self._schemas)

    def __contains__(self, schema_id: object) -> bool:
        return schema_id in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def load_directory(
        self,
        root: Union[str, Path, None] = None,
        id_extractor: Optional[IdExtractor] = None,
        *,
        recursive: Optional[bool] = None,
        settings: Optional[LoaderSettings] = None,
    ) -> List[SchemaId]:
        """Load and register every JSON schema file under ``root``.

        Without ``id_extractor`` the id comes from the schema's ``$id``.
        """
        return load_schemas_from_directory(
            self,
            root,
            id_extractor,
            recursive=recursive,
            settings=settings,
        )

    # Schema references

    def resolve_ref(self, ref: str) -> Optional[SchemaNode]:
        return self.get(self.translator(ref))

    # Using schemas

    async def expand(self, schema: SchemaLike) -> Optional[Dict[str, Any]]:
        return await expand(schema, self.resolve_ref)

    def find_property(self, schema: SchemaLike, path: PropertyPath) -> Optional[SchemaNode]:
        return find_property(schema, path, self.resolve_ref)

    def find_relationships(
        self,
        schema: SchemaLike,
        allowed_storage: Optional[Iterable[Union[str, RelationshipStorage]]] = None,
        limit_to_path: Optional[PropertyPath] = None,
        max_depth: Optional[int] = None,
    ) -> List[Relationship]:
        return find_relationships(schema, self.resolve_ref, allowed_storage, limit_to_path, max_depth)

    def find_transient(
        self,
        schema: SchemaLike,
        limit_to_path: Optional[PropertyPath] = None,
        max_depth: Optional[int] = None,
    ) -> List[str]:
        return find_transient(schema, self.resolve_ref, limit_to_path, max_depth)

    def is_required(self, schema: SchemaLike, path: PropertyPath) -> bool:
        return is_required(schema, path, self.resolve_ref)


__all__ = ["SchemaId", "SchemaRefTranslator", "SchemaRegistry"]
