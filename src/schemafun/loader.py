"""Loading schema files from a directory into a registry."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Protocol, Union

from .errors import SchemaLoadError
from .settings import LoaderSettings

logger = logging.getLogger(__name__)

IdExtractor = Callable[[Path, Mapping[str, Any]], str]
Catalogue = Dict[str, Union[Path, "Catalogue"]]


class SupportsRegister(Protocol):
    def register(self, schema_id: str, schema: Mapping[str, Any]) -> Any: ...


def _normalize_extensions(extensions: Iterable[str]) -> set[str]:
    return {ext.lstrip(".").lower() for ext in extensions}


def _matches(path: Path, extensions: set[str]) -> bool:
    return path.suffix.lstrip(".").lower() in extensions


def catalogue_directory(
    root: Union[str, Path],
    *,
    recursive: bool = False,
    extensions: Iterable[str] = ("json",),
) -> Catalogue:
    """Catalogue the schema files in a directory.

    Keys are file names without their extension; values are file paths, or
    nested catalogues for subdirectories when ``recursive`` is set. Paths are
    absolute or relative according to ``root``. A missing directory yields an
    empty catalogue.
    """
    root = Path(root)
    if not root.is_dir():
        return {}
    wanted = _normalize_extensions(extensions)
    result: Catalogue = {}
    for entry in sorted(root.iterdir()):
        if entry.is_dir():
            if recursive:
                result[entry.name] = catalogue_directory(entry, recursive=True, extensions=wanted)
        elif _matches(entry, wanted):
            result[entry.stem] = entry
    return result


def iter_schema_files(root: Path, *, recursive: bool, extensions: Iterable[str]) -> Iterator[Path]:
    wanted = _normalize_extensions(extensions)
    for entry in sorted(root.iterdir()):
        if entry.is_dir():
            if recursive:
                yield from iter_schema_files(entry, recursive=True, extensions=wanted)
        elif _matches(entry, wanted):
            yield entry


def read_schema_file(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            schema = json.load(f)
    except json.JSONDecodeError as exc:
        raise SchemaLoadError(
            f"Invalid JSON in schema file {path}: {exc.msg}",
            context={"path": str(path), "line": exc.lineno},
            inner_error=exc,
        ) from exc
    except (UnicodeDecodeError, OSError) as exc:
        raise SchemaLoadError(
            f"Cannot read schema file {path}: {exc}",
            context={"path": str(path)},
            inner_error=exc,
        ) from exc
    if not isinstance(schema, Mapping):
        raise SchemaLoadError(
            f"Schema file {path} does not contain a JSON object",
            context={"path": str(path)},
        )
    return schema


def field_id_extractor(id_field: str) -> IdExtractor:
    def extract(path: Path, schema: Mapping[str, Any]) -> str:
        return schema.get(id_field)

    return extract


def load_schemas_from_directory(
    registry: SupportsRegister,
    root: Union[str, Path, None] = None,
    id_extractor: Optional[IdExtractor] = None,
    *,
    recursive: Optional[bool] = None,
    extensions: Optional[Iterable[str]] = None,
    settings: Optional[LoaderSettings] = None,
) -> List[str]:
    """Register every schema file under ``root``.

    Files are read in sorted order. ``id_extractor`` receives the file path
    and the parsed schema; by default the id is read from the schema's
    ``settings.id_field`` (``$id``). Unspecified options come from
    ``settings``.

    :returns: the registered ids, in load order.
    :raises SchemaLoadError: if a file is not a JSON object or has no id.
    """
    settings = settings or LoaderSettings()
    root = settings.root if root is None else Path(root)
    if root is None:
        raise ValueError("No schema directory given and loader.root is not configured")
    recursive = settings.recursive if recursive is None else recursive
    extensions = settings.extensions if extensions is None else extensions
    extract = id_extractor or field_id_extractor(settings.id_field)

    if not root.is_dir():
        logger.warning("Schema directory %s does not exist", root)
        return []

    ids: List[str] = []
    for path in iter_schema_files(root, recursive=recursive, extensions=extensions):
        schema = read_schema_file(path)
        schema_id = extract(path, schema)
        if not isinstance(schema_id, str) or not schema_id:
            raise SchemaLoadError(
                f"Cannot determine the id of schema file {path}",
                context={"path": str(path), "id_field": settings.id_field},
            )
        registry.register(schema_id, schema)
        logger.debug("Registered schema %r from %s", schema_id, path)
        ids.append(schema_id)

    logger.info("Registered %d schema(s) from %s", len(ids), root)
    return ids


__all__ = [
    "IdExtractor",
    "Catalogue",
    "SupportsRegister",
    "catalogue_directory",
    "iter_schema_files",
    "read_schema_file",
    "field_id_extractor",
    "load_schemas_from_directory",
]
