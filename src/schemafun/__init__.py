from pydantic import __version__ as _pydantic_version

# Settings rely on the Pydantic v2 API (field_validator, ConfigDict).
if not _pydantic_version.startswith("2"):
    raise ImportError(
        "schemafun requires pydantic>=2.0; detected version %s" % _pydantic_version
    )

from .errors import PathRangeError, SchemaError, SchemaLoadError, SettingsError
from .paths import (
    WILDCARD,
    PropertyPath,
    TransformedPath,
    depth,
    drop_tail,
    json_path_to_property_path,
    map_paths,
    take_tail,
    to_segments,
    to_string,
)
from .schema import (
    Relationship,
    RelationshipStorage,
    SchemaNode,
    SchemaRegistry,
    expand,
    find_property,
    find_relationships,
    find_transient,
    is_required,
    parse_schema,
)
from .loader import catalogue_directory, load_schemas_from_directory
from .settings import LoaderSettings, SchemafunSettings, load_settings

__all__ = [
    # errors
    "SchemaError",
    "SchemaLoadError",
    "PathRangeError",
    "SettingsError",
    # paths
    "WILDCARD",
    "PropertyPath",
    "TransformedPath",
    "to_segments",
    "to_string",
    "depth",
    "drop_tail",
    "take_tail",
    "json_path_to_property_path",
    "map_paths",
    # schemas
    "SchemaNode",
    "parse_schema",
    "find_property",
    "find_relationships",
    "find_transient",
    "is_required",
    "expand",
    "Relationship",
    "RelationshipStorage",
    "SchemaRegistry",
    # loading and settings
    "catalogue_directory",
    "load_schemas_from_directory",
    "LoaderSettings",
    "SchemafunSettings",
    "load_settings",
]
