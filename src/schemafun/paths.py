"""Property paths in dot-and-bracket notation.

A property path addresses a location inside a document or schema. It has two
interchangeable forms:

* a string such as ``"orders[0].items[*].sku"``;
* a sequence of segments such as ``("orders", 0, "items", WILDCARD, "sku")``.

String segments are property names, integers are array indices and
:data:`WILDCARD` stands for any element of an array.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Sequence, Tuple, Union

from .errors import PathRangeError

logger = logging.getLogger(__name__)


class _Wildcard:
    _instance: Optional["_Wildcard"] = None

    def __new__(cls) -> "_Wildcard":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "WILDCARD"

    def __str__(self) -> str:
        return "*"

    def __reduce__(self) -> str:
        return "WILDCARD"


WILDCARD = _Wildcard()

Segment = Union[str, int, _Wildcard]
PathSegments = Tuple[Segment, ...]
PropertyPath = Union[str, Sequence[Segment]]

_SEGMENT_RE = re.compile(r"\[(?P<index>\d+|\*)\]|\.?(?P<name>[^.\[]+)")


@dataclass(frozen=True)
class TransformedPath:
    path: str
    additional_options: Optional[Dict[str, Any]] = None


PathTransformer = Callable[[str], Union[str, TransformedPath]]


def _normalize_segment(segment: Any) -> Segment:
    if segment is WILDCARD:
        return WILDCARD
    if isinstance(segment, int) and not isinstance(segment, bool):
        # -1 is accepted as a legacy spelling of the wildcard.
        return WILDCARD if segment < 0 else segment
    return str(segment)


def to_segments(path: PropertyPath) -> PathSegments:
    """Split a path into segments.

    Sequences are normalized and returned as a tuple; in a sequence ``"*"``
    is an ordinary property name and only :data:`WILDCARD` (or ``-1``) means
    any element. Strings are split on ``.`` and ``[...]``; ``[3]`` becomes
    ``3`` and ``[*]`` becomes :data:`WILDCARD`. Text that cannot be
    tokenized is kept as a single trailing name so the caller's lookup fails
    rather than the parse.
    """
    if not isinstance(path, str):
        return tuple(_normalize_segment(s) for s in path)

    segments: list[Segment] = []
    pos = 0
    while pos < len(path):
        match = _SEGMENT_RE.match(path, pos)
        if match is None:
            rest = path[pos:].lstrip(".")
            if rest:
                segments.append(rest)
            break
        index = match.group("index")
        if index is not None:
            segments.append(WILDCARD if index == "*" else int(index))
        else:
            segments.append(match.group("name"))
        pos = match.end()
    return tuple(segments)


def to_string(path: PropertyPath) -> str:
    """Render a path in dot-and-bracket notation."""
    if isinstance(path, str):
        return path
    parts: list[str] = []
    for i, segment in enumerate(to_segments(path)):
        if segment is WILDCARD:
            parts.append("[*]")
        elif isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif i == 0:
            parts.append(segment)
        else:
            parts.append(f".{segment}")
    return "".join(parts)


def depth(path: PropertyPath) -> int:
    return len(to_segments(path))


def _same_form(original: PropertyPath, segments: PathSegments) -> PropertyPath:
    return to_string(segments) if isinstance(original, str) else segments


def _check_range(path: PropertyPath, segments: PathSegments, n: int) -> None:
    if n < 0 or n > len(segments):
        raise PathRangeError(to_string(path), n, len(segments))


def drop_tail(path: PropertyPath, n: int) -> PropertyPath:
    """Remove the last ``n`` components of a path."""
    segments = to_segments(path)
    _check_range(path, segments, n)
    return _same_form(path, segments[: len(segments) - n])


def take_tail(path: PropertyPath, n: int) -> PropertyPath:
    """Keep only the last ``n`` components of a path."""
    segments = to_segments(path)
    _check_range(path, segments, n)
    return _same_form(path, segments[len(segments) - n :])


def json_path_to_property_path(json_path: str) -> str:
    """Convert a simple JSON path (``$.a.b[0]``) to a property path."""
    if json_path.startswith("$."):
        return json_path[2:]
    if json_path.startswith("$"):
        return json_path[1:]
    return json_path


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def map_paths(value: Any, transform: PathTransformer, _ancestors: FrozenSet[int] = frozenset()) -> Any:
    """Copy ``value`` with every string field named ``path`` transformed.

    ``value`` may be any nesting of mappings, lists and tuples. When the
    transformer returns a :class:`TransformedPath` with additional options,
    those keys are merged into the mapping that held the path.

    A container that is one of its own ancestors is dropped from the copy.
    The ancestor set belongs to a single branch, so a container shared by two
    siblings is rewritten under both of them.
    """
    if isinstance(value, Mapping):
        branch = _ancestors | {id(value)}
        mapped: Dict[str, Any] = {}
        for key, item in value.items():
            if key == "path" and isinstance(item, str):
                result = transform(item)
                if isinstance(result, TransformedPath):
                    mapped[key] = result.path
                    if result.additional_options:
                        mapped.update(result.additional_options)
                else:
                    mapped[key] = result
            elif _is_container(item) and id(item) in branch:
                logger.debug("map_paths: dropping cyclic value under key %r", key)
            else:
                mapped[key] = map_paths(item, transform, branch)
        return mapped

    if isinstance(value, (list, tuple)):
        branch = _ancestors | {id(value)}
        items = []
        for item in value:
            if _is_container(item) and id(item) in branch:
                logger.debug("map_paths: dropping cyclic list element")
                continue
            items.append(map_paths(item, transform, branch))
        return tuple(items) if isinstance(value, tuple) else items

    return value


__all__ = [
    "WILDCARD",
    "Segment",
    "PathSegments",
    "PropertyPath",
    "TransformedPath",
    "PathTransformer",
    "to_segments",
    "to_string",
    "depth",
    "drop_tail",
    "take_tail",
    "json_path_to_property_path",
    "map_paths",
]
