from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from .types import SchemaLike, SchemaNode

logger = logging.getLogger(__name__)

AsyncSchemaRefResolver = Callable[[str], Union[Optional[SchemaLike], Awaitable[Optional[SchemaLike]]]]


def _as_json(schema: Any) -> Any:
    return schema.to_json() if isinstance(schema, SchemaNode) else schema


class _ReferenceExpander:
    def __init__(self, resolve: AsyncSchemaRefResolver):
        self._resolve = resolve
        # ref -> expanded output, shared by every occurrence of the ref.
        self._expanded: Dict[str, Any] = {}

    async def _lookup(self, ref: str) -> Any:
        result = self._resolve(ref)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def expand_ref(self, ref: str) -> Optional[Dict[str, Any]]:
        if ref in self._expanded:
            return self._expanded[ref]

        # Schemas that are only a reference are aliases; every ref along the
        # chain shares the output of the schema at its end.
        chain = [ref]
        current = ref
        while True:
            target = _as_json(await self._lookup(current))
            if not isinstance(target, Mapping):
                logger.debug("expand: unresolved schema reference %r", current)
                return self._share(chain, None)
            alias = target.get("$ref")
            if not isinstance(alias, str):
                break
            if alias in self._expanded:
                return self._share(chain, self._expanded[alias])
            if alias in chain:
                logger.debug("expand: reference loop through %r", alias)
                return self._share(chain, None)
            chain.append(alias)
            current = alias

        out: Dict[str, Any] = {}
        self._share(chain, out)
        await self._fill(out, target)
        return out

    def _share(self, refs: List[str], expanded: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        for ref in refs:
            self._expanded[ref] = expanded
        return expanded

    async def expand_value(self, value: Any, parent_key: Optional[str]) -> Any:
        if isinstance(value, Mapping):
            ref = value.get("$ref")
            # Keys under "properties" are property names, so {"$ref": ...} there is a property called "$ref".
            if isinstance(ref, str) and parent_key != "properties":
                expanded = await self.expand_ref(ref)
                if expanded is not None:
                    return expanded
            out: Dict[str, Any] = {}
            await self._fill(out, value)
            return out
        if isinstance(value, (list, tuple)):
            return [await self.expand_value(item, None) for item in value]
        return value

    async def _fill(self, out: Dict[str, Any], source: Mapping[str, Any]) -> None:
        for key, item in source.items():
            out[key] = await self.expand_value(item, key)


async def expand(schema: SchemaLike, resolve: AsyncSchemaRefResolver) -> Optional[Dict[str, Any]]:
    """Expand references to other schemas.

    Returns a new schema of plain dicts and lists with every ``$ref`` replaced
    by the referenced schema. Each reference is expanded once and the result
    shared, so circular references become circular objects and the result is
    not JSON-serializable without special handling. References the resolver
    cannot resolve are left in place.

    ``resolve`` may be a plain function or return an awaitable.
    """
    expander = _ReferenceExpander(resolve)
    return await expander.expand_value(_as_json(schema), None)


__all__ = ["AsyncSchemaRefResolver", "expand"]
