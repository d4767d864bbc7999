"""Typed look-aside cache for domain entities.

Wraps a ``CacheBackend`` and converts dataclass entities to and from JSON
with pydantic. Every backend failure is logged and swallowed: reads turn
into misses, writes and invalidations into no-ops, so a cache outage
never fails a request.
"""

import logging
from functools import lru_cache
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter

from iwms.application.interfaces import CacheBackend

logger = logging.getLogger(__name__)

E = TypeVar("E")


@lru_cache(maxsize=None)
def _adapters(entity_type: Any) -> tuple[TypeAdapter, TypeAdapter]:
    """Build the (entity, list-of-entity) adapters once per type."""
    return TypeAdapter(entity_type), TypeAdapter(list[entity_type])


class EntityCache(Generic[E]):
    def __init__(self, backend: CacheBackend, entity_type: type[E], ttl_seconds: int):
        self._backend = backend
        self._ttl = ttl_seconds
        self._adapter, self._list_adapter = _adapters(entity_type)

    async def get(self, key: str) -> E | None:
        try:
            raw = await self._backend.get_json(key)
            return self._adapter.validate_python(raw) if raw is not None else None
        except Exception as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None

    async def put(self, key: str, entity: E) -> None:
        try:
            payload = self._adapter.dump_python(entity, mode="json")
            await self._backend.set_json(key, payload, self._ttl)
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    async def get_list(self, key: str) -> list[E] | None:
        try:
            raw = await self._backend.get_json(key)
            return self._list_adapter.validate_python(raw) if raw is not None else None
        except Exception as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None

    async def put_list(self, key: str, entities: list[E]) -> None:
        try:
            payload = self._list_adapter.dump_python(entities, mode="json")
            await self._backend.set_json(key, payload, self._ttl)
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    async def get_page(self, key: str) -> tuple[list[E], int] | None:
        try:
            raw = await self._backend.get_json(key)
            if raw is None:
                return None
            return self._list_adapter.validate_python(raw["items"]), int(raw["total"])
        except Exception as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None

    async def put_page(self, key: str, entities: list[E], total: int) -> None:
        try:
            payload = {
                "items": self._list_adapter.dump_python(entities, mode="json"),
                "total": total,
            }
            await self._backend.set_json(key, payload, self._ttl)
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    async def invalidate(self, *keys: str) -> None:
        try:
            await self._backend.delete(*keys)
        except Exception as exc:
            logger.warning("Cache invalidation failed for %s: %s", ", ".join(keys), exc)

    async def invalidate_pattern(self, pattern: str) -> None:
        try:
            await self._backend.delete_pattern(pattern)
        except Exception as exc:
            logger.warning("Cache invalidation failed for %s: %s", pattern, exc)
