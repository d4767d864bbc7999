"""Redis-backed implementation of the CacheBackend port."""

import json
import logging
from typing import Any

import redis.asyncio as redis

from iwms.application.interfaces import CacheBackend

logger = logging.getLogger(__name__)


class RedisCacheBackend(CacheBackend):
    """Stores JSON documents in Redis with ``SETEX``.

    Timeouts are short so that an unreachable Redis degrades into cache
    misses quickly instead of stalling requests.
    """

    def __init__(self, url: str, *, timeout_seconds: float = 1.0):
        self._client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=timeout_seconds,
            socket_timeout=timeout_seconds,
        )

    async def get_json(self, key: str) -> Any | None:
        raw = await self._client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        payload = json.dumps(value, separators=(",", ":"))
        await self._client.setex(key, max(1, int(ttl_seconds)), payload)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._client.delete(*keys)

    async def delete_pattern(self, pattern: str) -> int:
        keys = [key async for key in self._client.scan_iter(match=pattern, count=200)]
        if keys:
            await self._client.delete(*keys)
        logger.debug("Deleted %d cache keys matching %s", len(keys), pattern)
        return len(keys)

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        await self._client.aclose()
