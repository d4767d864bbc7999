"""In-process CacheBackend used when no Redis URL is configured."""

import fnmatch
import json
import time
from typing import Any

from iwms.application.interfaces import CacheBackend


class MemoryCacheBackend(CacheBackend):
    """Dictionary of JSON strings with per-key expiry.

    Values are stored serialized so callers never share mutable state
    with the cache, matching what a network cache would do.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[float, str]] = {}

    def _live_entry(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, payload = entry
        if expires_at <= time.monotonic():
            self._entries.pop(key, None)
            return None
        return payload

    async def get_json(self, key: str) -> Any | None:
        payload = self._live_entry(key)
        return json.loads(payload) if payload is not None else None

    def _sweep(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]

    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        now = time.monotonic()
        self._sweep(now)
        payload = json.dumps(value, separators=(",", ":"))
        self._entries[key] = (now + max(1, int(ttl_seconds)), payload)

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(key, None)

    async def delete_pattern(self, pattern: str) -> int:
        matches = [key for key in self._entries if fnmatch.fnmatchcase(key, pattern)]
        for key in matches:
            del self._entries[key]
        return len(matches)

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        """Keys that have not expired yet."""
        return [key for key in list(self._entries) if self._live_entry(key) is not None]
