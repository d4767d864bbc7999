"""Abstract interface (port) for the look-aside cache store."""

from abc import ABC, abstractmethod
from typing import Any


class CacheBackend(ABC):
    """Port for a TTL key-value store holding JSON documents.

    Implementations raise on connection problems; callers that must not
    fail because of the cache wrap them (see ``EntityCache``).
    """

    @abstractmethod
    async def get_json(self, key: str) -> Any | None:
        """Return the decoded document, or None on a miss."""
        ...

    @abstractmethod
    async def set_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a document that expires after ``ttl_seconds``."""
        ...

    @abstractmethod
    async def delete(self, *keys: str) -> None:
        ...

    @abstractmethod
    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern. Returns the count."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...
