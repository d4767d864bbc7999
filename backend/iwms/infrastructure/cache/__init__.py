from .entity_cache import EntityCache
from .memory_cache import MemoryCacheBackend
from .redis_cache import RedisCacheBackend

__all__ = [
    "EntityCache",
    "MemoryCacheBackend",
    "RedisCacheBackend",
]
