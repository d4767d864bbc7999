"""Health check endpoint."""

import logging

from fastapi import APIRouter, Depends

from iwms.application.interfaces import CacheBackend
from iwms.config import get_settings
from iwms.infrastructure.dependencies import get_cache_backend

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(cache: CacheBackend = Depends(get_cache_backend)) -> dict:
    """Returns the application health status and cache reachability."""
    settings = get_settings()
    try:
        cache_status = "ok" if await cache.ping() else "unavailable"
    except Exception as exc:
        logger.warning("Cache ping failed: %s", exc)
        cache_status = "unavailable"
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "cache": cache_status,
    }
