"""FastAPI dependency injection, wires infrastructure to the application layer."""

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from iwms.config import get_settings
from iwms.application.interfaces import CacheBackend
from iwms.application.services import (
    FloorPlanService,
    LeaseService,
    OccupancyService,
    SSEManager,
    UserService,
)
from iwms.domain.entities import FloorPlan, Lease, OccupancyData, User
from iwms.infrastructure.cache import EntityCache, MemoryCacheBackend, RedisCacheBackend
from iwms.infrastructure.database.session import get_db_session
from iwms.infrastructure.database.repositories import (
    SQLAlchemyFloorPlanRepository,
    SQLAlchemyLeaseRepository,
    SQLAlchemyOccupancyRepository,
    SQLAlchemyUserRepository,
)

logger = logging.getLogger(__name__)


@lru_cache
def get_cache_backend() -> CacheBackend:
    """Process-wide cache backend: Redis when configured, memory otherwise."""
    settings = get_settings()
    if settings.redis_url:
        logger.info("Using Redis cache backend")
        return RedisCacheBackend(settings.redis_url)
    logger.info("REDIS_URL not set; using in-process cache backend")
    return MemoryCacheBackend()


@lru_cache
def get_sse_manager() -> SSEManager:
    """Process-wide broadcaster for live occupancy events."""
    return SSEManager(keepalive_seconds=get_settings().sse_keepalive_seconds)


def get_actor_id(
    x_user_id: str = Header("system", alias="X-User-Id", max_length=255),
) -> str:
    """Identity recorded in audit fields; set by the upstream auth layer."""
    return x_user_id


async def get_floor_plan_service(
    session: AsyncSession = Depends(get_db_session),
    cache: CacheBackend = Depends(get_cache_backend),
) -> AsyncGenerator[FloorPlanService, None]:
    """Provides a FloorPlanService with its cached repository wired up."""
    settings = get_settings()
    repository = SQLAlchemyFloorPlanRepository(
        session, EntityCache(cache, FloorPlan, settings.cache_ttl_seconds)
    )
    yield FloorPlanService(repository, bulk_limit=settings.bulk_operation_limit)


async def get_lease_service(
    session: AsyncSession = Depends(get_db_session),
    cache: CacheBackend = Depends(get_cache_backend),
) -> AsyncGenerator[LeaseService, None]:
    """Provides a LeaseService with its cached repository wired up."""
    settings = get_settings()
    repository = SQLAlchemyLeaseRepository(
        session, EntityCache(cache, Lease, settings.cache_ttl_seconds)
    )
    yield LeaseService(repository, renewal_notice_days=settings.renewal_notice_days)


async def get_user_service(
    session: AsyncSession = Depends(get_db_session),
    cache: CacheBackend = Depends(get_cache_backend),
) -> AsyncGenerator[UserService, None]:
    """Provides a UserService with its cached repository wired up."""
    settings = get_settings()
    repository = SQLAlchemyUserRepository(
        session, EntityCache(cache, User, settings.cache_ttl_seconds)
    )
    yield UserService(
        repository,
        max_login_attempts=settings.max_login_attempts,
        bulk_limit=settings.bulk_operation_limit,
    )


async def get_occupancy_service(
    session: AsyncSession = Depends(get_db_session),
    cache: CacheBackend = Depends(get_cache_backend),
    sse: SSEManager = Depends(get_sse_manager),
) -> AsyncGenerator[OccupancyService, None]:
    """Provides an OccupancyService that also publishes live updates."""
    settings = get_settings()
    repository = SQLAlchemyOccupancyRepository(
        session, EntityCache(cache, OccupancyData, settings.occupancy_cache_ttl_seconds)
    )
    yield OccupancyService(
        repository,
        sse_manager=sse,
        batch_limit=settings.occupancy_batch_limit,
    )
