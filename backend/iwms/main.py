"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from iwms.config import get_settings
from iwms.infrastructure.database import Base, engine
from iwms.infrastructure.dependencies import get_cache_backend, get_sse_manager
from iwms.infrastructure.logging.log_config import setup_logging
from iwms.presentation.api.exception_handlers import setup_exception_handlers
from iwms.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _check_cache() -> None:
    """Log whether the cache backend answers; the API runs without it."""
    cache = get_cache_backend()
    try:
        reachable = await cache.ping()
    except Exception as exc:
        logger.warning("Cache backend unreachable at startup: %s", exc)
        return
    if reachable:
        logger.info("Cache backend ready (%s)", type(cache).__name__)
    else:
        logger.warning("Cache backend did not answer ping; reads go to the database")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: create tables, check the cache, stop streams."""
    settings = get_settings()
    setup_logging()
    logger.info("Starting %s %s (%s)", settings.app_title, settings.app_version, settings.app_env)

    # 1. Create all database tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    # 2. Report cache availability
    await _check_cache()

    yield

    # Shutdown
    sse = get_sse_manager()
    await sse.shutdown()
    try:
        await get_cache_backend().close()
    except Exception as exc:
        logger.warning("Error while closing cache backend: %s", exc)
    await engine.dispose()


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "Cache-Control"],
    )

    setup_exception_handlers(app)

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "iwms.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
