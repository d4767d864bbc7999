"""Shared fixtures: an in-memory SQLite database and an in-process cache."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from iwms.application.services import SSEManager
from iwms.infrastructure.cache import MemoryCacheBackend
from iwms.infrastructure.database import Base
from iwms.infrastructure.database.session import get_db_session
from iwms.infrastructure.dependencies import get_cache_backend, get_sse_manager
from iwms.main import app


@pytest_asyncio.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def cache_backend() -> MemoryCacheBackend:
    return MemoryCacheBackend()


@pytest_asyncio.fixture
async def client(session_factory, cache_backend) -> AsyncIterator[AsyncClient]:
    """HTTP client against the app wired to the test database and cache."""

    async def _session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_cache_backend] = lambda: cache_backend
    app.dependency_overrides[get_sse_manager] = lambda: SSEManager(keepalive_seconds=1)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()
