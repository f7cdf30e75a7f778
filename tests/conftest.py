"""
Test Configuration Module
"""

import pytest
import pytest_asyncio
from typing import AsyncGenerator

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from kv_gateway.db.models import Base
from kv_gateway.repositories.memory import MemoryKVStoreRepository
from kv_gateway.repositories.sqlalchemy import SQLAlchemyKVStoreRepository


# Use in-memory database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def async_engine():
    """Create async database engine for testing"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Clean up
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing"""
    async_session = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def memory_repo() -> MemoryKVStoreRepository:
    """Fresh in-memory store per test"""
    return MemoryKVStoreRepository()


@pytest_asyncio.fixture(params=["memory", "database"])
async def kv_repo(request, memory_repo, db_session):
    """Every repository backend that runs without external services"""
    if request.param == "memory":
        yield memory_repo
    else:
        yield SQLAlchemyKVStoreRepository(db_session)


@pytest_asyncio.fixture
async def client(memory_repo) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, backed by the in-memory store"""
    from kv_gateway.api.deps import get_kv_repo
    from kv_gateway.main import app

    app.dependency_overrides[get_kv_repo] = lambda: memory_repo

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}
