"""
Pytest configuration and fixtures for backend tests.

This module provides the core testing infrastructure including:
- An in-memory SQLite database built from the model metadata per test
- Session fixtures for database access
- Test clients for HTTP and websocket integration tests
"""

import os

# Settings are read once at import time, configure them before the app loads
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")

from collections.abc import AsyncGenerator, Iterator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

from letsroll.core.rate_limit import limiter  # noqa: E402
from letsroll.db.session import get_session, get_session_factory  # noqa: E402
from letsroll.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


def _session_factory(bind: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def create_test_database() -> AsyncEngine:
    """Create a fresh in-memory database with every table."""
    # StaticPool keeps the single in-memory connection alive between sessions
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    return test_engine


@pytest.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    test_engine = await create_test_database()
    yield test_engine
    await test_engine.dispose()


@pytest.fixture(scope="function")
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.

    The database lives in memory and is dropped with the engine, so no
    cleanup is needed between tests.
    """
    async with _session_factory(engine)() as test_session:
        yield test_session


@pytest.fixture
async def client(engine: AsyncEngine, session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing API endpoints.

    Requests share the test ``session`` so rows created with the factories
    are visible to the endpoints.

    Usage:
        async def test_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """

    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_factory] = lambda: _session_factory(engine)

    # Disable rate limiting in tests
    limiter.enabled = False

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def live_client() -> Iterator[tuple[TestClient, sessionmaker]]:
    """
    Run the app in a ``TestClient`` portal for websocket tests.

    The database is created on the portal's event loop so websocket handlers
    and seeding code share it. Seed data with
    ``client.portal.call(async_fn)`` using the returned session factory.
    """
    limiter.enabled = False
    with TestClient(app) as test_client:
        test_engine = test_client.portal.call(create_test_database)
        factory = _session_factory(test_engine)

        async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
            async with factory() as db_session:
                yield db_session

        app.dependency_overrides[get_session] = override_get_session
        app.dependency_overrides[get_session_factory] = lambda: factory
        try:
            yield test_client, factory
        finally:
            app.dependency_overrides.clear()
            test_client.portal.call(test_engine.dispose)
