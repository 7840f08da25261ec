"""Pytest configuration and fixtures for API tests."""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from world_city_api.database import Base, get_db
from world_city_api.main import app
from world_city_api.models import City

# A few rows of the world database's city table
SAMPLE_CITIES = [
    {"id": 1, "name": "Kabul", "countrycode": "AFG", "district": "Kabol", "population": 1780000},
    {"id": 5, "name": "Amsterdam", "countrycode": "NLD", "district": "Noord-Holland", "population": 731200},
    {"id": 6, "name": "Rotterdam", "countrycode": "NLD", "district": "Zuid-Holland", "population": 593321},
    {"id": 3815, "name": "Springfield", "countrycode": "USA", "district": "Illinois", "population": 111454},
    {"id": 3838, "name": "Springfield", "countrycode": "USA", "district": "Missouri", "population": 151580},
    {"id": 4079, "name": "Rafah", "countrycode": "PSE", "district": "Rafah", "population": 92020},
]


async def _make_client(engine) -> AsyncGenerator[AsyncClient, None]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with session_factory() as session:
        session.add_all([City(**row) for row in SAMPLE_CITIES])
        await session.commit()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        """Override database dependency for tests."""
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
        await engine.dispose()


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine; StaticPool keeps the single connection alive."""
    return create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest_asyncio.fixture
async def client(engine) -> AsyncGenerator[AsyncClient, None]:
    """Async test client for the FastAPI app, backed by a seeded in-memory database."""
    async for ac in _make_client(engine):
        yield ac


@pytest_asyncio.fixture
async def db_session(engine, client) -> AsyncGenerator[AsyncSession, None]:
    """Session on the same database the client uses, for direct checks."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def file_client(tmp_path) -> AsyncGenerator[AsyncClient, None]:
    """Client backed by an on-disk SQLite database with one connection per session.

    Needed where requests must run concurrently on separate connections.
    """
    file_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'cities.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async for ac in _make_client(file_engine):
        yield ac
