from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from src.api.deps import get_db_session
from src.api.main import app
from src.domain import Principal
from src.infrastructure.db.base import Base
from src.infrastructure.db.models import UserRole

from tests.utils import create_user


@pytest.fixture()
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    # File-backed so every session sees the same database
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'credtrust.db'}",
        future=True,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
async def session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Session handed to the services under test."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to the test database."""

    async def override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)  # type: ignore
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture()
async def admin(session_factory: async_sessionmaker[AsyncSession]) -> Principal:
    """An admin principal backed by a stored admin user."""
    user = await create_user(session_factory, email="admin@example.com", role=UserRole.ADMIN)
    return Principal(user_id=user.id, email=user.email, roles=("admin",))


@pytest.fixture()
async def owner(session_factory: async_sessionmaker[AsyncSession]) -> Principal:
    """A regular user who owns the credentials under test."""
    user = await create_user(session_factory, email="owner@example.com")
    return Principal(user_id=user.id, email=user.email, roles=("user",))


@pytest.fixture()
async def outsider(session_factory: async_sessionmaker[AsyncSession]) -> Principal:
    """A regular user with no relation to the credentials under test."""
    user = await create_user(session_factory, email="outsider@example.com")
    return Principal(user_id=user.id, email=user.email, roles=("user",))
