"""
Shared pytest fixtures.

Every test gets its own in-memory SQLite database. The FastAPI app is wired
to it through dependency_overrides.
"""

import os

os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")


import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.db.base import Base
from app.core.db.engine import get_db_util
from app.main import app
from app.modules.users.auth import AuthService
from app.modules.users.models import Role


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_util] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def make_token(user_id: int, role: Role) -> str:
    return AuthService.create_access_token(
        {"sub": f"user{user_id}", "user_id": user_id, "role": role.value}
    )


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token(1, Role.ADMIN)}"}


@pytest.fixture
def customer_headers():
    return {"Authorization": f"Bearer {make_token(2, Role.CUSTOMER)}"}
