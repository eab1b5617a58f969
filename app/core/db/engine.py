"""
Async database engine configuration for FastAPI.

SQLite (aiosqlite) is the default store; any async SQLAlchemy URL works.
For SQLite every new connection gets WAL mode, a busy timeout and
foreign key enforcement.
"""

from typing import AsyncGenerator
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from app.core.config import config as settings


def _get_engine_options(database_url: str) -> dict:
    """
    Get engine options based on database type.
    SQLite requires special handling for async and concurrency.
    """
    options = {
        "echo": False,
        "future": True,
    }

    if database_url.startswith("sqlite"):
        # In-memory databases live on a single shared connection
        if ":memory:" in database_url:
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        else:
            options["poolclass"] = NullPool
    elif not settings.is_production:
        options["poolclass"] = NullPool

    return options


def configure_sqlite_connection(dbapi_connection, connection_record):
    """
    Configure a SQLite connection:
    - WAL mode: readers don't block the writer
    - busy_timeout: wait up to 30s for locks instead of failing
    - foreign_keys: enforce referential integrity
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


database_url = settings.database_url

engine = create_async_engine(database_url, **_get_engine_options(database_url))

if database_url.startswith("sqlite"):
    # aiosqlite exposes connect events on the sync engine's pool
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        configure_sqlite_connection(dbapi_connection, connection_record)


AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db_util() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency for FastAPI.

    Commits when the request handler returns, rolls back on any exception.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def check_database_connection() -> bool:
    """Verify the database answers a trivial query (used by /health)."""
    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1
    except Exception:
        return False
