"""
Alembic migration environment.

The database URL comes from the application config (DB_URL / .env), so
migrations always target the same store as the API. SQLite runs in batch
mode because it cannot ALTER most column definitions in place.
"""

import asyncio
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import event, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

load_dotenv()

from app.core.config import config as app_config  # noqa: E402
from app.core.db.base import Base  # noqa: E402
from app.core.db.engine import configure_sqlite_connection  # noqa: E402

# Every model must be imported for autogenerate to see its table
from app.modules.users.models import User  # noqa: E402,F401
from app.modules.categories.models import Category  # noqa: E402,F401
from app.modules.products.models import Product  # noqa: E402,F401
from app.modules.orders.models import Order, OrderItem  # noqa: E402,F401

alembic_config = context.config

if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

db_url = app_config.database_url
is_sqlite = db_url.startswith("sqlite")

if is_sqlite and ":memory:" not in db_url:
    # sqlite+aiosqlite:///./data/storefront.db -> ./data must exist
    Path(db_url.split(":///", 1)[-1]).parent.mkdir(parents=True, exist_ok=True)

target_metadata = Base.metadata


def _configure_context(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=is_sqlite,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting to the database."""
    _configure_context(
        url=db_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure_context(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = create_async_engine(db_url, poolclass=pool.NullPool)

    if is_sqlite:
        event.listen(connectable.sync_engine, "connect", configure_sqlite_connection)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
