"""Alembic environment — migrations for the sitefeed build request log.

Design Decisions:
    - URL comes from sitefeed Settings when DATABASE_URL is set, so migrations
      and the app agree on driver coercion (postgresql:// -> postgresql+asyncpg://)
    - alembic.ini's sqlalchemy.url is only the local fallback
    - SQLite (local runs, tests) migrates in batch mode: it cannot ALTER columns
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from sitefeed.config import get_settings
from sitefeed.db.base import Base
import sitefeed.models  # noqa: F401  (registers BuildRequest on Base.metadata)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    if os.environ.get("DATABASE_URL"):
        return get_settings().database_url
    return config.get_main_option("sqlalchemy.url")


def _configure(**kwargs) -> None:
    url = make_url(_database_url())
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.get_backend_name() == "sqlite",
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync_migrations(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(_database_url(), poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(_run_sync_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
