"""Alembic environment: hand-written SQL migrations against settings.DATABASE_URL.

target_metadata is only used by `alembic check` to catch drift between the ORM
mappings and the migrated schema; revisions are never autogenerated.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

import src.pm_account.infrastructure.db_models  # noqa: F401
import src.pm_gateway.user.db_models  # noqa: F401
import src.pm_market.infrastructure.db_models  # noqa: F401
import src.pm_stake.infrastructure.db_models  # noqa: F401
from config.settings import settings
from src.pm_common.database import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of executing it."""
    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(settings.DATABASE_URL)
    async with engine.connect() as connection:
        await connection.run_sync(_run_sync)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
