"""Alembic environment for the filament inventory database.

The URL always comes from application settings, so ``alembic upgrade head``
migrates the same SQLite file the app opens (set DATABASE_URL to change it).
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from backend.app.core.config import settings
from backend.app.core.database import Base
from backend.app.models import Filament  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

# SQLite cannot alter most columns in place; batch mode rebuilds the table instead
_CONFIGURE_OPTIONS = {
    "target_metadata": Base.metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _migrate_offline() -> None:
    context.configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_CONFIGURE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **_CONFIGURE_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    migration_engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    async with migration_engine.connect() as connection:
        await connection.run_sync(_migrate)
    await migration_engine.dispose()


if context.is_offline_mode():
    _migrate_offline()
else:
    asyncio.run(_migrate_online())
