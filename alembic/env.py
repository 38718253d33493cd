"""Alembic environment for the account store.

The database URL comes from ``BREVITY_DATABASE_URL`` unless alembic.ini sets
one. SQLite needs batch mode for ALTER TABLE, so it is switched on whenever
the URL points at SQLite.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from brevity.core.config import get_settings
from brevity.infrastructure.persistence import models  # noqa: F401
from brevity.infrastructure.persistence.database import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = config.get_main_option("sqlalchemy.url") or get_settings().database_url
config.set_main_option("sqlalchemy.url", database_url)


def configure(**options) -> None:
    context.configure(
        target_metadata=Base.metadata,
        render_as_batch=database_url.startswith("sqlite"),
        compare_type=True,
        **options,
    )


def migrate(connection: Connection) -> None:
    configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def migrate_async() -> None:
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    # Emit SQL instead of connecting
    configure(url=database_url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
elif config.attributes.get("connection") is not None:
    migrate(config.attributes["connection"])
else:
    asyncio.run(migrate_async())
