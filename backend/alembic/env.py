"""Alembic environment for the marketplace schema (async engine)."""
from __future__ import annotations

import asyncio
import logging
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import async_engine_from_config

from supplylink_api import models
from supplylink_api.config import get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

# The application settings own the URL; alembic.ini only carries a fallback.
database_url = get_settings().database_url
config.set_main_option("sqlalchemy.url", database_url)
logger.info("Migrating %s", make_url(database_url).render_as_string(hide_password=True))

target_metadata = models.Base.metadata


def _configure(**options) -> None:
    url = make_url(config.get_main_option("sqlalchemy.url"))
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER constraints in place
        render_as_batch=url.get_backend_name() == "sqlite",
        **options,
    )


def run_migrations_offline() -> None:
    """Emit SQL without a live connection."""

    _configure(url=config.get_main_option("sqlalchemy.url"), literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
