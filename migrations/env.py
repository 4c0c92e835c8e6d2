import asyncio
import logging
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from src.db import Base, get_database_url


config = context.config

# Leave logging alone when the application already configured it.
if config.config_file_name and not logging.getLogger().handlers:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

# The application passes its URL in; the alembic CLI reads DATABASE_URL.
DATABASE_URL = config.get_main_option("sqlalchemy.url") or get_database_url()


def _upgrade_state_schema(connection: Connection) -> None:
    # SQLite cannot ALTER most columns in place, so every migration runs in batch mode.
    context.configure(
        connection=connection,
        target_metadata=Base.metadata,
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply the state schema revisions over a short-lived async connection."""
    engine = create_async_engine(DATABASE_URL, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_upgrade_state_schema)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    raise RuntimeError("Offline SQL generation is not supported for the state database.")

asyncio.run(run_migrations_online())
