"""
Alembic Migration Environment
===============================

What:  Configures Alembic to migrate the DevCamper schema (bootcamps,
       courses) with our async SQLAlchemy setup.
Why:   Alembic needs the database URL and the model metadata to apply
       revisions and to autogenerate new ones.
How:   Takes the URL from app.config.settings, builds an async engine and
       runs the migration context inside connection.run_sync().
Who:   Called by `alembic` CLI commands (upgrade, downgrade, revision).
When:  During migration operations (development and deployment).

Dialects:
    PostgreSQL (asyncpg) in deployment, SQLite (aiosqlite) for local runs.
    SQLite cannot ALTER most column properties in place, so on SQLite the
    operations are rendered in batch mode (copy table, swap).
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from app.config import settings
from app.database import Base

# Import all models so Alembic can detect them for --autogenerate
# Why: Alembic only sees tables registered with Base.metadata
from app.models import Bootcamp, Course  # noqa: F401

# Alembic Config object: access to .ini file values
config = context.config

# Setup logging from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Autogenerate compares this metadata against the live schema
target_metadata = Base.metadata

# Override database URL from our settings (not from alembic.ini)
# Why: the app and its migrations must always target the same database
config.set_main_option("sqlalchemy.url", settings.database_url)


def _configure_options() -> dict:
    """
    Options shared by offline and online runs.

    compare_type:     autogenerate notices column type changes (e.g. a
                      widened VARCHAR for bootcamp names)
    render_as_batch:  SQLite only, see module docstring
    """
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": settings.is_sqlite,
    }


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    What:  Emits the migration SQL to stdout (`alembic upgrade head --sql`).
    When:  Reviewing DDL before a deployment, or when the DB is unreachable.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    """Run the pending revisions on a (sync-facing) connection in one transaction."""
    context.configure(connection=connection, **_configure_options())

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """
    Run migrations in 'online' mode with the async engine.

    How:   Creates a throwaway async engine, then hands its connection to
           the sync Alembic API via connection.run_sync().
    """
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,  # One-shot process, nothing to pool
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Entry point for online migrations: bridges the async engine with Alembic."""
    asyncio.run(run_async_migrations())


# Determine which mode to run in
if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
