import logging
import sys
import time
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import Connection, create_engine, text

# Ensure parent directory (api/) is in Python path for module imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Import models so they register with Base.metadata
import models  # noqa: F401, E402
from alembic import context  # noqa: E402
from core.config import get_settings  # noqa: E402
from core.database import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Advisory lock key; any constant unique to this application works
_ADVISORY_LOCK_KEY = 581204733

_LOCK_TIMEOUT_SECONDS = 120


def _get_sync_database_url() -> str:
    """Synchronous URL for migrations (psycopg2 instead of asyncpg)."""
    url = get_settings().database_url
    if "+asyncpg" in url:
        url = url.replace("+asyncpg", "+psycopg2")
    if "+aiosqlite" in url:
        url = url.replace("+aiosqlite", "")
    return url


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=_get_sync_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def _acquire_lock(connection: Connection, logger: logging.Logger) -> None:
    """Serialize concurrent ``alembic upgrade`` runs on PostgreSQL."""
    start_time = time.time()
    while time.time() - start_time < _LOCK_TIMEOUT_SECONDS:
        acquired = connection.execute(
            text("SELECT pg_try_advisory_lock(:key)"), {"key": _ADVISORY_LOCK_KEY}
        ).scalar()
        if acquired:
            connection.commit()
            logger.info("Acquired migration advisory lock")
            return
        logger.debug("Waiting for migration lock...")
        time.sleep(2)
    raise RuntimeError(
        f"Failed to acquire migration lock within {_LOCK_TIMEOUT_SECONDS}s. "
        "Another process may be stuck holding the lock."
    )


def _run_migrations(connection: Connection) -> None:
    logger = logging.getLogger("alembic")
    is_postgres = connection.dialect.name == "postgresql"

    if is_postgres:
        _acquire_lock(connection, logger)

    try:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=not is_postgres,
        )
        with context.begin_transaction():
            context.run_migrations()
    finally:
        if is_postgres:
            try:
                connection.execute(
                    text("SELECT pg_advisory_unlock(:key)"),
                    {"key": _ADVISORY_LOCK_KEY},
                )
                logger.info("Released migration advisory lock")
            except Exception as unlock_error:
                # Released with the session anyway
                logger.warning("advisory.lock.release.failed: %s", unlock_error)


def run_migrations_online() -> None:
    engine = create_engine(_get_sync_database_url())
    with engine.connect() as connection:
        _run_migrations(connection)


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
