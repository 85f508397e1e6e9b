"""Database engine, session, and pool management."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, NamedTuple

from fastapi import Depends, Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import QueuePool

from core.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class PoolStatus(NamedTuple):
    """Connection pool status for health checks."""

    pool_size: int
    checked_out: int
    overflow: int
    checked_in: int


def _setup_pool_event_listeners(engine: AsyncEngine) -> None:
    pool = engine.sync_engine.pool
    if not isinstance(pool, QueuePool):
        return

    @event.listens_for(pool, "checkout")
    def _on_checkout(dbapi_conn, connection_record, connection_proxy):
        overflow = pool.overflow()
        if overflow > 0:
            logger.warning(
                "db.pool.overflow",
                extra={
                    "db_pool_checked_out": pool.checkedout(),
                    "db_pool_size": pool.size(),
                    "db_pool_overflow_count": overflow,
                },
            )


def create_engine() -> AsyncEngine:
    settings = get_settings()

    engine_kwargs: dict = {"echo": settings.db_echo}

    if not settings.is_sqlite:
        engine_kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
            connect_args={
                "server_settings": {
                    "statement_timeout": str(settings.db_statement_timeout_ms)
                }
            },
        )

    engine = create_async_engine(settings.database_url, **engine_kwargs)
    _setup_pool_event_listeners(engine)
    return engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@asynccontextmanager
async def session_scope(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Unit of work: commit on clean exit, roll back on any exception."""
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            try:
                await session.rollback()
            except Exception as rollback_err:
                logger.warning("db.rollback.failed", extra={"error": str(rollback_err)})
            raise


async def get_db(request: Request) -> AsyncGenerator[AsyncSession]:
    """One unit of work per request. Services flush, never commit."""
    async with session_scope(request.app.state.session_maker) as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def _ping(engine: AsyncEngine, timeout: float = 30) -> None:
    async with asyncio.timeout(timeout):
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.rollback()


async def init_db(engine: AsyncEngine) -> None:
    """Startup connectivity check. The schema itself is owned by Alembic."""
    logger.info("db.connectivity.verifying")
    await _ping(engine)
    logger.info("db.connectivity.verified")


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("db.engine.disposed")


async def check_db_connection(engine: AsyncEngine) -> None:
    """Readiness check; raises when the database does not answer in 5s."""
    await _ping(engine, timeout=5)


def get_pool_status(engine: AsyncEngine) -> PoolStatus | None:
    """Returns pool status, or None if pool is not a QueuePool."""
    pool = engine.sync_engine.pool

    if isinstance(pool, QueuePool):
        return PoolStatus(
            pool_size=pool.size(),
            checked_out=pool.checkedout(),
            overflow=pool.overflow(),
            checked_in=pool.checkedin(),
        )
    return None
