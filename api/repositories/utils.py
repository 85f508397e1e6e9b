"""Repository utility functions for common database operations."""

import time
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ConflictError
from core.logger import get_logger
from core.wide_event import set_wide_event_fields

logger = get_logger(__name__)

# Threshold for logging slow queries (milliseconds)
SLOW_QUERY_THRESHOLD_MS = 500

P = ParamSpec("P")
R = TypeVar("R")
T = TypeVar("T")


def log_slow_query(
    operation_name: str,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator to record slow repository operations and errors.

    Usage:
        @log_slow_query("organizacion.find_by_id")
        async def find_by_id(self, id_organizacion) -> Organizacion | None:
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                set_wide_event_fields(
                    db_query_error=True,
                    db_operation=operation_name,
                    db_duration_ms=round(duration_ms, 2),
                    db_error_type=type(e).__name__,
                )
                raise
            duration_ms = (time.perf_counter() - start_time) * 1000
            if duration_ms > SLOW_QUERY_THRESHOLD_MS:
                logger.warning(
                    "db.query.slow",
                    operation=operation_name,
                    duration_ms=round(duration_ms, 2),
                )
                set_wide_event_fields(
                    db_slow_query=True,
                    db_operation=operation_name,
                    db_duration_ms=round(duration_ms, 2),
                )
            return result

        return wrapper

    return decorator


def dialect_name(db: AsyncSession) -> str:
    bind = db.get_bind()
    return bind.dialect.name if bind else ""


def dialect_insert(db: AsyncSession, model: Any):
    """INSERT construct with ON CONFLICT support for the session's dialect."""
    if dialect_name(db) == "sqlite":
        return sqlite_insert(model)
    return pg_insert(model)


async def upsert_on_conflict(
    db: AsyncSession,
    model: type[T],
    values: dict[str, Any],
    index_elements: list[str],
    update_fields: list[str],
) -> T:
    """INSERT ... ON CONFLICT DO UPDATE ... RETURNING the row.

    Note:
        Does NOT commit. Caller owns the transaction.

    Warning:
        Column.onupdate triggers are NOT applied during ON CONFLICT DO UPDATE.
        Include 'updated_at' in both `values` and `update_fields`.
    """
    update_set = {field: values[field] for field in update_fields if field in values}

    if not update_set:
        raise ValueError(
            f"No valid update fields: update_fields={update_fields} "
            f"but values only contains keys {list(values.keys())}"
        )

    stmt = (
        dialect_insert(db, model)
        .values(**values)
        .on_conflict_do_update(index_elements=index_elements, set_=update_set)
        .returning(model)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one()


async def execute_unique(
    db: AsyncSession, operation: Callable[[], Awaitable[T]], conflict_message: str
) -> T:
    """Run a write inside a savepoint and surface unique violations as conflicts.

    The database constraint is the final authority on uniqueness; the
    pre-checks services run only produce friendlier messages.
    """
    try:
        async with db.begin_nested():
            return await operation()
    except IntegrityError as e:
        logger.info("db.unique_violation", detail=str(e.orig)[:200])
        raise ConflictError(conflict_message) from e
