import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings
from src.pm_common.errors import TransientStorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected, lock_not_available,
# admin_shutdown, connection_exception family
_TRANSIENT_SQLSTATES = frozenset(
    {"40001", "40P01", "55P03", "57P01", "08000", "08003", "08006"}
)


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


def is_transient_error(exc: BaseException) -> bool:
    """True for lock contention, serialization failures and lost connections."""
    if not isinstance(exc, DBAPIError):
        return False
    if exc.connection_invalidated:
        return True
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in _TRANSIENT_SQLSTATES


async def run_in_transaction(
    db: AsyncSession,
    work: Callable[[], Awaitable[T]],
    attempts: int | None = None,
) -> T:
    """Run `work` as one transaction on `db`: commit on success, roll back on any error.

    Every mutation re-evaluates its own preconditions inside `work`, so a
    transient failure re-runs the whole unit from scratch. After the last
    attempt the failure surfaces as TransientStorageError. Business errors
    (AppError) and unexpected faults are never retried.
    """
    max_attempts = max(1, attempts or settings.TX_RETRY_ATTEMPTS)
    attempt = 0
    while True:
        attempt += 1
        try:
            result = await work()
            await db.commit()
            return result
        except DBAPIError as exc:
            await db.rollback()
            if not is_transient_error(exc):
                raise
            if attempt >= max_attempts:
                logger.warning(
                    "Transient storage error, giving up after %d attempts: %s",
                    attempt, exc,
                )
                raise TransientStorageError() from exc
            logger.info("Transient storage error (attempt %d/%d), retrying", attempt, max_attempts)
        except Exception:
            await db.rollback()
            raise
