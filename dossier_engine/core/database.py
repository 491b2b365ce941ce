"""Relational store adapter.

Owns the async SQLAlchemy engine and session factory, the scoped
``transaction`` primitive every write path goes through, and the
translation of connection-level failures into ``StoreUnavailable``.
"""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy import event, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from dossier_engine.core.config import settings
from dossier_engine.core.exceptions import StoreUnavailable
from dossier_engine.utils.logging import get_logger

LOGGER = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> AsyncEngine:
    """Create an async engine for the configured (or given) database URL.

    PostgreSQL engines get a bounded pool and a per-statement timeout.
    SQLite engines (used for local runs and tests) share a single
    connection when in-memory so every session sees the same data.

    Args:
        url: Database URL, defaults to ``settings.database_url``
        echo: SQL query logging override

    Returns:
        AsyncEngine: Configured engine
    """
    url = url or settings.database_url
    echo = settings.database_echo if echo is None else echo

    if url.startswith("sqlite"):
        kwargs = {"echo": echo, "connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"):
            kwargs["poolclass"] = StaticPool
        engine = create_async_engine(url, **kwargs)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=echo,
        pool_pre_ping=True,
        connect_args={
            # Disable prepared statement cache for PgBouncer compatibility
            "statement_cache_size": 0,
            "command_timeout": settings.db.statement_timeout,
        },
    )


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to ``bind``."""
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine()
async_session_maker = build_session_maker(engine)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting async database session.

    Yields:
        AsyncSession: Database session
    """
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


def is_store_unavailable(error: BaseException) -> bool:
    """Return True when ``error`` means the store timed out or went away."""
    if isinstance(error, (sa_exc.OperationalError, sa_exc.InterfaceError, sa_exc.TimeoutError)):
        return True
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return True
    return isinstance(error, (asyncio.TimeoutError, TimeoutError, ConnectionError))


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Run a unit of work atomically on ``session``.

    Commits when the block exits cleanly. On any exception the session is
    rolled back and the error is re-raised: store outages as
    ``StoreUnavailable``, everything else unmodified.

    Usage:
        async with transaction(session):
            await repo.create(...)
            await other_repo.update(...)
    """
    try:
        yield session
        await session.commit()
    except BaseException as e:
        try:
            await session.rollback()
        except Exception as rollback_error:
            LOGGER.error(
                "Rollback failed",
                exc_info=True,
                extra={"error": str(rollback_error)},
            )
        if isinstance(e, Exception) and is_store_unavailable(e):
            LOGGER.error(
                "Relational store unavailable",
                extra={"error": str(e)},
            )
            raise StoreUnavailable(f"Relational store unavailable: {e}", original_error=e) from e
        raise


@asynccontextmanager
async def translate_store_errors() -> AsyncIterator[None]:
    """Map store outages raised by read paths to ``StoreUnavailable``."""
    try:
        yield
    except Exception as e:
        if is_store_unavailable(e):
            raise StoreUnavailable(f"Relational store unavailable: {e}", original_error=e) from e
        raise


class DatabaseClient:
    """Database client with connection and schema management."""

    def __init__(self, engine: AsyncEngine):
        """Initialize database client.

        Args:
            engine: SQLAlchemy async engine
        """
        self.engine = engine

    async def connect(self) -> bool:
        """Test database connection."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            LOGGER.info("Database connection successful")
            return True

        except Exception:
            LOGGER.error("Database connection failed", exc_info=True)
            raise

    async def disconnect(self) -> None:
        """Close database connection."""
        await self.engine.dispose()
        LOGGER.info("Database connection closed")

    async def create_tables(self) -> None:
        """Create all database tables from SQLAlchemy models.

        This will create tables that don't exist without dropping existing ones.
        """
        # Register models on Base.metadata
        from dossier_engine.database import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        LOGGER.info("Database tables created/verified successfully")

    async def health_check(self) -> dict:
        """Check database health."""
        try:
            async with self.engine.connect() as conn:
                val = await conn.scalar(text("SELECT 1"))

            return {
                "status": "healthy",
                "connected": True,
                "latency_test": "passed" if val == 1 else "failed",
            }

        except Exception as e:
            LOGGER.error("Database health check failed", extra={"error": str(e)})
            return {
                "status": "unhealthy",
                "connected": False,
                "error": str(e),
            }


# Global database client instance
db_client = DatabaseClient(engine)


async def init_database(auto_migrate: bool = True) -> None:
    """Initialize database connection and optionally create missing tables.

    Args:
        auto_migrate: Whether to create tables on startup
    """
    LOGGER.info("Initializing database connection...")
    await db_client.connect()

    if auto_migrate:
        await db_client.create_tables()

    LOGGER.info("Database initialization completed")


async def close_database() -> None:
    """Close database connection."""
    LOGGER.info("Closing database connection...")
    await db_client.disconnect()
