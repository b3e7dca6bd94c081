"""
Database connection management with SQLAlchemy async engine.

The ``Database`` object owns the engine (and so the connection pool) and the
session factory. It is constructed explicitly at startup and handed to every
store; there is no module level engine. Each store operation checks out one
short-lived session and always closes it.
"""

import asyncio
from typing import Any, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ats.core.config import Settings
from ats.core.logging import get_logger

logger = get_logger(__name__)


def _convert_database_url_to_async(url: str) -> str:
    """
    Convert a PostgreSQL URL to the asyncpg driver.

    Args:
        url: Database connection URL

    Returns:
        Async-compatible database URL
    """
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores REFERENCES and ON DELETE CASCADE unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(settings: Settings) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    Args:
        settings: Application settings

    Returns:
        Configured async SQLAlchemy engine
    """
    database_url = _convert_database_url_to_async(settings.database_url)

    engine_options: dict[str, Any] = {"echo": settings.debug}
    if not settings.uses_sqlite:
        engine_options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
            pool_recycle=3600,
            connect_args={
                "server_settings": {"application_name": settings.app_name},
                "command_timeout": 60,
                "timeout": 10,
            },
        )
    elif ":memory:" in database_url:
        # an in-memory database lives and dies with its single connection
        engine_options.update(
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    engine = create_async_engine(database_url, **engine_options)
    if settings.uses_sqlite:
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    logger.info(
        "Database engine created",
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        environment=settings.environment,
    )

    return engine


class Database:
    """
    Connection pool and session factory handed to the stores.

    Example:
        database = Database.from_settings(get_settings())
        store = RecordStore(database, catalog[EntityType.JOBS], registry)
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(create_engine(settings))

    def session(self) -> AsyncSession:
        """
        Open a new session.

        Use as ``async with database.session() as session:`` so the
        connection returns to the pool on every exit path.
        """
        return self.session_factory()

    async def check_health(
        self, max_retries: int = 3, retry_delay: float = 1.0
    ) -> bool:
        """
        Check database connectivity with retry logic.

        Args:
            max_retries: Maximum number of connection attempts
            retry_delay: Base delay between retries in seconds

        Returns:
            True if database is healthy, False otherwise
        """
        for attempt in range(max_retries):
            try:
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.debug("Database health check passed", attempt=attempt + 1)
                return True
            except (OperationalError, DBAPIError) as e:
                logger.warning(
                    "Database health check failed",
                    attempt=attempt + 1,
                    max_retries=max_retries,
                    error=str(e),
                )
            except SQLAlchemyError as e:
                logger.error(
                    "Database health check failed - SQLAlchemy error",
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            if attempt < max_retries - 1:
                await asyncio.sleep(retry_delay * (2**attempt))

        logger.error("Database health check failed after all retries", max_retries=max_retries)
        return False

    def pool_stats(self) -> Optional[dict[str, int]]:
        """
        Connection pool statistics, or None for pools without counters.
        """
        pool = self.engine.pool
        if not all(hasattr(pool, name) for name in ("size", "checkedin", "checkedout", "overflow")):
            return None
        return {
            "pool_size": pool.size(),
            "checked_in": pool.checkedin(),
            "checked_out": pool.checkedout(),
            "overflow": pool.overflow(),
        }

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database connections closed and engine disposed")
