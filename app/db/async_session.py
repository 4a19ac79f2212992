"""Async engine and session lifecycle.

One ``AsyncDatabaseManager`` per process owns the engine. Requests borrow a
session through ``get_async_db``; scripts open one with ``create_session``.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

logger = logging.getLogger(__name__)


class AsyncDatabaseManager:
    """Holds the async engine and its session factory.

    An existing engine can be passed in; otherwise one is built from
    ``settings.async_database_url`` with the configured pool limits.
    """

    def __init__(self, database_url: Optional[str] = None, engine: Optional[AsyncEngine] = None):
        if engine is None:
            engine = self._create_engine(database_url or settings.async_database_url)

        self.async_engine: Optional[AsyncEngine] = engine
        self.async_session_factory: Optional[async_sessionmaker] = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def is_initialized(self) -> bool:
        return self.async_session_factory is not None

    @staticmethod
    def _create_engine(url: str) -> AsyncEngine:
        if not url:
            raise ValueError("Async database URL is not configured")

        logger.info(f"Creating async engine for {settings.ENVIRONMENT} database")
        options = {"echo": settings.ASYNC_DB_ECHO, "pool_pre_ping": settings.ASYNC_DB_POOL_PRE_PING}
        # SQLite drivers take no queue pool sizing
        if not url.startswith("sqlite"):
            options.update(
                pool_size=settings.ASYNC_DB_POOL_SIZE,
                max_overflow=settings.ASYNC_DB_MAX_OVERFLOW,
                pool_recycle=settings.ASYNC_DB_POOL_RECYCLE,
                pool_timeout=settings.ASYNC_DB_POOL_TIMEOUT,
            )
        return create_async_engine(url, **options)

    def create_session(self) -> AsyncSession:
        """Open a session owned by the caller: ``async with manager.create_session() as db``."""
        if not self.is_initialized:
            raise RuntimeError("AsyncDatabaseManager is closed")
        return self.async_session_factory()

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.create_session() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Database error in session: {e}")
                raise
            except Exception:
                await session.rollback()
                raise

    async def test_connection(self) -> bool:
        """Run ``SELECT 1``; False when the database cannot be reached."""
        if not self.is_initialized:
            return False
        try:
            async with self.create_session() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            return False

    async def close(self):
        """Dispose of the engine and all pooled connections."""
        if self.async_engine is not None:
            await self.async_engine.dispose()
            logger.info("Async database engine disposed")
        self.async_engine = None
        self.async_session_factory = None


_async_db_manager: Optional[AsyncDatabaseManager] = None
_manager_lock = asyncio.Lock()


async def get_async_db_manager() -> AsyncDatabaseManager:
    """Get or create the process-wide database manager."""
    global _async_db_manager

    if _async_db_manager is None:
        async with _manager_lock:
            if _async_db_manager is None:
                _async_db_manager = AsyncDatabaseManager()

    return _async_db_manager


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Example:
        @router.get("/users")
        async def list_users(db: AsyncSession = Depends(get_async_db)):
            ...
    """
    manager = await get_async_db_manager()
    async for session in manager.get_async_session():
        yield session


async def startup_async_database():
    manager = await get_async_db_manager()
    if not await manager.test_connection():
        raise RuntimeError("Failed to establish database connection during startup")
    logger.info("Async database connection verified")


async def shutdown_async_database():
    await close_async_db_manager()


async def check_async_database_health() -> dict:
    """
    Check database connectivity.

    Returns:
        dict: ``status`` ("healthy"/"unhealthy"), ``connection_test``,
        ``pool`` (pool status line), ``response_time_ms``, ``timestamp`` and
        ``error``
    """
    start_time = time.time()
    health_status = {
        "status": "unhealthy",
        "connection_test": False,
        "pool": None,
        "response_time_ms": 0,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "error": None,
    }

    manager = await get_async_db_manager()
    health_status["connection_test"] = await manager.test_connection()

    if health_status["connection_test"]:
        health_status["status"] = "healthy"
        health_status["pool"] = manager.async_engine.pool.status()
    else:
        health_status["error"] = "Database connection test failed"

    health_status["response_time_ms"] = round((time.time() - start_time) * 1000, 2)
    return health_status


async def close_async_db_manager():
    """Close and forget the process-wide database manager."""
    global _async_db_manager

    if _async_db_manager is not None:
        await _async_db_manager.close()
        _async_db_manager = None
