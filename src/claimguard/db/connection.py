"""
Database Connection Management
Async SQLAlchemy with connection pooling
Source: https://docs.sqlalchemy.org/en/20/orm/extensions/asyncio.html
Verified: 2026-10-19
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from claimguard.core.config import get_engine_settings
from claimguard.models.base import Base
from claimguard.utils.logging import get_logger

logger = get_logger(__name__)


# Global engine instance
_engine: AsyncEngine | None = None
_async_session_maker: async_sessionmaker[AsyncSession] | None = None


def create_engine_from_url(url: str, echo: bool = False, pool_size: int = 10) -> AsyncEngine:
    """
    Create an async engine for a database URL.

    SQLite URLs get no pool sizing, as their pools do not accept it.
    """
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        echo=echo,
        pool_size=pool_size,
        pool_pre_ping=True,  # Verify connections before using
    )


def get_engine() -> AsyncEngine:
    """
    Get or create the global async engine.

    Returns:
        AsyncEngine instance
    """
    global _engine

    if _engine is None:
        settings = get_engine_settings()
        logger.info(f"Creating database engine: {settings.DATABASE_URL.split('@')[-1]}")

        if settings.is_testing:
            # NullPool for testing: one connection per session, nothing leaks
            _engine = create_async_engine(
                settings.DATABASE_URL,
                echo=settings.DB_ECHO,
                poolclass=NullPool,
            )
        else:
            _engine = create_engine_from_url(
                settings.DATABASE_URL,
                echo=settings.DB_ECHO,
                pool_size=settings.DB_POOL_SIZE,
            )

        logger.info("Database engine created successfully")

    return _engine


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session maker with the settings repositories rely on."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Don't expire objects after commit
        autoflush=False,  # Manual flush control
    )


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """
    Get or create the global session maker.

    Returns:
        Async session maker
    """
    global _async_session_maker

    if _async_session_maker is None:
        _async_session_maker = create_session_maker(get_engine())
        logger.info("Session maker created successfully")

    return _async_session_maker


async def create_tables(engine: AsyncEngine | None = None) -> None:
    """Create all tables for the models. For development and tests."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db_connection() -> None:
    """Close database connection pool."""
    global _engine, _async_session_maker

    if _engine is not None:
        logger.info("Closing database connection pool...")
        await _engine.dispose()
        _engine = None
        _async_session_maker = None
        logger.info("Database connection pool closed")


async def check_db_connection(engine: AsyncEngine | None = None) -> bool:
    """
    Check if database connection is healthy.

    Args:
        engine: Engine to check (the global engine by default)

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        engine = engine or get_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
