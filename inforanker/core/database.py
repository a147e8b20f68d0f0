"""Database configuration and session management.

This module provides SQLAlchemy 2.0 async engine and session management.
It includes the Base class for all ORM models and utility functions.
"""

import re
from collections.abc import AsyncGenerator
from typing import Any, ClassVar

from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, declared_attr

from inforanker.core.config import get_config
from inforanker.core.logging import get_logger

logger = get_logger(__name__)

# ============================================
# Naming Convention
# ============================================
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",  # Index
    "uq": "uq_%(table_name)s_%(column_0_name)s",  # Unique constraint
    "ck": "ck_%(table_name)s_%(constraint_name)s",  # Check constraint
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",  # Foreign key
    "pk": "pk_%(table_name)s",  # Primary key
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ============================================
# Base Model
# ============================================


class Base(DeclarativeBase):
    """Base class for all ORM models.

    Provides consistent snake_case table naming, metadata with naming
    conventions and a __repr__ implementation.
    """

    metadata: ClassVar[MetaData] = metadata

    @declared_attr.directive
    @classmethod
    def __tablename__(cls) -> str:
        """Generate table name from class name (CamelCase to snake_case).

        Returns:
            Snake case table name
        """
        return re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()

    def __repr__(self) -> str:
        columns = ", ".join(
            f"{k}={v!r}"
            for k, v in self.__dict__.items()
            if not k.startswith("_") and k != "metadata"
        )
        return f"{self.__class__.__name__}({columns})"


# ============================================
# Engine and Session
# ============================================

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def create_engine_from_url(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine, applying pool settings for server databases.

    Args:
        url: SQLAlchemy async URL
        echo: Echo SQL queries

    Returns:
        Configured AsyncEngine
    """
    kwargs: dict[str, Any] = {"echo": echo}
    if url.startswith("postgresql"):
        config = get_config()
        kwargs.update(
            pool_size=config.database_pool_size,
            max_overflow=config.database_max_overflow,
            pool_pre_ping=True,  # Verify connections before using
            pool_recycle=3600,  # Recycle connections after 1 hour
        )
    return create_async_engine(url, **kwargs)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory bound to an engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    """Get the process-wide engine, creating it on first use."""
    global _engine
    if _engine is None:
        config = get_config()
        _engine = create_engine_from_url(config.database_url, echo=config.database_echo)
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get the process-wide session factory."""
    global _session_maker
    if _session_maker is None:
        _session_maker = create_session_maker(get_engine())
    return _session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency.

    Yields async database session and ensures proper cleanup.
    Use this as a FastAPI dependency.

    Yields:
        AsyncSession: Database session
    """
    async with get_session_maker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Initialize database (create all tables).

    This is mainly for development/testing. In production, use Alembic migrations.
    """
    import inforanker.models  # noqa: F401  (register mappers)

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")


async def close_db() -> None:
    """Close database connections.

    Call this when shutting down the application.
    """
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None
    logger.info("Database connections closed")


# ============================================
# Health Check
# ============================================


async def check_db_connection() -> bool:
    """Check if database connection is healthy.

    Returns:
        True if connection is successful, False otherwise
    """
    try:
        async with get_engine().begin() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database health check failed", error=str(e), exc_info=True)
        return False
