"""Database engine and session configuration module.

Sets up the async SQLAlchemy engine, session factory, and ORM base class.
PostgreSQL (asyncpg) is the production target; any async SQLAlchemy URL works.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from civic_reporter.config import settings

_engine_options: dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
if settings.DATABASE_URL.startswith("postgresql+asyncpg"):
    # Disable prepared statement caches for transaction-mode poolers
    _engine_options.update(
        pool_size=5,
        max_overflow=10,
        connect_args={"statement_cache_size": 0},
    )

# Async database engine
engine: AsyncEngine = create_async_engine(settings.DATABASE_URL, **_engine_options)

# Async session factory
# expire_on_commit=False: allows attribute access after commit without refresh
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base class for all ORM models."""

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async database session.

    The session is closed after the request completes, so every request
    is one unit of work against the repository.

    Yields:
        AsyncSession: SQLAlchemy async session instance
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
