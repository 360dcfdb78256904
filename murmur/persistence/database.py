"""Async engine and session factory for the comment store."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from murmur.config import Settings

# Recycle pooled connections before typical proxy idle timeouts
POOL_RECYCLE_SECONDS = 1800


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine.

    SQL echo is controlled through the ``sqlalchemy.engine`` logger rather
    than the engine flag, see ``murmur.util.logging``.
    """
    return create_async_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=settings.database.pool_size,
        max_overflow=settings.database.max_overflow,
        pool_recycle=POOL_RECYCLE_SECONDS,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Comments are read back after commit when building responses
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
