"""
Database engine and session management.

Provides the async SQLAlchemy engine and session factory backing the
persistent cache.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from deckxport.config import settings
from deckxport.models.db import Base


def create_cache_engine(url: str | None = None) -> AsyncEngine:
    """Create an async engine for the cache store (defaults to settings)."""
    return create_async_engine(
        url or settings.cache_database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = create_cache_engine()

# Session factory
async_session_factory = create_session_factory(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a cache database session.

    Usage in FastAPI:
        @router.get("/ready")
        async def ready(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


async def init_db(target: AsyncEngine | None = None) -> None:
    """
    Initialize cache tables.

    Creates all tables defined in the ORM models. Safe to call repeatedly.
    """
    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

