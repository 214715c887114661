"""Async engines and per-request sessions.

Writes (bulk load, query history) go through ``engine``. Aggregation reads use
``read_engine``, which points at a read replica when
``DATABASE_READ_ONLY_URL`` is configured and is the primary engine otherwise.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings


def _create_engine(url: str) -> AsyncEngine:
    return create_async_engine(
        url,
        pool_pre_ping=True,   # Reconnects dropped connections automatically
        pool_size=10,
        max_overflow=20,
        echo=settings.debug,  # Log SQL in debug mode
    )


engine = _create_engine(settings.database_url)

read_engine = (
    _create_engine(settings.database_read_only_url)
    if settings.database_read_only_url
    else engine
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

ReadOnlySessionLocal = async_sessionmaker(
    read_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields a read-write session per request."""
    async with AsyncSessionLocal() as session:
        yield session


async def get_read_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields a session bound to the read engine."""
    async with ReadOnlySessionLocal() as session:
        yield session


async def dispose_engines() -> None:
    await engine.dispose()
    if read_engine is not engine:
        await read_engine.dispose()
