from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings

# Use CLEAN URL to avoid asyncpg errors with sslmode/channel_binding query params.
DATABASE_URL_ASYNC = settings.DATABASE_URL_ASYNC_CLEAN


def engine_options(url: str) -> dict[str, Any]:
    """
    Pool settings for the commission store.
    SQLite (local runs, tests) keeps its default pool; server databases get
    liveness checks and periodic recycling.
    """
    options: dict[str, Any] = {"echo": settings.LOG_LEVEL == "DEBUG", "future": True}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_pre_ping=True,  # detects dead connections before using them
        pool_recycle=300,    # recycle connections periodically (seconds)
    )
    return options


engine: AsyncEngine = create_async_engine(DATABASE_URL_ASYNC, **engine_options(DATABASE_URL_ASYNC))

# autoflush off: repositories flush explicitly so write errors surface where they happen
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    One AsyncSession per request.

    Commission operations only flush; the route commits once, so a mutation
    and its audit entries land in the same transaction. Anything left
    uncommitted (an exception mid-operation) is rolled back on close.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
