"""Async SQLAlchemy engine and session management.

The engine and session factory live on ``app.state`` so every application
instance (including the ones built by the test suite) owns its own
connection pool:

- ``create_engine()`` builds the engine from settings
- ``get_session()`` is the FastAPI dependency yielding one session per request
- ``init_db()`` / ``close_db()`` are wired into the application lifespan
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskboard.config import Settings
from taskboard.db_models import Base

# ---------------------------------------------------------------------------
# Engine & session factory
# ---------------------------------------------------------------------------


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for ``settings.database_url``."""
    options: dict = {"echo": settings.db_echo}
    if not settings.database_url.startswith("sqlite"):
        options["pool_pre_ping"] = True
    return create_async_engine(settings.database_url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ---------------------------------------------------------------------------
# FastAPI dependency
# ---------------------------------------------------------------------------


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a session bound to the application's engine.

    Store methods commit their own statement; anything left uncommitted when
    the request fails is rolled back here.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# ---------------------------------------------------------------------------
# Lifecycle hooks
# ---------------------------------------------------------------------------


async def init_db(engine: AsyncEngine) -> None:
    """Create missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(engine: AsyncEngine) -> None:
    """Dispose of the connection pool on shutdown."""
    await engine.dispose()
