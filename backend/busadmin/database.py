"""
Bus Admin Backend — Database Engine & Session Management
==========================================================

What:  Async SQLAlchemy engine/session factory builders and the per-request
       session dependency.
How:   `build_engine()` turns Settings into an AsyncEngine; the AppContext owns
       the engine and its session factory. `get_db_session()` pulls the
       factory off `request.app.state.context`, yields a session, commits on
       success and rolls back on error.
Who:   Engine built by AppContext; sessions injected into routes via Depends().

Connection Pooling:
    PostgreSQL (asyncpg) uses a queue pool sized by db_pool_size and
    db_max_overflow with pre-ping. SQLite (aiosqlite, used in tests and local
    development) is created without pool sizing arguments, which its pool
    classes do not accept.
"""

from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from busadmin.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers its table on `Base.metadata`, which is used by
    Alembic autogenerate and by `AppContext.create_schema()`.
    """
    pass


def _engine_kwargs(settings: Settings) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return kwargs


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    return create_async_engine(settings.database_url, **_engine_kwargs(settings))


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps ORM attributes readable after commit, so
    services can serialize a record straight after persisting it.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the AppContext's factory
        2. Yields it to the route handler
        3. On success: commits anything the handler left pending
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)

    Services that must react to a failed write (upload cleanup) commit
    explicitly inside their own try block; the trailing commit here is then
    a no-op.
    """
    session_factory = request.app.state.context.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
