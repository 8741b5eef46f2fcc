"""
Database Infrastructure
=======================

Engine, session lifecycle and schema helpers.

MySQL through aiomysql is the primary target (``mysql+aiomysql://``).
``postgresql+asyncpg://`` URLs work with the ``postgres`` extra installed,
and the test suite runs on ``sqlite+aiosqlite://``.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from feedback_triage.config import settings


class Base(DeclarativeBase):
    """Declarative base for every table of the service."""
    pass


_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def normalize_database_url(url: str) -> str:
    """Adapt driver specific query parameters."""
    if url.startswith("postgresql+asyncpg"):
        # asyncpg takes ssl= rather than sslmode=
        return url.replace("sslmode=", "ssl=")
    return url


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # In-memory SQLite must share one connection across sessions
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": True,
        # MySQL drops idle connections after wait_timeout
        "pool_recycle": 3600,
    }


def get_engine() -> AsyncEngine:
    """
    Return the engine created by ``init_database``.

    Raises:
        RuntimeError: If the database has not been initialized
    """
    if _engine is None:
        raise RuntimeError("Database engine not initialized. Call init_database() first.")
    return _engine


def init_database(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Create the engine and session factory.

    Args:
        database_url: Overrides ``settings.database_url``
    """
    global _engine, _session_maker

    url = normalize_database_url(database_url or settings.database_url)
    _engine = create_async_engine(url, echo=settings.debug, **_engine_options(url))
    _session_maker = async_sessionmaker(
        bind=_engine,
        class_=AsyncSession,
        # Responses are serialized after the commit
        expire_on_commit=False,
        autoflush=False,
    )
    return _engine


async def close_database() -> None:
    """Dispose of the engine's connections."""
    global _engine, _session_maker

    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None


@asynccontextmanager
async def get_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Unit of work: commits when the block exits normally, rolls back when
    it raises.

    Usage:
        async with get_session_context() as session:
            await build_detection_service(session, app.state).sweep()
    """
    if _session_maker is None:
        raise RuntimeError("Database not initialized. Call init_database() first.")

    async with _session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one unit of work per request.

    Usage:
        @router.get("/feedback")
        async def list_feedback(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with get_session_context() as session:
        yield session


def _import_models() -> None:
    # Registers every table on Base.metadata
    import feedback_triage.feedback.infrastructure.models  # noqa: F401
    import feedback_triage.issues.infrastructure.models  # noqa: F401
    import feedback_triage.employees.infrastructure.models  # noqa: F401


async def create_tables() -> None:
    """Create missing tables; existing tables are left untouched."""
    _import_models()
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables() -> None:
    _import_models()
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def ping_database() -> bool:
    """Run ``SELECT 1``; raises when the database is unreachable."""
    async with get_engine().connect() as conn:
        await conn.execute(text("SELECT 1"))
    return True
