"""Async engine and sessions for the fixture cache (SQLite via aiosqlite, PostgreSQL via asyncpg)."""

import logging
from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from matchday import models  # noqa: F401  (registers tables on SQLModel.metadata)
from matchday.config import get_settings

logger = logging.getLogger(__name__)


def get_database_url(url: str | None = None) -> str:
    """Rewrite a plain sqlite/postgres URL to its async driver form."""
    url = url or get_settings().DATABASE_URL

    # SQLite
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)

    # PostgreSQL
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return url


def is_sqlite_memory(url: str) -> bool:
    """True for in-memory SQLite URLs (`sqlite://`, `sqlite:///:memory:`)."""
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def create_engine(url: str | None = None) -> AsyncEngine:
    """Build an async engine with dialect-specific pool settings."""
    database_url = get_database_url(url)
    engine_kwargs = {"echo": False}

    if is_sqlite_memory(database_url):
        # In-memory data lives on a single connection
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        engine_kwargs["poolclass"] = StaticPool
    elif database_url.startswith("sqlite"):
        # Connection per session: transactions must not be shared
        engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
    else:
        engine_kwargs["pool_pre_ping"] = True
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10
        engine_kwargs["pool_recycle"] = 300
        engine_kwargs["pool_reset_on_return"] = "rollback"

    return create_async_engine(database_url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = create_engine()
AsyncSessionLocal = create_session_factory(async_engine)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session; the handler commits, closing discards anything uncommitted."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(engine: AsyncEngine | None = None) -> None:
    """Create any missing cache tables (no migrations)."""
    engine = engine or async_engine
    logger.info(f"Creating tables on {engine.url.render_as_string(hide_password=True)}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db(engine: AsyncEngine | None = None) -> None:
    """Dispose the engine pool at shutdown."""
    engine = engine or async_engine
    await engine.dispose()
    logger.info("Database engine disposed")
