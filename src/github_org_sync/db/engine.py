"""Async SQLAlchemy engine and session management.

Engines and session factories are built from explicit settings and passed
to their consumers; nothing here is held in module state.
"""

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from github_org_sync.config import Settings
from github_org_sync.db.models import Base


def create_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``database_url``.

    File databases use NullPool (one connection per session, so concurrent
    workers never share a connection). In-memory databases use StaticPool,
    since every new connection would otherwise see an empty database.
    """
    if ":memory:" in database_url:
        return create_async_engine(
            database_url,
            echo=echo,
            poolclass=pool.StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(
        database_url,
        echo=echo,
        poolclass=pool.NullPool,  # Required for SQLite to prevent "database is locked"
    )


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the engine described by ``settings.database_url``."""
    return create_engine(settings.database_url)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to ``engine``.

    Objects stay usable after commit; the gateway hands them back to callers
    once their session is closed.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all database tables.

    Use this for testing or initial setup. In production, use Alembic migrations.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(engine: AsyncEngine) -> None:
    """Drop all database tables.

    WARNING: This will delete all data. Use only for testing.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
