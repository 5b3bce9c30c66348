# passvault/app/db/session.py
"""
Async database session management for SQLAlchemy.

- Uses asyncpg for PostgreSQL (production)
- Uses aiosqlite for SQLite (local development and tests)
- Pool settings differ for SQLite (no pooling) vs PostgreSQL
"""
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, AsyncAdaptedQueuePool

from passvault.app.core.config import Settings


def create_engine_for(config: Settings) -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    SQLite:
    - NullPool, a new connection per session
    - check_same_thread=False for aiosqlite

    PostgreSQL:
    - AsyncAdaptedQueuePool (pool_size=5, max_overflow=10)
    - pool_pre_ping=True to detect stale connections
    - pool_recycle=300
    """
    if config.is_sqlite:
        return create_async_engine(
            config.DATABASE_URL,
            echo=config.DATABASE_ECHO,
            poolclass=NullPool,
            connect_args={"check_same_thread": False},
        )

    return create_async_engine(
        config.DATABASE_URL,
        echo=config.DATABASE_ECHO,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
    )


def create_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows stay readable after the batch commits
    # autoflush=False: writes are flushed explicitly inside the batch transaction
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency generator for database sessions.

    A new session per request from the factory stored on app.state by
    create_app(), closed after the response even when the endpoint raises.
    Services open their own transaction with `async with db.begin()`;
    nothing is committed implicitly.
    """
    async with request.app.state.session_factory() as session:
        yield session
