"""
Database configuration and session management.

Provides SQLAlchemy async engine setup, session factory, and dependency
injection for database sessions in FastAPI routes.
"""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

from budget_planning.core.config import settings
from budget_planning.models.base import Base


def get_async_engine() -> AsyncEngine:
    """
    Create and configure the async SQLAlchemy engine.

    For SQLite:
    - Uses StaticPool (single shared connection, required for :memory:)
    - Enables check_same_thread=False for async compatibility
    - Turns on foreign key enforcement for every connection

    Returns:
        Configured AsyncEngine instance
    """
    is_sqlite = "sqlite" in settings.database_url

    # SQLite-specific connection arguments (noop for other drivers)
    connect_args: dict = {"check_same_thread": False} if is_sqlite else {}

    engine_kwargs = {
        "echo": False,
        "future": True,
        "connect_args": connect_args,
    }

    if is_sqlite:
        engine_kwargs["poolclass"] = StaticPool

    engine = create_async_engine(
        settings.database_url,
        **engine_kwargs,
    )

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


# Global async engine instance
engine = get_async_engine()


# Async session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Keep loaded attributes usable after commit
    autocommit=False,
    autoflush=False,
)


async def init_db() -> None:
    """
    Initialize the database.

    Creates missing tables when ENABLE_DB_CREATE_ALL is set (the default).
    Deployments that manage the schema with migrations should turn it off.
    """
    # Import models so their tables are registered on Base.metadata
    from budget_planning import models  # noqa: F401

    if not settings.enable_db_create_all:
        return

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """
    Close the database connection.

    Should be called at application shutdown to cleanly close
    all database connections.
    """
    await engine.dispose()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.

    Provides a database session for FastAPI route handlers. The same session
    is shared by every dependency of one request, so the authenticated user
    and the route's writes live in one unit of work.

    Yields:
        AsyncSession instance for database operations

    Note:
        - Any exception rolls the transaction back
        - Services commit explicitly when an operation succeeds
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
