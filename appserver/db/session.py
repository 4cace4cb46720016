"""
Database connection management with async SQLAlchemy.

One ``Database`` is opened per application and shared by every request.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from appserver.db.base import Base

logger = logging.getLogger(__name__)


def _engine_options(url: str, echo: bool) -> dict:
    options: dict = {"echo": echo, "pool_pre_ping": True}
    # SQLite drivers pick their own pool class
    if not url.startswith("sqlite"):
        options.update(
            pool_size=10,
            max_overflow=20,
            pool_timeout=30,
            pool_recycle=1800,  # Recycle connections after 30 minutes
        )
    return options


class Database:
    """Async engine plus session factory for one database URL."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **_engine_options(url, echo))
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self.connected = False

    async def connect(self) -> bool:
        """
        Open the connection and create missing tables.

        Connection errors are logged and swallowed so the HTTP listener still
        starts with a disconnected database.

        Returns:
            True if the database is reachable
        """
        from appserver.models import user  # noqa: F401 - register models

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Database connection error: %s", exc)
            self.connected = False
        else:
            logger.debug("Connected to database")
            self.connected = True
        return self.connected

    async def ping(self) -> bool:
        """Check the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Database ping failed: %s", exc)
            return False
        return True

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Unit of work: commit on success, roll back on error.

        Usage:
            async with database.session() as db:
                ...
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def dispose(self) -> None:
        """Close database connections."""
        await self.engine.dispose()
        self.connected = False
