"""Database connection and session management."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy import event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..orm.base import Base
from ..retry import with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _prepare_url(database_url: str) -> URL:
    """Expand ``~`` in SQLite paths and make sure the parent directory exists."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        path = Path(url.database).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        url = url.set(database=str(path))
    return url


class DatabaseService:
    """Manages database connection and session lifecycle.

    Every public query goes through :meth:`run`, which retries the whole
    session scope with linear backoff.
    """

    def __init__(
        self,
        database_url: str,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        self.url = _prepare_url(database_url)
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        # aiosqlite and asyncpg both accept a ``timeout`` connect argument
        self.engine: AsyncEngine = create_async_engine(
            self.url,
            echo=False,
            pool_pre_ping=True,
            connect_args={"timeout": timeout},
        )

        if self.url.get_backend_name() == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.async_session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    async def initialize(self):
        """Create all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables and indexes created/verified")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope for database operations."""
        async with self.async_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def run(self, operation: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Execute ``operation`` in its own session, retrying on failure."""

        async def attempt() -> T:
            async with self.session() as session:
                return await operation(session)

        return await with_retry(attempt, self.max_retries, self.retry_delay)

    async def close(self):
        """Close database engine."""
        await self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite ignores ON DELETE CASCADE unless this pragma is on
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
