"""Database session configuration.

There is no module-level engine: a `Database` is constructed from settings, opened at process
start and disposed at shutdown, and handed to whatever needs a connection (cursor store, sinks,
lock gate). Tests construct their own instance or none at all.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ghsync.core.config import Settings


class Database:
    """Owns the async engine and session factory for one process."""

    def __init__(self, engine: AsyncEngine):
        """Wrap an already created engine.

        Args:
        ----
            engine (AsyncEngine): The engine whose pool backs every session and connection.

        """
        self.engine = engine
        self.session_factory = async_sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """Create the engine described by the settings.

        Connection Pool Timeout Behavior:
        - pool_timeout=30: wait up to 30 seconds for a connection to become available
        - advisory locks pin one pooled connection for the length of a sync run, so the pool
          must be larger than the number of entity types synced concurrently
        """
        engine = create_async_engine(
            str(settings.SQLALCHEMY_ASYNC_DATABASE_URI),
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_SIZE,
            pool_pre_ping=True,
            pool_recycle=300,
            pool_timeout=30,
            isolation_level="READ COMMITTED",
        )
        return cls(engine)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get an async database session that can be used as a context manager.

        Example:
        -------
            async with database.session() as db:
                await db.execute(...)

        """
        async with self.session_factory() as db:
            try:
                yield db
            finally:
                await db.close()

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """Check out one raw connection for the duration of the block."""
        async with self.engine.connect() as conn:
            yield conn

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
