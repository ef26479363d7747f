"""Named mutual exclusion for ingestion runs.

Two runs of the same (repository, entity type) must never overlap: they would race on the
cursor. Runs of different keys proceed independently.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Awaitable, Callable, Protocol, TypeVar

from sqlalchemy import text

from ghsync.core.logging import logger
from ghsync.db.session import Database

T = TypeVar("T")

_HASH_MASK = 0x7FFFFFFFFFFFFFFF


def ingestion_lock_key(repo_id: str, entity_type: str) -> str:
    """Lock key of one (repository, entity type) sync, e.g. 'ingest:octo/hello:ISSUE'."""
    return f"ingest:{repo_id}:{entity_type}"


def hash_lock_key(key: str) -> int:
    """Map a string key to a stable non-negative 63-bit integer.

    Polynomial hash over the code points with base 31, reduced to 63 bits at every step so the
    value fits a PostgreSQL bigint. Stable across processes and interpreter runs, unlike hash().
    """
    value = 0
    for char in key:
        value = (value * 31 + ord(char)) & _HASH_MASK
    return value


class LockGate(Protocol):
    """Named lock held for the length of a sync run."""

    def hold(self, key: str) -> AsyncContextManager[None]:
        """Hold `key` for the duration of the block."""
        ...

    async def with_lock(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run `fn` while holding `key` and return its result."""
        ...


class _WithLockMixin:
    async def with_lock(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        async with self.hold(key):
            return await fn()


class AdvisoryLockGate(_WithLockMixin):
    """Cross-process lock using PostgreSQL session-level advisory locks.

    Session-level advisory locks belong to the connection that took them, so lock and unlock
    run on one dedicated connection that stays checked out for the whole block.
    """

    def __init__(self, database: Database):
        """Bind the gate to a database."""
        self.database = database

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Block until the advisory lock for `key` is granted, release it on exit."""
        lock_id = hash_lock_key(key)
        async with self.database.connection() as conn:
            # autocommit, so the lock does not keep a transaction open for the whole run
            conn = await conn.execution_options(isolation_level="AUTOCOMMIT")
            await conn.execute(text("SELECT pg_advisory_lock(:lock_id)"), {"lock_id": lock_id})
            logger.debug(f"Acquired advisory lock {lock_id} for {key}")
            try:
                yield
            finally:
                # runs on cancellation too; the lock outlives a pooled connection otherwise
                await conn.execute(
                    text("SELECT pg_advisory_unlock(:lock_id)"), {"lock_id": lock_id}
                )
                logger.debug(f"Released advisory lock {lock_id} for {key}")


class LocalLockGate(_WithLockMixin):
    """In-process named lock: one asyncio.Lock per key.

    Suitable for a single worker process and for tests.
    """

    def __init__(self):
        """Create an empty lock table."""
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the named lock for the duration of the block."""
        async with self._lock_for(key):
            yield
