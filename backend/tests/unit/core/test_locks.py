"""Unit tests for the ingestion lock gates."""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from ghsync.core.locks import (
    AdvisoryLockGate,
    LocalLockGate,
    hash_lock_key,
    ingestion_lock_key,
)


class TestHashLockKey:
    """Tests for hash_lock_key."""

    def test_is_stable(self):
        """The same key always maps to the same lock id."""
        assert hash_lock_key("ingest:octo/hello:ISSUE") == hash_lock_key("ingest:octo/hello:ISSUE")

    def test_known_values(self):
        """Polynomial base-31 hash over code points."""
        assert hash_lock_key("") == 0
        assert hash_lock_key("a") == 97
        assert hash_lock_key("ab") == 97 * 31 + 98

    def test_fits_signed_bigint(self):
        """Long keys wrap into the non-negative 63-bit range."""
        value = hash_lock_key("ingest:" + "x" * 500 + ":DISCUSSION")

        assert 0 <= value < 2**63

    def test_entity_types_have_distinct_ids(self):
        """Each entity type of a repository has its own lock."""
        keys = [ingestion_lock_key("octo/hello", e) for e in ("ISSUE", "PR", "DISCUSSION")]
        ids = {hash_lock_key(key) for key in keys}

        assert len(ids) == 3


class TestLocalLockGate:
    """Tests for the in-process lock gate."""

    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self):
        """A second holder of the same key waits for the first to release."""
        gate = LocalLockGate()
        events = []

        async def work(tag: str):
            async with gate.hold("ingest:octo/hello:ISSUE"):
                events.append(f"{tag}:start")
                await asyncio.sleep(0.01)
                events.append(f"{tag}:end")

        await asyncio.gather(work("a"), work("b"))

        assert events == ["a:start", "a:end", "b:start", "b:end"]

    @pytest.mark.asyncio
    async def test_different_keys_run_concurrently(self):
        """Holders of different keys do not wait for each other."""
        gate = LocalLockGate()
        events = []

        async def work(key: str):
            async with gate.hold(key):
                events.append(f"{key}:start")
                await asyncio.sleep(0.01)
                events.append(f"{key}:end")

        await asyncio.gather(work("issues"), work("prs"))

        assert events[:2] == ["issues:start", "prs:start"]

    @pytest.mark.asyncio
    async def test_with_lock_returns_result_and_releases_on_error(self):
        """with_lock returns the callable's result and releases when it raises."""
        gate = LocalLockGate()

        async def boom():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            await gate.with_lock("k", boom)

        async def answer():
            return 42

        assert await asyncio.wait_for(gate.with_lock("k", answer), timeout=1) == 42


class TestAdvisoryLockGate:
    """Tests for the PostgreSQL advisory lock gate."""

    def _database(self, conn):
        database = MagicMock()

        @asynccontextmanager
        async def connection():
            yield conn

        database.connection = connection
        return database

    def _connection(self):
        conn = MagicMock()
        conn.execution_options = AsyncMock(return_value=conn)
        conn.execute = AsyncMock()
        return conn

    @pytest.mark.asyncio
    async def test_locks_and_unlocks_on_same_connection(self):
        """pg_advisory_lock and pg_advisory_unlock use one connection and one id."""
        # Arrange
        conn = self._connection()
        gate = AdvisoryLockGate(self._database(conn))
        key = ingestion_lock_key("octo/hello", "ISSUE")

        # Act
        async with gate.hold(key):
            pass

        # Assert
        statements = [str(call.args[0]) for call in conn.execute.await_args_list]
        params = [call.args[1] for call in conn.execute.await_args_list]
        assert statements == [
            "SELECT pg_advisory_lock(:lock_id)",
            "SELECT pg_advisory_unlock(:lock_id)",
        ]
        assert params == [{"lock_id": hash_lock_key(key)}] * 2

    @pytest.mark.asyncio
    async def test_unlocks_when_body_raises(self):
        """The lock is released on the error path too."""
        conn = self._connection()
        gate = AdvisoryLockGate(self._database(conn))

        with pytest.raises(RuntimeError):
            async with gate.hold("ingest:octo/hello:PR"):
                raise RuntimeError("run failed")

        last_statement = str(conn.execute.await_args_list[-1].args[0])
        assert last_statement == "SELECT pg_advisory_unlock(:lock_id)"
