"""Unit tests for cursor stores."""

import itertools
from unittest.mock import AsyncMock, patch

import pytest

from ghsync import crud, schemas
from ghsync.core.ingestion_cursor_service import PostgresCursorStore
from ghsync.models.ingestion_cursor import IngestionCursor
from tests.helpers.database import fake_database
from tests.helpers.in_memory import InMemoryCursorStore, ts

WATERMARKS = [
    ts("2026-02-01T02:00:00Z"),
    None,
    ts("2026-02-01T05:00:00Z"),
    ts("2026-02-01T01:00:00Z"),
    None,
]


def update(watermark, cursor="c"):
    return schemas.CursorStateUpdate(
        repo_id="octo/hello", entity_type="ISSUE", cursor=cursor, last_synced_at=watermark
    )


class TestWatermarkMonotonicity:
    """The stored watermark is the max of all writes, whatever their order."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("order", list(itertools.permutations(range(len(WATERMARKS)), 3)))
    async def test_any_order_keeps_running_max(self, order):
        store = InMemoryCursorStore()
        applied = []

        for index in order:
            state = await store.save(update(WATERMARKS[index]))
            applied.append(WATERMARKS[index])
            expected = max((w for w in applied if w is not None), default=None)
            assert state.last_synced_at == expected

    @pytest.mark.asyncio
    async def test_cursor_follows_last_write(self):
        store = InMemoryCursorStore()

        await store.save(update(ts("2026-02-01T05:00:00Z"), cursor="c2"))
        state = await store.save(update(None, cursor="c3"))

        assert state.cursor == "c3"
        assert state.last_synced_at == ts("2026-02-01T05:00:00Z")


class TestPostgresCursorStore:
    """Tests for the ingestion_cursor backed store."""

    @pytest.mark.asyncio
    async def test_load_returns_none_without_row(self):
        store = PostgresCursorStore(fake_database())

        with patch.object(
            crud.ingestion_cursor, "get_by_repo_and_entity", AsyncMock(return_value=None)
        ) as mock_get:
            state = await store.load("octo/hello", "ISSUE")

        assert state is None
        mock_get.assert_awaited_once()
        assert mock_get.await_args.kwargs == {"repo_id": "octo/hello", "entity_type": "ISSUE"}

    @pytest.mark.asyncio
    async def test_load_maps_row_to_state(self):
        store = PostgresCursorStore(fake_database())
        row = IngestionCursor(
            repo_id="octo/hello",
            entity_type="PR",
            cursor="Y3Vyc29y",
            last_synced_at=ts("2026-02-01T03:00:00Z"),
        )

        with patch.object(
            crud.ingestion_cursor, "get_by_repo_and_entity", AsyncMock(return_value=row)
        ):
            state = await store.load("octo/hello", "PR")

        assert state == schemas.CursorState(
            repo_id="octo/hello",
            entity_type="PR",
            cursor="Y3Vyc29y",
            last_synced_at=ts("2026-02-01T03:00:00Z"),
        )

    @pytest.mark.asyncio
    async def test_save_delegates_to_upsert(self):
        database = fake_database()
        store = PostgresCursorStore(database)
        merged = schemas.CursorState(
            repo_id="octo/hello", entity_type="ISSUE", cursor="c", last_synced_at=None
        )

        with patch.object(
            crud.ingestion_cursor, "upsert_after_page", AsyncMock(return_value=merged)
        ) as mock_upsert:
            state = await store.save(update(None))

        assert state is merged
        assert mock_upsert.await_args.args == (database.mock_session,)
        assert mock_upsert.await_args.kwargs["obj_in"] == update(None)
