"""Unit tests for the upsert statements of replicated tables and cursors."""

import re
from unittest.mock import MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from ghsync import crud, schemas
from ghsync.core.exceptions import PersistenceError
from tests.helpers.in_memory import ts


def compile_sql(stmt) -> str:
    """Render a statement for PostgreSQL on a single line."""
    return " ".join(str(stmt.compile(dialect=postgresql.dialect())).split())


def issue_row(external_id: str = "I_1", updated_at: str = "2026-02-01T03:00:00Z"):
    return schemas.GitHubItemUpsert(
        repo_id="octo/hello",
        external_id=external_id,
        number=1,
        title="Crash on start",
        state="OPEN",
        url="https://github.com/octo/hello/issues/1",
        author_login="octocat",
        body="It crashes.",
        labels=["bug"],
        comment_count=2,
        created_at_upstream=ts("2026-02-01T00:00:00Z"),
        updated_at=ts(updated_at),
        raw_payload={"id": external_id},
    )


class TestItemUpsertStatement:
    """Tests for CRUDBaseUpsert.build_upsert_statement."""

    def test_conflict_target_is_repo_and_external_id(self):
        """Rows are identified by (repo_id, external_id)."""
        sql = compile_sql(crud.issue.build_upsert_statement([issue_row()]))

        assert "INSERT INTO github_issue" in sql
        assert "ON CONFLICT (repo_id, external_id) DO UPDATE SET" in sql

    def test_updated_at_never_moves_backwards(self):
        """updated_at is merged with GREATEST, other columns are overwritten."""
        sql = compile_sql(crud.issue.build_upsert_statement([issue_row()]))

        assert "updated_at = greatest(github_issue.updated_at, excluded.updated_at)" in sql
        assert "title = excluded.title" in sql
        assert "state = excluded.state" in sql
        assert "labels = excluded.labels" in sql
        assert "ingested_at = now()" in sql

    def test_identity_columns_are_not_rewritten(self):
        """The primary key and first insertion time survive conflicts."""
        sql = compile_sql(crud.issue.build_upsert_statement([issue_row()]))
        set_clause = sql.split("DO UPDATE SET", 1)[1]

        assert not re.search(r"\bid = excluded\.id\b", set_clause)
        assert not re.search(r"\bcreated_at = excluded\.created_at\b", set_clause)
        assert "repo_id = excluded" not in set_clause

    def test_batch_is_one_statement(self):
        """Every row of a batch goes into a single multi-row INSERT."""
        stmt = crud.issue.build_upsert_statement([issue_row("I_1"), issue_row("I_2")])
        compiled = stmt.compile(dialect=postgresql.dialect())

        external_ids = [v for k, v in compiled.params.items() if k.startswith("external_id")]
        assert sorted(external_ids) == ["I_1", "I_2"]

    def test_comment_table_uses_same_contract(self):
        """Comment tables are keyed and merged like items."""
        comment = schemas.GitHubCommentUpsert(
            repo_id="octo/hello",
            external_id="IC_1",
            parent_external_id="I_1",
            created_at_upstream=ts("2026-02-01T00:00:00Z"),
            updated_at=ts("2026-02-01T00:00:00Z"),
        )

        sql = compile_sql(crud.issue_comment.build_upsert_statement([comment]))

        assert "INSERT INTO github_issue_comment" in sql
        assert "ON CONFLICT (repo_id, external_id)" in sql
        assert "parent_external_id = excluded.parent_external_id" in sql


class TestUpsertMany:
    """Tests for CRUDBaseUpsert.upsert_many."""

    @pytest.mark.asyncio
    async def test_empty_batch_is_noop(self, mock_db_session):
        """Nothing is executed for an empty batch."""
        written = await crud.issue.upsert_many(mock_db_session, [])

        assert written == 0
        mock_db_session.execute.assert_not_called()
        mock_db_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_executes_and_commits(self, mock_db_session):
        """A batch is executed and committed."""
        written = await crud.pull_request.upsert_many(mock_db_session, [issue_row()])

        assert written == 1
        mock_db_session.execute.assert_awaited_once()
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_caller_can_own_the_transaction(self, mock_db_session):
        """auto_commit=False leaves the commit to the caller."""
        await crud.discussion.upsert_many(mock_db_session, [issue_row()], auto_commit=False)

        mock_db_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_rolls_back_and_raises(self, mock_db_session):
        """A database error rolls the batch back and raises PersistenceError."""
        mock_db_session.execute.side_effect = OperationalError("INSERT", {}, Exception("down"))

        with pytest.raises(PersistenceError) as exc_info:
            await crud.issue.upsert_many(mock_db_session, [issue_row(), issue_row("I_2")])

        mock_db_session.rollback.assert_awaited_once()
        mock_db_session.commit.assert_not_called()
        assert exc_info.value.table == "github_issue"
        assert exc_info.value.batch_size == 2


class TestGetAllForRepo:
    """Tests for CRUDBaseUpsert.get_all_for_repo."""

    async def _query(self, mock_db_session, table_crud, **kwargs) -> str:
        result = MagicMock()
        result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = result

        await table_crud.get_all_for_repo(mock_db_session, repo_id="octo/hello", **kwargs)

        return compile_sql(mock_db_session.execute.await_args.args[0])

    @pytest.mark.asyncio
    async def test_most_recent_first_with_limit(self, mock_db_session):
        sql = await self._query(mock_db_session, crud.issue)

        assert "ORDER BY github_issue.updated_at DESC" in sql
        assert "LIMIT" in sql

    @pytest.mark.asyncio
    async def test_oldest_first_without_limit(self, mock_db_session):
        sql = await self._query(mock_db_session, crud.issue_comment, limit=None, ascending=True)

        assert re.search(r"ORDER BY github_issue_comment\.updated_at( ASC)?( OFFSET|$)", sql)
        assert "LIMIT" not in sql


class TestCursorUpsertStatement:
    """Tests for CRUDIngestionCursor.build_upsert_statement."""

    def _sql(self, last_synced_at=None) -> str:
        update = schemas.CursorStateUpdate(
            repo_id="octo/hello", entity_type="ISSUE", cursor="c1", last_synced_at=last_synced_at
        )
        return compile_sql(crud.ingestion_cursor.build_upsert_statement(update))

    def test_conflict_target_is_repo_and_entity_type(self):
        """One cursor per (repo_id, entity_type)."""
        assert "ON CONFLICT (repo_id, entity_type) DO UPDATE SET" in self._sql()

    def test_cursor_is_overwritten(self):
        """The pagination token always takes the incoming value."""
        assert "cursor = excluded.cursor" in self._sql()

    def test_watermark_is_merged_with_max_and_null_keeps_stored(self):
        """The watermark keeps the stored value on NULL and takes the greatest otherwise."""
        sql = self._sql(ts("2026-02-01T03:00:00Z"))

        assert (
            "last_synced_at = CASE WHEN (excluded.last_synced_at IS NULL) "
            "THEN ingestion_cursor.last_synced_at "
            "ELSE greatest(coalesce(ingestion_cursor.last_synced_at, excluded.last_synced_at), "
            "excluded.last_synced_at) END"
        ) in sql

    def test_returns_merged_state(self):
        """The stored state is returned by the statement itself."""
        assert "RETURNING ingestion_cursor.repo_id, ingestion_cursor.entity_type" in self._sql()

    @pytest.mark.asyncio
    async def test_upsert_after_page_returns_cursor_state(self, mock_db_session):
        """The returned row becomes a CursorState and the write is committed."""
        row = MagicMock()
        row._mapping = {
            "repo_id": "octo/hello",
            "entity_type": "ISSUE",
            "cursor": "c1",
            "last_synced_at": ts("2026-02-01T05:00:00Z"),
        }
        mock_db_session.execute.return_value.one = MagicMock(return_value=row)
        update = schemas.CursorStateUpdate(
            repo_id="octo/hello",
            entity_type="ISSUE",
            cursor="c1",
            last_synced_at=ts("2026-02-01T03:00:00Z"),
        )

        state = await crud.ingestion_cursor.upsert_after_page(mock_db_session, obj_in=update)

        assert state.last_synced_at == ts("2026-02-01T05:00:00Z")
        mock_db_session.commit.assert_awaited_once()
