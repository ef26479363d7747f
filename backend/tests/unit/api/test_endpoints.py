"""Unit tests for the HTTP API."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from ghsync import crud
from ghsync.api.deps import get_db, get_ingestion_service
from ghsync.core.exceptions import (
    MissingGitHubTokenError,
    UpstreamNotFoundError,
    UpstreamTransportError,
)
from ghsync.core.ingestion_service import IngestionService
from ghsync.core.shared_models import TerminationReason
from ghsync.main import create_app
from ghsync.models import GitHubIssue, GitHubIssueComment
from ghsync.platform.sync.types import SyncRun
from tests.helpers.in_memory import ts


@pytest.fixture
def mock_service():
    """Create a mock ingestion service."""
    service = MagicMock(spec=IngestionService)
    service.run_repository = AsyncMock()
    return service


@pytest.fixture
def client(mock_service, mock_db_session):
    """Test client with the service and database sessions overridden."""
    app = create_app()

    async def override_get_db():
        yield mock_db_session

    app.dependency_overrides[get_ingestion_service] = lambda: mock_service
    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


class TestHealth:
    """Tests for the health endpoint."""

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_trailing_slash(self, client):
        """Paths answer with and without a trailing slash."""
        assert client.get("/health/").status_code == 200


class TestIngest:
    """Tests for POST /ingest."""

    def test_returns_run_per_entity_type(self, client, mock_service):
        """The repository id is owner/name and every run is summarized."""
        # Arrange
        mock_service.run_repository.return_value = {
            "ISSUE": SyncRun(
                repo_id="octo/hello",
                entity_type="ISSUE",
                cursor="c1",
                watermark=ts("2026-02-01T03:00:00Z"),
                termination=TerminationReason.WATERMARK_BOUNDARY,
                pages_fetched=1,
                items_persisted=1,
            )
        }

        # Act
        response = client.post("/ingest", json={"owner": "octo", "name": "hello"})

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["repo_id"] == "octo/hello"
        assert body["runs"]["ISSUE"]["termination"] == "watermark_boundary"
        assert body["runs"]["ISSUE"]["cursor"] == "c1"
        assert body["runs"]["ISSUE"]["items_persisted"] == 1
        mock_service.run_repository.assert_awaited_once_with("octo", "hello")

    def test_missing_fields_are_rejected(self, client):
        response = client.post("/ingest", json={"owner": "octo"})

        assert response.status_code == 422

    @pytest.mark.parametrize(
        "error, status_code",
        [
            (UpstreamNotFoundError("octo", "nope", "issues"), 404),
            (UpstreamTransportError("GitHub GraphQL error: 502 Bad Gateway", 502), 502),
            (MissingGitHubTokenError(), 503),
        ],
    )
    def test_errors_map_to_status_codes(self, client, mock_service, error, status_code):
        """Upstream failures are reported with a matching status and the error message."""
        mock_service.run_repository.side_effect = error

        response = client.post("/ingest", json={"owner": "octo", "name": "nope"})

        assert response.status_code == status_code
        assert response.json() == {"detail": str(error)}


class TestListItems:
    """Tests for the listing endpoints."""

    def _issue(self) -> GitHubIssue:
        return GitHubIssue(
            id=uuid.uuid4(),
            repo_id="octo/hello",
            external_id="I_1",
            number=1,
            title="Crash on start",
            state="OPEN",
            url="https://github.com/octo/hello/issues/1",
            author_login="octocat",
            body=None,
            labels=["bug"],
            comment_count=0,
            created_at_upstream=ts("2026-02-01T00:00:00Z"),
            updated_at=ts("2026-02-01T03:00:00Z"),
            ingested_at=ts("2026-02-02T00:00:00Z"),
            raw_payload={},
        )

    def test_lists_issues_of_repository(self, client, mock_db_session):
        with patch.object(
            crud.issue, "get_all_for_repo", AsyncMock(return_value=[self._issue()])
        ) as mock_list:
            response = client.get("/issues", params={"repo_id": "octo/hello"})

        assert response.status_code == 200
        assert [item["external_id"] for item in response.json()] == ["I_1"]
        assert mock_list.await_args.kwargs == {"repo_id": "octo/hello", "skip": 0, "limit": 200}

    @pytest.mark.parametrize(
        "path, item_crud",
        [("/pull-requests", crud.pull_request), ("/discussions", crud.discussion)],
    )
    def test_other_collections(self, client, path, item_crud):
        with patch.object(item_crud, "get_all_for_repo", AsyncMock(return_value=[])):
            response = client.get(path, params={"repo_id": "octo/hello", "limit": 5})

        assert response.status_code == 200
        assert response.json() == []

    def test_repo_id_is_required(self, client):
        assert client.get("/issues").status_code == 422

    def test_reads_single_issue(self, client):
        with patch.object(
            crud.issue, "get_by_external_id", AsyncMock(return_value=self._issue())
        ) as mock_get:
            response = client.get("/issues/I_1", params={"repo_id": "octo/hello"})

        assert response.status_code == 200
        assert response.json()["title"] == "Crash on start"
        assert mock_get.await_args.kwargs == {"repo_id": "octo/hello", "external_id": "I_1"}

    def test_unknown_item_is_404(self, client):
        with patch.object(crud.discussion, "get_by_external_id", AsyncMock(return_value=None)):
            response = client.get("/discussions/D_9", params={"repo_id": "octo/hello"})

        assert response.status_code == 404
        assert "D_9" in response.json()["detail"]


class TestExport:
    """Tests for GET /export."""

    def _issue(self) -> GitHubIssue:
        return GitHubIssue(
            id=uuid.uuid4(),
            repo_id="octo/hello",
            external_id="I_1",
            number=1,
            title="Crash on start",
            state="OPEN",
            url="https://github.com/octo/hello/issues/1",
            labels=[],
            comment_count=1,
            created_at_upstream=ts("2026-02-01T00:00:00Z"),
            updated_at=ts("2026-02-01T03:00:00Z"),
            ingested_at=ts("2026-02-02T00:00:00Z"),
            raw_payload={"id": "I_1", "title": "Crash on start"},
        )

    def _comment(self) -> GitHubIssueComment:
        return GitHubIssueComment(
            id=uuid.uuid4(),
            repo_id="octo/hello",
            external_id="IC_1",
            parent_external_id="I_1",
            created_at_upstream=ts("2026-02-01T01:00:00Z"),
            updated_at=ts("2026-02-01T01:00:00Z"),
            ingested_at=ts("2026-02-02T00:00:00Z"),
            raw_payload={"id": "IC_1", "body": "Same here"},
        )

    def test_exports_items_and_comments(self, client):
        # Arrange
        empty = AsyncMock(return_value=[])
        issues = AsyncMock(return_value=[self._issue()])
        issue_comments = AsyncMock(return_value=[self._comment()])

        # Act
        with patch.object(crud.issue, "get_all_for_repo", issues), patch.object(
            crud.issue_comment, "get_all_for_repo", issue_comments
        ), patch.object(crud.pull_request, "get_all_for_repo", empty), patch.object(
            crud.discussion, "get_all_for_repo", empty
        ), patch.object(
            crud.pull_request_comment, "get_all_for_repo", empty
        ), patch.object(
            crud.discussion_comment, "get_all_for_repo", empty
        ):
            response = client.get("/export", params={"repo_id": "octo/hello"})

        # Assert
        assert response.status_code == 200
        assert response.headers["content-disposition"] == (
            'attachment; filename="repo-octo-hello-export.json"'
        )
        body = response.json()
        assert body["repo_id"] == "octo/hello"
        assert [row["raw_payload"] for row in body["issues"]] == [
            {"id": "I_1", "title": "Crash on start"}
        ]
        assert body["issue_comments"][0]["parent_external_id"] == "I_1"
        assert body["pull_requests"] == []
        assert body["discussion_comments"] == []
        assert issues.await_args.kwargs == {
            "repo_id": "octo/hello",
            "limit": None,
            "ascending": False,
        }
        assert issue_comments.await_args.kwargs["ascending"] is True

    def test_repo_id_is_required(self, client):
        assert client.get("/export").status_code == 422
