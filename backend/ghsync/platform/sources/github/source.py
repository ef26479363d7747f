"""GitHub source: sync configurations for issues, pull requests and discussions."""

from ghsync import crud
from ghsync.core.shared_models import EntityType
from ghsync.crud._base_upsert import CRUDBaseUpsert
from ghsync.db.session import Database
from ghsync.platform.sources.github.client import GitHubGraphQLClient
from ghsync.platform.sources.github.comments import DEFAULT_COMMENT_PAGE_SIZE
from ghsync.platform.sources.github.fetchers import (
    COLLECTIONS,
    GitHubPageFetcher,
    extract_updated_at,
)
from ghsync.platform.sources.github.sink import GitHubItemSink
from ghsync.platform.sync.types import EntitySyncConfig

TABLES: dict[EntityType, tuple[CRUDBaseUpsert, CRUDBaseUpsert]] = {
    EntityType.ISSUE: (crud.issue, crud.issue_comment),
    EntityType.PR: (crud.pull_request, crud.pull_request_comment),
    EntityType.DISCUSSION: (crud.discussion, crud.discussion_comment),
}


class GitHubSource:
    """Wires GraphQL fetchers and database sinks into engine configurations."""

    def __init__(
        self,
        client: GitHubGraphQLClient,
        database: Database,
        page_size: int = 50,
        comment_page_size: int = DEFAULT_COMMENT_PAGE_SIZE,
        sync_comments: bool = True,
    ):
        """Initialize the source.

        Args:
            client: GraphQL client used for pages and comments
            database: Database the sinks write to
            page_size: Nodes requested per page
            comment_page_size: Comments requested per page
            sync_comments: Whether to fan out to the comments of every persisted node
        """
        self.client = client
        self.database = database
        self.page_size = page_size
        self.comment_page_size = comment_page_size
        self.sync_comments = sync_comments

    def sync_config(self, entity_type: EntityType, repo_id: str) -> EntitySyncConfig:
        """Build the engine configuration of one entity type of a repository."""
        collection = COLLECTIONS[entity_type]
        item_crud, comment_crud = TABLES[entity_type]

        sink = GitHubItemSink(
            database=self.database,
            repo_id=repo_id,
            item_crud=item_crud,
            comment_crud=comment_crud if self.sync_comments else None,
            client=self.client,
            comment_page_size=self.comment_page_size,
        )
        return EntitySyncConfig(
            entity_type=entity_type.value,
            fetch_page=GitHubPageFetcher(self.client, collection),
            persist=sink,
            extract_updated_at=extract_updated_at,
            page_size=self.page_size,
        )
