"""Page fetchers for repository collections."""

from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Type

from ghsync.core.datetime_utils import parse_github_datetime
from ghsync.core.exceptions import GitHubGraphQLError, UpstreamNotFoundError
from ghsync.core.shared_models import EntityType
from ghsync.platform.sources.github.client import GitHubGraphQLClient
from ghsync.platform.sources.github.queries import (
    DISCUSSIONS_QUERY,
    ISSUES_QUERY,
    PULL_REQUESTS_QUERY,
)
from ghsync.platform.sync.types import NodeT, Page, PageInfo, PageRequest, RateLimitSnapshot
from ghsync.schemas.github import (
    DiscussionNode,
    GitHubItemNode,
    GraphQLConnection,
    GraphQLRateLimit,
    IssueNode,
    PullRequestNode,
)


@dataclass(frozen=True)
class GitHubCollection(Generic[NodeT]):
    """A repository connection synced as one entity type."""

    entity_type: EntityType
    field: str
    query: str
    node_model: Type[NodeT]


ISSUES = GitHubCollection(EntityType.ISSUE, "issues", ISSUES_QUERY, IssueNode)
PULL_REQUESTS = GitHubCollection(
    EntityType.PR, "pullRequests", PULL_REQUESTS_QUERY, PullRequestNode
)
DISCUSSIONS = GitHubCollection(
    EntityType.DISCUSSION, "discussions", DISCUSSIONS_QUERY, DiscussionNode
)

COLLECTIONS: dict[EntityType, GitHubCollection] = {
    collection.entity_type: collection for collection in (ISSUES, PULL_REQUESTS, DISCUSSIONS)
}


def extract_updated_at(node: GitHubItemNode) -> datetime:
    """Update time of a node as an aware datetime."""
    return parse_github_datetime(node.updated_at)


class GitHubPageFetcher(Generic[NodeT]):
    """Fetches one page of a collection; callable as `fetch_page` of a sync config."""

    def __init__(self, client: GitHubGraphQLClient, collection: GitHubCollection[NodeT]):
        """Bind the fetcher to a client and a collection."""
        self.client = client
        self.collection = collection

    async def __call__(self, request: PageRequest) -> Page[NodeT]:
        """Fetch the page after `request.cursor`.

        Raises:
            UpstreamNotFoundError: If the repository or the collection does not exist.
        """
        variables = {
            "owner": request.owner,
            "name": request.name,
            "pageSize": request.page_size,
            "cursor": request.cursor,
        }
        try:
            data = await self.client.execute(self.collection.query, variables)
        except GitHubGraphQLError as e:
            if e.is_not_found:
                raise UpstreamNotFoundError(
                    request.owner, request.name, self.collection.field
                ) from e
            raise

        repository = data.get("repository")
        raw_connection = repository.get(self.collection.field) if repository else None
        if raw_connection is None:
            raise UpstreamNotFoundError(request.owner, request.name, self.collection.field)

        connection = GraphQLConnection[self.collection.node_model].model_validate(raw_connection)

        rate_limit = None
        if data.get("rateLimit"):
            raw_rate_limit = GraphQLRateLimit.model_validate(data["rateLimit"])
            rate_limit = RateLimitSnapshot(
                remaining=raw_rate_limit.remaining, reset_at=raw_rate_limit.reset_at
            )

        return Page(
            nodes=connection.nodes or [],
            page_info=PageInfo(
                next_cursor=connection.page_info.end_cursor,
                has_more=connection.page_info.has_next_page,
            ),
            rate_limit=rate_limit,
        )
