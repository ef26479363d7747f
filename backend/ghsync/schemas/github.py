"""GitHub GraphQL wire schemas.

Field names follow the GraphQL response; python attribute names are snake_case.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class _GraphQLModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Actor(_GraphQLModel):
    """Author of an item or comment."""

    login: str


class Label(_GraphQLModel):
    """Label attached to an item."""

    name: str


class LabelConnection(_GraphQLModel):
    """First labels of an item."""

    nodes: list[Label] = Field(default_factory=list)


class TotalCount(_GraphQLModel):
    """Connection reduced to its size."""

    total_count: int = Field(0, alias="totalCount")


class GitHubItemNode(_GraphQLModel):
    """Fields shared by issues, pull requests and discussions."""

    id: str
    number: int
    title: str
    url: str
    body: Optional[str] = None
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")
    author: Optional[Actor] = None
    labels: Optional[LabelConnection] = None
    comments: Optional[TotalCount] = None

    @property
    def author_login(self) -> Optional[str]:
        """Login of the author, None for deleted accounts ("ghost")."""
        return self.author.login if self.author else None

    @property
    def label_names(self) -> list[str]:
        """Names of the attached labels."""
        return [label.name for label in self.labels.nodes] if self.labels else []

    @property
    def comment_count(self) -> int:
        """Total number of comments reported upstream."""
        return self.comments.total_count if self.comments else 0


class IssueNode(GitHubItemNode):
    """Issue node."""

    state: str


class PullRequestNode(GitHubItemNode):
    """Pull request node."""

    state: str


class DiscussionNode(GitHubItemNode):
    """Discussion node; discussions have no state upstream."""

    state: str = "UNKNOWN"


class CommentNode(_GraphQLModel):
    """Comment on an issue, pull request or discussion."""

    id: str
    body: Optional[str] = None
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")
    author: Optional[Actor] = None

    @property
    def author_login(self) -> Optional[str]:
        """Login of the author, None for deleted accounts."""
        return self.author.login if self.author else None


class GraphQLPageInfo(_GraphQLModel):
    """GraphQL pageInfo block."""

    end_cursor: Optional[str] = Field(None, alias="endCursor")
    has_next_page: bool = Field(False, alias="hasNextPage")


class GraphQLRateLimit(_GraphQLModel):
    """GraphQL rateLimit block. resetAt is kept as the raw string."""

    remaining: int
    reset_at: Optional[str] = Field(None, alias="resetAt")


NodeT = TypeVar("NodeT")


class GraphQLConnection(_GraphQLModel, Generic[NodeT]):
    """A paginated GraphQL connection."""

    nodes: Optional[list[NodeT]] = None
    page_info: GraphQLPageInfo = Field(default_factory=GraphQLPageInfo, alias="pageInfo")


class GraphQLResponse(_GraphQLModel):
    """Top-level GraphQL response envelope."""

    data: Optional[dict[str, Any]] = None
    errors: Optional[list[dict[str, Any]]] = None
