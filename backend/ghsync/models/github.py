"""Replicated GitHub items and their comments."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.ext.declarative import declared_attr
from sqlalchemy.orm import Mapped, mapped_column

from ghsync.core.datetime_utils import utc_now
from ghsync.models._base import Base


class GitHubRecordMixin:
    """Columns shared by every replicated table.

    Rows are identified by (repo_id, external_id), where external_id is the GraphQL node id.
    """

    repo_id: Mapped[str] = mapped_column(String, nullable=False)
    external_id: Mapped[str] = mapped_column(String, nullable=False)
    author_login: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at_upstream: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    raw_payload: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    ingested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    @declared_attr.directive
    def __table_args__(cls):
        return (
            UniqueConstraint("repo_id", "external_id", name=f"uq_{cls.__tablename__}_repo_ext"),
            Index(f"idx_{cls.__tablename__}_repo_updated", "repo_id", "updated_at"),
        )


class GitHubItemMixin(GitHubRecordMixin):
    """Columns of issues, pull requests and discussions."""

    number: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    state: Mapped[str] = mapped_column(String(32), nullable=False)
    url: Mapped[str] = mapped_column(String, nullable=False)
    labels: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class GitHubCommentMixin(GitHubRecordMixin):
    """Columns of comments; parent_external_id is the node id of the commented item."""

    parent_external_id: Mapped[str] = mapped_column(String, nullable=False)


class GitHubIssue(GitHubItemMixin, Base):
    """Issue of a repository."""

    __tablename__ = "github_issue"


class GitHubPullRequest(GitHubItemMixin, Base):
    """Pull request of a repository."""

    __tablename__ = "github_pull_request"


class GitHubDiscussion(GitHubItemMixin, Base):
    """Discussion of a repository. GitHub reports no state for discussions."""

    __tablename__ = "github_discussion"


class GitHubIssueComment(GitHubCommentMixin, Base):
    """Comment on an issue."""

    __tablename__ = "github_issue_comment"


class GitHubPullRequestComment(GitHubCommentMixin, Base):
    """Comment on a pull request."""

    __tablename__ = "github_pull_request_comment"


class GitHubDiscussionComment(GitHubCommentMixin, Base):
    """Comment on a discussion."""

    __tablename__ = "github_discussion_comment"
