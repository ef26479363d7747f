"""Schemas for replicated GitHub rows."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class GitHubRecordBase(BaseModel):
    """Columns shared by items and comments."""

    repo_id: str
    external_id: str = Field(..., description="GraphQL node id")
    author_login: Optional[str] = None
    body: Optional[str] = None
    created_at_upstream: datetime
    updated_at: datetime
    raw_payload: dict[str, Any] = Field(default_factory=dict)


class GitHubItemUpsert(GitHubRecordBase):
    """Row of an issue, pull request or discussion to upsert."""

    number: int
    title: str
    state: str
    url: str
    labels: list[str] = Field(default_factory=list)
    comment_count: int = 0


class GitHubCommentUpsert(GitHubRecordBase):
    """Row of a comment to upsert."""

    parent_external_id: str


class GitHubItem(BaseModel):
    """Stored issue, pull request or discussion."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    repo_id: str
    external_id: str
    number: int
    title: str
    state: str
    url: str
    author_login: Optional[str] = None
    body: Optional[str] = None
    labels: list[str] = Field(default_factory=list)
    comment_count: int = 0
    created_at_upstream: datetime
    updated_at: datetime
    ingested_at: datetime
