"""Schemas of the repository export."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExportedRecord(BaseModel):
    """Raw payload of one stored item or comment."""

    model_config = ConfigDict(from_attributes=True)

    external_id: str
    parent_external_id: Optional[str] = None
    updated_at: datetime
    raw_payload: dict[str, Any] = Field(default_factory=dict)


class RepositoryExport(BaseModel):
    """Every replicated collection of one repository.

    Items are ordered most recently updated first, comments oldest first.
    """

    repo_id: str
    generated_at: datetime
    issues: list[ExportedRecord]
    pull_requests: list[ExportedRecord]
    discussions: list[ExportedRecord]
    issue_comments: list[ExportedRecord]
    pull_request_comments: list[ExportedRecord]
    discussion_comments: list[ExportedRecord]
