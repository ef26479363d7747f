"""CRUD operations for the application."""

from .crud_github_item import (
    discussion,
    discussion_comment,
    issue,
    issue_comment,
    pull_request,
    pull_request_comment,
)
from .crud_ingestion_cursor import ingestion_cursor

__all__ = [
    "discussion",
    "discussion_comment",
    "ingestion_cursor",
    "issue",
    "issue_comment",
    "pull_request",
    "pull_request_comment",
]
