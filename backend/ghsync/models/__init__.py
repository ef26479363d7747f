"""Models for the application."""

from ._base import Base
from .github import (
    GitHubDiscussion,
    GitHubDiscussionComment,
    GitHubIssue,
    GitHubIssueComment,
    GitHubPullRequest,
    GitHubPullRequestComment,
)
from .ingestion_cursor import IngestionCursor

__all__ = [
    "Base",
    "GitHubDiscussion",
    "GitHubDiscussionComment",
    "GitHubIssue",
    "GitHubIssueComment",
    "GitHubPullRequest",
    "GitHubPullRequestComment",
    "IngestionCursor",
]
