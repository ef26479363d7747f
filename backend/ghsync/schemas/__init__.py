"""Schemas for the application."""

from .export import ExportedRecord, RepositoryExport
from .github import (
    Actor,
    CommentNode,
    DiscussionNode,
    GitHubItemNode,
    GraphQLConnection,
    GraphQLPageInfo,
    GraphQLRateLimit,
    GraphQLResponse,
    IssueNode,
    PullRequestNode,
)
from .github_record import GitHubCommentUpsert, GitHubItem, GitHubItemUpsert
from .ingestion import IngestRequest, IngestResponse, SyncRunSummary
from .ingestion_cursor import CursorState, CursorStateUpdate

__all__ = [
    "Actor",
    "CommentNode",
    "CursorState",
    "CursorStateUpdate",
    "DiscussionNode",
    "ExportedRecord",
    "GitHubCommentUpsert",
    "GitHubItem",
    "GitHubItemNode",
    "GitHubItemUpsert",
    "GraphQLConnection",
    "GraphQLPageInfo",
    "GraphQLRateLimit",
    "GraphQLResponse",
    "IngestRequest",
    "IngestResponse",
    "IssueNode",
    "PullRequestNode",
    "RepositoryExport",
    "SyncRunSummary",
]
