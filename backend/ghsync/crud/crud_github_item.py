"""CRUD operations for replicated issues, pull requests, discussions and their comments."""

from ghsync import models, schemas
from ghsync.crud._base_upsert import CRUDBaseUpsert


class CRUDGitHubItem(CRUDBaseUpsert[models.GitHubIssue, schemas.GitHubItemUpsert]):
    """CRUD operations for issues, pull requests and discussions."""


class CRUDGitHubComment(CRUDBaseUpsert[models.GitHubIssueComment, schemas.GitHubCommentUpsert]):
    """CRUD operations for comments."""


issue = CRUDGitHubItem(models.GitHubIssue)
pull_request = CRUDGitHubItem(models.GitHubPullRequest)
discussion = CRUDGitHubItem(models.GitHubDiscussion)

issue_comment = CRUDGitHubComment(models.GitHubIssueComment)
pull_request_comment = CRUDGitHubComment(models.GitHubPullRequestComment)
discussion_comment = CRUDGitHubComment(models.GitHubDiscussionComment)
