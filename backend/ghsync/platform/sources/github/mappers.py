"""Map GraphQL nodes to replicated rows."""

from ghsync.core.datetime_utils import parse_github_datetime
from ghsync.schemas.github import CommentNode, GitHubItemNode
from ghsync.schemas.github_record import GitHubCommentUpsert, GitHubItemUpsert


def to_item_upsert(repo_id: str, node: GitHubItemNode) -> GitHubItemUpsert:
    """Row of an issue, pull request or discussion."""
    return GitHubItemUpsert(
        repo_id=repo_id,
        external_id=node.id,
        number=node.number,
        title=node.title,
        state=node.state,
        url=node.url,
        author_login=node.author_login,
        body=node.body,
        labels=node.label_names,
        comment_count=node.comment_count,
        created_at_upstream=parse_github_datetime(node.created_at),
        updated_at=parse_github_datetime(node.updated_at),
        raw_payload=node.model_dump(mode="json", by_alias=True),
    )


def to_comment_upsert(repo_id: str, parent_id: str, comment: CommentNode) -> GitHubCommentUpsert:
    """Row of a comment on the node `parent_id`."""
    return GitHubCommentUpsert(
        repo_id=repo_id,
        external_id=comment.id,
        parent_external_id=parent_id,
        author_login=comment.author_login,
        body=comment.body,
        created_at_upstream=parse_github_datetime(comment.created_at),
        updated_at=parse_github_datetime(comment.updated_at),
        raw_payload=comment.model_dump(mode="json", by_alias=True),
    )
