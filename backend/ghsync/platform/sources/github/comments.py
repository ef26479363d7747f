"""Comment fan-out: every comment of an issue, pull request or discussion."""

from typing import Optional

from ghsync.platform.sources.github.client import GitHubGraphQLClient
from ghsync.platform.sources.github.queries import NODE_COMMENTS_QUERY
from ghsync.schemas.github import CommentNode, GraphQLConnection

DEFAULT_COMMENT_PAGE_SIZE = 100


async def fetch_all_comments(
    client: GitHubGraphQLClient, node_id: str, page_size: int = DEFAULT_COMMENT_PAGE_SIZE
) -> list[CommentNode]:
    """Fetch every comment of a node, following the comment cursor.

    A node that no longer resolves (deleted, or not commentable) yields no comments.
    """
    comments: list[CommentNode] = []
    cursor: Optional[str] = None

    while True:
        data = await client.execute(
            NODE_COMMENTS_QUERY, {"id": node_id, "pageSize": page_size, "cursor": cursor}
        )
        node = data.get("node") or {}
        if not node.get("comments"):
            break

        connection = GraphQLConnection[CommentNode].model_validate(node["comments"])
        comments.extend(connection.nodes or [])

        cursor = connection.page_info.end_cursor
        if not connection.page_info.has_next_page or cursor is None:
            break

    return comments
