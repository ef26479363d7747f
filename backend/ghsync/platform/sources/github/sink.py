"""Upsert sink for a page of items and their comments."""

from typing import Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ghsync.core.exceptions import PersistenceError
from ghsync.core.logging import ContextualLogger, logger as default_logger
from ghsync.crud._base_upsert import CRUDBaseUpsert
from ghsync.db.session import Database
from ghsync.platform.sources.github.client import GitHubGraphQLClient
from ghsync.platform.sources.github.comments import DEFAULT_COMMENT_PAGE_SIZE, fetch_all_comments
from ghsync.platform.sources.github.mappers import to_comment_upsert, to_item_upsert
from ghsync.schemas.github import GitHubItemNode


class GitHubItemSink:
    """Persists a page of nodes; callable as `persist` of a sync config.

    Comments are fetched first, then items and comments are upserted in one transaction, so a
    page is either stored completely or not at all.
    """

    def __init__(
        self,
        database: Database,
        repo_id: str,
        item_crud: CRUDBaseUpsert,
        comment_crud: Optional[CRUDBaseUpsert] = None,
        client: Optional[GitHubGraphQLClient] = None,
        comment_page_size: int = DEFAULT_COMMENT_PAGE_SIZE,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the sink.

        Args:
            database: Database to write to
            repo_id: Repository the nodes belong to
            item_crud: CRUD of the item table
            comment_crud: CRUD of the comment table; None skips comments
            client: GraphQL client for the comment fan-out, required with comment_crud
            comment_page_size: Comments requested per page
            logger: Logger to use
        """
        if comment_crud is not None and client is None:
            raise ValueError("A GraphQL client is required to fetch comments")

        self.database = database
        self.repo_id = repo_id
        self.item_crud = item_crud
        self.comment_crud = comment_crud
        self.client = client
        self.comment_page_size = comment_page_size
        self.logger = logger or default_logger

    async def __call__(self, nodes: Sequence[GitHubItemNode]) -> int:
        """Upsert the nodes and their comments.

        Returns:
            Number of comment rows written.

        Raises:
            PersistenceError: If a batch upsert failed; nothing of the page is kept.
        """
        if not nodes:
            return 0

        items = [to_item_upsert(self.repo_id, node) for node in nodes]
        comments = await self._collect_comments(nodes)

        async with self.database.session() as db:
            await self.item_crud.upsert_many(db, items, auto_commit=False)
            if self.comment_crud is not None:
                await self.comment_crud.upsert_many(db, comments, auto_commit=False)
            try:
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                raise PersistenceError(
                    self.item_crud.model.__tablename__, len(items) + len(comments), e
                ) from e

        self.logger.debug(
            f"Upserted {len(items)} rows into {self.item_crud.model.__tablename__} "
            f"with {len(comments)} comments"
        )
        return len(comments)

    async def _collect_comments(self, nodes: Sequence[GitHubItemNode]) -> list:
        if self.comment_crud is None:
            return []

        comments = []
        for node in nodes:
            # totalCount 0 means there is nothing to page through
            if node.comments is not None and node.comment_count == 0:
                continue
            for comment in await fetch_all_comments(self.client, node.id, self.comment_page_size):
                comments.append(to_comment_upsert(self.repo_id, node.id, comment))
        return comments
