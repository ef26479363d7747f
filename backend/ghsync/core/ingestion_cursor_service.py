"""Service for loading and saving ingestion cursors."""

from typing import Optional, Protocol

from ghsync import crud, schemas
from ghsync.db.session import Database


class CursorStore(Protocol):
    """Durable (cursor, watermark) per (repository, entity type).

    `save` must merge the watermark with the stored one using max, treat a None watermark
    as "no information", and always overwrite the cursor.
    """

    async def load(self, repo_id: str, entity_type: str) -> Optional[schemas.CursorState]:
        """Return the stored state, or None if no page was ever processed."""
        ...

    async def save(self, update: schemas.CursorStateUpdate) -> schemas.CursorState:
        """Write the state after a page and return what is stored."""
        ...


class PostgresCursorStore:
    """Cursor store backed by the ingestion_cursor table.

    The watermark merge happens inside the upsert statement, so two writers never interleave a
    read-modify-write. Writers of the same key are still expected to hold the ingestion lock.
    """

    def __init__(self, database: Database):
        """Bind the store to a database."""
        self.database = database

    async def load(self, repo_id: str, entity_type: str) -> Optional[schemas.CursorState]:
        """Load the cursor of a (repository, entity type) pair.

        Args:
            repo_id: The repository identifier
            entity_type: The entity type

        Returns:
            The stored cursor state, None if nothing was stored yet
        """
        async with self.database.session() as db:
            cursor = await crud.ingestion_cursor.get_by_repo_and_entity(
                db, repo_id=repo_id, entity_type=entity_type
            )
            if cursor is None:
                return None
            return schemas.CursorState.model_validate(cursor)

    async def save(self, update: schemas.CursorStateUpdate) -> schemas.CursorState:
        """Save the cursor after a page.

        Args:
            update: Cursor to store and candidate watermark (None keeps the stored one)

        Returns:
            The merged cursor state
        """
        async with self.database.session() as db:
            return await crud.ingestion_cursor.upsert_after_page(db, obj_in=update)
