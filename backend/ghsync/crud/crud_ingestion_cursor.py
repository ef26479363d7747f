"""CRUD operations for ingestion cursors."""

import uuid
from typing import Optional

from sqlalchemy import case, func, select
from sqlalchemy.dialects.postgresql import Insert, insert
from sqlalchemy.ext.asyncio import AsyncSession

from ghsync import schemas
from ghsync.core.datetime_utils import utc_now
from ghsync.models.ingestion_cursor import IngestionCursor


class CRUDIngestionCursor:
    """CRUD operations for ingestion cursors.

    There is no compare-and-swap here; concurrent writers for the same key are serialized by
    the advisory lock held around a sync run.
    """

    def __init__(self):
        """Bind the CRUD object to the ingestion cursor table."""
        self.model = IngestionCursor

    async def get_by_repo_and_entity(
        self, db: AsyncSession, *, repo_id: str, entity_type: str
    ) -> Optional[IngestionCursor]:
        """Get the cursor of a (repository, entity type) pair.

        Args:
            db: Database session
            repo_id: The repository identifier
            entity_type: The entity type

        Returns:
            The cursor if one was ever written, None otherwise
        """
        stmt = select(IngestionCursor).where(
            IngestionCursor.repo_id == repo_id,
            IngestionCursor.entity_type == entity_type,
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    def build_upsert_statement(self, obj_in: schemas.CursorStateUpdate) -> Insert:
        """Build the cursor write.

        The cursor column is overwritten. The watermark is merged server-side: an incoming NULL
        keeps the stored value, otherwise the larger of the two wins.
        """
        now = utc_now()
        stmt = insert(IngestionCursor).values(
            id=uuid.uuid4(),
            created_at=now,
            modified_at=now,
            repo_id=obj_in.repo_id,
            entity_type=obj_in.entity_type,
            cursor=obj_in.cursor,
            last_synced_at=obj_in.last_synced_at,
        )
        table = IngestionCursor.__table__
        incoming = stmt.excluded.last_synced_at

        stmt = stmt.on_conflict_do_update(
            index_elements=["repo_id", "entity_type"],
            set_={
                "cursor": stmt.excluded.cursor,
                "last_synced_at": case(
                    (incoming.is_(None), table.c.last_synced_at),
                    else_=func.greatest(func.coalesce(table.c.last_synced_at, incoming), incoming),
                ),
                "modified_at": func.now(),
            },
        )
        return stmt.returning(
            table.c.repo_id, table.c.entity_type, table.c.cursor, table.c.last_synced_at
        )

    async def upsert_after_page(
        self, db: AsyncSession, *, obj_in: schemas.CursorStateUpdate
    ) -> schemas.CursorState:
        """Write the cursor of a processed page and return the stored state.

        Args:
            db: Database session
            obj_in: The cursor write

        Returns:
            The cursor state as stored after the merge
        """
        result = await db.execute(self.build_upsert_statement(obj_in))
        row = result.one()
        await db.commit()
        return schemas.CursorState.model_validate(dict(row._mapping))


ingestion_cursor = CRUDIngestionCursor()
