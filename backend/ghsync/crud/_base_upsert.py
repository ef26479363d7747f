"""Base CRUD class for replicated tables keyed by (repo_id, external_id)."""

import uuid
from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import desc, func, select
from sqlalchemy.dialects.postgresql import Insert, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ghsync.core.datetime_utils import utc_now
from ghsync.core.exceptions import PersistenceError
from ghsync.models._base import Base

ModelType = TypeVar("ModelType", bound=Base)
UpsertSchemaType = TypeVar("UpsertSchemaType", bound=BaseModel)

CONFLICT_KEYS = ("repo_id", "external_id")
# Never rewritten on conflict: the identity of the row and its first insertion time
IMMUTABLE_COLUMNS = {"id", "created_at", *CONFLICT_KEYS}


class CRUDBaseUpsert(Generic[ModelType, UpsertSchemaType]):
    """CRUD base class for replicated GitHub tables.

    Writes are idempotent batch upserts: re-delivering a page leaves the table as it was,
    and a stale page can never move `updated_at` backwards.
    """

    def __init__(self, model: Type[ModelType]):
        """CRUD object for the given replicated table.

        Args:
        ----
            model (Type[ModelType]): The model to be used in the CRUD operations.

        """
        self.model = model

    def build_upsert_statement(self, objs_in: Sequence[UpsertSchemaType]) -> Insert:
        """Build one INSERT ... ON CONFLICT (repo_id, external_id) DO UPDATE for a batch.

        Every column is overwritten with the incoming value except `updated_at`, which becomes
        GREATEST(stored, incoming).
        """
        now = utc_now()
        rows = [
            {"id": uuid.uuid4(), "created_at": now, "modified_at": now, "ingested_at": now}
            | obj_in.model_dump()
            for obj_in in objs_in
        ]

        stmt = insert(self.model).values(rows)
        table = self.model.__table__

        set_: dict[str, Any] = {
            column.name: stmt.excluded[column.name]
            for column in table.columns
            if column.name not in IMMUTABLE_COLUMNS
        }
        set_["updated_at"] = func.greatest(table.c.updated_at, stmt.excluded.updated_at)
        set_["ingested_at"] = func.now()
        set_["modified_at"] = func.now()

        return stmt.on_conflict_do_update(index_elements=list(CONFLICT_KEYS), set_=set_)

    async def upsert_many(
        self, db: AsyncSession, objs_in: Sequence[UpsertSchemaType], *, auto_commit: bool = True
    ) -> int:
        """Upsert a batch of rows in one statement.

        Args:
        ----
            db (AsyncSession): The database session.
            objs_in (Sequence[UpsertSchemaType]): Rows to upsert. An empty batch is a no-op.
            auto_commit (bool): Commit when done. Pass False to let the caller commit several
                batches as one transaction.

        Returns:
        -------
            int: Number of rows written.

        Raises:
        ------
            PersistenceError: If the statement failed; the transaction is rolled back.

        """
        if not objs_in:
            return 0

        try:
            await db.execute(self.build_upsert_statement(objs_in))
            if auto_commit:
                await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise PersistenceError(self.model.__tablename__, len(objs_in), e) from e

        return len(objs_in)

    async def get_by_external_id(
        self, db: AsyncSession, *, repo_id: str, external_id: str
    ) -> ModelType | None:
        """Get a single row by its natural key."""
        result = await db.execute(
            select(self.model).where(
                self.model.repo_id == repo_id, self.model.external_id == external_id
            )
        )
        return result.scalar_one_or_none()

    async def get_all_for_repo(
        self,
        db: AsyncSession,
        *,
        repo_id: str,
        skip: int = 0,
        limit: Optional[int] = 100,
        ascending: bool = False,
    ) -> list[ModelType]:
        """Get rows of a repository ordered by updated_at, most recent first by default.

        Args:
        ----
            db (AsyncSession): The database session.
            repo_id (str): The repository identifier.
            skip (int): The number of objects to skip.
            limit (Optional[int]): The number of objects to return, None for all of them.
            ascending (bool): Oldest first instead.

        Returns:
        -------
            list[ModelType]: A list of objects.

        """
        order = self.model.updated_at if ascending else desc(self.model.updated_at)
        query = select(self.model).where(self.model.repo_id == repo_id).order_by(order).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())
