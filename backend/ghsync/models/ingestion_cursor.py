"""Ingestion cursor model for storing incremental sync state."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ghsync.models._base import Base


class IngestionCursor(Base):
    """Resume point of one (repository, entity type) sync.

    `cursor` is the opaque upstream pagination token of the next page to fetch; `last_synced_at`
    is the watermark, the newest `updatedAt` already persisted. The watermark never moves
    backwards: writes merge it with GREATEST on the server.
    """

    __tablename__ = "ingestion_cursor"

    repo_id: Mapped[str] = mapped_column(String, nullable=False)
    entity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    cursor: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("repo_id", "entity_type", name="uq_ingestion_cursor_repo_entity"),
    )
