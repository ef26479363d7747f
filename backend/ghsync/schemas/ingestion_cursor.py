"""Ingestion cursor schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CursorState(BaseModel):
    """Persisted resume point of a (repository, entity type) sync."""

    model_config = ConfigDict(from_attributes=True)

    repo_id: str = Field(..., description="Repository identifier, e.g. 'octo/hello'")
    entity_type: str = Field(..., description="Entity type, e.g. 'ISSUE'")
    cursor: Optional[str] = Field(
        None, description="Opaque pagination token of the next page; None starts from the top"
    )
    last_synced_at: Optional[datetime] = Field(
        None, description="Watermark: newest updatedAt already persisted"
    )


class CursorStateUpdate(CursorState):
    """Cursor write after a page.

    `cursor` always replaces the stored value. `last_synced_at` is merged with the stored
    watermark using max; None leaves the stored watermark unchanged.
    """

    pass
