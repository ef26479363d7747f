"""Ingestion request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ghsync.core.shared_models import TerminationReason


class IngestRequest(BaseModel):
    """Repository to ingest."""

    owner: str = Field(..., min_length=1, description="Repository owner, e.g. 'octo'")
    name: str = Field(..., min_length=1, description="Repository name, e.g. 'hello'")


class SyncRunSummary(BaseModel):
    """Outcome of one entity type."""

    model_config = ConfigDict(from_attributes=True)

    entity_type: str
    cursor: Optional[str] = None
    watermark: Optional[datetime] = None
    termination: TerminationReason
    pages_fetched: int
    items_persisted: int


class IngestResponse(BaseModel):
    """Outcome of an ingestion, per entity type."""

    repo_id: str
    runs: dict[str, SyncRunSummary]
