"""Ingestion endpoint."""

from fastapi import Depends

from ghsync import schemas
from ghsync.api.deps import get_ingestion_service
from ghsync.api.router import TrailingSlashRouter
from ghsync.core.ingestion_service import IngestionService

router = TrailingSlashRouter()


@router.post("", response_model=schemas.IngestResponse)
async def ingest_repository(
    *,
    ingest_in: schemas.IngestRequest,
    service: IngestionService = Depends(get_ingestion_service),
) -> schemas.IngestResponse:
    """Incrementally sync the issues, pull requests and discussions of a repository.

    Runs until every entity type is exhausted or reaches already-synced items.

    Args:
    -----
        ingest_in: The repository
        service: The ingestion service

    Returns:
    --------
        schemas.IngestResponse: The outcome of every entity type
    """
    runs = await service.run_repository(ingest_in.owner, ingest_in.name)
    return schemas.IngestResponse(
        repo_id=f"{ingest_in.owner}/{ingest_in.name}",
        runs={
            entity_type: schemas.SyncRunSummary.model_validate(run)
            for entity_type, run in runs.items()
        },
    )
