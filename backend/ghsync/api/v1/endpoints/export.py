"""Export endpoint: every replicated collection of a repository as raw payloads."""

from fastapi import Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ghsync import crud, schemas
from ghsync.api.deps import get_db
from ghsync.api.router import TrailingSlashRouter
from ghsync.core.datetime_utils import utc_now
from ghsync.crud._base_upsert import CRUDBaseUpsert

router = TrailingSlashRouter()


async def _export_rows(
    db: AsyncSession, table_crud: CRUDBaseUpsert, repo_id: str, ascending: bool
) -> list[schemas.ExportedRecord]:
    rows = await table_crud.get_all_for_repo(db, repo_id=repo_id, limit=None, ascending=ascending)
    return [schemas.ExportedRecord.model_validate(row) for row in rows]


@router.get("", response_model=schemas.RepositoryExport)
async def export_repository(
    response: Response,
    repo_id: str = Query(..., min_length=3, description="Repository, 'owner/name'"),
    db: AsyncSession = Depends(get_db),
) -> schemas.RepositoryExport:
    """Export the stored issues, pull requests, discussions and their comments.

    Items come most recently updated first, comments oldest first. The response is served as
    an attachment.
    """
    export = schemas.RepositoryExport(
        repo_id=repo_id,
        generated_at=utc_now(),
        issues=await _export_rows(db, crud.issue, repo_id, False),
        pull_requests=await _export_rows(db, crud.pull_request, repo_id, False),
        discussions=await _export_rows(db, crud.discussion, repo_id, False),
        issue_comments=await _export_rows(db, crud.issue_comment, repo_id, True),
        pull_request_comments=await _export_rows(db, crud.pull_request_comment, repo_id, True),
        discussion_comments=await _export_rows(db, crud.discussion_comment, repo_id, True),
    )
    filename = f"repo-{repo_id.replace('/', '-')}-export.json"
    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return export
