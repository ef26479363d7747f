"""Endpoints listing replicated issues, pull requests and discussions."""

from typing import List

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ghsync import crud, schemas
from ghsync.api.deps import get_db
from ghsync.api.router import TrailingSlashRouter
from ghsync.core.exceptions import NotFoundException
from ghsync.crud._base_upsert import CRUDBaseUpsert

issues_router = TrailingSlashRouter()
pull_requests_router = TrailingSlashRouter()
discussions_router = TrailingSlashRouter()


async def _list_items(
    db: AsyncSession, item_crud: CRUDBaseUpsert, repo_id: str, skip: int, limit: int
) -> List[schemas.GitHubItem]:
    rows = await item_crud.get_all_for_repo(db, repo_id=repo_id, skip=skip, limit=limit)
    return [schemas.GitHubItem.model_validate(row) for row in rows]


@issues_router.get("", response_model=List[schemas.GitHubItem])
async def list_issues(
    repo_id: str = Query(..., min_length=3, description="Repository, 'owner/name'"),
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
) -> List[schemas.GitHubItem]:
    """List the issues of a repository, most recently updated first."""
    return await _list_items(db, crud.issue, repo_id, skip, limit)


@pull_requests_router.get("", response_model=List[schemas.GitHubItem])
async def list_pull_requests(
    repo_id: str = Query(..., min_length=3, description="Repository, 'owner/name'"),
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
) -> List[schemas.GitHubItem]:
    """List the pull requests of a repository, most recently updated first."""
    return await _list_items(db, crud.pull_request, repo_id, skip, limit)


@discussions_router.get("", response_model=List[schemas.GitHubItem])
async def list_discussions(
    repo_id: str = Query(..., min_length=3, description="Repository, 'owner/name'"),
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
) -> List[schemas.GitHubItem]:
    """List the discussions of a repository, most recently updated first."""
    return await _list_items(db, crud.discussion, repo_id, skip, limit)


async def _get_item(
    db: AsyncSession, item_crud: CRUDBaseUpsert, repo_id: str, external_id: str
) -> schemas.GitHubItem:
    row = await item_crud.get_by_external_id(db, repo_id=repo_id, external_id=external_id)
    if row is None:
        raise NotFoundException(f"{external_id} not found in {repo_id}")
    return schemas.GitHubItem.model_validate(row)


@issues_router.get("/{external_id}", response_model=schemas.GitHubItem)
async def read_issue(
    external_id: str,
    repo_id: str = Query(..., min_length=3, description="Repository, 'owner/name'"),
    db: AsyncSession = Depends(get_db),
) -> schemas.GitHubItem:
    """Get a single issue by its GitHub node id."""
    return await _get_item(db, crud.issue, repo_id, external_id)


@pull_requests_router.get("/{external_id}", response_model=schemas.GitHubItem)
async def read_pull_request(
    external_id: str,
    repo_id: str = Query(..., min_length=3, description="Repository, 'owner/name'"),
    db: AsyncSession = Depends(get_db),
) -> schemas.GitHubItem:
    """Get a single pull request by its GitHub node id."""
    return await _get_item(db, crud.pull_request, repo_id, external_id)


@discussions_router.get("/{external_id}", response_model=schemas.GitHubItem)
async def read_discussion(
    external_id: str,
    repo_id: str = Query(..., min_length=3, description="Repository, 'owner/name'"),
    db: AsyncSession = Depends(get_db),
) -> schemas.GitHubItem:
    """Get a single discussion by its GitHub node id."""
    return await _get_item(db, crud.discussion, repo_id, external_id)
