"""Dependencies that are used in the API endpoints."""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from ghsync.core.ingestion_service import IngestionService
from ghsync.db.session import Database


def get_database(request: Request) -> Database:
    """Database opened by the application lifespan."""
    return request.app.state.database


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get an async database session for one request."""
    async with get_database(request).session() as db:
        yield db


def get_ingestion_service(request: Request) -> IngestionService:
    """Ingestion service created by the application lifespan."""
    return request.app.state.ingestion_service
