"""API routes for the FastAPI application."""

from ghsync.api.router import TrailingSlashRouter
from ghsync.api.v1.endpoints import export, health, ingest, items

api_router = TrailingSlashRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(ingest.router, prefix="/ingest", tags=["ingest"])
api_router.include_router(items.issues_router, prefix="/issues", tags=["issues"])
api_router.include_router(
    items.pull_requests_router, prefix="/pull-requests", tags=["pull-requests"]
)
api_router.include_router(items.discussions_router, prefix="/discussions", tags=["discussions"])
api_router.include_router(export.router, prefix="/export", tags=["export"])
