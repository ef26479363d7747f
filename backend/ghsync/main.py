"""Main module of the FastAPI application.

This module sets up the FastAPI application, the middleware to log incoming requests and
unhandled exceptions, and the lifespan that owns the database and the scheduler.
"""

import os
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ghsync.api.middleware import (
    add_request_id,
    exception_logging_middleware,
    ghsync_exception_handler,
    log_requests,
    not_found_exception_handler,
)
from ghsync.api.router import TrailingSlashRouter
from ghsync.api.v1.api import api_router
from ghsync.core.config import settings
from ghsync.core.exceptions import GhSyncException, NotFoundException
from ghsync.core.ingestion_service import IngestionService
from ghsync.core.locks import AdvisoryLockGate
from ghsync.core.logging import logger
from ghsync.db.session import Database
from ghsync.platform.scheduler import SyncScheduler


def run_migrations() -> None:
    """Upgrade the database to the latest alembic revision."""
    logger.info("Running alembic migrations...")
    env = os.environ.copy()
    backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    env["PYTHONPATH"] = backend_dir
    subprocess.run(["alembic", "upgrade", "head"], check=True, cwd=backend_dir, env=env)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events.

    Opens the database, runs alembic migrations when enabled and starts the scheduler. Every
    resource is released again on shutdown.
    """
    if settings.RUN_ALEMBIC_MIGRATIONS:
        run_migrations()

    database = Database.from_settings(settings)
    service = IngestionService(database, AdvisoryLockGate(database), settings)
    app.state.database = database
    app.state.ingestion_service = service

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = SyncScheduler(
            service, settings.SCHEDULER_CRON, settings.scheduled_repositories
        )
        await scheduler.start()

    try:
        yield
    finally:
        if scheduler is not None:
            await scheduler.stop()
        await database.dispose()


def create_app() -> FastAPI:
    """Build the application with its routes, middleware and exception handlers."""
    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url="/openapi.json",
        lifespan=lifespan,
        router=TrailingSlashRouter(),
        redirect_slashes=False,
    )
    app.include_router(api_router)

    app.middleware("http")(add_request_id)
    app.middleware("http")(log_requests)
    app.middleware("http")(exception_logging_middleware)

    app.exception_handler(NotFoundException)(not_found_exception_handler)
    app.exception_handler(GhSyncException)(ghsync_exception_handler)

    return app


app = create_app()
