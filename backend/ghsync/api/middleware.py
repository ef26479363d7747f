"""Middleware and exception handlers for the FastAPI application."""

import time
import traceback
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from ghsync.core.config import settings
from ghsync.core.exceptions import (
    GhSyncException,
    GitHubGraphQLError,
    MissingGitHubTokenError,
    NotFoundException,
    PersistenceError,
    UpstreamNotFoundError,
    UpstreamTransportError,
)
from ghsync.core.logging import logger


async def add_request_id(request: Request, call_next: callable) -> Response:
    """Middleware to generate and add a request ID to the request for tracing.

    Args:
    ----
        request (Request): The incoming request.
        call_next (callable): The next middleware in the chain.

    Returns:
    -------
        Response: The response to the incoming request.

    """
    request.state.request_id = str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


async def log_requests(request: Request, call_next: callable) -> Response:
    """Middleware to log handled requests with their duration and status code."""
    start_time = time.monotonic()
    response = await call_next(request)
    duration = time.monotonic() - start_time
    logger.info(
        f"Handled request {request.method} {request.url.path} in {duration:.2f} seconds. "
        f"Response code: {response.status_code}"
    )
    return response


async def exception_logging_middleware(request: Request, call_next: callable) -> Response:
    """Middleware to log unhandled exceptions and turn them into a 500 response."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

        response_content = {
            "detail": f"Internal Server Error: {exc.__class__.__name__}: {str(exc)}"
        }
        if settings.LOCAL_DEVELOPMENT:
            response_content["trace"] = traceback.format_exc()

        return JSONResponse(status_code=500, content=response_content)


async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    """Exception handler for NotFoundException.

    Args:
    ----
        request (Request): The incoming request that triggered the exception.
        exc (NotFoundException): The exception object that was raised.

    Returns:
    -------
        JSONResponse: A 404 Not Found status response that details the error message.

    """
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def ghsync_exception_handler(request: Request, exc: GhSyncException) -> JSONResponse:
    """Generic exception handler for all GhSyncException types.

    Upstream failures are reported as a bad gateway: the request was fine, GitHub was not.

    Args:
    ----
        request (Request): The incoming request that triggered the exception.
        exc (GhSyncException): The exception object that was raised.

    Returns:
    -------
        JSONResponse: HTTP response with appropriate status code and error details.
    """
    status_code_map = {
        # 404 Not Found - Repository or collection doesn't exist upstream
        UpstreamNotFoundError: 404,
        # 502 Bad Gateway - GitHub unreachable or answered with errors
        UpstreamTransportError: 502,
        GitHubGraphQLError: 502,
        # 503 Service Unavailable - No GitHub token configured
        MissingGitHubTokenError: 503,
        # 500 Internal Server Error - Batch rolled back
        PersistenceError: 500,
    }

    status_code = status_code_map.get(type(exc), 500)
    if status_code >= 500:
        logger.error(f"{exc.__class__.__name__}: {exc}")
    else:
        logger.warning(f"{exc.__class__.__name__}: {exc}")

    return JSONResponse(status_code=status_code, content={"detail": str(exc)})
