"""Router that answers every path with and without a trailing slash."""

from typing import Any, Callable

from fastapi import APIRouter
from fastapi.types import DecoratedCallable


class TrailingSlashRouter(APIRouter):
    """APIRouter that registers "/issues" and "/issues/" for the same endpoint.

    Only the form without the slash appears in the OpenAPI schema. The application disables
    FastAPI's slash redirects, so clients never receive a 307 for a trailing slash.
    """

    def api_route(
        self, path: str, *, include_in_schema: bool = True, **kwargs: Any
    ) -> Callable[[DecoratedCallable], DecoratedCallable]:
        """Register the endpoint under `path` without and with a trailing slash."""
        canonical = path.rstrip("/")
        register_canonical = super().api_route(
            canonical, include_in_schema=include_in_schema, **kwargs
        )
        register_slashed = super().api_route(canonical + "/", include_in_schema=False, **kwargs)

        def decorator(func: DecoratedCallable) -> DecoratedCallable:
            register_slashed(func)
            return register_canonical(func)

        return decorator
