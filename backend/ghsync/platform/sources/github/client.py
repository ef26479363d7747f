"""Async client for the GitHub GraphQL API."""

from typing import Any, Callable, Optional

import httpx
from tenacity import AsyncRetrying, stop_after_attempt

from ghsync.core.config import Settings
from ghsync.core.exceptions import (
    GitHubGraphQLError,
    MissingGitHubTokenError,
    UpstreamTransportError,
)
from ghsync.core.logging import ContextualLogger, LoggerConfigurator
from ghsync.platform.sources.github.retry import retry_if_retryable, wait_rate_limit_with_backoff
from ghsync.schemas.github import GraphQLResponse

DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"

client_logger = LoggerConfigurator.configure_logger(
    __name__, dimensions={"component": "github_graphql"}
)


class GitHubGraphQLClient:
    """POSTs GraphQL documents to GitHub with a bearer token.

    Transport errors, 5xx and 429 responses are retried with tenacity. What still fails after
    the last attempt is raised as UpstreamTransportError. A response carrying an `errors`
    envelope raises GitHubGraphQLError.

    Usage:
        async with GitHubGraphQLClient(token) as client:
            data = await client.execute(ISSUES_QUERY, {"owner": "octo", ...})
    """

    def __init__(
        self,
        token: Optional[str],
        url: str = DEFAULT_GRAPHQL_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        max_attempts: int = 3,
        wait: Callable = wait_rate_limit_with_backoff,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the client.

        Args:
            token: GitHub token; required
            url: GraphQL endpoint
            timeout: Per-request timeout in seconds
            http_client: Client to send requests with; one is created and owned otherwise
            max_attempts: Attempts per request, including the first
            wait: tenacity wait strategy between attempts
            logger: Logger to use

        Raises:
            MissingGitHubTokenError: If no token is given.
        """
        if not token:
            raise MissingGitHubTokenError()

        self.url = url
        self.max_attempts = max_attempts
        self.wait = wait
        self.logger = logger or client_logger
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/vnd.github+json",
        }
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: Optional[httpx.AsyncClient] = None
    ) -> "GitHubGraphQLClient":
        """Create a client from GITHUB_* settings."""
        return cls(
            token=settings.GITHUB_TOKEN,
            url=settings.GITHUB_GRAPHQL_URL,
            timeout=settings.GITHUB_REQUEST_TIMEOUT,
            http_client=http_client,
        )

    async def __aenter__(self) -> "GitHubGraphQLClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_http_client:
            await self._http.aclose()

    async def _post(self, body: dict[str, Any]) -> dict[str, Any]:
        response = await self._http.post(self.url, json=body, headers=self._headers)
        response.raise_for_status()
        return response.json()

    async def execute(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict:
        """Execute a GraphQL document and return its `data` object.

        Args:
            query: The GraphQL document
            variables: Variables of the document

        Returns:
            The `data` object of the response, empty if absent

        Raises:
            UpstreamTransportError: If the request failed after all attempts.
            GitHubGraphQLError: If the response carries errors.
        """
        body = {"query": query, "variables": variables or {}}

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_retryable,
                wait=self.wait,
                stop=stop_after_attempt(self.max_attempts),
                before_sleep=self._log_retry,
                reraise=True,
            ):
                with attempt:
                    payload = await self._post(body)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise UpstreamTransportError(
                f"GitHub GraphQL error: {status} {e.response.reason_phrase}", status_code=status
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamTransportError(f"GitHub GraphQL request failed: {e}") from e
        except ValueError as e:
            raise UpstreamTransportError(f"GitHub GraphQL returned invalid JSON: {e}") from e

        response = GraphQLResponse.model_validate(payload)
        if response.errors:
            raise GitHubGraphQLError(response.errors)

        return response.data or {}

    def _log_retry(self, retry_state) -> None:
        exception = retry_state.outcome.exception()
        self.logger.warning(
            f"GitHub GraphQL request failed ({exception!r}); "
            f"retrying, attempt {retry_state.attempt_number + 1}/{self.max_attempts}"
        )
