"""Retry helpers for the GitHub GraphQL transport.

Retries 429 responses (honoring Retry-After), 5xx responses and transport errors.
"""

import httpx
from tenacity import retry_if_exception, wait_exponential

MAX_RETRY_AFTER_SECONDS = 120.0


def should_retry_on_rate_limit(exception: BaseException) -> bool:
    """Check if exception is a retryable rate limit (429)."""
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code == 429
    return False


def should_retry_on_server_error(exception: BaseException) -> bool:
    """Check if exception is a 5xx response."""
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code >= 500
    return False


def should_retry_on_transport_error(exception: BaseException) -> bool:
    """Check if exception is a connection failure or timeout."""
    return isinstance(exception, httpx.TransportError)


def should_retry(exception: BaseException) -> bool:
    """Combined retry condition for GraphQL requests."""
    return (
        should_retry_on_rate_limit(exception)
        or should_retry_on_server_error(exception)
        or should_retry_on_transport_error(exception)
    )


def wait_rate_limit_with_backoff(retry_state) -> float:
    """Wait strategy that respects Retry-After for 429s, exponential backoff otherwise.

    Args:
        retry_state: tenacity retry state

    Returns:
        Number of seconds to wait before retry
    """
    exception = retry_state.outcome.exception()

    if should_retry_on_rate_limit(exception):
        retry_after = exception.response.headers.get("Retry-After")
        if retry_after:
            try:
                # at least 1s, or every attempt lands inside the same window
                return min(max(float(retry_after), 1.0), MAX_RETRY_AFTER_SECONDS)
            except (ValueError, TypeError):
                pass
        return wait_exponential(multiplier=1, min=2, max=30)(retry_state)

    return wait_exponential(multiplier=1, min=2, max=10)(retry_state)


retry_if_retryable = retry_if_exception(should_retry)
