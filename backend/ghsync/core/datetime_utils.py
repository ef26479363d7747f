"""Datetime utilities for consistent timezone handling across the application."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time - standardized across the application.

    Returns:
        Current datetime in UTC timezone.
    """
    return datetime.now(timezone.utc)


def parse_github_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp as returned by GitHub (e.g. '2026-02-01T03:00:00Z').

    Naive values are assumed to be UTC.

    Raises:
        ValueError: If the value is not a valid ISO 8601 timestamp.
        TypeError: If the value is not a string.
    """
    if not isinstance(value, str):
        raise TypeError(f"Expected an ISO 8601 string, got {type(value).__name__}")
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    return ensure_utc(parsed)


def ensure_utc(dt: datetime) -> datetime:
    """Ensure a datetime is UTC timezone-aware."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
