"""Common test fixtures and configuration for pytest."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tests.helpers.in_memory import InMemoryCursorStore, InMemorySink


@pytest.fixture
def cursor_store():
    """Provide an empty in-memory cursor store."""
    return InMemoryCursorStore()


@pytest.fixture
def sink():
    """Provide an in-memory upsert sink."""
    return InMemorySink()


@pytest.fixture
def mock_db_session():
    """Provide a mock DB session for unit tests."""
    return AsyncMock(spec=AsyncSession)
