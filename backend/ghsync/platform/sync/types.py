"""Value types of the incremental sync engine.

The engine knows nothing about GitHub: a source plugs in through `EntitySyncConfig`, a set of
plain async functions operating on opaque nodes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from ghsync.core.shared_models import TerminationReason

NodeT = TypeVar("NodeT")


@dataclass(frozen=True)
class SyncRequest:
    """Repository to synchronize."""

    owner: str
    name: str

    @property
    def repo_id(self) -> str:
        """Repository identifier, 'owner/name'."""
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class PageRequest:
    """Arguments of one page fetch. `cursor` None means the first page."""

    owner: str
    name: str
    cursor: Optional[str]
    page_size: int


@dataclass(frozen=True)
class PageInfo:
    """Pagination state returned with a page."""

    next_cursor: Optional[str] = None
    has_more: bool = False


@dataclass(frozen=True)
class RateLimitSnapshot:
    """Remaining quota as reported alongside a page.

    `reset_at` is kept as received (ISO 8601, or None when upstream omits it); the governor
    parses it.
    """

    remaining: int
    reset_at: Optional[str]


@dataclass(frozen=True)
class Page(Generic[NodeT]):
    """One page of nodes, ordered by ascending update time."""

    nodes: Sequence[NodeT]
    page_info: PageInfo
    rate_limit: Optional[RateLimitSnapshot] = None


@dataclass(frozen=True)
class EntitySyncConfig(Generic[NodeT]):
    """How to sync one entity type.

    Attributes:
        entity_type: Key of the cursor, e.g. 'ISSUE'.
        fetch_page: Fetch one page; raises UpstreamNotFoundError when the collection is missing.
        persist: Atomically upsert a batch of nodes; never called with an empty batch.
        extract_updated_at: Update time of a node, timezone-aware.
        page_size: Number of nodes requested per page.
    """

    entity_type: str
    fetch_page: Callable[[PageRequest], Awaitable[Page[NodeT]]]
    persist: Callable[[Sequence[NodeT]], Awaitable[Any]]
    extract_updated_at: Callable[[NodeT], datetime]
    page_size: int = 50


@dataclass
class SyncRun:
    """Outcome of one engine invocation. Not persisted beyond the cursor."""

    repo_id: str
    entity_type: str
    cursor: Optional[str] = None
    watermark: Optional[datetime] = None
    termination: TerminationReason = TerminationReason.EXHAUSTED
    pages_fetched: int = 0
    items_persisted: int = 0
