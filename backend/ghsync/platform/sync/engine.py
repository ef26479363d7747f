"""Incremental sync engine.

Pages through one upstream collection in ascending update order, persists what is newer than
the stored watermark and records a resume point after every page.
"""

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ghsync import schemas
from ghsync.core.ingestion_cursor_service import CursorStore
from ghsync.core.logging import ContextualLogger, LoggerConfigurator
from ghsync.core.shared_models import TerminationReason
from ghsync.platform.rate_limiters.governor import RateLimitGovernor
from ghsync.platform.sync.types import EntitySyncConfig, NodeT, PageRequest, SyncRequest, SyncRun

engine_logger = LoggerConfigurator.configure_logger(
    __name__, dimensions={"component": "sync_engine"}
)


class IncrementalSyncEngine:
    """Runs the fetch, filter, persist, checkpoint loop for one (repository, entity type).

    Guarantees:
    - the cursor is written only after the page's nodes were persisted, so a failed or
      cancelled run resumes from the last completed page;
    - the watermark never moves backwards, the cursor store merges it with max;
    - page N+1 is fetched only after page N was persisted and checkpointed, and is filtered
      against the watermark page N left behind.

    Callers must hold the ingestion lock of the key for the whole run.
    """

    def __init__(
        self,
        cursor_store: CursorStore,
        governor: Optional[RateLimitGovernor] = None,
        overlap: timedelta = timedelta(0),
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the engine.

        Args:
            cursor_store: Where resume points are loaded from and saved to
            governor: Rate limit governor consulted between pages; None disables waiting
            overlap: Grace window subtracted from the watermark when filtering. Nodes updated
                within it are read again, which idempotent upserts absorb.
            logger: Logger to use, defaults to the engine logger
        """
        self.cursor_store = cursor_store
        self.governor = governor
        self.overlap = overlap
        self.logger = logger or engine_logger

    async def run(self, request: SyncRequest, config: EntitySyncConfig[NodeT]) -> SyncRun:
        """Synchronize one entity type of a repository.

        Args:
            request: The repository
            config: Fetch, persist and timestamp functions of the entity type

        Returns:
            Summary of the run

        Raises:
            Whatever fetch_page, persist or the cursor store raise. The cursor of the failing
            page is not written.
        """
        repo_id = request.repo_id
        log = self.logger.with_context(repo_id=repo_id, entity_type=config.entity_type)

        state = await self.cursor_store.load(repo_id, config.entity_type)
        cursor = state.cursor if state else None
        watermark = state.last_synced_at if state else None

        run = SyncRun(
            repo_id=repo_id, entity_type=config.entity_type, cursor=cursor, watermark=watermark
        )
        log.info(f"Starting sync from cursor={cursor} watermark={watermark}")

        while True:
            page = await config.fetch_page(
                PageRequest(
                    owner=request.owner,
                    name=request.name,
                    cursor=cursor,
                    page_size=config.page_size,
                )
            )
            run.pages_fetched += 1

            survivors, reached_boundary = self._filter_new(
                page.nodes, self._boundary(watermark), config
            )

            if survivors:
                await config.persist(survivors)
                run.items_persisted += len(survivors)

            candidate = max((config.extract_updated_at(n) for n in survivors), default=None)

            # an empty page has no end cursor; keep the position we fetched it from
            next_cursor = page.page_info.next_cursor or cursor
            saved = await self.cursor_store.save(
                schemas.CursorStateUpdate(
                    repo_id=repo_id,
                    entity_type=config.entity_type,
                    cursor=next_cursor,
                    last_synced_at=candidate,
                )
            )
            run.cursor = saved.cursor
            run.watermark = saved.last_synced_at
            # the watermark of this page gates the filter of the next one
            watermark = saved.last_synced_at

            log.info(
                f"Page {run.pages_fetched}: fetched={len(page.nodes)} persisted={len(survivors)} "
                f"cursor={saved.cursor} watermark={saved.last_synced_at}"
            )

            if reached_boundary:
                run.termination = TerminationReason.WATERMARK_BOUNDARY
                log.info(f"Reached already-synced nodes after {run.pages_fetched} pages")
                break

            if not page.page_info.has_more or page.page_info.next_cursor is None:
                run.termination = TerminationReason.EXHAUSTED
                break

            cursor = page.page_info.next_cursor

            if self.governor is not None:
                await self.governor.wait(page.rate_limit)

        log.info(
            f"Finished sync ({run.termination.value}): pages={run.pages_fetched} "
            f"items={run.items_persisted} watermark={run.watermark}"
        )
        return run

    def _boundary(self, watermark: Optional[datetime]) -> Optional[datetime]:
        """Filter boundary for a watermark, widened by the overlap window."""
        if watermark is None:
            return None
        return watermark - self.overlap

    @staticmethod
    def _filter_new(
        nodes: Sequence[NodeT], boundary: Optional[datetime], config: EntitySyncConfig[NodeT]
    ) -> tuple[list[NodeT], bool]:
        """Split a page at the first node not newer than the boundary.

        Returns the nodes before that point and whether the boundary was reached. Without a
        boundary every node is new.
        """
        if boundary is None:
            return list(nodes), False

        survivors: list[NodeT] = []
        for node in nodes:
            if config.extract_updated_at(node) <= boundary:
                return survivors, True
            survivors.append(node)
        return survivors, False
