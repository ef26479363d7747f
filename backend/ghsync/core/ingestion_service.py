"""Service that runs the incremental sync of a repository."""

import asyncio
from datetime import timedelta
from typing import Callable, Iterable, Optional

from ghsync.core.config import Settings
from ghsync.core.ingestion_cursor_service import CursorStore, PostgresCursorStore
from ghsync.core.locks import LockGate, ingestion_lock_key
from ghsync.core.logging import LoggerConfigurator
from ghsync.core.shared_models import EntityType
from ghsync.db.session import Database
from ghsync.platform.rate_limiters.governor import RateLimitGovernor
from ghsync.platform.sources.github.client import GitHubGraphQLClient
from ghsync.platform.sources.github.source import GitHubSource
from ghsync.platform.sync.engine import IncrementalSyncEngine
from ghsync.platform.sync.types import SyncRequest, SyncRun

logger = LoggerConfigurator.configure_logger(__name__, dimensions={"component": "ingestion"})

ALL_ENTITY_TYPES = (EntityType.ISSUE, EntityType.PR, EntityType.DISCUSSION)


class IngestionService:
    """Runs issues, pull requests and discussions of a repository through the sync engine.

    Every entity type runs under its own ingestion lock, so two invocations for the same
    repository never overlap on a key while different keys proceed independently.
    """

    def __init__(
        self,
        database: Database,
        gate: LockGate,
        settings: Settings,
        client_factory: Optional[Callable[[], GitHubGraphQLClient]] = None,
        cursor_store: Optional[CursorStore] = None,
    ):
        """Initialize the service.

        Args:
            database: Database for cursors and replicated rows
            gate: Lock gate serializing runs of the same key
            settings: Sync, rate limit and GitHub settings
            client_factory: Creates the GraphQL client of one invocation
            cursor_store: Cursor store; defaults to the ingestion_cursor table
        """
        self.database = database
        self.gate = gate
        self.settings = settings
        self.client_factory = client_factory or (
            lambda: GitHubGraphQLClient.from_settings(settings)
        )
        self.engine = IncrementalSyncEngine(
            cursor_store=cursor_store or PostgresCursorStore(database),
            governor=RateLimitGovernor(
                threshold=settings.RATE_LIMIT_THRESHOLD,
                buffer=timedelta(seconds=settings.RATE_LIMIT_BUFFER_SECONDS),
            ),
            overlap=timedelta(seconds=settings.SYNC_OVERLAP_SECONDS),
        )

    async def run_repository(
        self,
        owner: str,
        name: str,
        entity_types: Iterable[EntityType] = ALL_ENTITY_TYPES,
        concurrent: Optional[bool] = None,
    ) -> dict[str, SyncRun]:
        """Sync the given entity types of owner/name.

        Args:
            owner: Repository owner
            name: Repository name
            entity_types: Entity types to sync
            concurrent: Run entity types concurrently; defaults to SYNC_CONCURRENT_ENTITY_TYPES

        Returns:
            The run of every entity type, keyed by entity type

        Raises:
            MissingGitHubTokenError: If no GitHub token is configured.
            The first error of a failed entity type, once every entity type has finished.
        """
        if concurrent is None:
            concurrent = self.settings.SYNC_CONCURRENT_ENTITY_TYPES

        request = SyncRequest(owner=owner, name=name)
        entity_types = list(entity_types)
        logger.info(
            f"Ingesting {request.repo_id}: {[e.value for e in entity_types]} "
            f"({'concurrent' if concurrent else 'sequential'})"
        )

        async with self.client_factory() as client:
            source = GitHubSource(
                client,
                self.database,
                page_size=self.settings.SYNC_PAGE_SIZE,
                comment_page_size=self.settings.COMMENT_PAGE_SIZE,
            )

            async def run_one(entity_type: EntityType) -> SyncRun:
                config = source.sync_config(entity_type, request.repo_id)
                return await self.gate.with_lock(
                    ingestion_lock_key(request.repo_id, entity_type.value),
                    lambda: self.engine.run(request, config),
                )

            if not concurrent:
                return {
                    entity_type.value: await run_one(entity_type) for entity_type in entity_types
                }

            results = await asyncio.gather(
                *(run_one(entity_type) for entity_type in entity_types), return_exceptions=True
            )

        runs: dict[str, SyncRun] = {}
        errors: list[BaseException] = []
        for entity_type, result in zip(entity_types, results):
            if isinstance(result, BaseException):
                logger.error(
                    f"Ingestion of {entity_type.value} for {request.repo_id} failed: {result}"
                )
                errors.append(result)
            else:
                runs[entity_type.value] = result
        if errors:
            raise errors[0]
        return runs
