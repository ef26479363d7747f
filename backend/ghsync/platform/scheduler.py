"""Scheduler for periodic ingestion.

Runs the ingestion of every configured repository each time the cron expression fires.
"""

import asyncio
from datetime import datetime
from typing import Callable, Optional, Sequence

from croniter import croniter

from ghsync.core.datetime_utils import utc_now
from ghsync.core.ingestion_service import IngestionService
from ghsync.core.logging import LoggerConfigurator

logger = LoggerConfigurator.configure_logger(__name__, dimensions={"component": "scheduler"})


class SyncScheduler:
    """Triggers repository ingestion on a cron schedule.

    A repository that fails is logged and skipped; the others still run, and the next tick
    resumes it from its stored cursor.
    """

    def __init__(
        self,
        service: IngestionService,
        cron: str,
        repositories: Sequence[tuple[str, str]],
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the scheduler.

        Args:
            service: Ingestion service to run repositories with
            cron: Cron expression, evaluated in UTC
            repositories: (owner, name) pairs to ingest

        Raises:
            ValueError: If the cron expression is invalid.
        """
        if not croniter.is_valid(cron):
            raise ValueError(f"Invalid cron expression '{cron}'")

        self.service = service
        self.cron = cron
        self.repositories = list(repositories)
        self.clock = clock
        self.running = False
        self.task: Optional[asyncio.Task] = None

    def next_run_after(self, moment: datetime) -> datetime:
        """Next time the cron expression fires strictly after `moment`."""
        return croniter(self.cron, moment).get_next(datetime)

    async def run_all(self) -> dict[str, bool]:
        """Ingest every configured repository once.

        Returns:
            Whether each repository ('owner/name') succeeded
        """
        outcome: dict[str, bool] = {}
        for owner, name in self.repositories:
            repo_id = f"{owner}/{name}"
            try:
                runs = await self.service.run_repository(owner, name)
                outcome[repo_id] = True
                logger.info(
                    f"Scheduled ingestion of {repo_id} finished: "
                    + ", ".join(f"{k}={run.items_persisted}" for k, run in runs.items())
                )
            except Exception as e:
                outcome[repo_id] = False
                logger.error(f"Scheduled ingestion of {repo_id} failed: {e}", exc_info=True)
        return outcome

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        self.running = True
        self.task = asyncio.create_task(self._scheduler_loop())
        logger.info(
            f"Sync scheduler started with '{self.cron}' for {len(self.repositories)} repositories"
        )

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            logger.warning("Scheduler is not running")
            return

        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                logger.debug("Scheduler task cancelled successfully")
            self.task = None
        logger.info("Sync scheduler stopped")

    async def _scheduler_loop(self):
        """Sleep until the next cron tick, then ingest every repository."""
        while self.running:
            now = self.clock()
            next_run = self.next_run_after(now)
            delay = max(0.0, (next_run - now).total_seconds())
            logger.debug(f"Next scheduled ingestion at {next_run.isoformat()}")
            await asyncio.sleep(delay)

            try:
                await self.run_all()
            except Exception as e:
                logger.error(f"Error in scheduler loop: {e}", exc_info=True)
