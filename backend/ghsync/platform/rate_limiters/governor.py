"""Rate limit governor: decides how long to wait between pages."""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional

from ghsync.core.datetime_utils import parse_github_datetime, utc_now
from ghsync.core.logging import ContextualLogger, logger as default_logger
from ghsync.platform.sync.types import RateLimitSnapshot

DEFAULT_THRESHOLD = 50
DEFAULT_BUFFER = timedelta(seconds=1)


class RateLimitGovernor:
    """Waits out the upstream quota when it runs low.

    Above the threshold no delay is applied. At or below it the governor waits until the
    reported reset time plus a buffer.
    """

    def __init__(
        self,
        threshold: int = DEFAULT_THRESHOLD,
        buffer: timedelta = DEFAULT_BUFFER,
        clock: Callable[[], datetime] = utc_now,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the governor.

        Args:
            threshold: Remaining quota at or below which to wait
            buffer: Pad added after the reset time
            clock: Source of the current time, timezone-aware
            logger: Logger for waits and invalid reset times
        """
        self.threshold = threshold
        self.buffer = buffer
        self.clock = clock
        self.logger = logger or default_logger

    def compute_delay(self, snapshot: Optional[RateLimitSnapshot]) -> timedelta:
        """Delay before the next request. Never negative."""
        if snapshot is None or snapshot.remaining > self.threshold:
            return timedelta(0)

        try:
            reset_at = parse_github_datetime(snapshot.reset_at)
        except (TypeError, ValueError):
            self.logger.warning(
                f"Invalid rate limit reset time {snapshot.reset_at!r}; continuing without delay"
            )
            return timedelta(0)

        return max(timedelta(0), reset_at - self.clock() + self.buffer)

    async def wait(self, snapshot: Optional[RateLimitSnapshot]) -> timedelta:
        """Sleep for the computed delay and return it."""
        delay = self.compute_delay(snapshot)
        if delay > timedelta(0):
            self.logger.warning(
                f"Rate limit low ({snapshot.remaining} remaining); "
                f"waiting {delay.total_seconds():.1f}s until {snapshot.reset_at}"
            )
            await asyncio.sleep(delay.total_seconds())
        return delay
