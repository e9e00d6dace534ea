"""Background scheduler for the today-fixtures sync."""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from matchday.config import Settings, get_settings
from matchday.etl.api_football import APIFootballClient
from matchday.etl.pipeline import sync_today_fixtures
from matchday.telemetry import sentry_job_context

logger = logging.getLogger(__name__)

FIXTURES_SYNC_JOB_ID = "fixtures_sync_today"


class FixtureSyncScheduler:
    """Owns the recurring fixtures sync.

    Constructing it does nothing; ``start()`` schedules the first run
    immediately and then every ``FIXTURES_SYNC_INTERVAL_SECONDS``; ``stop()``
    shuts the scheduler down. Both are safe to call twice.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        client_factory: Callable[[], APIFootballClient] = APIFootballClient,
        settings: Optional[Settings] = None,
    ):
        self.session_factory = session_factory
        self.client_factory = client_factory
        self.settings = settings or get_settings()
        self._scheduler: Optional[AsyncIOScheduler] = None
        self.last_sync_at: Optional[datetime] = None
        self.last_result: Optional[dict] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def run_once(self) -> dict:
        """Run one sync cycle with a fresh session and client."""
        with sentry_job_context(FIXTURES_SYNC_JOB_ID):
            async with self.session_factory() as session:
                async with self.client_factory() as client:
                    result = await sync_today_fixtures(session, client, self.settings)

        self.last_sync_at = datetime.now(timezone.utc)
        self.last_result = result
        return result

    def start(self) -> None:
        """Start the scheduler; must be called from a running event loop."""
        if self.running:
            logger.warning("Scheduler already started, skipping duplicate initialization")
            return

        interval = self.settings.FIXTURES_SYNC_INTERVAL_SECONDS
        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(seconds=interval),
            id=FIXTURES_SYNC_JOB_ID,
            name=f"Today's fixtures sync (every {interval}s)",
            replace_existing=True,
            next_run_time=datetime.now(timezone.utc),  # first run at startup
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(f"Scheduler started: fixtures sync every {interval}s")

    def stop(self) -> None:
        """Stop the background scheduler."""
        if not self.running:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Scheduler stopped")
