"""Health refresher - periodically re-probes the selected server.

Keeps the cached health status current between explicit probes. It never
re-registers the device; registration only runs on reconciliation triggers.
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .environment import EnvironmentSelector

logger = logging.getLogger(__name__)


class HealthRefresher:
    """Runs EnvironmentSelector.probe_health on an interval."""

    def __init__(self, environment: EnvironmentSelector, interval_seconds: int):
        self._environment = environment
        self.interval_seconds = interval_seconds
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """Start the scheduler. An interval of 0 or less disables refreshing."""
        if self._running:
            return
        if self.interval_seconds <= 0:
            logger.info("Health refresh disabled")
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.refresh,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id="refresh_health",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=self.interval_seconds,
        )
        self.scheduler.start()
        self._running = True
        logger.info(f"Health refresher started (interval={self.interval_seconds}s)")

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Health refresher stopped")

    async def refresh(self):
        """Probe the current environment once; failures are classified, not raised."""
        status = await self._environment.probe_health()
        logger.debug(f"Health refreshed: {status.display_text}")
        return status
