"""
Monitor Scheduler - periodic weather check on a fixed interval.

Uses APScheduler to call RainMonitor.scheduled_check() every
UPDATE_INTERVAL_MINUTES (default 30). The check itself is a no-op while
monitoring is stopped or out of season.

Usage:
    from rain_monitor.domain.services.scheduler import start_scheduler, stop_scheduler

    # In FastAPI startup:
    start_scheduler()

    # In FastAPI shutdown:
    stop_scheduler()
"""

from datetime import datetime, timezone
from typing import Optional
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .monitor import RainMonitor, get_monitor

logger = logging.getLogger(__name__)


class MonitorScheduler:
    """Scheduler for the background weather check job."""

    JOB_ID = "weather_check"

    def __init__(self, monitor: Optional[RainMonitor] = None, interval_minutes: Optional[int] = None):
        self.monitor = monitor or get_monitor()
        self.interval_minutes = interval_minutes or self.monitor.config.UPDATE_INTERVAL_MINUTES
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        """Start the scheduler."""
        if self._running:
            logger.warning("[Scheduler] Already running")
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self._run_weather_check,
            IntervalTrigger(minutes=self.interval_minutes),
            id=self.JOB_ID,
            name="Scheduled Weather Check",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        self._running = True

        logger.info(f"[Scheduler] Weather check scheduled every {self.interval_minutes} minutes")

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self._running:
            logger.info("[Scheduler] Stopping weather check scheduler...")
            self.scheduler.shutdown(wait=True)
            self._running = False
            logger.info("[Scheduler] Scheduler stopped")

    async def _run_weather_check(self):
        """Run the scheduled weather check job."""
        start_time = datetime.now(timezone.utc)

        try:
            result = await self.monitor.scheduled_check()
        except Exception as e:
            logger.error(f"[Scheduler] Weather check failed: {e}")
            return

        if result is None:
            return

        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(
            f"[Scheduler] Weather check completed in {duration:.1f}s: "
            f"{len(result.alerts)} alert(s)"
        )


# Global scheduler instance
_scheduler: Optional[MonitorScheduler] = None


def get_scheduler() -> MonitorScheduler:
    """Get or create global scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = MonitorScheduler()
    return _scheduler


def start_scheduler():
    """Start the global scheduler."""
    scheduler = get_scheduler()
    scheduler.start()


def stop_scheduler():
    """Stop the global scheduler."""
    global _scheduler
    if _scheduler:
        _scheduler.stop()
        _scheduler = None
