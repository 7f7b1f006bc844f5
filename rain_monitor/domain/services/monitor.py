"""
Rain monitor - pipeline coordinator and monitoring state machine.

Owns the weather snapshot, the alert history and the Stopped/Active state,
and runs the update cycle:

    zones -> fetchers (concurrent per zone) -> reconcile -> evaluate
          -> history + notify

Zones are processed one at a time with a short courtesy delay between them
to respect provider rate limits. Only one cycle runs at a time; a cycle
triggered while another is in flight is skipped.
"""

import asyncio
import calendar
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence
import logging

from rain_monitor.core.config import Settings, settings as default_settings
from rain_monitor.domain.models import (
    Confidence,
    CycleResult,
    MonitoringState,
    ReconciledReading,
    SourceReading,
)
from rain_monitor.domain.zones import MUMBAI_ZONES, Zone
from .alert_evaluator import AlertEvaluation, classify_flood_risk, create_alert, evaluate
from .alert_history import AlertHistory
from .notification_service import NotificationService
from .reconciler import classify_intensity, reconcile
from .weather_sources import BaseWeatherFetcher, build_fetchers

logger = logging.getLogger(__name__)


def is_monitoring_season(today: date, start_month: int = 7, end_month: int = 1) -> bool:
    """
    Check whether a date falls inside the monitoring season.

    The range is inclusive and may wrap across year end (July -> January).
    """
    month = today.month
    if start_month <= end_month:
        return start_month <= month <= end_month
    return month >= start_month or month <= end_month


def season_label(start_month: int = 7, end_month: int = 1) -> str:
    """Month range as text, e.g. 'July-January'."""
    if start_month == end_month:
        return calendar.month_name[start_month]
    return f"{calendar.month_name[start_month]}-{calendar.month_name[end_month]}"


def off_season_label(start_month: int = 7, end_month: int = 1) -> str:
    """The months outside the season, e.g. 'February-June'."""
    return season_label(end_month % 12 + 1, (start_month - 2) % 12 + 1)


@dataclass
class StartResult:
    started: bool
    message: str
    cycle: Optional[CycleResult] = None


class RainMonitor:
    """
    Pipeline coordinator.

    Usage:
        monitor = RainMonitor()
        result = await monitor.start()
        snapshot = monitor.snapshot
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        fetchers: Optional[list[BaseWeatherFetcher]] = None,
        notifier: Optional[NotificationService] = None,
        zones: Sequence[Zone] = MUMBAI_ZONES,
        clock: Optional[Callable[[], datetime]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or default_settings
        self.fetchers = fetchers if fetchers is not None else build_fetchers(self.config)
        self.notifier = notifier or NotificationService(self.config)
        self.zones = list(zones)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sleep = sleep

        self.state = MonitoringState()
        self.snapshot: dict[str, ReconciledReading] = {}
        self.history = AlertHistory(self.config.ALERT_HISTORY_LIMIT)
        self._cycle_in_progress = False

    def now(self) -> datetime:
        return self._clock()

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle_in_progress

    def in_season(self, today: Optional[date] = None) -> bool:
        today = today or self._clock().date()
        return is_monitoring_season(
            today, self.config.SEASON_START_MONTH, self.config.SEASON_END_MONTH
        )

    def season_label(self) -> str:
        return season_label(self.config.SEASON_START_MONTH, self.config.SEASON_END_MONTH)

    def off_season_label(self) -> str:
        return off_season_label(self.config.SEASON_START_MONTH, self.config.SEASON_END_MONTH)

    def get_enabled_fetchers(self) -> list[BaseWeatherFetcher]:
        return [f for f in self.fetchers if f.is_enabled()]

    def get_source_status(self) -> dict[str, bool]:
        return {f.get_source().value: f.is_enabled() for f in self.fetchers}

    # State machine

    async def start(self, today: Optional[date] = None) -> StartResult:
        """Stopped -> Active, then run one cycle immediately. Rejected out of season."""
        if not self.in_season(today):
            logger.warning("[Monitor] Start rejected - outside monitoring season")
            return StartResult(
                started=False,
                message=f"Outside monitoring season ({self.season_label()})",
            )

        self.state.active = True
        logger.info("🚀 [Monitor] Weather monitoring started")

        cycle = await self.run_cycle(trigger="start")
        return StartResult(started=True, message="Monitoring started successfully", cycle=cycle)

    def stop(self):
        """Active -> Stopped. Does not touch the snapshot or history."""
        self.state.active = False
        logger.info("⏹️ [Monitor] Weather monitoring stopped")

    async def scheduled_check(self, today: Optional[date] = None) -> Optional[CycleResult]:
        """Timer entry point - no-op unless Active and in season."""
        if not self.state.active or not self.in_season(today):
            logger.debug("[Monitor] Scheduled check skipped (monitoring inactive or out of season)")
            return None

        logger.info("⏰ [Monitor] Performing scheduled weather check...")
        return await self.run_cycle(trigger="timer")

    # Update cycle

    async def fetch_zone(self, zone: Zone) -> list[SourceReading]:
        """Query every enabled provider for one zone concurrently, dropping failures."""
        fetchers = self.get_enabled_fetchers()
        if not fetchers:
            return []

        results = await asyncio.gather(
            *(f.fetch(zone) for f in fetchers),
            return_exceptions=True,
        )

        readings = []
        for fetcher, result in zip(fetchers, results):
            if isinstance(result, Exception):
                logger.error(f"[Monitor] {fetcher.get_source().value} raised for {zone.name}: {result}")
                continue
            if result is not None:
                readings.append(result)
        return readings

    async def run_cycle(self, trigger: str = "manual") -> Optional[CycleResult]:
        """
        Run one full update cycle.

        Returns:
            CycleResult, or None if another cycle was already running
        """
        if self._cycle_in_progress:
            logger.warning(f"[Monitor] Update cycle already in progress - skipping {trigger} trigger")
            return None

        self._cycle_in_progress = True
        try:
            return await self._run_cycle(trigger)
        finally:
            self._cycle_in_progress = False

    async def _run_cycle(self, trigger: str) -> CycleResult:
        started_at = self._clock()
        logger.info(f"🔄 [Monitor] Updating weather data for {len(self.zones)} zones ({trigger})")

        snapshot: dict[str, ReconciledReading] = {}
        delay = self.config.ZONE_DELAY_MS / 1000

        for index, zone in enumerate(self.zones):
            readings = await self.fetch_zone(zone)
            snapshot[zone.name] = reconcile(zone.name, readings, self._clock())

            if not readings:
                logger.warning(f"[Monitor] No source returned data for {zone.name}")

            if delay > 0 and index < len(self.zones) - 1:
                await self._sleep(delay)

        completed_at = self._clock()
        self.snapshot = snapshot
        self.state.last_update_at = completed_at

        zones_with_data = sum(1 for r in snapshot.values() if not r.stale)
        logger.info(f"📊 [Monitor] Weather data updated: {zones_with_data}/{len(snapshot)} zones with data")

        evaluation = evaluate(
            snapshot.values(), completed_at, self.config.RAIN_ALERT_THRESHOLD_MM
        )
        notifications = await self._record_and_notify(evaluation, completed_at)

        return CycleResult(
            trigger=trigger,
            started_at=started_at,
            completed_at=completed_at,
            zones_updated=len(snapshot),
            zones_with_data=zones_with_data,
            alerts=evaluation.alerts,
            flood_risk=evaluation.flood_risk,
            notifications=notifications,
        )

    async def _record_and_notify(self, evaluation: AlertEvaluation, now: datetime):
        if not evaluation.has_alerts:
            return None

        # History is written before dispatch so a notifier failure cannot lose alerts
        self.history.extend(evaluation.alerts)
        logger.info(
            f"[Monitor] {len(evaluation.alerts)} alert(s) recorded, "
            f"flood risk {evaluation.flood_risk.value}"
        )
        return await self.notifier.notify_alerts(evaluation, now)

    # Diagnostics

    async def force_alert(self, zone: Zone, rainfall_mm: float) -> CycleResult:
        """Synthesize an alert for one zone and push it through history + notifiers."""
        now = self._clock()
        rainfall_mm = round(max(0.0, rainfall_mm), 2)
        reading = ReconciledReading(
            zone=zone.name,
            rainfall_mm=rainfall_mm,
            intensity=classify_intensity(rainfall_mm),
            condition_text="Forced test alert",
            sources_used=[],
            confidence=Confidence.LOW,
            computed_at=now,
        )
        alert = create_alert(reading, now)
        evaluation = AlertEvaluation(
            triggering=[reading],
            alerts=[alert],
            flood_risk=classify_flood_risk([reading]),
        )
        logger.info(f"🧪 [Monitor] Forced alert for {zone.name}: {rainfall_mm}mm/hr")
        notifications = await self._record_and_notify(evaluation, now)

        return CycleResult(
            trigger="force-alert",
            started_at=now,
            completed_at=now,
            zones_updated=0,
            zones_with_data=0,
            alerts=[alert],
            flood_risk=evaluation.flood_risk,
            notifications=notifications,
        )

    async def probe_sources(self, zone: Zone) -> dict[str, bool]:
        """Fetch one zone from each provider and report which ones answered."""
        status = {}
        for fetcher in self.fetchers:
            if not fetcher.is_enabled():
                status[fetcher.get_source().value] = False
                continue
            status[fetcher.get_source().value] = await fetcher.fetch(zone) is not None
        return status

    def active_alert_count(self) -> int:
        threshold = self.config.RAIN_ALERT_THRESHOLD_MM
        return sum(1 for r in self.snapshot.values() if r.rainfall_mm >= threshold)

    def get_status(self) -> dict:
        return {
            "monitoring": self.state.active,
            "season": self.in_season(),
            "zones_count": len(self.zones),
            "last_update": self.state.last_update_at,
            "alert_count": len(self.history),
            "weather_data_available": bool(self.snapshot),
            "cycle_in_progress": self._cycle_in_progress,
            "config_status": {
                **self.get_source_status(),
                **self.notifier.get_channel_status(),
            },
        }


# Global monitor instance
_monitor: Optional[RainMonitor] = None


def get_monitor() -> RainMonitor:
    """Get or create the global monitor instance."""
    global _monitor
    if _monitor is None:
        _monitor = RainMonitor()
    return _monitor
