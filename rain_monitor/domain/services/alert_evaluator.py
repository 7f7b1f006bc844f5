"""
Alert evaluation - threshold check per zone plus aggregate flood risk.

Alerts are level-triggered: a zone above the threshold on N consecutive
cycles produces N alerts.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional
import logging
import uuid

from rain_monitor.domain.models import Alert, FloodRisk, ReconciledReading

logger = logging.getLogger(__name__)

IST = timezone(timedelta(hours=5, minutes=30), name="IST")

# Flood risk rules
HEAVY_ZONE_MM = 7.0          # A zone at/above this counts towards HIGH
HEAVY_ZONE_COUNT = 3
TOTAL_RAINFALL_MM = 20.0     # Summed rainfall above this is MEDIUM
WIDESPREAD_ZONE_COUNT = 5

FLOOD_RISK_MESSAGES = {
    FloodRisk.HIGH: "🔴 HIGH flood risk - multiple zones reporting heavy rain",
    FloodRisk.MEDIUM: "🟠 MEDIUM flood risk - widespread rainfall across the city",
    FloodRisk.LOW: "🟢 LOW flood risk - localized rainfall",
}


@dataclass
class AlertEvaluation:
    """Result of evaluating one snapshot."""
    triggering: list[ReconciledReading] = field(default_factory=list)
    alerts: list[Alert] = field(default_factory=list)
    flood_risk: Optional[FloodRisk] = None

    @property
    def has_alerts(self) -> bool:
        return bool(self.alerts)


def format_ist(moment: datetime) -> str:
    """Human-readable Indian Standard Time, e.g. '16 Oct 2026, 05:30 PM IST'."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(IST).strftime("%d %b %Y, %I:%M %p IST")


def is_alerting(reading: ReconciledReading, threshold_mm: float = 1.0) -> bool:
    return reading.rainfall_mm >= threshold_mm


def classify_flood_risk(triggering: list[ReconciledReading]) -> Optional[FloodRisk]:
    """
    Aggregate flood risk over the zones that crossed the alert threshold.

    - HIGH:   >= 3 zones individually >= 7 mm/hr
    - MEDIUM: summed rainfall > 20 mm, or >= 5 zones triggering
    - LOW:    anything else with at least one zone triggering
    - None:   no zone triggering
    """
    if not triggering:
        return None

    heavy_zones = sum(1 for r in triggering if r.rainfall_mm >= HEAVY_ZONE_MM)
    if heavy_zones >= HEAVY_ZONE_COUNT:
        return FloodRisk.HIGH

    total = sum(r.rainfall_mm for r in triggering)
    if total > TOTAL_RAINFALL_MM or len(triggering) >= WIDESPREAD_ZONE_COUNT:
        return FloodRisk.MEDIUM

    return FloodRisk.LOW


def build_alert_message(reading: ReconciledReading, created_at: datetime) -> str:
    lines = [
        f"🌧️ RAIN ALERT - {reading.zone}: {reading.rainfall_mm:.1f}mm/hr ({reading.intensity.value})"
    ]
    if reading.temperature_c is not None:
        lines.append(f"🌡️ Temperature: {reading.temperature_c}°C")
    if reading.humidity_pct is not None:
        lines.append(f"💧 Humidity: {reading.humidity_pct:.0f}%")
    if reading.condition_text:
        lines.append(f"📍 Condition: {reading.condition_text}")
    lines.append(f"⏰ Time: {format_ist(created_at)}")
    return "\n".join(lines)


def create_alert(reading: ReconciledReading, created_at: datetime) -> Alert:
    return Alert(
        id=uuid.uuid4().hex,
        zone=reading.zone,
        rainfall_mm=reading.rainfall_mm,
        intensity=reading.intensity,
        message=build_alert_message(reading, created_at),
        created_at=created_at,
    )


def evaluate(
    readings: Iterable[ReconciledReading],
    created_at: datetime,
    threshold_mm: float = 1.0,
) -> AlertEvaluation:
    """
    Check every zone against the threshold and build alerts.

    Args:
        readings: The current snapshot, in zone order
        created_at: Timestamp for the created alerts
        threshold_mm: Rainfall (mm/hr) at or above which a zone alerts

    Returns:
        AlertEvaluation with one alert per triggering zone
    """
    result = AlertEvaluation()

    for reading in readings:
        if not is_alerting(reading, threshold_mm):
            continue
        result.triggering.append(reading)
        result.alerts.append(create_alert(reading, created_at))
        logger.info(f"🚨 RAIN ALERT: {reading.zone} - {reading.rainfall_mm:.1f}mm/hr")

    result.flood_risk = classify_flood_risk(result.triggering)
    return result
