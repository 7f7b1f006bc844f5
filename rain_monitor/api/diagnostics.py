"""
Diagnostics API - manual triggers for checking providers and channels.

Endpoints:
- GET  /test           - Probe every provider with one zone, send a Telegram test
- POST /test-telegram  - Send a Telegram test message
- POST /test-email     - Send an email test message
- POST /force-alert    - Create an alert for a zone and dispatch notifications
"""
from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from rain_monitor.api.deps import get_rain_monitor, resolve_zone
from rain_monitor.domain.models import CycleResult
from rain_monitor.domain.services.monitor import RainMonitor

logger = logging.getLogger(__name__)

router = APIRouter()


class SystemTestResponse(BaseModel):
    success: bool = True
    server: bool = True
    sources: dict[str, bool]
    telegram: Optional[bool]
    email: bool
    timestamp: datetime


class ChannelTestResponse(BaseModel):
    success: bool
    channel: str
    message: str


class ForceAlertResponse(BaseModel):
    success: bool = True
    message: str
    cycle: CycleResult


@router.get("/test", response_model=SystemTestResponse)
async def run_system_test(monitor: RainMonitor = Depends(get_rain_monitor)):
    """Run system tests: provider probe on the first zone plus a Telegram message."""
    logger.info("🧪 Running system tests...")
    now = datetime.now(timezone.utc)

    sources = await monitor.probe_sources(monitor.zones[0])
    telegram = await monitor.notifier.send_test_message("telegram", now)
    email = monitor.notifier.email.is_configured()

    logger.info(f"🧪 Test results: sources={sources}, telegram={telegram}, email={email}")
    return SystemTestResponse(sources=sources, telegram=telegram, email=email, timestamp=now)


async def _test_channel(monitor: RainMonitor, channel: str) -> ChannelTestResponse:
    outcome = await monitor.notifier.send_test_message(channel, datetime.now(timezone.utc))
    if outcome is None:
        return ChannelTestResponse(success=False, channel=channel, message=f"{channel} is not configured")
    if not outcome:
        return ChannelTestResponse(success=False, channel=channel, message=f"{channel} delivery failed")
    return ChannelTestResponse(success=True, channel=channel, message=f"{channel} test message sent")


@router.post("/test-telegram", response_model=ChannelTestResponse)
async def test_telegram(monitor: RainMonitor = Depends(get_rain_monitor)):
    return await _test_channel(monitor, "telegram")


@router.post("/test-email", response_model=ChannelTestResponse)
async def test_email(monitor: RainMonitor = Depends(get_rain_monitor)):
    return await _test_channel(monitor, "email")


@router.post("/force-alert", response_model=ForceAlertResponse)
async def force_alert(
    zone: str = Query("Dadar", description="Zone name"),
    rainfall: float = Query(5.0, ge=0, le=500, description="Rainfall in mm/hr"),
    monitor: RainMonitor = Depends(get_rain_monitor),
):
    """Force an alert for a zone (bypasses the threshold and the providers)."""
    target = resolve_zone(zone)
    cycle = await monitor.force_alert(target, rainfall)
    return ForceAlertResponse(message=f"Forced alert created for {target.name}", cycle=cycle)
