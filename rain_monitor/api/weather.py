"""
Weather API - current reconciled snapshot and manual refresh.

Endpoints:
- GET  /weather        - Current zone -> reading snapshot
- POST /refresh        - Run an update cycle now
- POST /check-weather  - Run an update cycle and report active alerts
"""
from datetime import datetime
from typing import Optional
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from rain_monitor.api.deps import get_rain_monitor
from rain_monitor.domain.models import CycleResult, ReconciledReading
from rain_monitor.domain.services.monitor import RainMonitor

logger = logging.getLogger(__name__)

router = APIRouter()


class WeatherResponse(BaseModel):
    success: bool = True
    data: dict[str, ReconciledReading]
    last_update: Optional[datetime]
    zones_count: int


class CheckWeatherResponse(BaseModel):
    success: bool
    message: str
    active_alerts: int = 0
    data: dict[str, ReconciledReading] = {}
    timestamp: Optional[datetime] = None
    cycle: Optional[CycleResult] = None


@router.get("/weather", response_model=WeatherResponse)
async def get_weather(monitor: RainMonitor = Depends(get_rain_monitor)):
    """Get the latest reconciled reading for every zone."""
    return WeatherResponse(
        data=monitor.snapshot,
        last_update=monitor.state.last_update_at,
        zones_count=len(monitor.snapshot),
    )


async def _run_manual_cycle(monitor: RainMonitor, trigger: str) -> CheckWeatherResponse:
    logger.info(f"🔍 Manual weather check triggered ({trigger})")
    cycle = await monitor.run_cycle(trigger=trigger)

    if cycle is None:
        return CheckWeatherResponse(
            success=False,
            message="Weather update already in progress",
            data=monitor.snapshot,
            timestamp=monitor.state.last_update_at,
        )

    return CheckWeatherResponse(
        success=True,
        message="Weather check completed",
        active_alerts=len(cycle.alerts),
        data=monitor.snapshot,
        timestamp=monitor.state.last_update_at,
        cycle=cycle,
    )


@router.post("/refresh", response_model=CheckWeatherResponse)
async def refresh_weather(monitor: RainMonitor = Depends(get_rain_monitor)):
    """Refresh weather data for all zones now."""
    return await _run_manual_cycle(monitor, "refresh")


@router.post("/check-weather", response_model=CheckWeatherResponse)
async def check_weather(monitor: RainMonitor = Depends(get_rain_monitor)):
    """Run a weather check and report how many zones are alerting."""
    return await _run_manual_cycle(monitor, "manual")
