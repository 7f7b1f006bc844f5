"""
Monitoring API - state machine transitions, status and runtime config.

Endpoints:
- GET  /status  - Monitoring state, season and configured channels
- POST /start   - Stopped -> Active (rejected out of season), runs one cycle
- POST /stop    - Active -> Stopped
- POST /config  - Update provider / notification credentials at runtime
"""
from datetime import datetime
from typing import Optional
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from rain_monitor.api.deps import get_rain_monitor
from rain_monitor.domain.models import CycleResult
from rain_monitor.domain.services.monitor import RainMonitor

logger = logging.getLogger(__name__)

router = APIRouter()


class StatusPayload(BaseModel):
    monitoring: bool
    season: bool
    zones_count: int
    last_update: Optional[datetime]
    alert_count: int
    weather_data_available: bool
    cycle_in_progress: bool
    config_status: dict[str, bool]


class StatusResponse(BaseModel):
    success: bool = True
    status: StatusPayload


class StartResponse(BaseModel):
    success: bool
    message: str
    current_month: Optional[int] = None
    zones: Optional[int] = None
    cycle: Optional[CycleResult] = None


class MessageResponse(BaseModel):
    success: bool
    message: str


class ConfigUpdate(BaseModel):
    """Credentials that may be changed at runtime. Omitted fields are left alone."""
    OPENWEATHER_API_KEY: Optional[str] = None
    WEATHERAPI_KEY: Optional[str] = None
    METEOMATICS_USERNAME: Optional[str] = None
    METEOMATICS_PASSWORD: Optional[str] = None
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_CHAT_ID: Optional[str] = None
    EMAIL_FROM: Optional[str] = None
    EMAIL_TO: Optional[str] = None
    EMAIL_PASS: Optional[str] = None


class ConfigResponse(BaseModel):
    success: bool = True
    message: str
    updated: list[str]
    config_status: dict[str, bool]


@router.get("/status", response_model=StatusResponse)
async def get_status(monitor: RainMonitor = Depends(get_rain_monitor)):
    """Get monitoring state, season flag and configured channels."""
    return StatusResponse(status=StatusPayload(**monitor.get_status()))


@router.post("/start", response_model=StartResponse)
async def start_monitoring(monitor: RainMonitor = Depends(get_rain_monitor)):
    """Start monitoring and run an immediate weather check."""
    result = await monitor.start()

    if not result.started:
        return StartResponse(
            success=False,
            message=result.message,
            current_month=monitor.now().month,
        )

    return StartResponse(
        success=True,
        message=result.message,
        zones=len(monitor.zones),
        cycle=result.cycle,
    )


@router.post("/stop", response_model=MessageResponse)
async def stop_monitoring(monitor: RainMonitor = Depends(get_rain_monitor)):
    """Stop monitoring. Snapshot and alert history are kept."""
    monitor.stop()
    return MessageResponse(success=True, message="Monitoring stopped")


@router.post("/config", response_model=ConfigResponse)
async def update_config(
    update: ConfigUpdate,
    monitor: RainMonitor = Depends(get_rain_monitor),
):
    """Update credentials in place. Fetchers and notifiers read them on every call."""
    changes = update.model_dump(exclude_none=True)
    for key, value in changes.items():
        setattr(monitor.config, key, value.strip())

    if changes:
        logger.info(f"⚙️ Configuration updated: {sorted(changes)}")

    status = monitor.get_status()["config_status"]
    return ConfigResponse(
        message="Configuration updated" if changes else "No changes",
        updated=sorted(changes),
        config_status=status,
    )
