"""
Alert history API.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from rain_monitor.api.deps import get_rain_monitor
from rain_monitor.core.config import settings
from rain_monitor.domain.models import Alert
from rain_monitor.domain.services.monitor import RainMonitor

router = APIRouter()


class AlertsResponse(BaseModel):
    success: bool = True
    alerts: list[Alert]
    total_alerts: int


@router.get("/alerts", response_model=AlertsResponse)
async def get_alerts(
    limit: Optional[int] = Query(None, ge=1, le=500, description="Maximum alerts to return"),
    monitor: RainMonitor = Depends(get_rain_monitor),
):
    """
    Get the most recent alerts, newest first.

    Defaults to ALERTS_RESPONSE_LIMIT (50) entries.
    """
    limit = limit or settings.ALERTS_RESPONSE_LIMIT
    return AlertsResponse(
        alerts=monitor.history.recent(limit),
        total_alerts=len(monitor.history),
    )
