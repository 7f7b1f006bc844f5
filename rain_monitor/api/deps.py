"""
Shared dependencies for FastAPI routes.
"""
from fastapi import HTTPException, status

from rain_monitor.domain.services.monitor import RainMonitor, get_monitor
from rain_monitor.domain.zones import Zone, get_zone, zone_names


def get_rain_monitor() -> RainMonitor:
    """Dependency returning the process-wide monitor (overridden in tests)."""
    return get_monitor()


def resolve_zone(name: str) -> Zone:
    zone = get_zone(name)
    if zone is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Zone '{name}' not found. Available zones: {zone_names()}",
        )
    return zone
