"""
WeatherAPI.com Fetcher - current conditions from /v1/current.json.

Requires WEATHERAPI_KEY. Precipitation is reported directly as precip_mm.
"""

from typing import Any
import logging

import httpx

from rain_monitor.domain.models import SourceReading, WeatherSource
from rain_monitor.domain.zones import Zone
from .base_fetcher import BaseWeatherFetcher, WeatherSourceError

logger = logging.getLogger(__name__)


WEATHERAPI_URL = "https://api.weatherapi.com/v1/current.json"

# 1000 = "Sunny" (day) / "Clear" (night)
CLEAR_SKY_CODE = 1000


class WeatherAPIFetcher(BaseWeatherFetcher):
    """Fetches current weather from WeatherAPI.com."""

    def get_source(self) -> WeatherSource:
        return WeatherSource.WEATHERAPI

    def is_enabled(self) -> bool:
        return bool(self.config.WEATHERAPI_KEY)

    async def _request(self, client: httpx.AsyncClient, zone: Zone) -> Any:
        return await self._get_json(
            client,
            WEATHERAPI_URL,
            params={
                "key": self.config.WEATHERAPI_KEY,
                "q": f"{zone.lat},{zone.lon}",
                "aqi": "no",
            },
        )

    def _parse(self, zone: Zone, payload: Any) -> SourceReading:
        current = payload.get("current") if isinstance(payload, dict) else None
        if not isinstance(current, dict):
            raise WeatherSourceError("response has no 'current' block")

        condition = current.get("condition") or {}
        text = condition.get("text")
        is_clear = condition.get("code") == CLEAR_SKY_CODE or (
            text is not None and text.strip().lower() in ("sunny", "clear")
        )

        rainfall = self.clamp_rainfall(current.get("precip_mm"))
        rainfall = self.apply_clear_sky_override(zone, rainfall, is_clear)

        wind_kph = self.optional_float(current.get("wind_kph"))

        return SourceReading(
            zone=zone.name,
            source=self.get_source(),
            rainfall_mm=rainfall,
            temperature_c=self.optional_float(current.get("temp_c")),
            humidity_pct=self.optional_float(current.get("humidity")),
            pressure_hpa=self.optional_float(current.get("pressure_mb")),
            wind_speed_ms=round(wind_kph / 3.6, 2) if wind_kph is not None else None,
            cloud_cover_pct=self.optional_float(current.get("cloud")),
            condition_text=text.strip() if text else None,
            fetched_at=self.now(),
        )
