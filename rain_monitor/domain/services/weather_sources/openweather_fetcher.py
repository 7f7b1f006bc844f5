"""
OpenWeatherMap Fetcher - current conditions from the /data/2.5/weather API.

Requires OPENWEATHER_API_KEY. Rain is reported as a nested block
({"1h": mm} or {"3h": mm}) and is absent entirely when it is not raining.
"""

from typing import Any
import logging

import httpx

from rain_monitor.domain.models import SourceReading, WeatherSource
from rain_monitor.domain.zones import Zone
from .base_fetcher import BaseWeatherFetcher, WeatherSourceError

logger = logging.getLogger(__name__)


OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"

CLEAR_SKY_ID = 800


class OpenWeatherFetcher(BaseWeatherFetcher):
    """Fetches current weather from OpenWeatherMap."""

    def get_source(self) -> WeatherSource:
        return WeatherSource.OPENWEATHER

    def is_enabled(self) -> bool:
        return bool(self.config.OPENWEATHER_API_KEY)

    async def _request(self, client: httpx.AsyncClient, zone: Zone) -> Any:
        return await self._get_json(
            client,
            OPENWEATHER_URL,
            params={
                "lat": zone.lat,
                "lon": zone.lon,
                "appid": self.config.OPENWEATHER_API_KEY,
                "units": "metric",
            },
        )

    def _parse(self, zone: Zone, payload: Any) -> SourceReading:
        if not isinstance(payload, dict) or "main" not in payload:
            raise WeatherSourceError("response has no 'main' block")

        main = payload["main"]
        weather = (payload.get("weather") or [{}])[0]
        wind = payload.get("wind") or {}
        clouds = payload.get("clouds") or {}

        is_clear = weather.get("id") == CLEAR_SKY_ID or weather.get("main") == "Clear"
        rainfall = self.flatten_precipitation(payload.get("rain"))
        rainfall = self.apply_clear_sky_override(zone, rainfall, is_clear)

        return SourceReading(
            zone=zone.name,
            source=self.get_source(),
            rainfall_mm=rainfall,
            temperature_c=self.optional_float(main.get("temp")),
            humidity_pct=self.optional_float(main.get("humidity")),
            pressure_hpa=self.optional_float(main.get("pressure")),
            wind_speed_ms=self.optional_float(wind.get("speed")),
            cloud_cover_pct=self.optional_float(clouds.get("all")),
            condition_text=weather.get("description"),
            fetched_at=self.now(),
        )
