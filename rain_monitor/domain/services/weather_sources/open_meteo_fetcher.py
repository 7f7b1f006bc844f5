"""
Open-Meteo Fetcher - current conditions from the Open-Meteo forecast API.

API: https://api.open-meteo.com/v1/forecast
Free, no API key required. Reports precipitation (mm) summed over the
current 15-minute interval, scaled here to mm/hr.
"""

from typing import Any
import logging

import httpx

from rain_monitor.domain.models import SourceReading, WeatherSource
from rain_monitor.domain.zones import Zone
from .base_fetcher import BaseWeatherFetcher, WeatherSourceError

logger = logging.getLogger(__name__)


OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_FIELDS = [
    "temperature_2m",
    "relative_humidity_2m",
    "precipitation",
    "weather_code",
    "cloud_cover",
    "pressure_msl",
    "wind_speed_10m",
]

# WMO weather interpretation codes
WMO_CONDITIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

CLEAR_SKY_CODES = {0, 1}


class OpenMeteoFetcher(BaseWeatherFetcher):
    """Fetches current weather from Open-Meteo."""

    def get_source(self) -> WeatherSource:
        return WeatherSource.OPEN_METEO

    def is_enabled(self) -> bool:
        return self.config.OPEN_METEO_ENABLED

    async def _request(self, client: httpx.AsyncClient, zone: Zone) -> Any:
        return await self._get_json(
            client,
            OPEN_METEO_URL,
            params={
                "latitude": zone.lat,
                "longitude": zone.lon,
                "current": ",".join(CURRENT_FIELDS),
                "wind_speed_unit": "ms",
                "timezone": "Asia/Kolkata",
            },
        )

    def _parse(self, zone: Zone, payload: Any) -> SourceReading:
        current = payload.get("current") if isinstance(payload, dict) else None
        if not isinstance(current, dict):
            raise WeatherSourceError("response has no 'current' block")

        code = current.get("weather_code")
        rainfall = self.clamp_rainfall(current.get("precipitation"))
        # "current" values are totals over the preceding `interval` seconds (15 min)
        interval = self.optional_float(current.get("interval")) or 3600
        rainfall = round(rainfall * 3600 / interval, 2)
        rainfall = self.apply_clear_sky_override(zone, rainfall, code in CLEAR_SKY_CODES)

        return SourceReading(
            zone=zone.name,
            source=self.get_source(),
            rainfall_mm=rainfall,
            temperature_c=self.optional_float(current.get("temperature_2m")),
            humidity_pct=self.optional_float(current.get("relative_humidity_2m")),
            pressure_hpa=self.optional_float(current.get("pressure_msl")),
            wind_speed_ms=self.optional_float(current.get("wind_speed_10m")),
            cloud_cover_pct=self.optional_float(current.get("cloud_cover")),
            condition_text=WMO_CONDITIONS.get(code, f"WMO code {code}" if code is not None else None),
            fetched_at=self.now(),
        )
