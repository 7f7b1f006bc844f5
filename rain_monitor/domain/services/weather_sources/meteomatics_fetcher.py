"""
Meteomatics Fetcher - point query against the Meteomatics time-series API.

Requires METEOMATICS_USERNAME / METEOMATICS_PASSWORD (HTTP basic auth).

URL shape: https://api.meteomatics.com/{time}/{params}/{lat},{lon}/json
Response: {"data": [{"parameter": "precip_1h:mm",
                     "coordinates": [{"dates": [{"value": 0.4}]}]}, ...]}
"""

from typing import Any, Optional
import logging

import httpx

from rain_monitor.domain.models import SourceReading, WeatherSource
from rain_monitor.domain.zones import Zone
from .base_fetcher import BaseWeatherFetcher, WeatherSourceError

logger = logging.getLogger(__name__)


METEOMATICS_URL = "https://api.meteomatics.com"

PARAMETERS = {
    "precip_1h:mm": "rainfall_mm",
    "t_2m:C": "temperature_c",
    "relative_humidity_2m:p": "humidity_pct",
    "msl_pressure:hPa": "pressure_hpa",
    "wind_speed_10m:ms": "wind_speed_ms",
    "total_cloud_cover:p": "cloud_cover_pct",
    "weather_symbol_1h:idx": "symbol",
}

# Weather symbol index (values >100 are the night-time variants)
SYMBOL_CONDITIONS = {
    1: "Clear sky",
    2: "Light clouds",
    3: "Partly cloudy",
    4: "Cloudy",
    5: "Rain",
    6: "Rain and snow",
    7: "Snow",
    8: "Rain shower",
    9: "Snow shower",
    10: "Sleet shower",
    11: "Light fog",
    12: "Dense fog",
    13: "Freezing rain",
    14: "Thunderstorms",
    15: "Drizzle",
    16: "Sandstorm",
}

CLEAR_SKY_SYMBOLS = {1, 101}


class MeteomaticsFetcher(BaseWeatherFetcher):
    """Fetches current weather from Meteomatics."""

    def get_source(self) -> WeatherSource:
        return WeatherSource.METEOMATICS

    def is_enabled(self) -> bool:
        return bool(self.config.METEOMATICS_USERNAME and self.config.METEOMATICS_PASSWORD)

    async def _request(self, client: httpx.AsyncClient, zone: Zone) -> Any:
        url = f"{METEOMATICS_URL}/now/{','.join(PARAMETERS)}/{zone.lat},{zone.lon}/json"
        return await self._get_json(
            client,
            url,
            auth=(self.config.METEOMATICS_USERNAME, self.config.METEOMATICS_PASSWORD),
        )

    def _parse(self, zone: Zone, payload: Any) -> SourceReading:
        if not isinstance(payload, dict) or not payload.get("data"):
            raise WeatherSourceError("response has no 'data' series")

        values = {}
        for series in payload["data"]:
            field = PARAMETERS.get(series.get("parameter"))
            if field:
                values[field] = self._first_value(series)

        symbol = values.get("symbol")
        symbol = int(symbol) if symbol is not None else None

        rainfall = self.clamp_rainfall(values.get("rainfall_mm"))
        rainfall = self.apply_clear_sky_override(zone, rainfall, symbol in CLEAR_SKY_SYMBOLS)

        return SourceReading(
            zone=zone.name,
            source=self.get_source(),
            rainfall_mm=rainfall,
            temperature_c=self.optional_float(values.get("temperature_c")),
            humidity_pct=self.optional_float(values.get("humidity_pct")),
            pressure_hpa=self.optional_float(values.get("pressure_hpa")),
            wind_speed_ms=self.optional_float(values.get("wind_speed_ms")),
            cloud_cover_pct=self.optional_float(values.get("cloud_cover_pct")),
            condition_text=self._condition_text(symbol),
            fetched_at=self.now(),
        )

    def _first_value(self, series: dict) -> Optional[float]:
        """Pull the single value out of a one-point, one-date series."""
        try:
            value = series["coordinates"][0]["dates"][0]["value"]
        except (KeyError, IndexError, TypeError):
            raise WeatherSourceError(f"malformed series for {series.get('parameter')}")
        # Meteomatics uses -999 for "no value"
        if value is None or value == -999:
            return None
        return value

    def _condition_text(self, symbol: Optional[int]) -> Optional[str]:
        if symbol is None:
            return None
        return SYMBOL_CONDITIONS.get(symbol % 100, f"Symbol {symbol}")
