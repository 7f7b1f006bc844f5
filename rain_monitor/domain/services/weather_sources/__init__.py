"""
Weather Sources Module

Fetches current conditions for a zone from multiple weather providers:
- Open-Meteo (free, no key)
- OpenWeatherMap (OPENWEATHER_API_KEY)
- WeatherAPI.com (WEATHERAPI_KEY)
- Meteomatics (METEOMATICS_USERNAME / METEOMATICS_PASSWORD)

Every fetcher implements the same capability:

    reading = await fetcher.fetch(zone)   # SourceReading or None

Usage:
    from rain_monitor.domain.services.weather_sources import build_fetchers

    fetchers = [f for f in build_fetchers() if f.is_enabled()]
"""

from typing import Optional

from rain_monitor.core.config import Settings
from .base_fetcher import BaseWeatherFetcher, WeatherSourceError
from .open_meteo_fetcher import OpenMeteoFetcher
from .openweather_fetcher import OpenWeatherFetcher
from .weatherapi_fetcher import WeatherAPIFetcher
from .meteomatics_fetcher import MeteomaticsFetcher


def build_fetchers(config: Optional[Settings] = None) -> list[BaseWeatherFetcher]:
    """Create one fetcher per supported provider (enabled or not)."""
    return [
        OpenMeteoFetcher(config),
        OpenWeatherFetcher(config),
        WeatherAPIFetcher(config),
        MeteomaticsFetcher(config),
    ]


__all__ = [
    "BaseWeatherFetcher",
    "WeatherSourceError",
    "OpenMeteoFetcher",
    "OpenWeatherFetcher",
    "WeatherAPIFetcher",
    "MeteomaticsFetcher",
    "build_fetchers",
]
