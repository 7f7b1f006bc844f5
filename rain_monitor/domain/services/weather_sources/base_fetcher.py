"""
Base Fetcher - Abstract base class for all weather source fetchers.

All fetchers must implement:
- get_source() -> WeatherSource
- is_enabled() -> bool
- _request(client, zone) -> dict        (raw provider payload)
- _parse(zone, payload) -> SourceReading

fetch(zone) wraps the two provider hooks and never raises: any transport,
status or parse failure is logged and returned as None ("no data").
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional
import logging

import httpx

from rain_monitor.core.config import Settings, settings as default_settings
from rain_monitor.domain.models import SourceReading, WeatherSource
from rain_monitor.domain.zones import Zone

logger = logging.getLogger(__name__)


class WeatherSourceError(Exception):
    """Raised when a provider payload is missing required fields."""
    pass


class BaseWeatherFetcher(ABC):
    """Abstract base class for all weather source fetchers."""

    USER_AGENT = "MumbaiRainMonitor/1.0"

    def __init__(self, config: Optional[Settings] = None, timeout: Optional[float] = None):
        """
        Args:
            config: Settings to read API keys from (read on every call, so
                runtime updates via /api/config take effect immediately)
            timeout: Request timeout in seconds
        """
        self.config = config or default_settings
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        if self._timeout is not None:
            return self._timeout
        return self.config.FETCH_TIMEOUT_SECONDS

    @abstractmethod
    def get_source(self) -> WeatherSource:
        """Return the provider identifier."""
        pass

    @abstractmethod
    def is_enabled(self) -> bool:
        """Check if this fetcher has the config/API keys it needs."""
        pass

    @abstractmethod
    async def _request(self, client: httpx.AsyncClient, zone: Zone) -> Any:
        """Issue the provider request and return the decoded JSON payload."""
        pass

    @abstractmethod
    def _parse(self, zone: Zone, payload: Any) -> SourceReading:
        """
        Convert a provider payload into a SourceReading.

        Raises:
            WeatherSourceError: If the payload does not have the expected shape
        """
        pass

    async def fetch(self, zone: Zone) -> Optional[SourceReading]:
        """
        Fetch current conditions for a zone.

        Returns:
            SourceReading, or None if the provider is disabled or failed
        """
        if not self.is_enabled():
            logger.debug(f"[{self.get_source().value}] Fetcher disabled via config")
            return None

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.USER_AGENT},
            ) as client:
                payload = await self._request(client, zone)
            reading = self._parse(zone, payload)
        except httpx.TimeoutException:
            self.log_fetch_error(zone, f"timed out after {self.timeout}s")
            return None
        except Exception as e:
            self.log_fetch_error(zone, e)
            return None

        logger.debug(
            f"[{self.get_source().value}] {zone.name}: {reading.rainfall_mm}mm/hr "
            f"({reading.condition_text})"
        )
        return reading

    async def _get_json(self, client: httpx.AsyncClient, url: str, **kwargs) -> Any:
        """GET a URL and decode JSON, raising on non-2xx status."""
        response = await client.get(url, **kwargs)
        response.raise_for_status()
        return response.json()

    # Rainfall helpers shared by providers

    @staticmethod
    def clamp_rainfall(value: Any) -> float:
        """Coerce to float and clamp negatives to zero."""
        if value is None:
            return 0.0
        try:
            return max(0.0, float(value))
        except (TypeError, ValueError):
            return 0.0

    @classmethod
    def flatten_precipitation(cls, block: Optional[dict]) -> float:
        """
        Flatten a nested {"1h": x, "3h": y} precipitation block.

        Prefers the 1h figure, falls back to 3h, else 0.
        """
        if not block or not isinstance(block, dict):
            return 0.0
        if block.get("1h") is not None:
            return cls.clamp_rainfall(block["1h"])
        if block.get("3h") is not None:
            return cls.clamp_rainfall(block["3h"])
        return 0.0

    def apply_clear_sky_override(self, zone: Zone, rainfall: float, is_clear: bool) -> float:
        """Provider says clear/sunny - treat any reported rainfall as noise."""
        if is_clear and rainfall > 0:
            logger.debug(
                f"[{self.get_source().value}] {zone.name}: clear sky, "
                f"ignoring {rainfall}mm reading"
            )
            return 0.0
        return rainfall

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def optional_float(value: Any) -> Optional[float]:
        if value is None:
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def log_fetch_error(self, zone: Zone, error):
        """Log fetch operation error."""
        logger.warning(f"[{self.get_source().value}] Fetch failed for {zone.name}: {error}")
