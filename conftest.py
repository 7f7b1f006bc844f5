"""
Pytest fixtures for the rain monitor.

Provides stub fetchers/notification channels, a deterministic monitor and a
TestClient with the monitor dependency overridden.
"""
from datetime import datetime, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from rain_monitor.api.deps import get_rain_monitor
from rain_monitor.core.config import Settings
from rain_monitor.domain.models import SourceReading, WeatherSource
from rain_monitor.domain.services.interfaces import INotificationChannel
from rain_monitor.domain.services.monitor import RainMonitor
from rain_monitor.domain.services.notification_service import NotificationService
from rain_monitor.main import app

# Inside the July-January monitoring season
FIXED_NOW = datetime(2026, 8, 1, 12, 0, tzinfo=timezone.utc)


class StaticFetcher:
    """Fetcher stub: fixed rainfall per zone name, `default` for the rest (None = no data)."""

    def __init__(self, source: WeatherSource, rainfall_by_zone: Optional[dict] = None,
                 default: Optional[float] = 0.0, enabled: bool = True):
        self.source = source
        self.rainfall_by_zone = rainfall_by_zone or {}
        self.default = default
        self.enabled = enabled
        self.calls: list[str] = []

    def get_source(self) -> WeatherSource:
        return self.source

    def is_enabled(self) -> bool:
        return self.enabled

    async def fetch(self, zone):
        self.calls.append(zone.name)
        rainfall = self.rainfall_by_zone.get(zone.name, self.default)
        if rainfall is None:
            return None
        return SourceReading(
            zone=zone.name,
            source=self.source,
            rainfall_mm=rainfall,
            temperature_c=28.0,
            humidity_pct=85,
            condition_text="Moderate rain" if rainfall > 0 else "Overcast",
            fetched_at=FIXED_NOW,
        )


class RecordingChannel(INotificationChannel):
    """Notification channel stub recording every message it is asked to send."""

    def __init__(self, configured: bool = True, outcome=True):
        self.configured = configured
        self.outcome = outcome
        self.sent: list[dict] = []

    def is_configured(self) -> bool:
        return self.configured

    async def send(self, subject: str, text: str, html: str) -> bool:
        self.sent.append({"subject": subject, "text": text, "html": html})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture
def static_fetcher():
    return StaticFetcher


@pytest.fixture
def recording_channel():
    return RecordingChannel


@pytest.fixture
def test_settings():
    """Settings isolated from .env, with no courtesy delay between zones."""
    return Settings(
        _env_file=None,
        OPEN_METEO_ENABLED=True,
        OPENWEATHER_API_KEY="",
        WEATHERAPI_KEY="",
        METEOMATICS_USERNAME="",
        METEOMATICS_PASSWORD="",
        TELEGRAM_BOT_TOKEN="",
        TELEGRAM_CHAT_ID="",
        EMAIL_FROM="",
        EMAIL_TO="",
        EMAIL_PASS="",
        ZONE_DELAY_MS=0,
        ALERT_HISTORY_LIMIT=100,
    )


@pytest.fixture
def telegram_channel():
    return RecordingChannel()


@pytest.fixture
def email_channel():
    return RecordingChannel()


@pytest.fixture
def make_monitor(test_settings, telegram_channel, email_channel):
    """Factory for a RainMonitor wired to stub fetchers and recording channels."""

    def _make(fetchers=None, clock=None, settings=None, **kwargs):
        config = settings or test_settings
        notifier = NotificationService(config, telegram=telegram_channel, email=email_channel)
        return RainMonitor(
            config=config,
            fetchers=fetchers if fetchers is not None else [
                StaticFetcher(WeatherSource.OPEN_METEO),
            ],
            notifier=notifier,
            clock=clock or (lambda: FIXED_NOW),
            **kwargs,
        )

    return _make


@pytest.fixture
def monitor(make_monitor):
    return make_monitor()


@pytest.fixture
def client(monitor):
    """Create a test client with the monitor dependency overridden."""
    app.dependency_overrides[get_rain_monitor] = lambda: monitor
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
