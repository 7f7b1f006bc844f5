"""
Tests for the HTTP API.

The monitor dependency is overridden with a stub-backed RainMonitor
(see conftest.py), so no provider or channel is contacted.
"""
from rain_monitor.api.deps import get_rain_monitor
from rain_monitor.domain.models import WeatherSource
from rain_monitor.domain.zones import MUMBAI_ZONES
from rain_monitor.main import app


def use_monitor(monitor):
    app.dependency_overrides[get_rain_monitor] = lambda: monitor


class TestWeatherEndpoints:

    def test_weather_empty_before_first_cycle(self, client):
        response = client.get("/api/weather")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"] == {}
        assert data["last_update"] is None
        assert data["zones_count"] == 0

    def test_refresh_populates_snapshot(self, client):
        response = client.post("/api/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["active_alerts"] == 0
        assert len(data["data"]) == len(MUMBAI_ZONES)

        weather = client.get("/api/weather").json()
        assert weather["zones_count"] == len(MUMBAI_ZONES)
        assert weather["data"]["Dadar"]["intensity"] == "No Rain"
        assert weather["last_update"] is not None

    def test_check_weather_reports_alerts(self, client, make_monitor, static_fetcher):
        use_monitor(make_monitor(fetchers=[
            static_fetcher(WeatherSource.OPEN_METEO, {"Dadar": 8.5, "Kurla": 1.2}),
        ]))

        data = client.post("/api/check-weather").json()

        assert data["success"] is True
        assert data["active_alerts"] == 2
        assert data["data"]["Dadar"]["intensity"] == "Heavy"
        assert data["cycle"]["flood_risk"] == "LOW"

    def test_check_weather_while_cycle_running(self, client, monitor):
        monitor._cycle_in_progress = True

        data = client.post("/api/check-weather").json()

        assert data["success"] is False
        assert data["message"] == "Weather update already in progress"


class TestAlertEndpoints:

    def test_alerts_empty(self, client):
        data = client.get("/api/alerts").json()

        assert data["success"] is True
        assert data["alerts"] == []
        assert data["total_alerts"] == 0

    def test_alerts_newest_first_with_limit(self, client):
        client.post("/api/force-alert", params={"zone": "Dadar", "rainfall": 3.0})
        client.post("/api/force-alert", params={"zone": "Sion", "rainfall": 9.0})
        client.post("/api/force-alert", params={"zone": "Kurla", "rainfall": 40.0})

        data = client.get("/api/alerts", params={"limit": 2}).json()

        assert data["total_alerts"] == 3
        assert [a["zone"] for a in data["alerts"]] == ["Kurla", "Sion"]
        assert data["alerts"][0]["intensity"] == "Very Heavy"

    def test_alerts_invalid_limit(self, client):
        response = client.get("/api/alerts", params={"limit": 0})
        assert response.status_code == 422


class TestMonitoringEndpoints:

    def test_status(self, client):
        response = client.get("/api/status")

        assert response.status_code == 200
        status = response.json()["status"]
        assert status["monitoring"] is False
        assert status["season"] is True
        assert status["zones_count"] == len(MUMBAI_ZONES)
        assert status["config_status"]["open_meteo"] is True

    def test_start_and_stop(self, client):
        data = client.post("/api/start").json()

        assert data["success"] is True
        assert data["zones"] == len(MUMBAI_ZONES)
        assert data["cycle"]["trigger"] == "start"
        assert client.get("/api/status").json()["status"]["monitoring"] is True

        data = client.post("/api/stop").json()
        assert data["success"] is True

        status = client.get("/api/status").json()["status"]
        assert status["monitoring"] is False
        assert status["weather_data_available"] is True

    def test_start_rejected_out_of_season(self, client, make_monitor):
        from datetime import datetime, timezone

        april = datetime(2026, 4, 10, 9, 0, tzinfo=timezone.utc)
        use_monitor(make_monitor(clock=lambda: april))

        data = client.post("/api/start").json()

        assert data["success"] is False
        assert data["current_month"] == 4
        assert data["cycle"] is None

    def test_update_config(self, client, monitor):
        response = client.post("/api/config", json={"WEATHERAPI_KEY": "  new-key  "})

        assert response.status_code == 200
        data = response.json()
        assert data["updated"] == ["WEATHERAPI_KEY"]
        assert monitor.config.WEATHERAPI_KEY == "new-key"

    def test_update_config_no_changes(self, client):
        data = client.post("/api/config", json={}).json()

        assert data["message"] == "No changes"
        assert data["updated"] == []


class TestDiagnosticsEndpoints:

    def test_force_alert_defaults(self, client, telegram_channel):
        response = client.post("/api/force-alert")

        assert response.status_code == 200
        data = response.json()
        alert = data["cycle"]["alerts"][0]
        assert alert["zone"] == "Dadar"
        assert alert["rainfall_mm"] == 5.0
        assert alert["intensity"] == "Medium"
        assert data["cycle"]["notifications"]["telegram"] is True
        assert len(telegram_channel.sent) == 1

    def test_force_alert_zone_is_case_insensitive(self, client):
        data = client.post("/api/force-alert", params={"zone": "dadar"}).json()
        assert data["cycle"]["alerts"][0]["zone"] == "Dadar"

    def test_force_alert_unknown_zone(self, client):
        response = client.post("/api/force-alert", params={"zone": "Atlantis"})

        assert response.status_code == 404
        assert "Atlantis" in response.json()["detail"]

    def test_system_test(self, client):
        data = client.get("/api/test").json()

        assert data["success"] is True
        assert data["sources"] == {"open_meteo": True}
        assert data["telegram"] is True
        assert data["email"] is True

    def test_channel_test_messages(self, client, email_channel):
        assert client.post("/api/test-telegram").json()["success"] is True

        email_channel.configured = False
        data = client.post("/api/test-email").json()
        assert data["success"] is False
        assert "not configured" in data["message"]

    def test_channel_delivery_failure(self, client, telegram_channel):
        telegram_channel.outcome = False

        data = client.post("/api/test-telegram").json()

        assert data["success"] is False
        assert "delivery failed" in data["message"]

    def test_unhandled_error_returns_500(self, client, monitor):
        def broken_status():
            raise RuntimeError("status exploded")

        monitor.get_status = broken_status

        response = client.get("/api/status")

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["error"] == "Internal server error"
