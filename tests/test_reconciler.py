"""
Unit tests for multi-source rainfall reconciliation.

Tests cover:
- Intensity bands and monotonicity
- Majority-clear rule and mean of non-clear readings
- Negative clamping
- Zero-source (No Data) zones
- Confidence, rounding and determinism
"""
from datetime import datetime, timezone

import pytest

from rain_monitor.domain.models import Confidence, RainIntensity, SourceReading, WeatherSource
from rain_monitor.domain.services.reconciler import classify_intensity, fuse_rainfall, reconcile

NOW = datetime(2026, 8, 1, 12, 0, tzinfo=timezone.utc)


def reading(rainfall, source=WeatherSource.OPEN_METEO, **kwargs):
    return SourceReading(zone="Dadar", source=source, rainfall_mm=rainfall, fetched_at=NOW, **kwargs)


# =============================================================================
# INTENSITY
# =============================================================================

class TestClassifyIntensity:

    @pytest.mark.parametrize("rainfall,expected", [
        (0.0, RainIntensity.NO_RAIN),
        (0.009, RainIntensity.NO_RAIN),
        (0.01, RainIntensity.LIGHT),
        (2.49, RainIntensity.LIGHT),
        (2.5, RainIntensity.MEDIUM),
        (7.49, RainIntensity.MEDIUM),
        (7.5, RainIntensity.HEAVY),
        (34.99, RainIntensity.HEAVY),
        (35.0, RainIntensity.VERY_HEAVY),
        (120.0, RainIntensity.VERY_HEAVY),
    ])
    def test_band_boundaries(self, rainfall, expected):
        assert classify_intensity(rainfall) == expected

    def test_monotonic_across_boundaries(self):
        order = [
            RainIntensity.NO_RAIN,
            RainIntensity.LIGHT,
            RainIntensity.MEDIUM,
            RainIntensity.HEAVY,
            RainIntensity.VERY_HEAVY,
        ]
        values = [i / 100 for i in range(0, 5000, 7)]
        ranks = [order.index(classify_intensity(v)) for v in values]
        assert ranks == sorted(ranks)


# =============================================================================
# FUSION
# =============================================================================

class TestFuseRainfall:

    def test_majority_clear_overrides_minority(self):
        assert fuse_rainfall([0, 0, 5.0]) == (0.0, 2)

    def test_mean_of_nonzero_when_no_clear_majority(self):
        rainfall, agreeing = fuse_rainfall([0, 4.0, 6.0])
        assert rainfall == pytest.approx(5.0)
        assert agreeing == 2

    def test_tie_is_not_a_clear_majority(self):
        assert fuse_rainfall([0.0, 3.0]) == (3.0, 1)

    def test_tiny_readings_count_as_clear(self):
        assert fuse_rainfall([0.01, 0.005, 2.0]) == (0.0, 2)

    def test_negative_readings_are_clamped(self):
        rainfall, _ = fuse_rainfall([-3.0, -1.0, 2.0])
        assert rainfall == 0.0

    def test_rounded_to_two_decimals(self):
        rainfall, _ = fuse_rainfall([1.111, 2.222, 3.334])
        assert rainfall == 2.22

    def test_empty(self):
        assert fuse_rainfall([]) == (0.0, 0)


# =============================================================================
# RECONCILE
# =============================================================================

class TestReconcile:

    def test_no_sources_is_stale_no_data(self):
        result = reconcile("Dadar", [], NOW)
        assert result.rainfall_mm == 0.0
        assert result.intensity == RainIntensity.NO_DATA
        assert result.confidence == Confidence.LOW
        assert result.stale is True
        assert result.sources_used == []

    def test_single_source_is_medium_confidence(self):
        result = reconcile("Dadar", [reading(3.0)], NOW)
        assert result.rainfall_mm == 3.0
        assert result.intensity == RainIntensity.MEDIUM
        assert result.confidence == Confidence.MEDIUM
        assert result.stale is False

    def test_two_agreeing_sources_is_high_confidence(self):
        result = reconcile("Dadar", [
            reading(8.5, WeatherSource.OPEN_METEO),
            reading(7.9, WeatherSource.WEATHERAPI),
        ], NOW)
        assert result.rainfall_mm == pytest.approx(8.2)
        assert result.intensity == RainIntensity.HEAVY
        assert result.confidence == Confidence.HIGH
        assert result.sources_used == [WeatherSource.OPEN_METEO, WeatherSource.WEATHERAPI]

    def test_split_vote_with_one_raining_source(self):
        result = reconcile("Dadar", [
            reading(0.0, WeatherSource.OPEN_METEO),
            reading(4.0, WeatherSource.OPENWEATHER),
        ], NOW)
        assert result.rainfall_mm == 4.0
        assert result.sources_agreeing == 1
        assert result.confidence == Confidence.MEDIUM

    def test_majority_clear_zone(self):
        result = reconcile("Dadar", [
            reading(0.0, WeatherSource.OPEN_METEO),
            reading(0.0, WeatherSource.OPENWEATHER),
            reading(5.0, WeatherSource.WEATHERAPI),
        ], NOW)
        assert result.rainfall_mm == 0.0
        assert result.intensity == RainIntensity.NO_RAIN

    def test_negative_source_reading_never_negative(self):
        result = reconcile("Dadar", [reading(-4.0)], NOW)
        assert result.rainfall_mm == 0.0

    def test_ancillary_values_are_averaged(self):
        result = reconcile("Dadar", [
            reading(2.0, WeatherSource.OPEN_METEO, temperature_c=27.0, humidity_pct=80, pressure_hpa=1004.0),
            reading(2.0, WeatherSource.WEATHERAPI, temperature_c=28.5, humidity_pct=91, pressure_hpa=None),
        ], NOW)
        assert result.temperature_c == pytest.approx(27.8)
        assert result.humidity_pct == 86
        assert result.pressure_hpa == 1004.0
        assert result.wind_speed_ms is None

    def test_condition_from_most_trusted_source(self):
        result = reconcile("Dadar", [
            reading(2.0, WeatherSource.OPEN_METEO, condition_text="Slight rain"),
            reading(2.0, WeatherSource.WEATHERAPI, condition_text="Patchy rain nearby"),
        ], NOW)
        assert result.condition_text == "Patchy rain nearby"

    def test_deterministic(self):
        readings = [
            reading(1.3, WeatherSource.OPEN_METEO, temperature_c=27.1),
            reading(0.0, WeatherSource.OPENWEATHER, temperature_c=27.9),
            reading(2.7, WeatherSource.WEATHERAPI, temperature_c=28.3),
        ]
        first = reconcile("Dadar", readings, NOW)
        second = reconcile("Dadar", list(readings), NOW)
        assert first == second
        assert first.model_dump() == second.model_dump()
