"""
Multi-source rainfall reconciliation.

Policy: majority-clear vote, then mean of the non-clear readings.

- A reading is "clear" when it reports <= CLEAR_THRESHOLD_MM.
- If a strict majority of sources is clear, the zone is declared clear
  (rainfall forced to 0) regardless of the minority.
- Otherwise rainfall is the arithmetic mean of the non-clear readings.

Ancillary values (temperature, humidity, pressure, wind, cloud cover) are
straight means across every source that reported them. The condition text is
taken from the most trusted source available.
"""
from datetime import datetime
from typing import Iterable, Optional

from rain_monitor.domain.models import (
    Confidence,
    RainIntensity,
    ReconciledReading,
    SourceReading,
    WeatherSource,
)

CLEAR_THRESHOLD_MM = 0.01

# Upper bounds (exclusive) of each intensity band, mm/hr
INTENSITY_BANDS: list[tuple[float, RainIntensity]] = [
    (0.01, RainIntensity.NO_RAIN),
    (2.5, RainIntensity.LIGHT),
    (7.5, RainIntensity.MEDIUM),
    (35.0, RainIntensity.HEAVY),
]

# Most trusted first - used for the textual condition description
SOURCE_TRUST_ORDER = [
    WeatherSource.OPENWEATHER,
    WeatherSource.WEATHERAPI,
    WeatherSource.METEOMATICS,
    WeatherSource.OPEN_METEO,
]


def classify_intensity(rainfall_mm: float) -> RainIntensity:
    """
    Bucket a rainfall rate into an intensity label.

    Bands: <0.01 No Rain, <2.5 Light, <7.5 Medium, <35 Heavy, else Very Heavy.
    """
    for upper, intensity in INTENSITY_BANDS:
        if rainfall_mm < upper:
            return intensity
    return RainIntensity.VERY_HEAVY


def _mean(values: Iterable[Optional[float]], digits: int) -> Optional[float]:
    present = [v for v in values if v is not None]
    if not present:
        return None
    result = round(sum(present) / len(present), digits)
    return int(result) if digits == 0 else result


def _most_trusted_condition(readings: list[SourceReading]) -> Optional[str]:
    by_source = {r.source: r for r in readings}
    for source in SOURCE_TRUST_ORDER:
        reading = by_source.get(source)
        if reading and reading.condition_text:
            return reading.condition_text
    return None


def fuse_rainfall(rainfalls: list[float]) -> tuple[float, int]:
    """
    Apply the majority-clear rule to a list of rainfall figures.

    Returns:
        (fused rainfall rounded to 2dp, number of sources on the winning side)
    """
    if not rainfalls:
        return 0.0, 0

    values = [max(0.0, r) for r in rainfalls]
    clear = [r for r in values if r <= CLEAR_THRESHOLD_MM]
    raining = [r for r in values if r > CLEAR_THRESHOLD_MM]

    if len(clear) * 2 > len(values):
        return 0.0, len(clear)

    return round(sum(raining) / len(raining), 2), len(raining)


def reconcile(
    zone: str,
    readings: list[SourceReading],
    computed_at: datetime,
) -> ReconciledReading:
    """
    Combine the successful source readings for one zone into one reading.

    Args:
        zone: Zone name
        readings: Readings obtained this cycle (may be empty)
        computed_at: Timestamp to stamp on the result

    Returns:
        ReconciledReading; stale with "No Data" intensity if readings is empty
    """
    if not readings:
        return ReconciledReading(
            zone=zone,
            rainfall_mm=0.0,
            intensity=RainIntensity.NO_DATA,
            sources_used=[],
            sources_agreeing=0,
            confidence=Confidence.LOW,
            stale=True,
            computed_at=computed_at,
        )

    rainfall, agreeing = fuse_rainfall([r.rainfall_mm for r in readings])

    return ReconciledReading(
        zone=zone,
        rainfall_mm=rainfall,
        intensity=classify_intensity(rainfall),
        temperature_c=_mean((r.temperature_c for r in readings), 1),
        humidity_pct=_mean((r.humidity_pct for r in readings), 0),
        pressure_hpa=_mean((r.pressure_hpa for r in readings), 1),
        wind_speed_ms=_mean((r.wind_speed_ms for r in readings), 1),
        cloud_cover_pct=_mean((r.cloud_cover_pct for r in readings), 0),
        condition_text=_most_trusted_condition(readings),
        sources_used=[r.source for r in readings],
        sources_agreeing=agreeing,
        confidence=Confidence.HIGH if agreeing >= 2 else Confidence.MEDIUM,
        stale=False,
        computed_at=computed_at,
    )
