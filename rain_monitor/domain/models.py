"""
Domain models for the rain monitoring pipeline.

SourceReading -> ReconciledReading -> Alert, plus the process-wide
MonitoringState and the per-cycle CycleResult summary.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WeatherSource(str, Enum):
    """External weather providers."""
    OPEN_METEO = "open_meteo"
    OPENWEATHER = "openweather"
    WEATHERAPI = "weatherapi"
    METEOMATICS = "meteomatics"


class RainIntensity(str, Enum):
    NO_DATA = "No Data"
    NO_RAIN = "No Rain"
    LIGHT = "Light"
    MEDIUM = "Medium"
    HEAVY = "Heavy"
    VERY_HEAVY = "Very Heavy"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FloodRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SourceReading(BaseModel):
    """One provider's normalized current conditions for one zone."""

    zone: str = Field(..., description="Zone name")
    source: WeatherSource
    rainfall_mm: float = Field(0.0, ge=0, description="Rainfall in mm/hr, never negative")
    temperature_c: Optional[float] = None
    humidity_pct: Optional[float] = None
    pressure_hpa: Optional[float] = None
    wind_speed_ms: Optional[float] = None
    cloud_cover_pct: Optional[float] = None
    condition_text: Optional[str] = None
    fetched_at: datetime

    @field_validator("rainfall_mm", mode="before")
    @classmethod
    def clamp_rainfall(cls, v) -> float:
        """Negative readings are instrument noise - clamp to zero."""
        if v is None:
            return 0.0
        return max(0.0, float(v))


class ReconciledReading(BaseModel):
    """Authoritative reading for a zone in one update cycle."""

    zone: str
    rainfall_mm: float = Field(..., ge=0)
    intensity: RainIntensity
    temperature_c: Optional[float] = None
    humidity_pct: Optional[float] = None
    pressure_hpa: Optional[float] = None
    wind_speed_ms: Optional[float] = None
    cloud_cover_pct: Optional[float] = None
    condition_text: Optional[str] = None
    sources_used: list[WeatherSource] = Field(default_factory=list)
    sources_agreeing: int = 0
    confidence: Confidence
    stale: bool = Field(False, description="True when no source returned data this cycle")
    computed_at: datetime


class Alert(BaseModel):
    """A rain alert for one zone. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    zone: str
    rainfall_mm: float
    intensity: RainIntensity
    message: str
    created_at: datetime


class MonitoringState(BaseModel):
    active: bool = False
    last_update_at: Optional[datetime] = None


class NotificationResult(BaseModel):
    """Per-channel outcome. None means the channel is not configured."""

    telegram: Optional[bool] = None
    email: Optional[bool] = None


class CycleResult(BaseModel):
    """Summary of one completed update cycle."""

    trigger: str
    started_at: datetime
    completed_at: datetime
    zones_updated: int
    zones_with_data: int
    alerts: list[Alert] = Field(default_factory=list)
    flood_risk: Optional[FloodRisk] = None
    notifications: Optional[NotificationResult] = None
