"""
Mumbai zone registry.

Fixed list of localities monitored for rainfall. Coordinates are the
locality centre points used for every provider query.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Zone:
    """A monitored locality."""

    name: str
    lat: float
    lon: float

    @property
    def coordinates(self) -> str:
        return f"{self.lat}, {self.lon}"


MUMBAI_ZONES: tuple[Zone, ...] = (
    Zone("Colaba", 18.9067, 72.8147),
    Zone("CST", 18.9398, 72.8355),
    Zone("Fort", 18.9338, 72.8356),
    Zone("Marine Lines", 18.9467, 72.8258),
    Zone("Grant Road", 18.9658, 72.8147),
    Zone("Lamington Road", 18.9735, 72.8162),
    Zone("Mazgaon", 18.9697, 72.8434),
    Zone("Byculla", 18.9793, 72.8311),
    Zone("Lalbaug", 18.9896, 72.8313),
    Zone("Parel", 19.0074, 72.8337),
    Zone("Dadar", 19.0183, 72.8420),
    Zone("Sion", 19.0434, 72.8606),
    Zone("Kurla", 19.0728, 72.8826),
    Zone("Ghatkopar", 19.0952, 72.9081),
    Zone("Vikhroli", 19.1055, 72.9264),
    Zone("Thane", 19.1972, 72.9722),
    Zone("Powai", 19.1197, 72.9106),
    Zone("Vashi", 19.0771, 73.0134),
)

_ZONES_BY_NAME = {zone.name.lower(): zone for zone in MUMBAI_ZONES}


def get_zone(name: str) -> Optional[Zone]:
    """Look up a zone by name (case-insensitive)."""
    if not name:
        return None
    return _ZONES_BY_NAME.get(name.strip().lower())


def zone_names() -> list[str]:
    return [zone.name for zone in MUMBAI_ZONES]
