from __future__ import annotations

import math
from dataclasses import dataclass

from .exceptions import InvalidCoordinate

EARTH_RADIUS_M = 6_371_000.0


def normalize_longitude_delta(delta: float) -> float:
    """Fold a longitude difference in degrees into (-180, 180]."""

    folded = math.fmod(delta, 360.0)
    if folded > 180.0:
        folded -= 360.0
    elif folded <= -180.0:
        folded += 360.0
    return folded


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two lat/lon points in degrees.

    The longitude delta is folded before use, so two points on either side of
    the antimeridian measure the short way round.
    """

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(normalize_longitude_delta(lon2 - lon1))
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float
    altitude: float = 0.0

    def __post_init__(self) -> None:
        for name in ("latitude", "longitude", "altitude"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidCoordinate(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise InvalidCoordinate(f"{name} must be finite, got {value!r}")
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidCoordinate(f"latitude {self.latitude} outside [-90, 90]")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidCoordinate(f"longitude {self.longitude} outside [-180, 180]")

    def distance_to(self, other: "GeoLocation") -> float:
        return haversine_m(self.latitude, self.longitude, other.latitude, other.longitude)

