from __future__ import annotations

import math
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude pair is not finite or out of range."""


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


def validate_coordinate(lat: float, lng: float) -> Coordinate:
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError) as exc:
        raise InvalidCoordinateError(f"lat/lng must be numbers. Got lat={lat!r}, lng={lng!r}") from exc

    if not math.isfinite(lat_f) or not math.isfinite(lng_f):
        raise InvalidCoordinateError("lat/lng must be finite.")
    if not -90 <= lat_f <= 90:
        raise InvalidCoordinateError(f"lat must be within [-90, 90]. Got {lat_f}")
    if not -180 <= lng_f <= 180:
        raise InvalidCoordinateError(f"lng must be within [-180, 180]. Got {lng_f}")
    return Coordinate(lat_f, lng_f)


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometers (haversine)."""
    phi1, phi2 = math.radians(a.lat), math.radians(b.lat)
    dphi = phi2 - phi1
    dlambda = math.radians(b.lng - a.lng)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push h a hair past 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))
