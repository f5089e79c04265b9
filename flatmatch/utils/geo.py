"""Great-circle distance helpers for the feed radius filter."""

from __future__ import annotations

from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in kilometers between two lat/lng points.

    Treats the earth as a sphere, which is accurate to roughly 0.5% and
    plenty for city-level roommate search.
    """

    phi1, phi2 = radians(lat1), radians(lat2)
    d_phi = radians(lat2 - lat1)
    d_lambda = radians(lng2 - lng1)

    a = sin(d_phi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(a), sqrt(1 - a))


def distance_between(origin, target) -> float | None:
    """Distance in km between two optional GeoPoints, rounded to 0.1 km.

    Returns None when either side has no known location.
    """

    if origin is None or target is None:
        return None

    return round(haversine_km(origin.lat, origin.lng, target.lat, target.lng), 1)
