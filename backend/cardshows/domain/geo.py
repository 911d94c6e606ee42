"""Great-circle helpers. Every distance surfaced by the service is in miles."""

from __future__ import annotations

import math
from typing import Optional, Tuple

EARTH_RADIUS_M = 6_371_000
METERS_PER_MILE = 1609.34
# Slack for float error so a point sitting exactly on the radius stays in.
RADIUS_TOLERANCE_MILES = 1e-9
BOX_SLACK_DEG = 1e-6


def _haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    return _haversine_m(lat1, lon1, lat2, lon2) / METERS_PER_MILE


def within_radius(distance: float, radius_miles: float) -> bool:
    return distance <= radius_miles + RADIUS_TOLERANCE_MILES


def validate_coordinates(lat: Optional[float], lon: Optional[float]) -> bool:
    if lat is None or lon is None:
        return False
    if math.isnan(lat) or math.isnan(lon):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def bounding_box(lat: float, lon: float, radius_miles: float) -> Tuple[float, float, float, float]:
    """Return (min_lat, max_lat, min_lon, max_lon) enclosing the radius.

    The box is a superset of the circle; it is only good for discarding
    points, never for admitting them.
    """
    angular = radius_miles * METERS_PER_MILE / EARTH_RADIUS_M
    dlat = math.degrees(angular) + BOX_SLACK_DEG
    min_lat, max_lat = lat - dlat, lat + dlat
    if min_lat <= -90.0 or max_lat >= 90.0:
        return max(min_lat, -90.0), min(max_lat, 90.0), -180.0, 180.0
    dlon = math.degrees(math.asin(min(1.0, math.sin(angular) / math.cos(math.radians(lat))))) + BOX_SLACK_DEG
    min_lon, max_lon = lon - dlon, lon + dlon
    if min_lon < -180.0 or max_lon > 180.0:
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, min_lon, max_lon


def in_bounding_box(box: Tuple[float, float, float, float], lat: float, lon: float) -> bool:
    min_lat, max_lat, min_lon, max_lon = box
    return min_lat <= lat <= max_lat and min_lon <= lon <= max_lon
