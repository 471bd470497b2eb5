"""
Great-circle helpers for ranking shelters by distance.
"""

import math
from typing import Iterable, Optional

from models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance between two points in kilometres."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    dphi = phi2 - phi1
    dlambda = math.radians(b.longitude - a.longitude)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def within_radius(origin: GeoPoint, point: GeoPoint, radius_km: float) -> bool:
    return distance_km(origin, point) <= radius_km


def bounding_box(points: Iterable[GeoPoint]) -> Optional[tuple[GeoPoint, GeoPoint]]:
    """Return (south_west, north_east) covering all points, or None if empty."""
    points = list(points)
    if not points:
        return None
    lats = [p.latitude for p in points]
    lngs = [p.longitude for p in points]
    return GeoPoint(min(lats), min(lngs)), GeoPoint(max(lats), max(lngs))
