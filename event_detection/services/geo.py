"""Spherical geometry helpers for venue clustering."""

import math
from collections.abc import Sequence

from event_detection.domain.models import Event, GeoPoint
from event_detection.domain.radius_constants import EARTH_RADIUS_METERS


def haversine_distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters between two WGS84 points.

    Uses the haversine formula on a sphere of radius 6,371 km. Symmetric,
    zero for identical points, never negative.

    Example:
        >>> round(haversine_distance_m(36.1291, -115.1522, 36.1291, -115.1522))
        0
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    # Rounding can push a marginally above 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def distance_between(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in meters between two points."""
    return haversine_distance_m(a.lat, a.lng, b.lat, b.lng)


def cluster_center(events: Sequence[Event]) -> GeoPoint:
    """Arithmetic-mean centroid of the events' locations.

    Raises:
        ValueError: If no event carries a location
    """
    points = [event.location for event in events if event.location is not None]
    if not points:
        raise ValueError("Cannot compute the center of events without locations")

    avg_lat = sum(point.lat for point in points) / len(points)
    avg_lng = sum(point.lng for point in points) / len(points)
    return GeoPoint(lat=avg_lat, lng=avg_lng)


def city_from_vicinity(vicinity: str | None) -> str | None:
    """Extract the city from a free-text address.

    The last-but-one comma-separated segment is taken as the city, which fits
    the ``street, city, region`` shape of geocoded addresses.

    Example:
        >>> city_from_vicinity("3150 Paradise Rd, Las Vegas, NV 89109")
        'Las Vegas'
        >>> city_from_vicinity("Somewhere") is None
        True
    """
    if not vicinity:
        return None

    parts = vicinity.split(",")
    if len(parts) < 2:
        return None

    city = parts[-2].strip()
    return city or None
