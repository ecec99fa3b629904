"""
Spherical distance and simple coordinate helpers.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

EARTH_RADIUS_MILES = 3958.8
MILES_TO_METERS = 1609.34


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


# Five boroughs, padded
NYC_BOUNDS = BoundingBox(min_lat=40.4, max_lat=41.0, min_lng=-74.3, max_lng=-73.7)


def is_valid_coordinate(lat: float, lng: float) -> bool:
    return (
        math.isfinite(lat)
        and math.isfinite(lng)
        and -90 <= lat <= 90
        and -180 <= lng <= 180
    )


def ring_centroid(ring: Sequence[Sequence[float]]) -> Optional[Tuple[float, float]]:
    """
    Vertex average of a GeoJSON ring as (lat, lng).

    Vertices are [lng, lat]. Holes and the repeated closing vertex are not
    treated specially, so this is a pin position rather than an area centroid.
    """
    if not ring:
        return None

    sum_lat = 0.0
    sum_lng = 0.0
    for vertex in ring:
        try:
            lng, lat = float(vertex[0]), float(vertex[1])
        except (TypeError, ValueError, IndexError):
            return None
        sum_lng += lng
        sum_lat += lat

    count = len(ring)
    return sum_lat / count, sum_lng / count
