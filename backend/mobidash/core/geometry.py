"""
Coordinate extraction from open-data rows.

Rows describe location either as a GeoJSON geometry under ``the_geom``
(Point, Polygon or MultiPolygon) or as flat latitude/longitude fields.
Each geometry kind has its own extractor; anything unrecognised yields None.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from mobidash.core.geo import is_valid_coordinate, ring_centroid

Coordinates = Tuple[float, float]

# (lat field, lng field), tried in order
FLAT_FIELD_PAIRS = (
    ("latitude", "longitude"),
    ("lat", "lon"),
)


def point_coordinates(coordinates: Any) -> Optional[Coordinates]:
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
        return None
    return float(coordinates[1]), float(coordinates[0])


def polygon_coordinates(coordinates: Any) -> Optional[Coordinates]:
    # [ring][vertex]; only the outer ring is used
    if not isinstance(coordinates, list) or not coordinates:
        return None
    return ring_centroid(coordinates[0])


def multipolygon_coordinates(coordinates: Any) -> Optional[Coordinates]:
    # [polygon][ring][vertex]; only the first polygon's outer ring is used
    if not isinstance(coordinates, list) or not coordinates:
        return None
    return polygon_coordinates(coordinates[0])


GEOMETRY_EXTRACTORS: Dict[str, Callable[[Any], Optional[Coordinates]]] = {
    "Point": point_coordinates,
    "MultiPolygon": multipolygon_coordinates,
    "Polygon": polygon_coordinates,
}


def geometry_coordinates(geometry: Any) -> Optional[Coordinates]:
    if not isinstance(geometry, Mapping) or not geometry.get("coordinates"):
        return None
    extractor = GEOMETRY_EXTRACTORS.get(geometry.get("type"))
    if extractor is None:
        return None
    return extractor(geometry["coordinates"])


def flat_coordinates(row: Mapping[str, Any]) -> Optional[Coordinates]:
    for lat_field, lng_field in FLAT_FIELD_PAIRS:
        lat, lng = row.get(lat_field), row.get(lng_field)
        if lat in (None, "") or lng in (None, ""):
            continue
        return float(lat), float(lng)
    return None


def extract_coordinates(row: Mapping[str, Any]) -> Optional[Coordinates]:
    """Best-effort (lat, lng) for a dataset row, or None."""
    try:
        coords = geometry_coordinates(row.get("the_geom"))
        if coords is None:
            coords = flat_coordinates(row)
    except (TypeError, ValueError):
        return None

    if coords is None or not is_valid_coordinate(*coords):
        return None
    return coords
