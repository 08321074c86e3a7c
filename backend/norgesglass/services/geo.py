"""
Coordinate validation and query geometry.

Everything the upstream services need to turn a "lat"/"lon" query pair
into something an upstream understands: a validated Coordinate, the WMS
map window around it and the WKT search polygon for HydAPI.
"""

import math

from norgesglass.core.constants import (
    LAT_MAX,
    LAT_MIN,
    LON_MAX,
    LON_MIN,
    POLYGON_RADIUS_DEGREES,
    POLYGON_VERTICES,
    WMS_BBOX_OFFSET_DEGREES,
)
from norgesglass.core.exceptions import InvalidInputError
from norgesglass.core.parsers import parse_decimal
from norgesglass.services.models import Coordinate


def validate_coordinates(lat_text: str | None, lon_text: str | None) -> Coordinate:
    """
    Parse and bounds-check a coordinate pair from query parameters.

    Args:
        lat_text: Raw latitude text
        lon_text: Raw longitude text

    Returns:
        Coordinate inside Norway's bounding box

    Raises:
        InvalidInputError: naming the first rule that failed
    """
    if not lat_text or not lon_text:
        raise InvalidInputError("lat and lon are required")

    lat = parse_decimal(lat_text)
    if lat is None:
        raise InvalidInputError("invalid lat: must be a number", {"lat": lat_text[:50]})

    lon = parse_decimal(lon_text)
    if lon is None:
        raise InvalidInputError("invalid lon: must be a number", {"lon": lon_text[:50]})

    if not (LAT_MIN <= lat <= LAT_MAX and LON_MIN <= lon <= LON_MAX):
        raise InvalidInputError(
            "coordinates out of Norway bounds (lat 57-82, lon -2 to 35)",
            {"lat": lat, "lon": lon},
        )

    return Coordinate(lat=lat, lon=lon)


def build_circle_polygon(
    lat: float,
    lon: float,
    radius: float = POLYGON_RADIUS_DEGREES,
    vertices: int = POLYGON_VERTICES,
) -> str:
    """
    Approximate a circle around (lat, lon) as a closed WKT polygon.

    Vertex i sits at angle 2*pi*i/vertices; the first vertex is repeated
    at the end to close the ring.

    Example:
        build_circle_polygon(60.0, 10.0)
        -> "POLYGON((10.100000 60.000000,10.070711 60.070711,...,10.100000 60.000000))"
    """
    points = []
    for i in range(vertices):
        angle = 2 * math.pi * i / vertices
        points.append(f"{lon + radius * math.cos(angle):f} {lat + radius * math.sin(angle):f}")
    points.append(points[0])

    return "POLYGON((" + ",".join(points) + "))"


def wms_bbox(coordinate: Coordinate, offset: float = WMS_BBOX_OFFSET_DEGREES) -> str:
    """WMS 1.1.1 BBOX (minx,miny,maxx,maxy in lon/lat) centred on the coordinate."""
    return (
        f"{coordinate.lon - offset:f},{coordinate.lat - offset:f},"
        f"{coordinate.lon + offset:f},{coordinate.lat + offset:f}"
    )
