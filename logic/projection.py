"""
Coordinate projection helpers.

Pins are stored as WGS84 longitude/latitude. Rendering, hit-testing and
clustering happen in Web Mercator (EPSG:3857) metres, where one zoom level
halves the resolution (map units per pixel).

Extents are ``[min_x, min_y, max_x, max_y]`` lists in map units.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-18
"""

import math
from typing import List, Optional, Sequence, Tuple

EARTH_RADIUS_M = 6378137.0
HALF_SIZE = math.pi * EARTH_RADIUS_M
MAX_LATITUDE = 85.0511287798066
TILE_SIZE = 256

# Resolution at zoom 0: the whole world in one 256px tile.
MAX_RESOLUTION = 2 * HALF_SIZE / TILE_SIZE
ZOOM_FACTOR = 2.0

Coordinate = Tuple[float, float]
Extent = List[float]


def from_lon_lat(lon: float, lat: float) -> Coordinate:
    """Project a WGS84 longitude/latitude to Web Mercator.

    Latitudes beyond the Mercator limit are clamped.

    Args:
        lon: Longitude in degrees.
        lat: Latitude in degrees.

    Returns:
        (x, y) in metres.
    """
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, lat))
    x = EARTH_RADIUS_M * math.radians(lon)
    y = EARTH_RADIUS_M * math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))
    return x, y


def to_lon_lat(x: float, y: float) -> Coordinate:
    """Inverse of :func:`from_lon_lat`.

    Args:
        x: Easting in metres.
        y: Northing in metres.

    Returns:
        (lon, lat) in degrees.
    """
    lon = math.degrees(x / EARTH_RADIUS_M)
    lat = math.degrees(2 * math.atan(math.exp(y / EARTH_RADIUS_M)) - math.pi / 2)
    return lon, lat


def resolution_for_zoom(zoom: float) -> float:
    """Map units per pixel at the given zoom level."""
    return MAX_RESOLUTION / math.pow(ZOOM_FACTOR, zoom)


def zoom_for_resolution(resolution: float) -> Optional[float]:
    """Zoom level for a resolution, or None if it is not a positive number."""
    if not resolution or resolution <= 0 or not math.isfinite(resolution):
        return None
    return math.log(MAX_RESOLUTION / resolution, ZOOM_FACTOR)


def create_empty() -> Extent:
    return [math.inf, math.inf, -math.inf, -math.inf]


def is_empty(extent: Extent) -> bool:
    return extent[2] < extent[0] or extent[3] < extent[1]


def extend_coordinate(extent: Extent, coordinate: Coordinate) -> Extent:
    """Grow ``extent`` in place to include ``coordinate``."""
    x, y = coordinate
    extent[0] = min(extent[0], x)
    extent[1] = min(extent[1], y)
    extent[2] = max(extent[2], x)
    extent[3] = max(extent[3], y)
    return extent


def extent_from_coordinates(coordinates: Sequence[Coordinate]) -> Extent:
    extent = create_empty()
    for coordinate in coordinates:
        extend_coordinate(extent, coordinate)
    return extent


def buffer_coordinate(coordinate: Coordinate, distance: float) -> Extent:
    """Square extent of half-side ``distance`` centred on ``coordinate``."""
    x, y = coordinate
    return [x - distance, y - distance, x + distance, y + distance]


def get_center(extent: Extent) -> Coordinate:
    return (extent[0] + extent[2]) / 2, (extent[1] + extent[3]) / 2


def get_width(extent: Extent) -> float:
    return extent[2] - extent[0]


def get_height(extent: Extent) -> float:
    return extent[3] - extent[1]


def resolution_for_extent(extent: Extent, size: Tuple[int, int]) -> float:
    """Resolution needed to fit ``extent`` into a viewport of ``size`` pixels.

    A single-point extent yields 0, which has no corresponding zoom.

    Args:
        extent: Extent to fit.
        size: Viewport (width, height) in pixels.

    Returns:
        Map units per pixel.
    """
    width, height = size
    return max(get_width(extent) / width, get_height(extent) / height)


def coordinate_to_pixel(
    coordinate: Coordinate, center: Coordinate, resolution: float, size: Tuple[int, int]
) -> Coordinate:
    """Convert a map coordinate to a viewport pixel (y grows downwards)."""
    width, height = size
    px = width / 2 + (coordinate[0] - center[0]) / resolution
    py = height / 2 - (coordinate[1] - center[1]) / resolution
    return px, py


def pixel_to_coordinate(
    pixel: Coordinate, center: Coordinate, resolution: float, size: Tuple[int, int]
) -> Coordinate:
    """Inverse of :func:`coordinate_to_pixel`."""
    width, height = size
    x = center[0] + (pixel[0] - width / 2) * resolution
    y = center[1] - (pixel[1] - height / 2) * resolution
    return x, y
