"""
Distance functions on WGS84 coordinates.

`great_circle_distance` is the exact haversine distance and is used for edge
weights and reported trip lengths. `planar_approx_distance` projects both
points onto a local tangent plane and is only meant as a search heuristic:
it is cheaper but can overestimate the true distance, so it must never be
reported back to a caller.
"""

import math
from typing import Sequence
from app.schemas.common import Coordinate

EARTH_RADIUS_M = 6_371_000.0
DEG_TO_RAD = math.pi / 180


def great_circle_distance(a: Coordinate, b: Coordinate) -> float:
    """
    Haversine distance between two coordinates.

    Args:
        a: First coordinate
        b: Second coordinate

    Returns:
        Distance in meters
    """
    d_lat = (b.lat - a.lat) * DEG_TO_RAD
    d_lng = (b.lng - a.lng) * DEG_TO_RAD
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(a.lat * DEG_TO_RAD) * math.cos(b.lat * DEG_TO_RAD) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def planar_approx_distance(a: Coordinate, b: Coordinate) -> float:
    """Equirectangular approximation scaled by the cosine of the mean latitude, in meters."""
    mean_lat = (a.lat + b.lat) / 2 * DEG_TO_RAD
    dx = (b.lng - a.lng) * DEG_TO_RAD * math.cos(mean_lat) * EARTH_RADIUS_M
    dy = (b.lat - a.lat) * DEG_TO_RAD * EARTH_RADIUS_M
    return math.hypot(dx, dy)


def path_length(points: Sequence[Coordinate]) -> float:
    """Sum of great-circle distances between consecutive points."""
    return sum(great_circle_distance(p, q) for p, q in zip(points, points[1:]))
