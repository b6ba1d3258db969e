"""
Input geometry model and the containment filter.

Polygons arrive as an outer ring plus hole rings of (lon, lat) points. They
are validated once, before any tracing, and are immutable afterwards.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .errors import GeometryError

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Ring = Tuple[Point, ...]
BBox = Tuple[float, float, float, float]  # min_lon, min_lat, max_lon, max_lat


def validate_ring(ring: Sequence[Sequence[float]], label: str = "ring") -> Ring:
    """
    Check that ``ring`` is a closed sequence of at least four finite points.

    Returns:
        The ring as a tuple of float pairs

    Raises:
        GeometryError: If the ring is too short, not closed, or has a
            malformed coordinate.
    """
    if len(ring) < 4:
        raise GeometryError(f"{label} has {len(ring)} points, at least 4 are required")

    points = []
    for n, point in enumerate(ring):
        if len(point) < 2:
            raise GeometryError(f"{label} point {n} has fewer than 2 coordinates: {point}")
        try:
            lon, lat = float(point[0]), float(point[1])
        except (TypeError, ValueError) as e:
            raise GeometryError(f"{label} point {n} is not numeric: {point}") from e
        if not (math.isfinite(lon) and math.isfinite(lat)):
            raise GeometryError(f"{label} point {n} is not finite: {point}")
        points.append((lon, lat))

    if points[0] != points[-1]:
        raise GeometryError(f"{label} is not closed: {points[0]} != {points[-1]}")
    return tuple(points)


def ring_bbox(ring: Sequence[Point]) -> BBox:
    lons = [p[0] for p in ring]
    lats = [p[1] for p in ring]
    return min(lons), min(lats), max(lons), max(lats)


@dataclass(frozen=True)
class Polygon:
    """Outer ring, hole rings and the bounding box of the outer ring."""

    outer: Ring
    holes: Tuple[Ring, ...]
    bbox: BBox

    @classmethod
    def from_rings(cls, outer: Sequence[Sequence[float]],
                   holes: Optional[Sequence[Sequence[Sequence[float]]]] = None) -> "Polygon":
        outer_ring = validate_ring(outer, "outer ring")
        hole_rings = tuple(
            validate_ring(hole, f"hole ring {n}") for n, hole in enumerate(holes or ())
        )
        return cls(outer_ring, hole_rings, ring_bbox(outer_ring))

    @classmethod
    def from_coordinates(cls, coordinates: Sequence[Sequence[Sequence[float]]]) -> "Polygon":
        """Build from GeoJSON Polygon coordinates: ``[outer, hole, hole, ...]``."""
        if len(coordinates) == 0:
            raise GeometryError("Polygon has no rings")
        return cls.from_rings(coordinates[0], coordinates[1:])

    @property
    def rings(self) -> Tuple[Ring, ...]:
        return (self.outer,) + self.holes

    def contains(self, point: Point) -> bool:
        return point_in_polygon(point, self)


def combined_bbox(polygons: Sequence[Polygon]) -> BBox:
    """Bounding box over the outer rings of all polygons."""
    if not polygons:
        raise GeometryError("Cannot compute a bounding box of zero polygons")
    boxes = np.array([p.bbox for p in polygons], dtype=float)
    return (
        float(boxes[:, 0].min()),
        float(boxes[:, 1].min()),
        float(boxes[:, 2].max()),
        float(boxes[:, 3].max()),
    )


def bbox_center(bbox: BBox) -> Point:
    return (bbox[0] + bbox[2]) / 2, (bbox[1] + bbox[3]) / 2


# ============================================================================
# CONTAINMENT
# ============================================================================

def point_in_bbox(point: Point, bbox: BBox) -> bool:
    return bbox[0] <= point[0] <= bbox[2] and bbox[1] <= point[1] <= bbox[3]


def point_in_ring(point: Point, ring: Sequence[Point]) -> bool:
    """
    Even-odd ray cast from ``point`` towards +longitude.

    For every edge whose latitude span straddles the query latitude, the
    crossing longitude is interpolated on latitude; the parity flips when the
    crossing lies strictly to the right of the point. Winding order does not
    matter.
    """
    lon, lat = point
    pts = np.asarray(ring, dtype=float)
    x0, y0 = pts[:-1, 0], pts[:-1, 1]
    x1, y1 = pts[1:, 0], pts[1:, 1]

    straddles = (y0 > lat) != (y1 > lat)
    if not straddles.any():
        return False

    x0, y0, x1, y1 = x0[straddles], y0[straddles], x1[straddles], y1[straddles]
    crossing = x0 + (lat - y0) * (x1 - x0) / (y1 - y0)
    return bool(np.count_nonzero(crossing > lon) % 2)


def point_in_polygon(point: Point, polygon: Polygon) -> bool:
    """Inside the outer ring and outside every hole."""
    if not point_in_bbox(point, polygon.bbox):
        return False
    if not point_in_ring(point, polygon.outer):
        return False
    return not any(point_in_ring(point, hole) for hole in polygon.holes)


def point_in_any(point: Point, polygons: Sequence[Polygon]) -> bool:
    return any(point_in_polygon(point, polygon) for polygon in polygons)


def as_polygons(polygons) -> List[Polygon]:
    """Accept Polygon objects or raw GeoJSON-style coordinate lists."""
    result = []
    for n, polygon in enumerate(polygons):
        if isinstance(polygon, Polygon):
            result.append(polygon)
        else:
            try:
                result.append(Polygon.from_coordinates(polygon))
            except GeometryError as e:
                raise GeometryError(f"Polygon {n}: {e}") from e
    return result
