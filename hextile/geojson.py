"""
GeoJSON input handling (RFC 7946).

Walks arbitrary Feature / FeatureCollection / GeometryCollection nesting and
hands the tiler a flat list of polygons. Non-areal geometries (points, lines)
are skipped. A bounding box ``[min_lon, min_lat, max_lon, max_lat]`` is also
accepted and converted to a rectangle.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from .errors import GeometryError
from .geometry import Polygon

logger = logging.getLogger(__name__)

SKIPPED_TYPES = ("Point", "MultiPoint", "LineString", "MultiLineString")


def bbox_to_polygon(bbox: Sequence[float]) -> Dict[str, Any]:
    """GeoJSON Polygon for a ``[min_lon, min_lat, max_lon, max_lat]`` box."""
    if len(bbox) != 4:
        raise GeometryError(f"Bounding box needs 4 numbers, got {len(bbox)}")
    x0, y0, x1, y1 = (float(v) for v in bbox)
    if x0 > x1 or y0 > y1:
        raise GeometryError(f"Bounding box min exceeds max: {list(bbox)}")
    return {
        "type": "Polygon",
        "coordinates": [[[x0, y0], [x1, y0], [x1, y1], [x0, y1], [x0, y0]]],
    }


def is_bbox(node: Any) -> bool:
    return (
        isinstance(node, (list, tuple))
        and len(node) == 4
        and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in node)
    )


def _walk(node: Any, out: List[Sequence]) -> None:
    if isinstance(node, (list, tuple)):
        for child in node:
            _walk(child, out)
        return
    if not isinstance(node, dict):
        return

    gtype = node.get("type")
    if gtype == "Polygon":
        out.append(node.get("coordinates") or [])
    elif gtype == "MultiPolygon":
        out.extend(node.get("coordinates") or [])
    elif gtype == "Feature":
        _walk(node.get("geometry"), out)
    elif gtype == "FeatureCollection":
        _walk(node.get("features") or [], out)
    elif gtype == "GeometryCollection":
        _walk(node.get("geometries") or [], out)
    elif gtype in SKIPPED_TYPES:
        logger.debug(f"Skipping non-areal geometry {gtype}")
    else:
        raise GeometryError(f"Unsupported GeoJSON type: {gtype}")


def extract_polygons(geojson: Any) -> List[Polygon]:
    """
    Flatten a GeoJSON tree into validated polygons.

    Args:
        geojson: Parsed GeoJSON object, list of objects, or a bbox list

    Returns:
        Polygons in document order

    Raises:
        GeometryError: On unsupported types or malformed rings
    """
    if is_bbox(geojson):
        geojson = bbox_to_polygon(geojson)

    raw: List[Sequence] = []
    _walk(geojson, raw)

    polygons = []
    for n, coordinates in enumerate(raw):
        try:
            polygons.append(Polygon.from_coordinates(coordinates))
        except GeometryError as e:
            raise GeometryError(f"Polygon {n}: {e}") from e
    logger.debug(f"Extracted {len(polygons)} polygons")
    return polygons


def load_geojson(path: Union[str, Path]) -> Any:
    """Read a GeoJSON (or bbox JSON array) file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    with open(path, encoding="utf-8-sig") as f:
        return json.load(f)
