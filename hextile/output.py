"""
Output assembly: stable cell identifiers and feature export.

Identifiers encode the lattice address with minus signs replaced by ``M``
and components joined by ``.``, so ``(-1, -2)`` becomes ``"M1.M2"``. They
are safe to use as file names, HTML ids and GeoJSON feature ids.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

import geopandas as gpd
import pandas as pd
from shapely.geometry import Polygon as ShapelyPolygon

from .cells import Cell

logger = logging.getLogger(__name__)

ID_SEPARATOR = "."
NEGATIVE_MARK = "M"


def encode_id(address: Sequence[int]) -> str:
    return ID_SEPARATOR.join(str(int(n)) for n in address).replace("-", NEGATIVE_MARK)


def decode_id(cell_id: str) -> Tuple[int, ...]:
    """Inverse of ``encode_id``."""
    try:
        return tuple(
            int(part.replace(NEGATIVE_MARK, "-")) for part in cell_id.split(ID_SEPARATOR)
        )
    except ValueError as e:
        raise ValueError(f"Not a cell id: '{cell_id}'") from e


@dataclass(frozen=True)
class Feature:
    """A retained cell paired with its identifier and properties."""

    id: str
    address: Tuple[int, ...]
    center: Tuple[float, float]
    ring: Tuple[Tuple[float, float], ...]
    properties: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_cell(cls, cell: Cell, shape: str) -> "Feature":
        return cls(
            id=encode_id(cell.address),
            address=cell.address,
            center=cell.center,
            ring=cell.ring,
            properties={
                "shape": shape,
                "address": list(cell.address),
                "boundary": cell.keep,
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain record: id, address, center and closed ring."""
        return {
            "id": self.id,
            "address": list(self.address),
            "center": list(self.center),
            "ring": [list(p) for p in self.ring],
        }

    def to_geojson(self) -> Dict[str, Any]:
        properties = dict(self.properties)
        properties["center"] = list(self.center)
        return {
            "type": "Feature",
            "id": self.id,
            "properties": properties,
            "geometry": {
                "type": "Polygon",
                "coordinates": [[list(p) for p in self.ring]],
            },
        }


def to_records(features: Sequence[Feature]) -> List[Dict[str, Any]]:
    return [f.to_dict() for f in features]


def to_feature_collection(features: Sequence[Feature]) -> Dict[str, Any]:
    return {
        "type": "FeatureCollection",
        "features": [f.to_geojson() for f in features],
    }


def to_geodataframe(features: Sequence[Feature], crs: str = "EPSG:4326") -> gpd.GeoDataFrame:
    """
    Tabular view of the features.

    Returns:
        GeoDataFrame indexed by ``cell_id`` with columns ``address``,
        ``center_lon``, ``center_lat``, ``boundary`` and polygon geometry.
    """
    index = pd.Index([f.id for f in features], name="cell_id")
    data = {
        "address": [f.address for f in features],
        "center_lon": [f.center[0] for f in features],
        "center_lat": [f.center[1] for f in features],
        "boundary": [bool(f.properties.get("boundary", False)) for f in features],
    }
    geometry = [ShapelyPolygon(f.ring) for f in features]
    return gpd.GeoDataFrame(data, index=index, geometry=geometry, crs=crs)
