"""
hextile
=======

Square and hexagonal tilings of longitude/latitude polygons.

Polygons are projected into a planar lattice, the cells their boundaries
cross are found by exact line/lattice-line intersection, and interior cells
are kept by a hole-aware point-in-polygon test.
"""

from .config import TilingConfig
from .errors import ConfigError, DegenerateLatticeError, GeometryError, HextileError
from .geojson import bbox_to_polygon, extract_polygons
from .geometry import Polygon
from .output import Feature, decode_id, encode_id, to_feature_collection, to_geodataframe
from .projection import EquirectangularProjection, PyprojProjection
from .tiler import Tiler, TilingResult, hextile

__version__ = "0.1.0"

__all__ = [
    'hextile',
    'Tiler',
    'TilingResult',
    'TilingConfig',
    'Polygon',
    'Feature',
    'EquirectangularProjection',
    'PyprojProjection',
    'extract_polygons',
    'bbox_to_polygon',
    'encode_id',
    'decode_id',
    'to_feature_collection',
    'to_geodataframe',
    'HextileError',
    'ConfigError',
    'GeometryError',
    'DegenerateLatticeError',
]
