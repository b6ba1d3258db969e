"""
Projection
==========

Bidirectional mapping between geographic ``(lon, lat)`` coordinates and the
unscaled planar system the lattice lives in. One planar unit equals one cell
width.

Two implementations ship with the package:

- ``EquirectangularProjection``: the default, a local equirectangular
  approximation around the grid centre.
- ``PyprojProjection``: a real map projection (azimuthal equidistant by
  default) for inputs spanning large areas.

Anything exposing ``forward(point)`` and ``inverse(point)`` that are mutual
inverses can be passed instead.
"""

import logging
import math
from typing import Tuple

from pyproj import Transformer
from pyproj.exceptions import CRSError, ProjError

from .errors import ConfigError

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

EARTH_RADIUS = 6371000.0  # meters
MIN_WIDTH = 500.0
MAX_WIDTH = 500000.0
DEFAULT_WIDTH = 1000.0

# cos(lat0) below this is treated as a pole-adjacent centre
POLE_EPSILON = 1e-12


def clamp_width(width: float) -> float:
    """Clamp a cell width in meters to [MIN_WIDTH, MAX_WIDTH]."""
    width = float(width)
    if not math.isfinite(width):
        raise ConfigError(f"Width must be a finite number, got {width}")
    clamped = min(max(width, MIN_WIDTH), MAX_WIDTH)
    if clamped != width:
        logger.debug(f"Width {width}m clamped to {clamped}m")
    return clamped


def angular_distance(center: Point, width: float,
                     radius: float = EARTH_RADIUS) -> Tuple[float, float]:
    """
    Degrees of longitude and latitude spanned by ``width`` meters at ``center``.

    Args:
        center: (lon, lat) of the grid origin
        width: Distance in meters
        radius: Sphere radius in meters

    Returns:
        (dx, dy) in degrees

    Raises:
        ConfigError: If the centre is so close to a pole that the longitude
            scale degenerates.
    """
    rad2deg = 180.0 / math.pi
    cos_lat = math.cos(center[1] / rad2deg)
    if abs(cos_lat) < POLE_EPSILON:
        raise ConfigError(
            f"Center latitude {center[1]} is pole-adjacent; longitude scale is degenerate"
        )
    dy = width / radius * rad2deg
    dx = width / (cos_lat * radius) * rad2deg
    return dx, dy


class EquirectangularProjection:
    """
    Local equirectangular projection centred at ``center``.

    ``forward`` maps a geographic point to planar units of ``width`` meters;
    ``inverse`` is its algebraic reverse.
    """

    def __init__(self, center: Point, width: float = DEFAULT_WIDTH,
                 radius: float = EARTH_RADIUS):
        self.center = (float(center[0]), float(center[1]))
        self.width = float(width)
        self.radius = float(radius)
        self.dx, self.dy = angular_distance(self.center, self.width, self.radius)

    def forward(self, point: Point) -> Point:
        lon, lat = point
        return (lon - self.center[0]) / self.dx, (lat - self.center[1]) / self.dy

    def inverse(self, point: Point) -> Point:
        x, y = point
        return self.center[0] + x * self.dx, self.center[1] + y * self.dy

    def __repr__(self):
        return (f"EquirectangularProjection(center={self.center}, "
                f"width={self.width}, radius={self.radius})")


class PyprojProjection:
    """
    Map projection backed by ``pyproj``.

    Geographic coordinates (EPSG:4326, lon/lat order) are projected with a
    PROJ definition centred on ``center`` and divided by ``width`` so one
    planar unit equals one cell width. The default azimuthal equidistant
    projection keeps distances from the centre true, which the equirectangular
    default does not do for inputs spanning hundreds of kilometres.

    Args:
        center: (lon, lat) of the projection centre
        width: Cell width in meters
        proj: PROJ projection name (``aeqd``, ``laea``, ``tmerc``, ...)
    """

    def __init__(self, center: Point, width: float = DEFAULT_WIDTH, proj: str = "aeqd"):
        self.center = (float(center[0]), float(center[1]))
        self.width = float(width)
        if not self.width > 0:
            raise ConfigError(f"Width must be positive, got {width}")
        self.proj = proj
        crs = (f"+proj={proj} +lat_0={self.center[1]} +lon_0={self.center[0]} "
               f"+x_0=0 +y_0=0 +ellps=WGS84 +units=m +no_defs")
        try:
            self._forward = Transformer.from_crs("EPSG:4326", crs, always_xy=True)
            self._inverse = Transformer.from_crs(crs, "EPSG:4326", always_xy=True)
        except (CRSError, ProjError) as e:
            raise ConfigError(f"Could not build projection '{proj}': {e}") from e

    def forward(self, point: Point) -> Point:
        x, y = self._forward.transform(point[0], point[1])
        return x / self.width, y / self.width

    def inverse(self, point: Point) -> Point:
        lon, lat = self._inverse.transform(point[0] * self.width, point[1] * self.width)
        return lon, lat

    def __repr__(self):
        return f"PyprojProjection(center={self.center}, width={self.width}, proj='{self.proj}')"


def validate_projection(projection) -> None:
    """Raise ConfigError unless ``projection`` exposes callable forward/inverse."""
    for name in ("forward", "inverse"):
        if not callable(getattr(projection, name, None)):
            raise ConfigError(f"Projection override is missing a callable '{name}'")
