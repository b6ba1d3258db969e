"""
Tiler
=====

Runs the full tiling pipeline:

1. Build the projection (default equirectangular around the bbox midpoint)
   and the lattice basis for the configured shape and tilt.
2. Trace every polygon boundary into a keep-map.
3. Enumerate the explored window and assemble cells.
4. Keep a cell if the boundary touched it, or if its centre lies inside at
   least one polygon (holes excluded).
5. Emit features with stable identifiers.

Usage::

    from hextile import hextile

    features = hextile(geojson, shape="hexagon", width=2000, tilt=30)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from .cells import assemble_cells
from .config import TilingConfig
from .errors import ConfigError
from .geojson import extract_polygons, is_bbox
from .geometry import Polygon, as_polygons, bbox_center, combined_bbox, point_in_any
from .lattice import HEXAGON, LatticeBasis, lattice_range, padded_range
from .output import Feature
from .projection import EquirectangularProjection
from .tracer import KeepMap, trace_boundaries

logger = logging.getLogger(__name__)


@dataclass
class TilingResult:
    """
    Everything one run produced.

    Attributes:
        features: Retained cells in window order
        projection: Projection the run used (None for empty input)
        keep: Keep-map holding traced flags and every explored window address
        window: (i_range, j_range) enumerated on axes 0 and 1
    """

    features: List[Feature]
    projection: Any = None
    keep: KeepMap = field(default_factory=KeepMap)
    window: Optional[Tuple[range, range]] = None


class Tiler:
    """
    Polygon-to-cells tiler for one configuration.

    The lattice basis is fixed at construction; the projection is resolved
    per run because its default centre depends on the input. Runs keep no
    state on the instance, so one Tiler can serve several calls.
    """

    def __init__(self, config: Optional[TilingConfig] = None, **options):
        if config is not None and options:
            raise ConfigError("Pass either a TilingConfig or keyword options, not both")
        self.config = config or TilingConfig(**options)
        self.basis = LatticeBasis.for_shape(self.config.shape, self.config.tilt)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def resolve_projection(self, polygons: Sequence[Polygon]):
        """Configured projection override, or the default around the centre."""
        if self.config.projection is not None:
            return self.config.projection
        center = self.config.center
        if center is None:
            center = bbox_center(combined_bbox(polygons))
        return EquirectangularProjection(center, self.config.width)

    def explored_window(self, polygons: Sequence[Polygon], forward) -> Tuple[range, range]:
        """
        Index windows on axis 0 and axis 1 covering every polygon.

        Built from the projected bbox corners and outer-ring vertices, then
        padded one index (two for hexagons, whose cells span two lattice
        steps either side of their centre) beyond the tightest bound.
        """
        min_lon, min_lat, max_lon, max_lat = combined_bbox(polygons)
        points = [forward(corner) for corner in (
            (min_lon, min_lat), (min_lon, max_lat), (max_lon, max_lat), (max_lon, min_lat)
        )]
        for polygon in polygons:
            points.extend(forward(point) for point in polygon.outer)

        pad = 2 if self.basis.shape == HEXAGON else 1
        i_range = padded_range(lattice_range(self.basis.axes[0], points, self.basis.step), pad)
        j_range = padded_range(lattice_range(self.basis.axes[1], points, self.basis.step), pad)
        return i_range, j_range

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def tile(self, polygons) -> TilingResult:
        """
        Tile ``polygons`` (Polygon objects or GeoJSON Polygon coordinates).

        Returns:
            TilingResult with the features, projection, keep-map and window

        Raises:
            GeometryError: Malformed input rings
            ConfigError: Degenerate projection or configuration
            DegenerateLatticeError: An intersection could not be solved
        """
        polygons = as_polygons(polygons)
        if not polygons:
            logger.warning("No polygons to tile")
            return TilingResult(features=[])

        projection = self.resolve_projection(polygons)
        forward, inverse = projection.forward, projection.inverse

        keep = trace_boundaries(self.basis, polygons, forward, workers=self.config.workers)
        i_range, j_range = self.explored_window(polygons, forward)

        features = []
        n_boundary = 0
        n_interior = 0
        for cell in assemble_cells(self.basis, i_range, j_range, inverse, keep,
                                   progress=self.config.progress):
            if cell.keep:
                n_boundary += 1
            elif point_in_any(cell.center, polygons):
                n_interior += 1
            else:
                continue
            features.append(Feature.from_cell(cell, self.basis.shape))

        logger.info(f"Tiled {len(polygons)} polygons into {len(features)} {self.basis.shape} cells "
                    f"({n_boundary} boundary, {n_interior} interior)")
        return TilingResult(features=features, projection=projection, keep=keep,
                            window=(i_range, j_range))

    def run(self, polygons) -> List[Feature]:
        """Tile ``polygons`` and return only the features."""
        return self.tile(polygons).features


def hextile(geojson, config: Optional[TilingConfig] = None, **options) -> List[Feature]:
    """
    Tile GeoJSON (or polygons given directly) into square or hexagon cells.

    Args:
        geojson: GeoJSON object of any nesting (Feature, FeatureCollection,
            GeometryCollection, Polygon, MultiPolygon or a list of these),
            a bbox ``[min_lon, min_lat, max_lon, max_lat]``, or a list of
            Polygon objects / GeoJSON Polygon coordinate arrays
        config: TilingConfig; alternatively pass its fields as keywords
            (shape, tilt, width, center, projection, workers, progress)

    Returns:
        List of Feature
    """
    if isinstance(geojson, (list, tuple)) and not is_bbox(geojson) \
            and not any(isinstance(item, dict) for item in geojson):
        polygons = as_polygons(geojson)
    else:
        polygons = extract_polygons(geojson)
    return Tiler(config, **options).run(polygons)
