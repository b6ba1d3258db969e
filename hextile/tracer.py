"""
Boundary Tracer
===============

Flags every lattice cell the input boundary passes through.

Each polygon edge is treated as the line ``dot(beta, P) = d`` with
``beta = (y1 - y0, x0 - x1)`` and ``d = x0*y1 - y0*x1``, both scaled by
``1 / |beta|`` so very short edges stay solvable. For every lattice
line ``n`` the edge spans on an axis, the system ``{axis: n*step, beta: d}``
is solved exactly and both cells straddling the crossing are flagged. The
cells holding the ring vertices are flagged too, which covers edges that
never leave a single cell.

Tracing only ever sets flags, so the order in which edges (or polygons) are
processed does not matter and per-worker keep-maps can be merged by union.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from .geometry import Polygon
from .lattice import (
    HEXAGON,
    LatticeBasis,
    LinearSolver,
    dot,
    lattice_range,
    triangle_from_floors,
)

logger = logging.getLogger(__name__)

Address = Tuple[int, ...]


class KeepMap:
    """
    Sparse map from lattice address to the boundary-adjacent flag.

    An absent address means "not explored", which is distinct from an
    explored address whose flag is False.
    """

    def __init__(self):
        self._flags: Dict[Address, bool] = {}

    def flag(self, address: Address) -> None:
        self._flags[address] = True

    def explore(self, address: Address) -> None:
        self._flags.setdefault(address, False)

    def get(self, address: Address, default: bool = False) -> bool:
        return self._flags.get(address, default)

    def update(self, other: "KeepMap") -> None:
        """Union of flags; True always wins."""
        for address, keep in other._flags.items():
            if keep:
                self._flags[address] = True
            else:
                self._flags.setdefault(address, False)

    def flagged(self) -> Iterator[Address]:
        return (address for address, keep in self._flags.items() if keep)

    def __contains__(self, address) -> bool:
        return address in self._flags

    def __getitem__(self, address: Address) -> bool:
        return self._flags[address]

    def __len__(self) -> int:
        return len(self._flags)

    def __iter__(self) -> Iterator[Address]:
        return iter(self._flags)

    def __repr__(self):
        return f"KeepMap({len(self._flags)} explored, {sum(self._flags.values())} flagged)"


# ============================================================================
# CROSSINGS
# ============================================================================

def edge_line(p0: Sequence[float], p1: Sequence[float]) -> Tuple[Tuple[float, float], float]:
    """Coefficients ``(beta, d)`` of the infinite line through ``p0`` and ``p1``."""
    beta = (p1[1] - p0[1], p0[0] - p1[0])
    d = p0[0] * p1[1] - p0[1] * p1[0]
    return beta, d


def _square_crossings(basis: LatticeBasis, m: int, n: int,
                      point: Sequence[float]) -> List[Address]:
    # cells on both sides of line n of axis m
    other = math.floor(dot(basis.axes[1 - m], point) / basis.step)
    if m == 0:
        return [(n, other), (n - 1, other)]
    return [(other, n), (other, n - 1)]


def _hexagon_crossings(basis: LatticeBasis, m: int, n: int,
                       point: Sequence[float]) -> List[Address]:
    # floors of the two triangles on both sides of line n of axis m,
    # using u - v + w == 0 to keep the three floors consistent
    if m == 0:
        fv = math.floor(dot(basis.axes[1], point) / basis.step)
        fw = fv - n
        floors = [(n, fv, fw), (n - 1, fv, fw)]
    elif m == 1:
        fu = math.floor(dot(basis.axes[0], point) / basis.step)
        fw = n - fu - 1
        floors = [(fu, n, fw), (fu, n - 1, fw)]
    else:
        fu = math.floor(dot(basis.axes[0], point) / basis.step)
        fv = fu + n
        floors = [(fu, fv, n), (fu, fv, n - 1)]
    return [triangle_from_floors(*f) for f in floors]


def trace_edge(basis: LatticeBasis, p0: Sequence[float], p1: Sequence[float],
               keep: KeepMap) -> int:
    """
    Flag the cells on both sides of every lattice line crossed by one edge.

    Args:
        basis: Lattice basis
        p0, p1: Planar endpoints
        keep: Keep-map to update

    Returns:
        Number of crossings found
    """
    beta, d = edge_line(p0, p1)
    length = math.hypot(*beta)
    if length == 0:
        return 0
    # unit normal so the solver's determinant measures angle, not edge length
    beta = (beta[0] / length, beta[1] / length)
    d = d / length
    crossings = _hexagon_crossings if basis.shape == HEXAGON else _square_crossings
    count = 0

    for m, lattice_axis in enumerate(basis.axes):
        lo, hi = lattice_range(lattice_axis, (p0, p1), basis.step)
        if lo > hi:
            continue
        solver = LinearSolver.from_axes(lattice_axis, beta)
        for n in range(lo, hi + 1):
            point = solver.solve(n * basis.step, d)
            for address in crossings(basis, m, n, point):
                keep.flag(address)
            count += 1
    return count


def trace_ring(basis: LatticeBasis, ring: Sequence[Sequence[float]], keep: KeepMap) -> int:
    """Trace a ring of planar points, flagging vertex cells and edge crossings."""
    count = 0
    for point in ring:
        keep.flag(basis.cell_address(point))
    for p0, p1 in zip(ring[:-1], ring[1:]):
        count += trace_edge(basis, p0, p1, keep)
    return count


def trace_polygon(basis: LatticeBasis, polygon: Polygon, forward) -> KeepMap:
    """Trace every ring of one polygon into a fresh keep-map."""
    keep = KeepMap()
    count = 0
    for ring in polygon.rings:
        planar = [forward(point) for point in ring]
        count += trace_ring(basis, planar, keep)
    logger.debug(f"Traced polygon with {len(polygon.rings)} rings: "
                 f"{count} crossings, {len(keep)} cells flagged")
    return keep


def trace_boundaries(basis: LatticeBasis, polygons: Iterable[Polygon], forward,
                     workers: int = 1) -> KeepMap:
    """
    Trace all polygons and return the merged keep-map.

    With ``workers > 1`` polygons are traced concurrently, each into its own
    keep-map; the maps are merged only once every worker has finished.
    """
    polygons = list(polygons)
    keep = KeepMap()

    if workers <= 1 or len(polygons) <= 1:
        for polygon in polygons:
            keep.update(trace_polygon(basis, polygon, forward))
        return keep

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(trace_polygon, basis, polygon, forward)
                   for polygon in polygons]
        partial = [future.result() for future in futures]

    for part in partial:
        keep.update(part)
    return keep
