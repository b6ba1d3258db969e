"""
Cell Assembler
==============

Enumerates lattice addresses inside the explored window and materialises
each one as a closed geographic ring.

- Square cell ``(i, j)``: the quad between lattice lines i, i+1 on axis 0 and
  j, j+1 on axis 1; its centre sits at ``(i + 0.5, j + 0.5)``.
- Hexagon ``(i, j)``: centred on a triangular-lattice vertex with
  ``(i + j) % 3 == 0``; the union of the six triangles sharing that vertex.
  Its keep flag is the OR of the six triangle flags.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

from tqdm import tqdm

from .lattice import (
    HEXAGON,
    LatticeBasis,
    hexagon_triangles,
    is_hexagon_center,
)
from .tracer import KeepMap

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

# Hexagon vertices as lattice offsets from the centre vertex, in ring order
HEXAGON_OFFSETS = ((1, 0), (1, 1), (0, 1), (-1, 0), (-1, -1), (0, -1))
SQUARE_OFFSETS = ((0, 0), (0, 1), (1, 1), (1, 0))


@dataclass(frozen=True)
class Cell:
    """One materialised lattice cell."""

    address: Tuple[int, ...]
    planar_center: Point
    center: Point
    ring: Tuple[Point, ...]
    keep: bool


def close_ring(points: Sequence[Point]) -> Tuple[Point, ...]:
    points = tuple(points)
    return points + (points[0],)


def square_cell(basis: LatticeBasis, i: int, j: int, inverse, keep: KeepMap) -> Cell:
    corners = [basis.lattice_point(i + di, j + dj) for di, dj in SQUARE_OFFSETS]
    planar_center = basis.lattice_point(i + 0.5, j + 0.5)
    return Cell(
        address=(i, j),
        planar_center=planar_center,
        center=tuple(inverse(planar_center)),
        ring=close_ring(tuple(inverse(p)) for p in corners),
        keep=keep.get((i, j)),
    )


def hexagon_cell(basis: LatticeBasis, i: int, j: int, inverse, keep: KeepMap) -> Cell:
    vertices = [basis.lattice_point(i + di, j + dj) for di, dj in HEXAGON_OFFSETS]
    planar_center = basis.lattice_point(i, j)
    return Cell(
        address=(i, j),
        planar_center=planar_center,
        center=tuple(inverse(planar_center)),
        ring=close_ring(tuple(inverse(p)) for p in vertices),
        keep=any(keep.get(t) for t in hexagon_triangles(i, j)),
    )


def window_addresses(basis: LatticeBasis, i_range: range, j_range: range) -> Iterator[Tuple[int, int]]:
    """Addresses enumerated over the window, hexagon centres only for hexagons."""
    for i in i_range:
        for j in j_range:
            if basis.shape == HEXAGON and not is_hexagon_center(i, j):
                continue
            yield i, j


def assemble_cells(basis: LatticeBasis, i_range: range, j_range: range, inverse,
                   keep: KeepMap, progress: bool = False) -> Iterator[Cell]:
    """
    Materialise every cell of the window.

    Each enumerated address (the six triangles of a hexagon) is recorded in
    ``keep`` as explored, so after assembly the map distinguishes unflagged
    window cells from addresses never reached.

    Args:
        basis: Lattice basis
        i_range, j_range: Padded index windows on axis 0 and axis 1
        inverse: Planar-to-geographic mapping
        keep: Completed keep-map from the boundary tracer
        progress: Show a tqdm progress bar

    Yields:
        Cell objects in row-major window order
    """
    build = hexagon_cell if basis.shape == HEXAGON else square_cell
    logger.debug(f"Assembling {basis.shape} cells over window "
                 f"i=[{i_range.start}, {i_range.stop - 1}] j=[{j_range.start}, {j_range.stop - 1}]")

    addresses = window_addresses(basis, i_range, j_range)
    if progress:
        total = len(i_range) * len(j_range)
        if basis.shape == HEXAGON:
            total = total // 3 + 1
        addresses = tqdm(addresses, total=total, desc=f"Assembling {basis.shape} cells")

    for i, j in addresses:
        if basis.shape == HEXAGON:
            for triangle in hexagon_triangles(i, j):
                keep.explore(triangle)
        else:
            keep.explore((i, j))
        yield build(basis, i, j, inverse, keep)
