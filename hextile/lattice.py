"""
Lattice Geometry
================

Unit axes, the 2-axis linear solver and lattice-line range estimation.

A lattice axis ``A`` defines one family of parallel lattice lines
``dot(A, P) = n * step`` for integer ``n``. The square lattice uses two
orthogonal families (step 1); the hexagon tiling is built on a triangular
lattice of three families 60 degrees apart (step sqrt(3)/4, the height of a
triangle whose side is half a hexagon width).

Key Properties:
- axis(theta) = (sin theta, -cos theta), theta in degrees clockwise from north
- Hexagon axes satisfy a0 - a1 + a2 = 0, so the three lattice coordinates
  (u, v, w) of any point satisfy u - v + w = 0
- Triangle addresses (i, j, k) satisfy i - j + k in {-1, +1}; lattice
  vertices satisfy i - j + k == 0
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigError, DegenerateLatticeError

logger = logging.getLogger(__name__)

Vector = Tuple[float, float]

SQUARE = "square"
HEXAGON = "hexagon"
SHAPES = (SQUARE, HEXAGON)

SQUARE_STEP = 1.0
HEXAGON_STEP = math.sqrt(3) / 4

# Determinant magnitude below which two axes are treated as parallel
EPSILON = 1e-12


# ============================================================================
# AXES
# ============================================================================

def axis(angle_deg: float) -> Vector:
    """Unit vector at ``angle_deg`` degrees clockwise from planar north."""
    theta = angle_deg / 180.0 * math.pi
    return math.sin(theta), -math.cos(theta)


def dot(a: Sequence[float], b: Sequence[float]) -> float:
    return a[0] * b[0] + a[1] * b[1]


@dataclass(frozen=True)
class LinearSolver:
    """
    Inverts two axis projections back to a planar point.

    Given axes ``(a1, b1)`` and ``(a2, b2)``, ``solve(d1, d2)`` returns the
    unique point P with ``dot(axis1, P) == d1`` and ``dot(axis2, P) == d2``
    (Cramer's rule). The axes need not be unit vectors; the boundary tracer
    pairs a lattice axis with an edge normal.

    Raises:
        DegenerateLatticeError: On construction, if the axes are parallel or
            antiparallel (determinant within EPSILON of zero).
    """

    axis1: Vector
    axis2: Vector
    det: float

    @classmethod
    def from_axes(cls, axis1: Sequence[float], axis2: Sequence[float]) -> "LinearSolver":
        a1, b1 = float(axis1[0]), float(axis1[1])
        a2, b2 = float(axis2[0]), float(axis2[1])
        det = a1 * b2 - a2 * b1
        if not abs(det) >= EPSILON:
            raise DegenerateLatticeError(
                f"Axes {(a1, b1)} and {(a2, b2)} are parallel (det={det:.3e})"
            )
        return cls((a1, b1), (a2, b2), det)

    def solve(self, d1: float, d2: float) -> Vector:
        a1, b1 = self.axis1
        a2, b2 = self.axis2
        return (
            (b2 * d1 - b1 * d2) / self.det,
            (-a2 * d1 + a1 * d2) / self.det,
        )


# ============================================================================
# RANGE ESTIMATION
# ============================================================================

def lattice_range(lattice_axis: Sequence[float], points: Iterable[Sequence[float]],
                  step: float = SQUARE_STEP) -> Tuple[int, int]:
    """
    Inclusive range of lattice-line indices along ``lattice_axis`` crossed by
    the span of ``points``.

    Formula: [floor(min/step + 1), ceil(max/step - 1)] over the dot products
    of every point with the axis. Lines touched only at an extreme value are
    excluded. The range is empty when ``lo > hi``.

    Args:
        lattice_axis: Unit axis vector
        points: Planar points (at least one)
        step: Lattice spacing

    Returns:
        (lo, hi) line indices
    """
    pts = np.asarray(list(points), dtype=float).reshape(-1, 2)
    if len(pts) == 0:
        raise ValueError("lattice_range needs at least one point")
    values = pts @ np.asarray(lattice_axis, dtype=float)
    lo = math.floor(float(values.min()) / step + 1)
    hi = math.ceil(float(values.max()) / step - 1)
    return lo, hi


def padded_range(bounds: Tuple[int, int], pad: int = 1) -> range:
    """Python range over ``bounds`` widened by ``pad`` on both sides."""
    lo, hi = bounds
    return range(lo - pad, hi + pad + 1)


# ============================================================================
# TRIANGULAR LATTICE ADDRESSING
# ============================================================================

def triangle_from_floors(fu: int, fv: int, fw: int) -> Tuple[int, int, int]:
    """
    Convert the floored lattice coordinates of a point to its triangle address.

    Inside the unit cell ``[fu, fu+1] x [fv, fv+1]`` the diagonal ``w = fv - fu``
    splits two triangles, so ``fu - fv + fw`` is 0 (upper triangle) or -1
    (lower triangle). The address shifts one coordinate by one so that the
    six triangles around a lattice vertex ``(i, j, j - i)`` are exactly the
    vertex plus or minus one on a single coordinate.
    """
    parity = fu - fv + fw
    if parity == 0:
        return fu, fv + 1, fw
    if parity == -1:
        return fu + 1, fv, fw + 1
    raise DegenerateLatticeError(
        f"Floors {(fu, fv, fw)} do not describe a lattice triangle"
    )


def triangle_address(u: float, v: float) -> Tuple[int, int, int]:
    """Triangle containing the point with lattice coordinates ``(u, v)``."""
    fu = math.floor(u)
    fv = math.floor(v)
    # w = v - u exactly; clamp the floor so rounding never breaks parity
    fw = min(max(math.floor(v - u), fv - fu - 1), fv - fu)
    return triangle_from_floors(fu, fv, fw)


def hexagon_triangles(i: int, j: int) -> Tuple[Tuple[int, int, int], ...]:
    """The six triangle addresses sharing the lattice vertex ``(i, j)``."""
    k = j - i
    return (
        (i, j, k + 1),
        (i - 1, j, k),
        (i, j - 1, k),
        (i, j, k - 1),
        (i + 1, j, k),
        (i, j + 1, k),
    )


def is_hexagon_center(i: int, j: int) -> bool:
    return (i + j) % 3 == 0


# ============================================================================
# BASIS
# ============================================================================

@dataclass(frozen=True)
class LatticeBasis:
    """
    Orientation and spacing of a tiling lattice.

    Attributes:
        shape: 'square' or 'hexagon'
        axes: Unit axes, 2 for square and 3 for hexagon
        step: Spacing between consecutive lattice lines
        solver: LinearSolver over axes[0] and axes[1], used to materialise
            lattice points
    """

    shape: str
    axes: Tuple[Vector, ...]
    step: float
    solver: LinearSolver
    tilt: Optional[float] = None

    @classmethod
    def square(cls, tilt: float = 0.0) -> "LatticeBasis":
        return cls.from_angles(SQUARE, (tilt, tilt + 90), SQUARE_STEP, tilt=tilt)

    @classmethod
    def hexagon(cls, tilt: float = 0.0) -> "LatticeBasis":
        return cls.from_angles(HEXAGON, (tilt, tilt + 60, tilt + 120), HEXAGON_STEP, tilt=tilt)

    @classmethod
    def for_shape(cls, shape: str, tilt: float = 0.0) -> "LatticeBasis":
        if shape == SQUARE:
            return cls.square(tilt)
        if shape == HEXAGON:
            return cls.hexagon(tilt)
        raise ConfigError(f"Unknown shape '{shape}', expected one of {SHAPES}")

    @classmethod
    def from_angles(cls, shape: str, angles: Sequence[float], step: float,
                    tilt: Optional[float] = None) -> "LatticeBasis":
        """
        Build a basis from axis angles in degrees.

        Raises:
            ConfigError: If the shape, axis count or step is invalid, or two
                axes are parallel.
        """
        if shape not in SHAPES:
            raise ConfigError(f"Unknown shape '{shape}', expected one of {SHAPES}")
        expected = 2 if shape == SQUARE else 3
        if len(angles) != expected:
            raise ConfigError(f"A {shape} basis needs {expected} axes, got {len(angles)}")
        if not (math.isfinite(step) and step > 0):
            raise ConfigError(f"Lattice step must be positive, got {step}")
        if not all(math.isfinite(a) for a in angles):
            raise ConfigError(f"Axis angles must be finite, got {tuple(angles)}")

        axes = tuple(axis(a) for a in angles)
        try:
            for m in range(len(axes)):
                for n in range(m + 1, len(axes)):
                    LinearSolver.from_axes(axes[m], axes[n])
            solver = LinearSolver.from_axes(axes[0], axes[1])
        except DegenerateLatticeError as e:
            raise ConfigError(f"Degenerate lattice basis for angles {tuple(angles)}: {e}") from e

        if shape == HEXAGON:
            # triangle addressing relies on u - v + w == 0
            closure = [axes[0][c] - axes[1][c] + axes[2][c] for c in range(2)]
            if max(abs(c) for c in closure) > 1e-9:
                raise ConfigError(
                    f"Hexagon axes {tuple(angles)} must be 60 degrees apart "
                    f"(a0 - a1 + a2 = {tuple(closure)})"
                )
        return cls(shape=shape, axes=axes, step=float(step), solver=solver, tilt=tilt)

    def coordinates(self, point: Sequence[float]) -> Tuple[float, ...]:
        """Lattice coordinates (dot / step) of a planar point on every axis."""
        return tuple(dot(a, point) / self.step for a in self.axes)

    def lattice_point(self, i: float, j: float) -> Vector:
        """Planar point at lattice coordinates ``(i, j)`` on axes 0 and 1."""
        return self.solver.solve(i * self.step, j * self.step)

    def cell_address(self, point: Sequence[float]) -> Tuple[int, ...]:
        """Address of the lattice cell (square or triangle) containing ``point``."""
        u = dot(self.axes[0], point) / self.step
        v = dot(self.axes[1], point) / self.step
        if self.shape == SQUARE:
            return math.floor(u), math.floor(v)
        return triangle_address(u, v)
