"""geometry/isometry.py - Point / Isometry values over an interchangeable geometry.

The geometry is a capability object (``EuclideanGeometry`` or
``HyperbolicGeometry``) chosen when a board is built; everything above this
module talks to the plane only through ``Point`` and ``Isometry``.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Dict, Protocol, Tuple, Type

import torch
from torch import Tensor

from geometry.euclidean import EuclideanGeometry
from geometry.hyperbolic import HyperbolicGeometry
from geometry.spinor import DTYPE, SpinorTensor, PointTensor
from utils.errors import ConfigurationError

# Round-trip and manifold tolerance used by the validation helpers.
EPSILON = 1e-9


class Geometry(Protocol):
    """Operations a plane model has to provide.  All of them are batched."""

    name: str
    curvature: float
    point_dim: int
    device: torch.device

    def identity(self) -> SpinorTensor: ...
    def rotation(self, angle: float) -> SpinorTensor: ...
    def translation(self, distance: float, angle: float) -> SpinorTensor: ...
    def translation_to(self, coords: PointTensor) -> SpinorTensor: ...
    def compose(self, lhs: SpinorTensor, rhs: SpinorTensor) -> SpinorTensor: ...
    def reverse(self, spinors: SpinorTensor) -> SpinorTensor: ...
    def magnitude(self, spinors: SpinorTensor) -> Tensor: ...
    def normalize(self, spinors: SpinorTensor) -> SpinorTensor: ...
    def zero(self) -> PointTensor: ...
    def apply(self, spinors: SpinorTensor, coords: PointTensor) -> PointTensor: ...
    def point_distance(self, p: PointTensor, q: PointTensor) -> Tensor: ...
    def point_error(self, coords: PointTensor) -> Tensor: ...
    def tiling_distance(self, sides: int, around_vertex: int) -> float: ...
    def distance_to_flat(self, distance: float) -> float: ...
    def to_flat(self, coords: PointTensor) -> Tensor: ...
    def from_flat(self, flat: Tensor) -> PointTensor: ...
    def view_to_local(self, view: Tensor,
                      projection_factor: float) -> Tuple[PointTensor, bool]: ...
    def adjust_projection_factor(self, factor: float, amount: float) -> float: ...


GEOMETRIES: Dict[str, Type] = {
    "euclidean":  EuclideanGeometry,
    "flat":       EuclideanGeometry,
    "hyperbolic": HyperbolicGeometry,
}


def get_geometry(name: str, device: torch.device | None = None) -> Geometry:
    try:
        return GEOMETRIES[name.lower()](device)
    except KeyError:
        raise ConfigurationError(
            f"unknown geometry {name!r}; expected one of {sorted(GEOMETRIES)}"
        ) from None


# ========================= POINT =============================================

class Point:
    """Immutable coordinate in the model of ``geometry``."""

    __slots__ = ("geometry", "coords")

    def __init__(self, geometry: Geometry, coords: PointTensor) -> None:
        assert coords.shape == (geometry.point_dim,), coords.shape
        object.__setattr__(self, "geometry", geometry)
        object.__setattr__(self, "coords", coords.detach().to(DTYPE).clone())

    def __setattr__(self, name, value):
        raise AttributeError("Point is immutable")

    @classmethod
    def zero(cls, geometry: Geometry) -> "Point":
        return cls(geometry, geometry.zero())

    @classmethod
    def from_flat(cls, geometry: Geometry, x: float, y: float) -> "Point":
        """Build a point from view coordinates (Poincare disk for hyperbolic)."""
        return cls(geometry, geometry.from_flat(torch.tensor([x, y], dtype=DTYPE)))

    @property
    def x(self) -> float: return float(self.coords[0])
    @property
    def y(self) -> float: return float(self.coords[1])

    def to_flat(self) -> Tuple[float, float]:
        flat = self.geometry.to_flat(self.coords)
        return float(flat[0]), float(flat[1])

    def distance(self, other: "Point") -> float:
        return float(self.geometry.point_distance(self.coords, other.coords))

    def is_valid(self, eps: float = EPSILON) -> bool:
        return float(self.geometry.point_error(self.coords)) <= eps

    def __eq__(self, other) -> bool:
        return (isinstance(other, Point) and
                self.geometry.name == other.geometry.name and
                torch.equal(self.coords, other.coords))

    def __hash__(self):
        return hash((self.geometry.name, tuple(self.coords.tolist())))

    def __repr__(self) -> str:
        vals = ", ".join(f"{c:.6g}" for c in self.coords.tolist())
        return f"Point({vals})"


# ========================= ISOMETRY ==========================================

class Isometry:
    """Rigid motion of the plane; ``(g * h).apply(p) == g.apply(h.apply(p))``."""

    __slots__ = ("geometry", "data")

    def __init__(self, geometry: Geometry, data: SpinorTensor) -> None:
        assert data.shape == (4,), data.shape
        object.__setattr__(self, "geometry", geometry)
        object.__setattr__(self, "data", data.detach().to(DTYPE).clone())

    def __setattr__(self, name, value):
        raise AttributeError("Isometry is immutable")

    # ------------------------------------------------------------------ #
    # Constructors                                                       #
    # ------------------------------------------------------------------ #
    @classmethod
    def identity(cls, geometry: Geometry) -> "Isometry":
        return cls(geometry, geometry.identity())

    @classmethod
    def translation(cls, geometry: Geometry, distance: float, angle: float) -> "Isometry":
        return cls(geometry, geometry.translation(distance, angle))

    @classmethod
    def translation_to(cls, point: Point) -> "Isometry":
        return cls(point.geometry, point.geometry.translation_to(point.coords))

    @classmethod
    def rotation(cls, geometry: Geometry, angle: float) -> "Isometry":
        return cls(geometry, geometry.rotation(angle))

    # ------------------------------------------------------------------ #
    # Algebra                                                            #
    # ------------------------------------------------------------------ #
    def __mul__(self, other: "Isometry") -> "Isometry":
        if not isinstance(other, Isometry):
            return NotImplemented
        return Isometry(self.geometry, self.geometry.compose(self.data, other.data))

    def reverse(self) -> "Isometry":
        return Isometry(self.geometry, self.geometry.reverse(self.data))

    def apply(self, point: Point) -> Point:
        return Point(self.geometry, self.geometry.apply(self.data, point.coords))

    @property
    def magnitude(self) -> float:
        return float(self.geometry.magnitude(self.data))

    def normalize(self) -> "Isometry":
        """Return the element projected back onto the unit-norm manifold."""
        return Isometry(self.geometry, self.geometry.normalize(self.data))

    def origin(self) -> Point:
        """Image of the origin."""
        return Point(self.geometry, self.geometry.apply(self.data, self.geometry.zero()))

    def distance(self, other: "Isometry") -> float:
        """Distance between the images of the origin under ``self`` and ``other``."""
        rel = self.geometry.compose(self.geometry.reverse(self.data), other.data)
        moved = self.geometry.apply(rel, self.geometry.zero())
        return float(self.geometry.point_distance(self.geometry.zero(), moved))

    # ------------------------------------------------------------------ #
    # Validation                                                         #
    # ------------------------------------------------------------------ #
    def allclose(self, other: "Isometry", atol: float = 1e-9) -> bool:
        """Equality as plane motions; (a, b) and (-a, -b) are the same motion."""
        return (torch.allclose(self.data, other.data, atol=atol) or
                torch.allclose(self.data, -other.data, atol=atol))

    def check(self, eps: float = 1e-6) -> bool:
        """True when the element sits on the unit-norm manifold."""
        return abs(self.magnitude - 1.0) <= eps

    def __repr__(self) -> str:
        vals = ", ".join(f"{c:.6g}" for c in self.data.tolist())
        return f"Isometry({self.geometry.name}: {vals})"


# ========================= TILING PARAMETERS =================================

@dataclass(frozen=True)
class TilingParameters:
    sides: int
    around_vertex: int
    angle: float        # between neighbouring edges at a vertex
    distance: float     # edge length, in geometric units
    link_len: float     # edge length in view coordinates, measured from the origin

    @classmethod
    def for_geometry(cls, geometry: Geometry, sides: int,
                     around_vertex: int) -> "TilingParameters":
        if sides < 3 or around_vertex < 3:
            raise ConfigurationError(
                f"a tiling needs sides >= 3 and around_vertex >= 3, "
                f"got {{{sides},{around_vertex}}}"
            )
        angle = 2.0 * math.pi / around_vertex
        distance = geometry.tiling_distance(sides, around_vertex)
        return cls(sides=sides,
                   around_vertex=around_vertex,
                   angle=angle,
                   distance=distance,
                   link_len=geometry.distance_to_flat(distance))

    @property
    def reverses_on_walk(self) -> bool:
        """Whether walking an edge leaves the new vertex's edges offset by a half turn.

        The back edge of a freshly reached vertex points at angle pi, which is
        one of the edge directions only when around_vertex is even.
        """
        return self.around_vertex % 2 == 1
