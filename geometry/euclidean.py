"""geometry/euclidean.py - Rigid motions of the flat plane.

Points are (x, y).  A spinor with components (a, b) acts as
z -> (a z + b) / conj(a), i.e. a rotation by arg(a**2) followed by a shift.
"""

from __future__ import annotations
import math
from typing import Tuple

import torch
from torch import Tensor

from geometry import spinor
from geometry.spinor import DTYPE, SpinorTensor, PointTensor
from utils.errors import ConfigurationError


class EuclideanGeometry:
    """Zero-curvature implementation of the ``Geometry`` capability."""

    name      = "euclidean"
    curvature = 0.0
    point_dim = 2

    def __init__(self, device: torch.device | None = None) -> None:
        self.device = device or torch.device("cpu")

    def __repr__(self) -> str:
        return "EuclideanGeometry()"

    # ------------------------------------------------------------------ #
    # Group elements                                                     #
    # ------------------------------------------------------------------ #
    def identity(self) -> SpinorTensor:
        return spinor.identity(self.device)

    def rotation(self, angle: float) -> SpinorTensor:
        return spinor.rotation(angle, self.device)

    def translation(self, distance: float, angle: float) -> SpinorTensor:
        return torch.tensor([1.0, 0.0,
                             distance * math.cos(angle),
                             distance * math.sin(angle)],
                            dtype=DTYPE, device=self.device)

    def translation_to(self, coords: PointTensor) -> SpinorTensor:
        ones  = torch.ones_like(coords[..., 0])
        zeros = torch.zeros_like(coords[..., 0])
        return torch.stack([ones, zeros, coords[..., 0], coords[..., 1]], dim=-1)

    def compose(self, lhs: SpinorTensor, rhs: SpinorTensor) -> SpinorTensor:
        return spinor.compose(lhs, rhs, self.curvature)

    def reverse(self, spinors: SpinorTensor) -> SpinorTensor:
        return spinor.reverse(spinors)

    def magnitude(self, spinors: SpinorTensor) -> Tensor:
        return spinor.magnitude2(spinors, self.curvature).sqrt()

    def normalize(self, spinors: SpinorTensor) -> SpinorTensor:
        return spinor.normalize(spinors, self.curvature)

    # ------------------------------------------------------------------ #
    # Points                                                             #
    # ------------------------------------------------------------------ #
    def zero(self) -> PointTensor:
        return torch.zeros(2, dtype=DTYPE, device=self.device)

    def apply(self, spinors: SpinorTensor, coords: PointTensor) -> PointTensor:
        z = torch.complex(coords[..., 0], coords[..., 1])
        U, V = spinor.mobius_terms(spinors, z, torch.ones_like(z), self.curvature)
        out = U / V
        return torch.stack([out.real, out.imag], dim=-1)

    def point_distance(self, p: PointTensor, q: PointTensor) -> Tensor:
        return torch.linalg.vector_norm(p - q, dim=-1)

    def point_error(self, coords: PointTensor) -> Tensor:
        """Every finite (x, y) is a valid flat point."""
        return torch.where(torch.isfinite(coords).all(dim=-1),
                           torch.zeros_like(coords[..., 0]),
                           torch.full_like(coords[..., 0], math.inf))

    # ------------------------------------------------------------------ #
    # Tiling                                                             #
    # ------------------------------------------------------------------ #
    def tiling_distance(self, sides: int, around_vertex: int) -> float:
        """Edge length of the flat {sides, around_vertex} tiling.

        Only {4,4}, {3,6} and {6,3} close up in the plane; the edge length
        is then a free scale and fixed to 1.
        """
        lhs = math.cos(math.pi / sides)
        rhs = math.sin(math.pi / around_vertex)
        if not math.isclose(lhs, rhs, rel_tol=1e-9, abs_tol=1e-12):
            raise ConfigurationError(
                f"{{{sides},{around_vertex}}} does not tile the flat plane "
                f"(cos(pi/{sides})={lhs:.6f} != sin(pi/{around_vertex})={rhs:.6f})"
            )
        return 1.0

    def distance_to_flat(self, distance: float) -> float:
        return distance

    # ------------------------------------------------------------------ #
    # View projection                                                    #
    # ------------------------------------------------------------------ #
    def to_flat(self, coords: PointTensor) -> Tensor:
        return coords[..., :2]

    def from_flat(self, flat: Tensor) -> PointTensor:
        return flat[..., :2].to(DTYPE)

    def view_to_local(self, view: Tensor,
                      projection_factor: float) -> Tuple[PointTensor, bool]:
        """Map normalised view coordinates to a point; ``projection_factor`` is a zoom."""
        return self.from_flat(view / projection_factor), False

    def adjust_projection_factor(self, factor: float, amount: float) -> float:
        return factor * (amount + 1.0)
