"""geometry/hyperbolic.py - Rigid motions of the hyperbolic plane.

Points live on the upper sheet of the hyperboloid w**2 - x**2 - y**2 = 1.
A spinor (a, b) with |a|**2 - |b|**2 = 1 is an SU(1,1) element acting on the
Poincare disk as z -> (a z + b) / (conj(b) z + conj(a)); the disk coordinate
of a hyperboloid point is (x + iy) / (1 + w).
"""

from __future__ import annotations
import math
from typing import Tuple

import torch
from torch import Tensor

from geometry import spinor
from geometry.spinor import DTYPE, SpinorTensor, PointTensor
from utils.errors import ConfigurationError

# Screen-space clamp; the rim of the disk is infinitely far away.
VIEW_LIMIT = 0.99


class HyperbolicGeometry:
    """Curvature -1 implementation of the ``Geometry`` capability."""

    name      = "hyperbolic"
    curvature = -1.0
    point_dim = 3

    def __init__(self, device: torch.device | None = None) -> None:
        self.device = device or torch.device("cpu")

    def __repr__(self) -> str:
        return "HyperbolicGeometry()"

    # ------------------------------------------------------------------ #
    # Group elements                                                     #
    # ------------------------------------------------------------------ #
    def identity(self) -> SpinorTensor:
        return spinor.identity(self.device)

    def rotation(self, angle: float) -> SpinorTensor:
        return spinor.rotation(angle, self.device)

    def translation(self, distance: float, angle: float) -> SpinorTensor:
        half = 0.5 * distance
        sh = math.sinh(half)
        return torch.tensor([math.cosh(half), 0.0,
                             math.cos(angle) * sh,
                             math.sin(angle) * sh],
                            dtype=DTYPE, device=self.device)

    def translation_to(self, coords: PointTensor) -> SpinorTensor:
        # a = cosh(d/2), b = e^{i angle} sinh(d/2), written without d or angle
        # so the origin itself needs no special case.
        v = 1.0 + coords[..., 2]
        scale = torch.rsqrt(2.0 * v)
        return torch.stack([torch.sqrt(0.5 * v),
                            torch.zeros_like(v),
                            coords[..., 0] * scale,
                            coords[..., 1] * scale], dim=-1)

    def compose(self, lhs: SpinorTensor, rhs: SpinorTensor) -> SpinorTensor:
        return spinor.compose(lhs, rhs, self.curvature)

    def reverse(self, spinors: SpinorTensor) -> SpinorTensor:
        return spinor.reverse(spinors)

    def magnitude(self, spinors: SpinorTensor) -> Tensor:
        return spinor.magnitude2(spinors, self.curvature).clamp(min=0.0).sqrt()

    def normalize(self, spinors: SpinorTensor) -> SpinorTensor:
        return spinor.normalize(spinors, self.curvature)

    # ------------------------------------------------------------------ #
    # Points                                                             #
    # ------------------------------------------------------------------ #
    def zero(self) -> PointTensor:
        return torch.tensor([0.0, 0.0, 1.0], dtype=DTYPE, device=self.device)

    def apply(self, spinors: SpinorTensor, coords: PointTensor) -> PointTensor:
        u = torch.complex(coords[..., 0], coords[..., 1])
        v = (1.0 + coords[..., 2]).to(u.dtype)
        U, V = spinor.mobius_terms(spinors, u, v, self.curvature)
        U2, V2 = U.abs() ** 2, V.abs() ** 2
        # Dividing by the actual form value keeps the result on the
        # hyperboloid even for a slightly denormalised spinor.
        denom = V2 - U2
        xy = 2.0 * U * V.conj() / denom
        w = (U2 + V2) / denom
        return torch.stack([xy.real, xy.imag, w], dim=-1)

    def point_distance(self, p: PointTensor, q: PointTensor) -> Tensor:
        inner = p[..., 2] * q[..., 2] - p[..., 0] * q[..., 0] - p[..., 1] * q[..., 1]
        return torch.acosh(inner.clamp(min=1.0))

    def point_error(self, coords: PointTensor) -> Tensor:
        """Deviation from the hyperboloid, relative to the size of w."""
        x, y, w = coords[..., 0], coords[..., 1], coords[..., 2]
        return (w * w - x * x - y * y - 1.0).abs() / (w * w)

    # ------------------------------------------------------------------ #
    # Tiling                                                             #
    # ------------------------------------------------------------------ #
    def tiling_distance(self, sides: int, around_vertex: int) -> float:
        """Edge length of {sides, around_vertex}: cosh(e/2) = cos(pi/p) / sin(pi/q)."""
        ratio = math.cos(math.pi / sides) / math.sin(math.pi / around_vertex)
        if ratio <= 1.0 + 1e-9:
            raise ConfigurationError(
                f"{{{sides},{around_vertex}}} is not a hyperbolic tiling "
                f"((sides-2)*(around_vertex-2) must exceed 4)"
            )
        return 2.0 * math.acosh(ratio)

    def distance_to_flat(self, distance: float) -> float:
        """Length in the Poincare disk of a segment starting at the origin."""
        return math.tanh(0.5 * distance)

    # ------------------------------------------------------------------ #
    # View projection                                                    #
    # ------------------------------------------------------------------ #
    def to_flat(self, coords: PointTensor) -> Tensor:
        return coords[..., :2] / (1.0 + coords[..., 2:3])

    def from_flat(self, flat: Tensor) -> PointTensor:
        flat = flat[..., :2].to(DTYPE)
        r2 = (flat * flat).sum(dim=-1, keepdim=True)
        denom = 1.0 - r2
        return torch.cat([2.0 * flat / denom, (1.0 + r2) / denom], dim=-1)

    def from_klein(self, klein: Tensor) -> PointTensor:
        klein = klein[..., :2].to(DTYPE)
        w = torch.rsqrt(1.0 - (klein * klein).sum(dim=-1, keepdim=True))
        return torch.cat([klein * w, w], dim=-1)

    def view_to_local(self, view: Tensor,
                      projection_factor: float) -> Tuple[PointTensor, bool]:
        """Map normalised view coordinates to a point.

        ``projection_factor`` blends the Beltrami-Klein view (0) into the
        Poincare view (1).  Positions outside the view disk are pulled back
        to its edge and reported as clipped.
        """
        view = view.to(DTYPE)
        mag2 = float((view * view).sum())
        clipped = mag2 >= VIEW_LIMIT
        if clipped:
            view = view * math.sqrt(VIEW_LIMIT / mag2)
            mag2 = VIEW_LIMIT
        base = 0.5 * (1.0 + mag2) * projection_factor + 1.0 - projection_factor
        return self.from_klein(view / base), clipped

    def adjust_projection_factor(self, factor: float, amount: float) -> float:
        return min(max(factor + amount, 0.0), 1.0)
