"""geometry/spinor.py - Batched spinor arithmetic shared by both geometries.

An isometry is stored as a float64 tensor of shape (..., 4) laid out as

    [a.real, a.imag, b.real, b.imag]

and read as the complex 2x2 matrix

    [[ a,            b      ],
     [ -K * conj(b), conj(a)]]

where K is the curvature of the plane (0 flat, -1 hyperbolic).  Composition
is plain matrix multiplication, so ``compose(g, h)`` acts as "apply h, then g".
Every helper here broadcasts over the leading dimensions.
"""

from __future__ import annotations
import math
from typing import Tuple

import torch
from torch import Tensor

DTYPE = torch.float64

SpinorTensor = Tensor   # (..., 4) float64
PointTensor  = Tensor   # (..., D) float64, D = 2 flat / 3 hyperbolic


# ========================= PACKING ===========================================

def split(spinors: SpinorTensor) -> Tuple[Tensor, Tensor]:
    """Return the complex (a, b) pair of a (..., 4) spinor tensor."""
    pairs = torch.view_as_complex(
        spinors.contiguous().reshape(*spinors.shape[:-1], 2, 2)
    )
    return pairs[..., 0], pairs[..., 1]


def join(a: Tensor, b: Tensor) -> SpinorTensor:
    """Inverse of :func:`split`."""
    a, b = torch.broadcast_tensors(a, b)
    pairs = torch.stack([a, b], dim=-1)                       # (..., 2) complex
    return torch.view_as_real(pairs).reshape(*a.shape, 4)


def identity(device: torch.device | None = None) -> SpinorTensor:
    return torch.tensor([1.0, 0.0, 0.0, 0.0], dtype=DTYPE, device=device)


def rotation(angle: float, device: torch.device | None = None) -> SpinorTensor:
    half = 0.5 * angle
    return torch.tensor([math.cos(half), math.sin(half), 0.0, 0.0],
                        dtype=DTYPE, device=device)


# ========================= GROUP OPERATIONS ==================================

def compose(lhs: SpinorTensor, rhs: SpinorTensor, curvature: float) -> SpinorTensor:
    a1, b1 = split(lhs)
    a2, b2 = split(rhs)
    a = a1 * a2 - curvature * b1 * b2.conj()
    b = a1 * b2 + b1 * a2.conj()
    return join(a, b)


def reverse(spinors: SpinorTensor) -> SpinorTensor:
    sign = torch.tensor([1.0, -1.0, -1.0, -1.0], dtype=spinors.dtype,
                        device=spinors.device)
    return spinors * sign


def magnitude2(spinors: SpinorTensor, curvature: float) -> Tensor:
    """Determinant of the matrix form; 1 on the group manifold."""
    a, b = split(spinors)
    return a.abs() ** 2 + curvature * b.abs() ** 2


def normalize(spinors: SpinorTensor, curvature: float) -> SpinorTensor:
    mag = magnitude2(spinors, curvature).clamp(min=1e-300).sqrt()
    return spinors / mag.unsqueeze(-1)


def mobius_terms(spinors: SpinorTensor, u: Tensor, v: Tensor,
                 curvature: float) -> Tuple[Tensor, Tensor]:
    """Homogeneous image (U, V) of z = u / v under the matrix form."""
    a, b = split(spinors)
    U = a * u + b * v
    V = -curvature * b.conj() * u + a.conj() * v
    return U, V
