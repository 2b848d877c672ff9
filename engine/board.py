"""engine/board.py - Arena of board points over an arbitrary adjacency graph.

Per-point data lives in preallocated tensors indexed by point id, and
``BoardPoint`` is a lightweight view into them.  Points are only ever
appended, so an index stays valid for the lifetime of the board and
neighbour lists can hold plain integers.
"""

from __future__ import annotations
import logging
from collections import defaultdict
from typing import Iterator, List, Optional, Tuple

import torch
from torch import Tensor

from engine.gotypes import Player, Stone
from geometry.isometry import Geometry, Isometry, Point, TilingParameters
from geometry.spinor import DTYPE, SpinorTensor, PointTensor
from utils.shared import timed_method

logger = logging.getLogger(__name__)


class BoardPoint:
    """Read-only view of one point of a ``Board``."""

    __slots__ = ("board", "index")

    def __init__(self, board: "Board", index: int) -> None:
        self.board = board
        self.index = index

    @property
    def transform(self) -> Isometry:
        """Absolute isometry placing the point relative to the board origin."""
        return Isometry(self.board.geometry, self.board.transforms[self.index])

    @property
    def position(self) -> Point:
        return Point(self.board.geometry, self.board.positions[self.index])

    @property
    def relative(self) -> Isometry:
        """Transform relative to the board's current floating origin."""
        return Isometry(self.board.geometry, self.board.relative[self.index])

    @property
    def relative_position(self) -> Point:
        return Point(self.board.geometry, self.board.relative_positions[self.index])

    @property
    def neighbors(self) -> Tuple[int, ...]:
        return tuple(self.board.neighbors[self.index])

    @property
    def stone(self) -> int:
        return int(self.board.stones[self.index])

    @property
    def reversed(self) -> bool:
        return bool(self.board.reversed[self.index])

    @property
    def ring(self) -> int:
        return int(self.board.rings[self.index])

    @property
    def expanded(self) -> bool:
        return bool(self.board.expanded[self.index])

    def __repr__(self) -> str:
        return (f"BoardPoint({self.index}, stone={self.stone}, "
                f"neighbors={list(self.neighbors)})")


class Board:
    """Append-only point arena, undirected links and the stone tensor."""

    def __init__(
        self,
        geometry: Geometry,
        params: TilingParameters,
        max_points: int = 4096,
        enable_timing: bool = False,
    ) -> None:
        self.geometry      = geometry
        self.params        = params
        self.capacity      = max_points
        self.device        = geometry.device
        self.enable_timing = enable_timing

        self.timings     = defaultdict(list) if enable_timing else {}
        self.call_counts = defaultdict(int)  if enable_timing else {}

        self._init_state()

    # ------------------------------------------------------------------ #
    # Storage                                                            #
    # ------------------------------------------------------------------ #
    def _init_state(self) -> None:
        N, D, dev = self.capacity, self.geometry.point_dim, self.device

        self.transforms         = torch.zeros((N, 4), dtype=DTYPE, device=dev)
        self.positions          = torch.zeros((N, D), dtype=DTYPE, device=dev)
        self.relative           = torch.zeros((N, 4), dtype=DTYPE, device=dev)
        self.relative_positions = torch.zeros((N, D), dtype=DTYPE, device=dev)
        self.stones   = torch.full((N,), Stone.EMPTY, dtype=torch.int8, device=dev)
        self.reversed = torch.zeros(N, dtype=torch.bool, device=dev)
        self.expanded = torch.zeros(N, dtype=torch.bool, device=dev)
        self.rings    = torch.zeros(N, dtype=torch.int16, device=dev)

        self.neighbors: List[List[int]] = []
        self.links: List[Tuple[int, int]] = []
        self.num_points = 0

    def __len__(self) -> int:
        return self.num_points

    @property
    def is_full(self) -> bool:
        return self.num_points >= self.capacity

    def point(self, index: int) -> BoardPoint:
        if not 0 <= index < self.num_points:
            raise IndexError(f"point {index} not on board of {self.num_points}")
        return BoardPoint(self, index)

    __getitem__ = point

    def __iter__(self) -> Iterator[BoardPoint]:
        return (BoardPoint(self, i) for i in range(self.num_points))

    # ------------------------------------------------------------------ #
    # Construction                                                       #
    # ------------------------------------------------------------------ #
    def add_point(self, transform: SpinorTensor, *, reversed: bool = False,
                  ring: int = 0) -> int:
        if self.is_full:
            raise IndexError(f"board capacity of {self.capacity} points exhausted")
        i = self.num_points
        self.transforms[i] = transform
        self.positions[i]  = self.geometry.apply(transform, self.geometry.zero())
        self.relative[i]   = transform
        self.relative_positions[i] = self.positions[i]
        self.reversed[i] = reversed
        self.rings[i]    = ring
        self.neighbors.append([])
        self.num_points += 1
        return i

    def link(self, i: int, j: int) -> bool:
        """Join two points; returns False when they were already linked."""
        if i == j or j in self.neighbors[i]:
            return False
        self.neighbors[i].append(j)
        self.neighbors[j].append(i)
        self.links.append((i, j))
        return True

    def mark_expanded(self, index: int) -> None:
        self.expanded[index] = True

    def renormalize(self, start: int = 0, end: Optional[int] = None) -> None:
        end = self.num_points if end is None else end
        if end <= start:
            return
        fixed = self.geometry.normalize(self.transforms[start:end])
        self.transforms[start:end] = fixed
        self.positions[start:end] = self.geometry.apply(fixed, self.geometry.zero())

    # ------------------------------------------------------------------ #
    # Lookup                                                             #
    # ------------------------------------------------------------------ #
    def find_point(self, coords: PointTensor, tolerance: float, *,
                   relative: bool = False) -> Optional[int]:
        """Index of the nearest point within ``tolerance`` of ``coords``, else None.

        Brute-force scan over every point; swapping in a spatial index must
        keep the nearest-within-tolerance result.
        """
        n = self.num_points
        if n == 0:
            return None
        table = self.relative_positions if relative else self.positions
        dist = self.geometry.point_distance(table[:n], coords.to(DTYPE).unsqueeze(0))
        best = int(torch.argmin(dist))
        if float(dist[best]) <= tolerance:
            return best
        return None

    # ------------------------------------------------------------------ #
    # Stones                                                             #
    # ------------------------------------------------------------------ #
    def stone(self, index: int) -> int:
        return int(self.stones[index])

    def set_stone(self, index: int, value: int) -> None:
        self.stones[index] = value

    def clear(self, indices) -> None:
        idx = torch.as_tensor(sorted(indices), dtype=torch.long, device=self.device)
        if idx.numel():
            self.stones[idx] = Stone.EMPTY

    def snapshot(self) -> Tensor:
        return self.stones[:self.num_points].clone()

    def restore(self, snapshot: Tensor) -> None:
        if snapshot.shape != (self.num_points,):
            raise ValueError(f"snapshot shape {tuple(snapshot.shape)} does not match "
                             f"{self.num_points} points")
        self.stones[:self.num_points] = snapshot

    def occupied(self) -> List[Tuple[int, Player]]:
        live = self.stones[:self.num_points]
        idx = (live != Stone.EMPTY).nonzero(as_tuple=True)[0]
        return [(int(i), Player(int(live[i]))) for i in idx]

    def count(self, player: Player) -> int:
        return int((self.stones[:self.num_points] == player.stone).sum())

    # ------------------------------------------------------------------ #
    # Floating origin                                                    #
    # ------------------------------------------------------------------ #
    @timed_method
    def update_relative(self, reference: Isometry) -> None:
        """Re-express every point relative to ``reference``."""
        n = self.num_points
        inv = self.geometry.reverse(reference.data)
        rel = self.geometry.normalize(self.geometry.compose(inv, self.transforms[:n]))
        self.relative[:n] = rel
        self.relative_positions[:n] = self.geometry.apply(rel, self.geometry.zero())
        logger.debug("recomputed %d relative transforms", n)

    # ------------------------------------------------------------------ #
    # Invariants                                                         #
    # ------------------------------------------------------------------ #
    def is_boundary(self, index: int) -> bool:
        return not bool(self.expanded[index])

    def check_adjacency(self) -> bool:
        """Every link is listed from both ends."""
        for i, nbrs in enumerate(self.neighbors):
            for j in nbrs:
                if i not in self.neighbors[j]:
                    return False
        return True
