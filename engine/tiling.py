"""engine/tiling.py - Grow a board graph ring by ring from the plane's isometries.

Every board point is a vertex of the regular {sides, around_vertex} tiling.
Starting from the origin, each ring walks every edge direction out of every
point added by the previous ring, and either finds the vertex it lands on
already in the board or appends it.  A final pass over the outermost points
links the ones that sit one edge apart, so the board is the full induced
subgraph of the tiling.
"""

from __future__ import annotations
import logging
import math
import time
from typing import List

import torch

from engine.board import Board
from geometry.isometry import Geometry, Isometry, TilingParameters, get_geometry
from utils.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEDUP_TOLERANCE = 1e-3
MAX_POINTS      = 4096


def edge_directions(geometry: Geometry, params: TilingParameters) -> torch.Tensor:
    """(around_vertex, 4) spinors stepping one edge out along each direction."""
    step = Isometry.translation(geometry, params.distance, 0.0)
    return torch.stack([
        (Isometry.rotation(geometry, k * params.angle) * step).data
        for k in range(params.around_vertex)
    ])


def _landings(board: Board, index: int, directions: torch.Tensor,
              half_turn: torch.Tensor):
    """Candidate transforms and landing coordinates of every edge out of ``index``."""
    geometry = board.geometry
    base = board.transforms[index]
    if board.reversed[index]:
        base = geometry.compose(base, half_turn)
    candidates = geometry.compose(base, directions)            # (q, 4)
    return candidates, geometry.apply(candidates, geometry.zero())


def make_board(
    geometry: Geometry | str,
    edge_len: int,
    sides: int,
    around_vertex: int,
    *,
    dedup_tolerance: float = DEDUP_TOLERANCE,
    max_points: int = MAX_POINTS,
    enable_timing: bool = False,
) -> Board:
    """Build the board spanning ``edge_len`` points across its centre.

    Generation stops early, returning the partial board, once ``max_points``
    points exist.
    """
    if isinstance(geometry, str):
        geometry = get_geometry(geometry)
    if edge_len < 1 or edge_len % 2 == 0:
        raise ConfigurationError(f"edge_len must be a positive odd number, got {edge_len}")
    if max_points < 1:
        raise ConfigurationError(f"max_points must be positive, got {max_points}")

    params = TilingParameters.for_geometry(geometry, sides, around_vertex)
    board = Board(geometry, params, max_points=max_points, enable_timing=enable_timing)

    start = time.perf_counter()
    directions = edge_directions(geometry, params)
    half_turn = geometry.rotation(math.pi)
    child_reversed = params.reverses_on_walk

    frontier: List[int] = [board.add_point(geometry.identity())]
    truncated = False

    for ring in range(1, edge_len // 2 + 1):
        ring_start = len(board)
        next_frontier: List[int] = []

        for parent in frontier:
            candidates, landing = _landings(board, parent, directions, half_turn)

            for k in range(params.around_vertex):
                found = board.find_point(landing[k], dedup_tolerance)
                if found is None:
                    if board.is_full:
                        truncated = True
                        break
                    found = board.add_point(candidates[k],
                                            reversed=child_reversed, ring=ring)
                    next_frontier.append(found)
                board.link(parent, found)
            else:
                board.mark_expanded(parent)

            if truncated:
                break

        board.renormalize(ring_start)
        frontier = next_frontier
        if truncated:
            logger.warning(
                "board generation hit the %d point ceiling in ring %d; "
                "returning a partial board", max_points, ring,
            )
            break

    closed = 0
    for index in range(len(board)):
        if board.expanded[index]:
            continue
        _, landing = _landings(board, index, directions, half_turn)
        for k in range(params.around_vertex):
            found = board.find_point(landing[k], dedup_tolerance)
            if found is not None and board.link(index, found):
                closed += 1
    logger.debug("closed %d links between unexpanded points", closed)

    board.update_relative(Isometry.identity(geometry))
    logger.info(
        "generated %s {%d,%d} board: %d points, %d links in %.3fs",
        geometry.name, sides, around_vertex, len(board), len(board.links),
        time.perf_counter() - start,
    )
    return board
