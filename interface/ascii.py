# interface/ascii.py  –  character-grid dump of a board, for debugging
from __future__ import annotations

import numpy as np

from engine.gotypes import Stone

BLACK_STONE = "●"      # U+25CF
WHITE_STONE = "○"      # U+25CB
EMPTY_POINT = "·"      # U+00B7
HOVER_POINT = "+"


def board_to_lines(state, width: int = 61, height: int = 31) -> list[str]:
    """
    Rasterise a GameState into ``height`` strings of ``width`` characters.

    Points are drawn at their floating-origin-relative view coordinates
    (Poincare disk for hyperbolic boards), scaled to fill the grid.  Points
    that collide on the grid keep the last stone drawn.
    """
    board = state.board
    n = len(board)
    flat = board.geometry.to_flat(board.relative_positions[:n]).cpu().numpy()
    stones = board.stones[:n].cpu().numpy()

    extent = float(np.abs(flat).max()) if n else 1.0
    extent = extent if extent > 0 else 1.0
    cols = np.rint((flat[:, 0] / extent + 1.0) * 0.5 * (width - 1)).astype(int)
    rows = np.rint((1.0 - flat[:, 1] / extent) * 0.5 * (height - 1)).astype(int)

    grid = np.full((height, width), " ", dtype="<U1")
    order = np.argsort(stones, kind="stable")       # empty first, stones on top
    for i in order:
        s = stones[i]
        grid[rows[i], cols[i]] = (
            BLACK_STONE if s == Stone.BLACK else
            WHITE_STONE if s == Stone.WHITE else
            HOVER_POINT if i == state.hover else
            EMPTY_POINT
        )
    return ["".join(r).rstrip() for r in grid]


def show(state, *, header: str | None = None, out=print) -> None:
    """Pretty-print one board."""
    if header:
        out(header)
    for line in board_to_lines(state):
        out(line)
    out()            # blank line
