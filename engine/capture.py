"""engine/capture.py - Liberty flood fill, captures and self-capture on a board graph.

Groups are connected components of same-coloured stones over the board's
adjacency lists, so the rules hold for any valence the tiling produces.
"""

from __future__ import annotations
import enum
import logging
from typing import List, Optional, Set, Tuple

from engine.board import Board
from engine.gotypes import Player, Stone

logger = logging.getLogger(__name__)


class MoveOutcome(enum.Enum):
    CAPTURED_AND_ACCEPTED = "captured_and_accepted"
    ACCEPTED_NO_CAPTURE   = "accepted_no_capture"
    REJECTED_SELF_CAPTURE = "rejected_self_capture"
    REJECTED_OCCUPIED     = "rejected_occupied"
    REJECTED_OFF_BOARD    = "rejected_off_board"

    @property
    def accepted(self) -> bool:
        return self in (MoveOutcome.CAPTURED_AND_ACCEPTED,
                        MoveOutcome.ACCEPTED_NO_CAPTURE)


def flood_fill(stones: List[int], neighbors: List[List[int]],
               start: int, colour: int) -> Tuple[Set[int], bool]:
    """Walk the ``colour`` group containing ``start``.

    Returns the stones visited and whether an empty point was reached; the
    walk stops at the first liberty, so the group is only complete when the
    flag is False.
    """
    group: Set[int] = set()
    stack = [start]
    while stack:
        i = stack.pop()
        s = stones[i]
        if s == Stone.EMPTY:
            return group, True
        if s == colour and i not in group:
            group.add(i)
            stack.extend(neighbors[i])
    return group, False


def find_captures(board: Board, index: int, player: Player) -> Set[int]:
    """Opponent stones left without liberties by ``player``'s stone at ``index``."""
    stones = board.stones[:len(board)].tolist()
    enemy = player.other.stone
    captured: Set[int] = set()
    for start in board.neighbors[index]:
        if stones[start] != enemy or start in captured:
            continue
        group, has_liberty = flood_fill(stones, board.neighbors, start, enemy)
        if not has_liberty:
            captured |= group
    return captured


def is_self_capture(board: Board, index: int, player: Player) -> bool:
    stones = board.stones[:len(board)].tolist()
    _, has_liberty = flood_fill(stones, board.neighbors, index, player.stone)
    return not has_liberty


def resolve_placement(board: Board, index: Optional[int],
                      player: Player) -> Tuple[MoveOutcome, Set[int]]:
    """Place ``player``'s stone at ``index`` and settle captures.

    Opponent captures are resolved first, so a move that frees itself by
    capturing is legal.  Every rejection leaves the board as it was.
    """
    if index is None:
        return MoveOutcome.REJECTED_OFF_BOARD, set()
    if board.stone(index) != Stone.EMPTY:
        return MoveOutcome.REJECTED_OCCUPIED, set()

    board.set_stone(index, player.stone)
    captured = find_captures(board, index, player)
    if captured:
        board.clear(captured)
        return MoveOutcome.CAPTURED_AND_ACCEPTED, captured

    if is_self_capture(board, index, player):
        board.set_stone(index, Stone.EMPTY)
        logger.debug("self capture at point %d rejected", index)
        return MoveOutcome.REJECTED_SELF_CAPTURE, set()

    return MoveOutcome.ACCEPTED_NO_CAPTURE, set()
