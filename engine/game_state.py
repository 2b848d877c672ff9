"""engine/game_state.py - Turn orchestration and the query / command surface for a view.

A ``GameState`` owns one board for one session.  The view layer feeds it
world-space points (already mapped through its camera) and reads back
stones, links and turn information.
"""

from __future__ import annotations
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple, Union

from engine.board import Board
from engine.capture import MoveOutcome, resolve_placement
from engine.config import GameConfig
from engine.gotypes import Player
from engine.history import MoveHistory, TurnInfo
from engine.tiling import make_board
from geometry.isometry import Isometry, Point, get_geometry
from utils.shared import timed_method

logger = logging.getLogger(__name__)

Target = Union[Point, int, None]


class GameState:
    """Board + turn + history + floating origin."""

    def __init__(self, board: Board, config: Optional[GameConfig] = None) -> None:
        self.board  = board
        self.config = config or GameConfig()

        self.current_player  = Player.black
        self.hover: Optional[int] = None
        self.floating_origin = Isometry.identity(board.geometry)
        self.needs_render    = True
        self.prisoners: Dict[Player, int] = {Player.black: 0, Player.white: 0}

        self.device        = board.device
        self.enable_timing = self.config.enable_timing
        self.timings       = defaultdict(list) if self.enable_timing else {}
        self.call_counts   = defaultdict(int)  if self.enable_timing else {}

        self.history = MoveHistory(board.snapshot(), self._turn_info(),
                                   history_factor=self.config.history_factor)

    @classmethod
    def new_game(cls, config: Optional[GameConfig] = None, **overrides) -> "GameState":
        config = (config or GameConfig()).with_overrides(**overrides)
        board = make_board(
            get_geometry(config.geometry),
            config.edge_len,
            config.sides,
            config.around_vertex,
            dedup_tolerance=config.dedup_tolerance,
            max_points=config.max_points,
            enable_timing=config.enable_timing,
        )
        return cls(board, config)

    # ------------------------------------------------------------------ #
    # Read accessors                                                     #
    # ------------------------------------------------------------------ #
    @property
    def geometry(self):
        return self.board.geometry

    @property
    def move_index(self) -> int:
        return self.history.cursor

    @property
    def turn_count(self) -> int:
        """Number of the move about to be played, counting from 1."""
        return self.history.cursor + 1

    def occupied_points(self) -> List[Tuple[int, Player]]:
        return self.board.occupied()

    def links(self) -> List[Tuple[int, int]]:
        return list(self.board.links)

    # ------------------------------------------------------------------ #
    # Lookup                                                             #
    # ------------------------------------------------------------------ #
    def find_point(self, point: Point) -> Optional[int]:
        """Board point within the hover tolerance of a world-space ``point``.

        The search runs in the floating-origin frame, where coordinates stay
        small however far the view has travelled.
        """
        local = self.floating_origin.reverse().apply(point)
        return self.board.find_point(local.coords, self.config.hover_tolerance,
                                     relative=True)

    def check_hover(self, point: Optional[Point]) -> Optional[Tuple[Point, int]]:
        index = None if point is None else self.find_point(point)
        if index != self.hover:
            self.hover = index
            self.needs_render = True
        if index is None:
            return None
        return self.board.point(index).position, index

    # ------------------------------------------------------------------ #
    # Moves                                                              #
    # ------------------------------------------------------------------ #
    def _turn_info(self) -> TurnInfo:
        return TurnInfo(self.current_player, dict(self.prisoners))

    def _resolve_target(self, target: Target) -> Optional[int]:
        if target is None:
            return None
        if isinstance(target, Point):
            return self.find_point(target)
        if isinstance(target, bool) or not isinstance(target, int):
            return None
        return target if 0 <= target < len(self.board) else None

    @timed_method
    def select_point(self, target: Target) -> MoveOutcome:
        """Try to play the current player's stone at ``target``."""
        index = self._resolve_target(target)
        player = self.current_player
        outcome, captured = resolve_placement(self.board, index, player)
        if not outcome.accepted:
            logger.debug("%s move at %s rejected: %s", player.name, index, outcome.value)
            return outcome

        self.prisoners[player] += len(captured)
        self.current_player = player.other
        self.history.save(self.board.snapshot(), self._turn_info())
        self.needs_render = True
        logger.debug("%s played %d, captured %d", player.name, index, len(captured))
        return outcome

    def move_history(self, offset: int) -> bool:
        """Undo (negative) or redo (positive) ``offset`` moves; out of range does nothing."""
        if self.history.move(offset) is None:
            return False
        self.board.restore(self.history.current)
        info = self.history.current_info
        self.current_player = info.next_player
        self.prisoners = dict(info.prisoners)
        self.needs_render = True
        return True

    # ------------------------------------------------------------------ #
    # Floating origin                                                    #
    # ------------------------------------------------------------------ #
    @timed_method
    def update_floating_origin(self, viewpoint: Isometry, force: bool = False) -> bool:
        """Recentre cached transforms on ``viewpoint`` once it has drifted far enough."""
        if not force and (self.floating_origin.distance(viewpoint)
                          <= self.config.recenter_threshold):
            return False
        self.floating_origin = viewpoint.normalize()
        self.board.update_relative(self.floating_origin)
        self.needs_render = True
        logger.info("floating origin recentred at %s", self.floating_origin.origin())
        return True


def new_game(edge_len: int, sides: int, around_vertex: int,
             geometry: str = "hyperbolic", **options) -> GameState:
    """Build a board and the initial turn state."""
    config = GameConfig(geometry=geometry, edge_len=edge_len, sides=sides,
                        around_vertex=around_vertex, **options)
    return GameState.new_game(config)
