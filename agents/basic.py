"""basic.py - Uniform random player over a board graph."""

from __future__ import annotations
from typing import Iterable, Optional

import torch

from engine.game_state import GameState
from engine.gotypes import Stone
from utils.shared import sample_from_mask


class RandomBot:
    """Picks a uniformly random empty point.

    Self-capture is only discovered when the engine rejects the move, so
    callers pass already-rejected points back in through ``exclude``.
    """

    def __init__(self, seed: Optional[int] = None):
        self.generator = torch.Generator()
        if seed is not None:
            self.generator.manual_seed(seed)

    def select_point(self, state: GameState, exclude: Iterable[int] = ()) -> Optional[int]:
        """Return a point index, or None when no candidate is left."""
        board = state.board
        mask = board.stones[:len(board)] == Stone.EMPTY
        excluded = list(exclude)
        if excluded:
            mask[torch.as_tensor(excluded, dtype=torch.long)] = False
        if not mask.any():
            return None
        return int(sample_from_mask(mask.unsqueeze(0), generator=self.generator)[0])
