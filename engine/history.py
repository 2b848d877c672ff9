"""engine/history.py - Linear undo / redo over full stone snapshots."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import torch
from torch import Tensor

from engine.gotypes import Player


@dataclass(frozen=True)
class TurnInfo:
    """Turn bookkeeping restored together with a snapshot."""
    next_player: Player
    prisoners: Dict[Player, int] = field(default_factory=dict)


class MoveHistory:
    """Snapshot buffer plus cursor; ``0 <= cursor < len(self)`` always holds.

    board_history : (capacity, N) int8 – -1 empty, 0 black, 1 white
    """

    def __init__(self, initial: Tensor, info: TurnInfo, history_factor: int = 4) -> None:
        num_points = initial.shape[0]
        capacity = max(1, num_points * history_factor)
        self.board_history = torch.empty((capacity, num_points),
                                         dtype=initial.dtype, device=initial.device)
        self.board_history[0] = initial
        self._info: List[TurnInfo] = [info]
        self.length = 1
        self.cursor = 0

    def __len__(self) -> int:
        return self.length

    def _reserve(self, needed: int) -> None:
        capacity = self.board_history.shape[0]
        if needed <= capacity:
            return
        grown = torch.empty((max(needed, 2 * capacity), self.board_history.shape[1]),
                            dtype=self.board_history.dtype,
                            device=self.board_history.device)
        grown[:self.length] = self.board_history[:self.length]
        self.board_history = grown

    def save(self, stones: Tensor, info: TurnInfo) -> None:
        """Drop any redo branch past the cursor, then append ``stones``."""
        self.length = self.cursor + 1
        del self._info[self.length:]
        self._reserve(self.length + 1)
        self.board_history[self.length] = stones
        self._info.append(info)
        self.length += 1
        self.cursor += 1

    def move(self, offset: int) -> Optional[int]:
        """Shift the cursor by ``offset``; None (and no change) when out of range."""
        target = self.cursor + offset
        if not 0 <= target < self.length:
            return None
        self.cursor = target
        return target

    @property
    def current(self) -> Tensor:
        return self.board_history[self.cursor]

    @property
    def current_info(self) -> TurnInfo:
        return self._info[self.cursor]

    @property
    def can_undo(self) -> bool:
        return self.cursor > 0

    @property
    def can_redo(self) -> bool:
        return self.cursor + 1 < self.length
