# gotypes.py
# ------------------------------------------------------------------
from __future__ import annotations
import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class Stone:
    """Values stored in the int8 stone tensor."""
    BLACK: int = 0
    WHITE: int = 1
    EMPTY: int = -1


class Player(enum.IntEnum):        # ← values line up with Stone.BLACK / Stone.WHITE
    black = 0
    white = 1

    @property
    def other(self) -> "Player":
        return Player.black if self is Player.white else Player.white

    @property
    def stone(self) -> int:
        return int(self)
