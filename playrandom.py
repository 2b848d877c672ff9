"""playrandom.py - Random self-play on a generated board.

Configuration comes from HYPERGO_* environment variables (see
engine/config.py), e.g.

    HYPERGO_GEOMETRY=euclidean HYPERGO_SIDES=4 HYPERGO_AROUND_VERTEX=4 python playrandom.py
"""

from __future__ import annotations
import logging
import time

from agents.basic import RandomBot
from engine.config import GameConfig
from engine.game_state import GameState
from engine.gotypes import Player
from interface.ascii import show
from utils.shared import print_performance_metrics, print_timing_report

MAX_MOVES = 200


def play(config: GameConfig, max_moves: int = MAX_MOVES, seed: int = 0,
         verbose: bool = False) -> GameState:
    state = GameState.new_game(config)
    bots = {Player.black: RandomBot(seed), Player.white: RandomBot(seed + 1)}

    accepted = rejected = 0
    start = time.perf_counter()
    while accepted < max_moves:
        player = state.current_player
        tried = set()
        while True:
            index = bots[player].select_point(state, exclude=tried)
            if index is None:
                break
            outcome = state.select_point(index)
            if outcome.accepted:
                accepted += 1
                if verbose:
                    print(f"{state.move_index:3d}. {player.name:5s} -> {index} ({outcome.value})")
                break
            rejected += 1
            tried.add(index)
        if index is None:
            print(f"{player.name} has no legal point left")
            break
    elapsed = time.perf_counter() - start

    show(state, header=f"after {state.move_index} moves, prisoners "
                       f"B:{state.prisoners[Player.black]} W:{state.prisoners[Player.white]}")
    print_performance_metrics(elapsed, accepted, rejected)
    if config.enable_timing:
        print_timing_report(state)
        print_timing_report(state.board)
    return state


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    play(GameConfig.from_env())
