import pytest
import torch

from engine.capture import MoveOutcome
from engine.game_state import GameState
from engine.gotypes import Player, Stone
from engine.history import MoveHistory, TurnInfo
from geometry.isometry import Point


def _square_game(edge_len):
    return GameState.new_game(geometry="euclidean", edge_len=edge_len,
                              sides=4, around_vertex=4)


def _at(state, x, y):
    p = Point.from_flat(state.geometry, x, y)
    return state.board.find_point(p.coords, 1e-6)


def _play(state, *coords):
    outcomes = [state.select_point(_at(state, x, y)) for x, y in coords]
    assert all(o.accepted for o in outcomes), outcomes
    return outcomes


def test_undo_redo_is_bit_identical():
    state = _square_game(7)
    # ring 1 and 2 points: every one keeps a liberty on the centre or ring 3
    for i in range(1, 11):
        assert state.select_point(i) is MoveOutcome.ACCEPTED_NO_CAPTURE
    after = state.board.snapshot()
    assert state.move_index == 10

    assert state.move_history(-10)
    assert (state.board.snapshot() == Stone.EMPTY).all()
    assert state.current_player is Player.black
    assert state.move_index == 0

    assert state.move_history(10)
    assert torch.equal(state.board.snapshot(), after)
    assert state.current_player is Player.black
    assert state.move_index == 10


def test_undo_restores_captured_stones_and_prisoners():
    state = _square_game(5)
    _play(state,
          (1, 0),     # B
          (0, 0),     # W
          (0, 1),     # B
          (0, -2),    # W
          (-1, 0),    # B
          (-1, -1))   # W
    before = state.board.snapshot()

    outcome = state.select_point(_at(state, 0, -1))     # B
    assert outcome is MoveOutcome.CAPTURED_AND_ACCEPTED
    for xy in [(0, 0), (0, -2), (-1, -1)]:
        assert state.board.stone(_at(state, *xy)) == Stone.EMPTY
    assert state.prisoners[Player.black] == 3
    captured = state.board.snapshot()

    assert state.move_history(-1)
    assert torch.equal(state.board.snapshot(), before)
    assert state.prisoners[Player.black] == 0
    assert state.current_player is Player.black

    assert state.move_history(1)
    assert torch.equal(state.board.snapshot(), captured)
    assert state.prisoners[Player.black] == 3
    assert state.current_player is Player.white


def test_out_of_range_is_a_no_op():
    state = _square_game(3)
    assert not state.move_history(-1)
    assert not state.move_history(1)

    state.select_point(1)
    state.select_point(2)
    snap = state.board.snapshot()
    assert not state.move_history(-3)
    assert not state.move_history(1)
    assert torch.equal(state.board.snapshot(), snap)
    assert state.move_index == 2
    assert state.current_player is Player.black
    assert state.move_history(0)


def test_new_move_discards_redo_branch():
    state = _square_game(5)
    for i in (1, 2, 3):
        state.select_point(i)
    assert state.move_history(-2)
    assert state.history.can_redo

    assert state.select_point(4).accepted
    assert not state.history.can_redo
    assert len(state.history) == 3
    assert not state.move_history(1)
    assert state.board.stone(2) == Stone.EMPTY
    assert state.board.stone(3) == Stone.EMPTY
    assert state.board.stone(4) == Stone.WHITE


def test_rejected_moves_leave_no_history():
    state = _square_game(3)
    state.select_point(0)
    state.select_point(0)
    state.select_point(None)
    assert len(state.history) == 2


def test_restore_rejects_mismatched_snapshot():
    state = _square_game(3)
    with pytest.raises(ValueError):
        state.board.restore(torch.zeros(4, dtype=torch.int8))


def test_history_buffer_grows():
    initial = torch.full((3,), Stone.EMPTY, dtype=torch.int8)
    history = MoveHistory(initial, TurnInfo(Player.black), history_factor=1)
    assert history.board_history.shape[0] == 3

    for k in range(6):
        stones = initial.clone()
        stones[k % 3] = k % 2
        history.save(stones, TurnInfo(Player(1 - k % 2)))
    assert len(history) == 7
    assert history.board_history.shape[0] >= 7
    assert history.cursor == 6
    assert torch.equal(history.board_history[0], initial)
    assert history.current_info.next_player is Player.black

    assert history.move(-6) == 0
    assert torch.equal(history.current, initial)
    assert history.move(-1) is None
    assert history.cursor == 0
    assert history.can_redo and not history.can_undo


if __name__ == "__main__":
    test_undo_redo_is_bit_identical()
    test_undo_restores_captured_stones_and_prisoners()
    test_new_move_discards_redo_branch()
    print("✓ history checks pass")
