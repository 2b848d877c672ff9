import pytest

from agents.basic import RandomBot
from engine.config import GameConfig
from engine.game_state import GameState, new_game
from engine.gotypes import Player, Stone
from interface.ascii import BLACK_STONE, HOVER_POINT, board_to_lines, show
from playrandom import play
from utils.errors import ConfigurationError, HyperGoError


def test_config_from_env():
    config = GameConfig.from_env({
        "HYPERGO_GEOMETRY": "euclidean",
        "HYPERGO_EDGE_LEN": "7",
        "HYPERGO_SIDES": "4",
        "HYPERGO_AROUND_VERTEX": "4",
        "HYPERGO_HOVER_TOLERANCE": "0.3",
        "HYPERGO_ENABLE_TIMING": "yes",
        "UNRELATED": "1",
    })
    assert config.geometry == "euclidean"
    assert config.edge_len == 7 and config.rings == 3
    assert config.hover_tolerance == 0.3
    assert config.enable_timing is True
    assert config.max_points == GameConfig().max_points

    assert GameConfig.from_env({}) == GameConfig()


def test_overrides_skip_none():
    config = GameConfig().with_overrides(edge_len=5, sides=None)
    assert config.edge_len == 5
    assert config.sides == GameConfig().sides


def test_bad_config_raises_configuration_error():
    with pytest.raises(ConfigurationError) as err:
        new_game(4, 5, 4)
    assert isinstance(err.value, HyperGoError)
    assert isinstance(err.value, ValueError)
    assert "CONFIGURATION_ERROR" in str(err.value)

    with pytest.raises(ConfigurationError):
        GameState.new_game(geometry="elliptic")


def test_error_context_in_message():
    err = HyperGoError("boom", context={"edge_len": 4})
    assert str(err) == "[HYPERGO_ERROR] boom (edge_len=4)"
    assert err.context == {"edge_len": 4}


def test_turn_counters():
    state = new_game(3, 4, 4, geometry="euclidean")
    assert state.move_index == 0 and state.turn_count == 1
    state.select_point(0)
    assert state.move_index == 1 and state.turn_count == 2
    assert state.occupied_points() == [(0, Player.black)]
    assert len(state.links()) == 4


def test_timing_collected_when_enabled():
    state = GameState.new_game(geometry="euclidean", edge_len=5, sides=4,
                               around_vertex=4, enable_timing=True)
    state.select_point(0)
    state.select_point(1)
    assert state.call_counts["select_point"] == 2
    assert len(state.timings["select_point"]) == 2
    assert state.board.call_counts["update_relative"] == 1

    quiet = GameState.new_game(geometry="euclidean", edge_len=5, sides=4, around_vertex=4)
    quiet.select_point(0)
    assert quiet.timings == {}


def test_ascii_dump_marks_stones_and_hover():
    state = new_game(5, 4, 4, geometry="euclidean")
    state.select_point(0)
    state.hover = 1
    lines = board_to_lines(state, width=21, height=11)
    assert len(lines) == 11
    text = "\n".join(lines)
    assert text.count(BLACK_STONE) == 1
    assert HOVER_POINT in text

    out = []
    show(state, header="board", out=lambda *a: out.append(a[0] if a else ""))
    assert out[0] == "board"
    assert out[-1] == ""


def test_random_bot_picks_empty_points():
    state = new_game(5, 5, 4, geometry="hyperbolic")
    bot = RandomBot(seed=3)
    seen = set()
    for _ in range(20):
        index = bot.select_point(state)
        assert state.board.stone(index) == Stone.EMPTY
        seen.add(index)
    assert len(seen) > 1

    everything = range(len(state.board))
    assert bot.select_point(state, exclude=everything) is None


def test_random_self_play_keeps_board_consistent():
    config = GameConfig(geometry="hyperbolic", edge_len=5, sides=5, around_vertex=4)
    state = play(config, max_moves=15, seed=7)
    assert 0 < state.move_index <= 15
    assert state.board.check_adjacency()
    stones = state.board.count(Player.black) + state.board.count(Player.white)
    captured = state.prisoners[Player.black] + state.prisoners[Player.white]
    assert stones + captured == state.move_index


if __name__ == "__main__":
    test_config_from_env()
    test_turn_counters()
    test_random_self_play_keeps_board_consistent()
    print("✓ session checks pass")
