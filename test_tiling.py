import math

import pytest
import torch

from engine.tiling import make_board
from geometry.isometry import get_geometry
from utils.errors import ConfigurationError

TILINGS = [
    ("euclidean",  4, 4, 7),
    ("euclidean",  6, 3, 7),
    ("euclidean",  3, 6, 5),
    ("hyperbolic", 5, 4, 7),
    ("hyperbolic", 4, 5, 5),
    ("hyperbolic", 7, 3, 7),
    ("hyperbolic", 3, 7, 5),
]


def _ids(t):
    return f"{t[0]}-{{{t[1]},{t[2]}}}-{t[3]}"


@pytest.mark.parametrize("tiling", TILINGS, ids=_ids)
def test_valence_matches_around_vertex(tiling):
    name, p, q, edge_len = tiling
    board = make_board(name, edge_len, p, q)
    expanded = 0
    for point in board:
        if point.expanded:
            expanded += 1
            assert len(point.neighbors) == q, point
        else:
            assert 1 <= len(point.neighbors) <= q, point
    assert expanded > 1
    assert board[0].expanded and board[0].ring == 0


@pytest.mark.parametrize("tiling", TILINGS, ids=_ids)
def test_adjacency_is_symmetric(tiling):
    name, p, q, edge_len = tiling
    board = make_board(name, edge_len, p, q)
    assert board.check_adjacency()
    assert sum(len(n) for n in board.neighbors) == 2 * len(board.links)
    assert len(set(map(frozenset, board.links))) == len(board.links)


@pytest.mark.parametrize("tiling", TILINGS, ids=_ids)
def test_no_coincident_points(tiling):
    name, p, q, edge_len = tiling
    board = make_board(name, edge_len, p, q)
    n = len(board)
    pos = board.positions[:n]
    dist = board.geometry.point_distance(pos.unsqueeze(1), pos.unsqueeze(0))
    dist = dist + torch.eye(n, dtype=dist.dtype) * 1e9
    assert float(dist.min()) > 0.5 * board.params.distance


@pytest.mark.parametrize("tiling", TILINGS, ids=_ids)
def test_linked_points_are_one_edge_apart(tiling):
    name, p, q, edge_len = tiling
    board = make_board(name, edge_len, p, q)
    for i, j in board.links:
        d = board[i].position.distance(board[j].position)
        assert d == pytest.approx(board.params.distance, abs=1e-6)


@pytest.mark.parametrize("tiling", TILINGS, ids=_ids)
def test_points_stay_on_the_manifold(tiling):
    name, p, q, edge_len = tiling
    board = make_board(name, edge_len, p, q)
    for point in board:
        assert point.position.is_valid()
        assert point.transform.check(eps=1e-9)


@pytest.mark.parametrize("tiling", TILINGS, ids=_ids)
def test_every_edge_length_pair_is_linked(tiling):
    name, p, q, edge_len = tiling
    board = make_board(name, edge_len, p, q)
    n = len(board)
    pos = board.positions[:n]
    dist = board.geometry.point_distance(pos.unsqueeze(1), pos.unsqueeze(0))
    close = (dist - board.params.distance).abs() < 1e-6
    pairs = {frozenset((i, j)) for i, j in close.nonzero().tolist() if i < j}
    assert pairs == set(map(frozenset, board.links))


def test_triangle_board_rim_is_linked():
    board = make_board("euclidean", 3, 3, 6)
    assert len(board) == 7
    assert len(board.links) == 12
    for i in range(1, 7):
        rim = [j for j in board[i].neighbors if j != 0]
        assert 0 in board[i].neighbors
        assert len(rim) == 2
        assert not board[i].expanded


def test_square_grid_layout():
    board = make_board("euclidean", 7, 4, 4)
    rings = 3
    assert len(board) == 1 + 2 * rings * (rings + 1)
    for point in board:
        x, y = point.position.x, point.position.y
        assert x == pytest.approx(round(x), abs=1e-9)
        assert y == pytest.approx(round(y), abs=1e-9)
        assert abs(round(x)) + abs(round(y)) == point.ring


def test_three_across_square_board():
    board = make_board("euclidean", 3, 4, 4)
    assert len(board) == 5
    assert sorted(board[0].neighbors) == [1, 2, 3, 4]
    for i in range(1, 5):
        assert board[i].neighbors == (0,)
        assert board.is_boundary(i)


def test_single_point_board():
    board = make_board("hyperbolic", 1, 5, 4)
    assert len(board) == 1
    assert board.links == []
    assert board[0].neighbors == ()


def test_reversed_flag_follows_vertex_parity():
    even = make_board("euclidean", 5, 4, 4)
    assert not any(p.reversed for p in even)

    odd = make_board("euclidean", 5, 6, 3)
    assert not odd[0].reversed
    assert all(p.reversed for p in list(odd)[1:])


def test_hyperbolic_rings_grow_faster_than_flat():
    flat = make_board("euclidean", 7, 4, 4)
    hyp = make_board("hyperbolic", 7, 5, 4)
    assert len(hyp) > len(flat)
    last_ring = [p for p in hyp if p.ring == 3]
    prev_ring = [p for p in hyp if p.ring == 2]
    # a flat {4,4} ring grows by exactly 4 points
    assert len(last_ring) - len(prev_ring) > 4


def test_point_ceiling_returns_partial_board():
    board = make_board("hyperbolic", 21, 5, 4, max_points=50)
    assert len(board) == 50
    assert board.is_full
    assert board.check_adjacency()
    assert all(len(p.neighbors) <= 4 for p in board)
    with pytest.raises(IndexError):
        board.add_point(board.geometry.identity())


def test_relative_cache_starts_at_identity():
    board = make_board("hyperbolic", 5, 4, 5)
    n = len(board)
    assert torch.allclose(board.relative_positions[:n], board.positions[:n], atol=1e-12)


@pytest.mark.parametrize("edge_len", [0, 2, 4, -3])
def test_edge_len_must_be_positive_odd(edge_len):
    with pytest.raises(ConfigurationError):
        make_board("euclidean", edge_len, 4, 4)


@pytest.mark.parametrize("name,p,q", [
    ("euclidean", 5, 4),
    ("euclidean", 4, 5),
    ("hyperbolic", 4, 4),
    ("hyperbolic", 3, 6),
    ("hyperbolic", 2, 8),
])
def test_non_closing_parameters_raise(name, p, q):
    with pytest.raises(ConfigurationError):
        make_board(name, 5, p, q)


def test_geometry_object_accepted():
    g = get_geometry("hyperbolic")
    board = make_board(g, 3, 7, 3)
    assert board.geometry is g
    assert len(board) == 4
    assert board.params.distance == pytest.approx(
        2 * math.acosh(math.cos(math.pi / 7) / math.sin(math.pi / 3)))


if __name__ == "__main__":
    for t in TILINGS:
        test_valence_matches_around_vertex(t)
        test_adjacency_is_symmetric(t)
    print("✓ tiling checks pass")
