import math

import pytest

from noguess import (
    Board,
    FrontierTooLargeError,
    combination,
    safety_map,
    safety_probability,
)


def one_corner_clue(bombs: int) -> Board:
    return Board.from_layout(
        ["o..", ".o.", "..."],
        ["r..", ".r.", "..."],
        ["1..", "...", "..."],
        bombs=bombs,
    )


@pytest.mark.parametrize(
    "n,r,expected",
    [(0, 0, 1.0), (5, 2, 10.0), (10, 0, 1.0), (10, 10, 1.0), (4, 5, 0.0), (4, -1, 0.0)],
)
def test_combination(n, r, expected):
    assert combination(n, r) == expected


def test_combination_matches_exact_value_for_large_arguments():
    assert combination(200, 100) == pytest.approx(math.comb(200, 100), rel=1e-12)


def test_combination_rejects_negative_n():
    with pytest.raises(ValueError):
        combination(-1, 0)


def test_no_clue_means_certainly_safe():
    board = Board(4, 4, 5)
    for idx in (0, 5, 15):
        assert safety_probability(board, idx) == 1.0


def test_empty_frontier_after_a_clue_uses_uniform_density():
    board = Board(5, 5, 4).reveal(0, 0, 0)
    assert board.hint_cells() == []
    # 21 unsettled cells hold the 4 remaining mines.
    assert safety_probability(board, 24) == pytest.approx(17 / 21)
    assert safety_probability(board, 1) == 1.0


def test_frontier_cells_split_the_weight():
    board = one_corner_clue(1)
    # Either neighbor of the clue is the mine, each with weight C(5, 0).
    assert safety_probability(board, 1) == pytest.approx(0.5)
    assert safety_probability(board, 3) == pytest.approx(0.5)
    assert safety_probability(board, 8) == pytest.approx(1.0)


def test_cell_outside_the_frontier_uses_uniform_density():
    board = one_corner_clue(2)
    # Two completions of weight C(5, 1) = 5; the last mine lands on 1 of 5 cells.
    assert safety_probability(board, 1) == pytest.approx(0.5)
    assert safety_probability(board, 8) == pytest.approx(0.8)


def test_known_empty_cell_is_safe():
    board = Board.from_layout(
        ["o..", ".o.", "..o"],
        ["r..", ".r.", "..."],
        ["1..", "...", "..."],
        bombs=2,
    )
    assert safety_probability(board, 8) == 1.0


def test_settled_bomb_is_never_safe():
    board = Board.from_layout(
        ["o*.", ".o.", "..."],
        ["r..", ".r.", "..."],
        ["1..", "...", "..."],
        bombs=2,
    )
    assert safety_probability(board, 1) == 0.0


def test_board_without_completion_defaults_to_safe():
    board = Board.from_layout(
        ["...", ".*o", "ooo"],
        ["...", ".rr", "rrr"],
        ["...", "..3", "221"],
        bombs=1,
    )
    assert safety_probability(board, 0) == 1.0


def test_safety_probability_does_not_modify_board():
    board = one_corner_clue(2)
    before = board.copy()
    safety_probability(board, 8)
    assert board == before


def test_safety_map_matches_single_cell_estimates():
    board = one_corner_clue(2)
    probabilities = safety_map(board)

    assert sorted(probabilities) == [1, 2, 3, 5, 6, 7, 8]
    for idx, p in probabilities.items():
        assert p == pytest.approx(safety_probability(board, idx))


def test_safety_map_skips_revealed_and_bomb_cells():
    board = Board.from_layout(
        ["o*.", ".o.", "..."],
        ["r..", ".r.", "..."],
        ["1..", "...", "..."],
        bombs=2,
    )
    probabilities = safety_map(board)
    assert 0 not in probabilities
    assert 1 not in probabilities
    assert 4 not in probabilities


@pytest.mark.parametrize("index", [-1, 9])
def test_index_out_of_range(index):
    with pytest.raises(ValueError):
        safety_probability(Board(3, 3, 1), index)


def test_oversized_frontier_raises():
    with pytest.raises(FrontierTooLargeError):
        safety_probability(one_corner_clue(1), 8, max_frontier_size=1)
