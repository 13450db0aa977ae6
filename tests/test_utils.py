import pytest

from noguess.utils import get_index, get_neighborhoods, get_row_col


def test_corner_edge_and_interior_neighbor_counts():
    nbrs = get_neighborhoods(4, 3)
    assert len(nbrs) == 12
    assert len(nbrs[get_index(4, 0, 0)]) == 3
    assert len(nbrs[get_index(4, 0, 2)]) == 5
    assert len(nbrs[get_index(4, 1, 1)]) == 8
    assert len(nbrs[get_index(4, 2, 3)]) == 3


def test_no_wraparound():
    nbrs = get_neighborhoods(3, 3)
    assert nbrs[0] == (1, 3, 4)
    assert nbrs[8] == (4, 5, 7)
    # Right edge of row 0 must not reach the left edge of row 1.
    assert 3 not in nbrs[2]


def test_single_cell_grid_has_no_neighbors():
    assert get_neighborhoods(1, 1) == ((),)


def test_neighborhoods_are_cached():
    assert get_neighborhoods(5, 7) is get_neighborhoods(5, 7)


@pytest.mark.parametrize("width,height", [(0, 3), (3, 0), (-1, 2)])
def test_invalid_dimensions(width, height):
    with pytest.raises(ValueError):
        get_neighborhoods(width, height)


def test_index_mapping():
    assert get_index(5, 2, 3) == 13
    assert get_row_col(5, 13) == (2, 3)
