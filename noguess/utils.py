"""Grid geometry and shared cell vocabulary for the no-guess engine."""

from enum import IntEnum
from typing import Dict, List, Tuple


class Cell(IntEnum):
    """Truth value of a cell. Values match the binding layer's byte encoding."""

    EMPTY = 0
    BOMB = 1
    UNSETTLED = 255


class CellState(IntEnum):
    """Visibility of a cell. A revealed cell never becomes hidden again."""

    HIDDEN = 0
    REVEALED = 1


# Clue number carried by a revealed cell whose neighbors were all settled.
NO_CONSTRAINT = 255

# Module-level cache: (width, height) -> neighbors indexed by linear cell index
_NEIGHBORHOODS_CACHE: Dict[Tuple[int, int], Tuple[Tuple[int, ...], ...]] = {}


def get_index(width: int, row: int, column: int) -> int:
    """Map (row, column) to a row-major linear index."""
    return row * width + column


def get_row_col(width: int, index: int) -> Tuple[int, int]:
    """Map a row-major linear index back to (row, column)."""
    return divmod(index, width)


def get_neighborhoods(width: int, height: int) -> Tuple[Tuple[int, ...], ...]:
    """
    Precompute and cache 8-connected neighbor indices for every cell in a grid.

    Neighborhoods are bounded: cells on an edge simply have fewer neighbors,
    there is no wraparound.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Tuple indexed by linear cell index; each entry is the tuple of
        neighbor indices in row-major order.

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: List[Tuple[int, ...]] = []
    for row in range(height):
        for column in range(width):
            nbrs: List[int] = []
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    if dr == 0 and dc == 0:
                        continue
                    nr, nc = row + dr, column + dc
                    if 0 <= nr < height and 0 <= nc < width:
                        nbrs.append(get_index(width, nr, nc))
            neighborhoods.append(tuple(nbrs))

    result = tuple(neighborhoods)
    _NEIGHBORHOODS_CACHE[key] = result
    return result
