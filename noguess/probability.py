"""Combinatorially weighted safety estimates for hidden cells."""

import logging
import math
from typing import TYPE_CHECKING, Dict, List, Union

from .solver import DEFAULT_MAX_FRONTIER_SIZE, ConstraintSolver
from .utils import NO_CONSTRAINT, Cell, CellState

if TYPE_CHECKING:
    from .board import Board

logger = logging.getLogger(__name__)

# Pascal's triangle, grown on demand: _PASCAL_ROWS[n][r] == C(n, r)
_PASCAL_ROWS: List[List[float]] = [[1.0]]


def combination(n: int, r: int) -> float:
    """
    Binomial coefficient C(n, r) as a float, read from a cached Pascal's triangle.

    Built by addition only, so large coefficients lose no precision to
    factorial ratios. Out-of-range r gives 0.0.
    """
    if n < 0:
        raise ValueError("n must be non-negative.")
    if r < 0 or r > n:
        return 0.0

    while len(_PASCAL_ROWS) <= n:
        prev = _PASCAL_ROWS[-1]
        row = [1.0]
        for j in range(1, len(prev)):
            row.append(prev[j - 1] + prev[j])
        row.append(1.0)
        _PASCAL_ROWS.append(row)

    return _PASCAL_ROWS[n][r]


def _weighted_safety(
    board: "Board",
    targets: List[int],
    max_frontier_size: Union[int, float],
) -> Dict[int, float]:
    """
    Shared accumulation for one or many target cells over one enumeration.

    Each consistent frontier assignment is weighted by the number of ways to
    place the remaining mines among the unsettled cells it leaves behind.

    A board that has never shown a clue gives 1.0 for every non-bomb target.
    Once any clue has been shown, an empty frontier is weighed like any other:
    the single empty assignment spreads the remaining mines uniformly.
    """
    if all(number == NO_CONSTRAINT for number in board.numbers):
        # No clue shown yet; nothing to weigh.
        return {t: 0.0 if board.cells[t] == Cell.BOMB else 1.0 for t in targets}

    solver = ConstraintSolver(board, max_frontier_size=max_frontier_size)
    assignments = solver.enumerate_consistent_assignments()

    placed_bombs = board.bombs - board.rest_bombs()
    unsettled_total = board.rest_cells()

    universe = 0.0
    valid: Dict[int, float] = {t: 0.0 for t in targets}

    for bomb_cells, empty_cells in assignments:
        rest_unsettled = unsettled_total - len(bomb_cells) - len(empty_cells)
        rest_bombs = board.bombs - placed_bombs - len(bomb_cells)
        weight = combination(rest_unsettled, rest_bombs)
        universe += weight

        for t in targets:
            if t in empty_cells:
                valid[t] += weight
            elif t in bomb_cells:
                continue
            elif board.cells[t] == Cell.EMPTY:
                valid[t] += weight
            elif board.cells[t] == Cell.UNSETTLED:
                valid[t] += weight * (rest_unsettled - rest_bombs) / rest_unsettled

    result: Dict[int, float] = {}
    for t in targets:
        rate = valid[t] / universe if universe else math.nan
        # Zero or overflowed universe: treat as safe.
        result[t] = 1.0 if math.isnan(rate) else rate
    return result


def safety_probability(
    board: "Board",
    index: int,
    max_frontier_size: Union[int, float] = DEFAULT_MAX_FRONTIER_SIZE,
) -> float:
    """
    Probability that a cell is safe, over all consistent mine layouts.

    Args:
        board: Board to evaluate (not modified).
        index: Linear index of the target cell.
        max_frontier_size: Enumeration limit forwarded to the solver.

    Returns:
        A value in [0, 1]. Boards without any consistent layout, or without
        any clue yet, give 1.0.

    Raises:
        ValueError: If index is outside the board.
        FrontierTooLargeError: If the frontier exceeds max_frontier_size.
    """
    if not 0 <= index < board.width * board.height:
        raise ValueError("Cell index is outside the board.")
    return _weighted_safety(board, [index], max_frontier_size)[index]


def safety_map(
    board: "Board",
    max_frontier_size: Union[int, float] = DEFAULT_MAX_FRONTIER_SIZE,
) -> Dict[int, float]:
    """
    Safety probability of every hidden cell not already known to be a bomb.

    Uses a single enumeration for all cells, so it is much cheaper than
    calling safety_probability() per cell.
    """
    targets = [
        idx
        for idx, state in enumerate(board.stats)
        if state == CellState.HIDDEN and board.cells[idx] != Cell.BOMB
    ]
    if not targets:
        return {}
    probabilities = _weighted_safety(board, targets, max_frontier_size)
    logger.debug("Safety map computed for %d hidden cells", len(probabilities))
    return probabilities
