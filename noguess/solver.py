"""Consistency checking, frontier analysis and forced-cell deduction for no-guess boards."""

import logging
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Tuple, Union

from .utils import Cell, CellState, NO_CONSTRAINT

if TYPE_CHECKING:
    from .board import Board

logger = logging.getLogger(__name__)

# Exhaustive enumeration is exponential in the frontier size; callers may cap it.
DEFAULT_MAX_FRONTIER_SIZE: float = float("inf")

Assignment = Tuple[FrozenSet[int], FrozenSet[int]]


class FrontierTooLargeError(RuntimeError):
    """Raised when a frontier exceeds the configured enumeration limit."""

    def __init__(self, frontier_size: int, limit: Union[int, float]) -> None:
        super().__init__(
            f"Frontier of {frontier_size} cells exceeds the enumeration limit of {limit}."
        )
        self.frontier_size = frontier_size
        self.limit = limit


def count_neighbors(board: "Board", index: int) -> Tuple[int, int]:
    """Return (bomb_count, unsettled_count) over the neighbors of a cell."""
    bombs = 0
    unsettled = 0
    for nbr in board.neighbors(index):
        cell = board.cells[nbr]
        if cell == Cell.BOMB:
            bombs += 1
        elif cell == Cell.UNSETTLED:
            unsettled += 1
    return bombs, unsettled


# -----------------------------------------------------------------------------
# Consistency checking
# -----------------------------------------------------------------------------


def is_valid(board: "Board") -> bool:
    """
    Check the board against every local clue and the global mine budget.

    A clue showing k is violated when more than k of its neighbors are bombs,
    or when even turning every unsettled neighbor into a bomb cannot reach k.
    Globally, the bombs placed must not exceed the budget, and bombs plus
    unsettled cells must still be able to reach it.

    This is a necessary condition only; it does not search for a completion.
    """
    bombs = 0
    unsettled = 0
    for idx, cell in enumerate(board.cells):
        if cell == Cell.BOMB:
            bombs += 1
            continue
        if cell == Cell.UNSETTLED:
            unsettled += 1
            continue

        if board.stats[idx] != CellState.REVEALED:
            continue
        number = board.numbers[idx]
        if number == NO_CONSTRAINT:
            continue

        n_bomb, n_unsettled = count_neighbors(board, idx)
        if n_bomb > number or n_bomb + n_unsettled < number:
            return False

    return bombs <= board.bombs and bombs + unsettled >= board.bombs


# -----------------------------------------------------------------------------
# Frontier analysis
# -----------------------------------------------------------------------------


def clue_cells(board: "Board") -> List[int]:
    """Clue cells that still have at least one unsettled neighbor, in index order."""
    return [
        idx
        for idx in sorted(board.clue_set)
        if any(board.cells[nbr] == Cell.UNSETTLED for nbr in board.neighbors(idx))
    ]


def frontier_cells(board: "Board") -> List[int]:
    """Sorted unsettled cells adjacent to at least one clue cell."""
    frontier = {
        nbr
        for idx in board.clue_set
        for nbr in board.neighbors(idx)
        if board.cells[nbr] == Cell.UNSETTLED
    }
    return sorted(frontier)


# -----------------------------------------------------------------------------
# Constraint solver
# -----------------------------------------------------------------------------


class ConstraintSolver:
    """
    Deduce forced cells on a board, mutating it in place.

    Deduction runs three passes in order:
    1. Trivial: a clue already satisfied clears its unsettled neighbors, and a
       clue needing every unsettled neighbor turns them all into bombs.
    2. Exhaustive: each frontier cell is tentatively set to bomb, then to empty;
       an option with no consistent frontier completion is ruled out.
    3. Saturation: the global mine budget settles every remaining cell when it
       is either exhausted or exactly matched by the unsettled count.
    """

    def __init__(
        self,
        board: "Board",
        max_frontier_size: Union[int, float] = DEFAULT_MAX_FRONTIER_SIZE,
    ) -> None:
        """
        Bind a solver to a board.

        Args:
            board: The board to inspect and mutate.
            max_frontier_size: Largest frontier the exhaustive enumeration will
                accept; use float("inf") to disable the limit.

        Raises:
            ValueError: If max_frontier_size is negative.
        """
        if max_frontier_size < 0:
            raise ValueError("max_frontier_size must be non-negative.")
        self.board = board
        self.max_frontier_size: Union[int, float] = max_frontier_size

        # Counters (for analysis)
        self.inferred_trivial_count: int = 0
        self.inferred_exhaustive_count: int = 0
        self.inferred_saturation_count: int = 0

    # -------------------------------------------------------------------------
    # Consistent completion enumeration
    # -------------------------------------------------------------------------

    def enumerate_consistent_assignments(
        self, board: Optional["Board"] = None
    ) -> List[Assignment]:
        """
        Enumerate every bomb/empty assignment of the frontier that keeps the board valid.

        Each frontier cell is marked revealed with its assigned truth value on a
        scratch copy, and partial assignments that already break a constraint
        are pruned. An empty frontier yields the single empty assignment when
        the board itself is valid.

        Args:
            board: Board to enumerate; defaults to the bound board.

        Returns:
            List of (bomb_cells, empty_cells) pairs.

        Raises:
            FrontierTooLargeError: If the frontier exceeds max_frontier_size.
        """
        if board is None:
            board = self.board

        frontier = frontier_cells(board)
        if len(frontier) > self.max_frontier_size:
            raise FrontierTooLargeError(len(frontier), self.max_frontier_size)

        scratch = board.copy()
        assignments: List[Assignment] = []
        bomb_cells: List[int] = []
        empty_cells: List[int] = []

        def dfs(i: int) -> None:
            if not is_valid(scratch):
                return

            if i == len(frontier):
                assignments.append((frozenset(bomb_cells), frozenset(empty_cells)))
                return

            idx = frontier[i]
            scratch.stats[idx] = CellState.REVEALED

            scratch.cells[idx] = Cell.BOMB
            bomb_cells.append(idx)
            dfs(i + 1)
            bomb_cells.pop()

            scratch.cells[idx] = Cell.EMPTY
            empty_cells.append(idx)
            dfs(i + 1)
            empty_cells.pop()

            scratch.cells[idx] = Cell.UNSETTLED
            scratch.stats[idx] = CellState.HIDDEN

        dfs(0)
        logger.debug(
            "%d consistent completions over a frontier of %d cells",
            len(assignments),
            len(frontier),
        )
        return assignments

    def count_consistent_assignments(self, board: Optional["Board"] = None) -> int:
        """Number of consistent frontier completions."""
        return len(self.enumerate_consistent_assignments(board))

    def has_any_consistent_completion(self, board: Optional["Board"] = None) -> bool:
        """True when at least one consistent frontier completion exists."""
        return self.count_consistent_assignments(board) > 0

    # -------------------------------------------------------------------------
    # Deduction passes
    # -------------------------------------------------------------------------

    def _settle_neighbors(self, index: int, value: Cell) -> int:
        settled = 0
        for nbr in self.board.neighbors(index):
            if self.board.cells[nbr] == Cell.UNSETTLED:
                self.board.cells[nbr] = value
                settled += 1
        return settled

    def trivial_infer(self) -> int:
        """Apply single-clue arithmetic to every clue cell; return cells settled."""
        board = self.board
        settled = 0
        for idx in clue_cells(board):
            number = board.numbers[idx]
            bombs, unsettled = count_neighbors(board, idx)
            if number == bombs:
                settled += self._settle_neighbors(idx, Cell.EMPTY)
            if number == bombs + unsettled:
                settled += self._settle_neighbors(idx, Cell.BOMB)

        self.inferred_trivial_count += settled
        return settled

    def _tentative_board(self, index: int, value: Cell) -> "Board":
        tmp_board = self.board.copy()
        tmp_board.cells[index] = value
        tmp_board.stats[index] = CellState.REVEALED
        return tmp_board

    def exhaustive_infer(self) -> int:
        """
        Rule out impossible values for each frontier cell by enumeration.

        Returns:
            Number of cells settled. Oversized frontiers are skipped (0).
        """
        board = self.board
        frontier = frontier_cells(board)
        if len(frontier) > self.max_frontier_size:
            logger.warning(
                "Skipping exhaustive deduction: frontier of %d cells exceeds limit %s",
                len(frontier),
                self.max_frontier_size,
            )
            return 0

        settled = 0
        for idx in frontier:
            if board.cells[idx] != Cell.UNSETTLED:
                continue

            if self.count_consistent_assignments(
                self._tentative_board(idx, Cell.BOMB)
            ) == 0:
                board.cells[idx] = Cell.EMPTY
                settled += 1
            elif self.count_consistent_assignments(
                self._tentative_board(idx, Cell.EMPTY)
            ) == 0:
                board.cells[idx] = Cell.BOMB
                settled += 1

        self.inferred_exhaustive_count += settled
        return settled

    def saturation_infer(self) -> int:
        """Settle every unsettled cell when the mine budget leaves no choice."""
        board = self.board
        bombs = sum(1 for c in board.cells if c == Cell.BOMB)
        unsettled = [i for i, c in enumerate(board.cells) if c == Cell.UNSETTLED]

        if bombs == board.bombs:
            value = Cell.EMPTY
        elif bombs + len(unsettled) == board.bombs:
            value = Cell.BOMB
        else:
            return 0

        for idx in unsettled:
            board.cells[idx] = value

        self.inferred_saturation_count += len(unsettled)
        return len(unsettled)

    def propagate(self) -> int:
        """
        Run the trivial, exhaustive and saturation passes once, in that order.

        Returns:
            Total number of cells settled.
        """
        trivial = self.trivial_infer()
        exhaustive = self.exhaustive_infer()
        saturation = self.saturation_infer()
        logger.debug(
            "Propagation settled %d trivial, %d exhaustive, %d saturation cells",
            trivial,
            exhaustive,
            saturation,
        )
        return trivial + exhaustive + saturation
