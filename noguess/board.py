"""No-guess board state and the reveal transaction."""

import copy
import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from .probability import safety_probability
from .solver import (
    DEFAULT_MAX_FRONTIER_SIZE,
    ConstraintSolver,
    clue_cells,
    frontier_cells,
)
from .utils import (
    NO_CONSTRAINT,
    Cell,
    CellState,
    get_index,
    get_neighborhoods,
    get_row_col,
)

logger = logging.getLogger(__name__)

_TRUTH_CHARS = {".": Cell.UNSETTLED, "o": Cell.EMPTY, "*": Cell.BOMB}
_STATE_CHARS = {".": CellState.HIDDEN, "r": CellState.REVEALED}


def _no_deductions() -> Dict[str, int]:
    return {"trivial": 0, "exhaustive": 0, "saturation": 0}


class Board:
    """
    Board whose mine layout stays undetermined until the clues force it.

    Cells carry a truth value (unsettled, empty or bomb), a visibility and a
    clue number. Every reveal produces a new Board; the receiver is never
    modified by reveal().
    """

    def __init__(self, width: int, height: int, bombs: int) -> None:
        """
        Create a board with one pre-opened cell and the full mine budget unplaced.

        The pre-opened cell is (1, 1), clamped into the grid. It carries no
        clue, so the first real reveal is unconstrained.

        Args:
            width: Board width (number of columns), must be > 0.
            height: Board height (number of rows), must be > 0.
            bombs: Total mine budget, must satisfy 0 < bombs < width * height.

        Raises:
            ValueError: If dimensions or budget are invalid.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")
        if bombs <= 0:
            raise ValueError("bombs must be positive.")
        if bombs >= width * height:
            raise ValueError("bombs must be smaller than the number of cells.")

        self.width: int = width
        self.height: int = height
        self.bombs: int = bombs

        size = width * height
        self.cells: List[Cell] = [Cell.UNSETTLED] * size
        self.stats: List[CellState] = [CellState.HIDDEN] * size
        self.numbers: List[int] = [NO_CONSTRAINT] * size
        self.fairness: float = 1.0
        self.clue_set: Set[int] = set()
        # Cells settled per deduction pass by the reveal that produced this board
        self.deductions: Dict[str, int] = _no_deductions()

        self._neighborhoods: Tuple[Tuple[int, ...], ...] = get_neighborhoods(
            width, height
        )

        start = self.get_index(min(1, height - 1), min(1, width - 1))
        self.cells[start] = Cell.EMPTY
        self.stats[start] = CellState.REVEALED

    @classmethod
    def from_layout(
        cls,
        truths: Sequence[str],
        states: Sequence[str],
        numbers: Sequence[str],
        bombs: int,
        fairness: float = 1.0,
    ) -> "Board":
        """
        Build an arbitrary board from row strings.

        Args:
            truths: One string per row; '.' unsettled, 'o' empty, '*' bomb.
            states: One string per row; '.' hidden, 'r' revealed.
            numbers: One string per row; '.' no constraint, '0'-'8' clue.
            bombs: Total mine budget.
            fairness: Initial fairness score.

        Raises:
            ValueError: If the rows are ragged, characters are unknown, or a
                revealed cell is unsettled.
        """
        height = len(truths)
        width = len(truths[0]) if height else 0
        if len(states) != height or len(numbers) != height:
            raise ValueError("Layouts must have the same number of rows.")
        for rows in (truths, states, numbers):
            if any(len(row) != width for row in rows):
                raise ValueError("All layout rows must have the same width.")

        board = cls(width, height, bombs)
        try:
            board.cells = [_TRUTH_CHARS[ch] for row in truths for ch in row]
            board.stats = [_STATE_CHARS[ch] for row in states for ch in row]
        except KeyError as exc:
            raise ValueError(f"Unknown layout character {exc.args[0]!r}.") from None

        board.numbers = []
        for row in numbers:
            for ch in row:
                if ch == ".":
                    board.numbers.append(NO_CONSTRAINT)
                elif ch.isdigit() and int(ch) <= 8:
                    board.numbers.append(int(ch))
                else:
                    raise ValueError(f"Unknown clue character {ch!r}.")

        for idx, state in enumerate(board.stats):
            if state == CellState.REVEALED and board.cells[idx] == Cell.UNSETTLED:
                raise ValueError("A revealed cell must be empty or a bomb.")

        board.fairness = fairness
        board.clue_set = {
            idx
            for idx, state in enumerate(board.stats)
            if state == CellState.REVEALED
            and board.cells[idx] == Cell.EMPTY
            and board.numbers[idx] != NO_CONSTRAINT
        }
        return board

    def copy(self) -> "Board":
        """Return an independent snapshot of this board."""
        clone = copy.copy(self)
        clone.cells = list(self.cells)
        clone.stats = list(self.stats)
        clone.numbers = list(self.numbers)
        clone.clue_set = set(self.clue_set)
        clone.deductions = dict(self.deductions)
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.bombs == other.bombs
            and self.cells == other.cells
            and self.stats == other.stats
            and self.numbers == other.numbers
            and self.fairness == other.fairness
            and self.clue_set == other.clue_set
        )

    def __repr__(self) -> str:
        return (
            f"Board(width={self.width}, height={self.height}, bombs={self.bombs}, "
            f"fairness={self.fairness:.4f})"
        )

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    def get_index(self, row: int, column: int) -> int:
        return get_index(self.width, row, column)

    def get_row_col(self, index: int) -> Tuple[int, int]:
        return get_row_col(self.width, index)

    def neighbors(self, index: int) -> Tuple[int, ...]:
        """Return precomputed neighbor indices for a cell."""
        return self._neighborhoods[index]

    def _check_coords(self, row: int, column: int) -> None:
        if row < 0 or row >= self.height or column < 0 or column >= self.width:
            raise ValueError("Cell coordinates are outside the board.")

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    def rest_bombs(self) -> int:
        """Mines still to be placed: budget minus cells settled as bombs."""
        return self.bombs - sum(1 for c in self.cells if c == Cell.BOMB)

    def rest_cells(self) -> int:
        """Number of cells whose truth is still unsettled."""
        return sum(1 for c in self.cells if c == Cell.UNSETTLED)

    def is_revealed(self, row: int, column: int) -> bool:
        self._check_coords(row, column)
        return self.stats[self.get_index(row, column)] == CellState.REVEALED

    def is_clue_cell(self, index: int) -> bool:
        return index in self.clue_set

    def is_hint_cell(self, index: int) -> bool:
        """True when the cell is on the frontier of the current clues."""
        return index in frontier_cells(self)

    def clue_cells(self) -> List[int]:
        return sorted(self.clue_set)

    def hint_cells(self) -> List[int]:
        return frontier_cells(self)

    def is_lost(self) -> bool:
        return any(
            state == CellState.REVEALED and self.cells[idx] == Cell.BOMB
            for idx, state in enumerate(self.stats)
        )

    def is_won(self) -> bool:
        """All cells that could be safe are revealed, and no bomb was hit."""
        if self.is_lost():
            return False
        return all(
            self.cells[idx] == Cell.BOMB
            for idx, state in enumerate(self.stats)
            if state == CellState.HIDDEN
        )

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def solve(
        self, *, max_frontier_size: Union[int, float] = DEFAULT_MAX_FRONTIER_SIZE
    ) -> int:
        """Deduce forced cells in place; return the number of cells settled."""
        return ConstraintSolver(self, max_frontier_size=max_frontier_size).propagate()

    def update_clues(self) -> None:
        """Drop clue cells whose neighbors are all settled."""
        self.clue_set = set(clue_cells(self))
        logger.debug("clue_cells: %s", sorted(self.clue_set))
        logger.debug("hint_cells: %s", frontier_cells(self))

    def reveal(
        self,
        row: int,
        column: int,
        number: int,
        *,
        max_frontier_size: Union[int, float] = DEFAULT_MAX_FRONTIER_SIZE,
    ) -> Optional["Board"]:
        """
        Reveal one cell, showing the proposed clue number.

        Args:
            row: Row of the cell to reveal.
            column: Column of the cell to reveal.
            number: Proposed clue number (0-8). NO_CONSTRAINT is accepted only
                for a cell settled as a bomb or whose neighbors are all
                settled; such cells never carry a clue anyway.
            max_frontier_size: Enumeration limit for validation and deduction.

        Returns:
            A new Board, or None when the cell is already revealed or the
            proposed number cannot be realized by any mine layout. Revealing
            a cell already settled as a bomb returns the losing board. The new
            board's deductions dict holds the cells settled by each pass.

        Raises:
            ValueError: If coordinates or the proposed number are out of range,
                or NO_CONSTRAINT is proposed for a cell with an unsettled
                neighbor.
            FrontierTooLargeError: If validation needs an oversized enumeration.
        """
        self._check_coords(row, column)
        if number != NO_CONSTRAINT and not 0 <= number <= 8:
            raise ValueError("Clue number must be between 0 and 8.")

        idx = self.get_index(row, column)
        if self.stats[idx] == CellState.REVEALED:
            return None

        if self.cells[idx] == Cell.BOMB:
            new_board = self.copy()
            new_board.stats[idx] = CellState.REVEALED
            new_board.deductions = _no_deductions()
            logger.info("Revealed a bomb at (%d, %d)", row, column)
            return new_board

        constrained = any(
            self.cells[nbr] == Cell.UNSETTLED for nbr in self.neighbors(idx)
        )
        if number == NO_CONSTRAINT and constrained:
            raise ValueError("A cell with unsettled neighbors needs a clue number.")

        if self.cells[idx] == Cell.UNSETTLED:
            pass_rate = safety_probability(
                self, idx, max_frontier_size=max_frontier_size
            )
        else:
            pass_rate = 1.0

        if not constrained:
            number = NO_CONSTRAINT

        new_board = self.copy()
        new_board._reveal_inner(idx, number)

        solver = ConstraintSolver(new_board, max_frontier_size=max_frontier_size)
        if not solver.has_any_consistent_completion():
            logger.debug("Rejected clue %d at (%d, %d)", number, row, column)
            return None

        new_board.fairness *= pass_rate
        solver.propagate()
        new_board.deductions = {
            "trivial": solver.inferred_trivial_count,
            "exhaustive": solver.inferred_exhaustive_count,
            "saturation": solver.inferred_saturation_count,
        }
        new_board.update_clues()
        return new_board

    def _reveal_inner(self, index: int, number: int) -> None:
        self.cells[index] = Cell.EMPTY
        self.stats[index] = CellState.REVEALED
        self.numbers[index] = number
        if number != NO_CONSTRAINT:
            self.clue_set.add(index)

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def format_board(self, reveal_all: bool = False) -> str:
        """
        Render the board as a multi-line string for debugging output.

        Args:
            reveal_all: If True, also show the settled truth of hidden cells
                ('*' bomb, 'o' empty).

        Returns:
            A formatted multi-line string with coordinate labels and the board grid.
        """

        def cell_str(idx: int) -> str:
            cell = self.cells[idx]
            if self.stats[idx] == CellState.REVEALED:
                if cell == Cell.BOMB:
                    return "X"
                number = self.numbers[idx]
                return " " if number == NO_CONSTRAINT else str(number)
            if reveal_all and cell == Cell.BOMB:
                return "*"
            if reveal_all and cell == Cell.EMPTY:
                return "o"
            return "."

        header_cells = " ".join(f"{c:2d}" for c in range(self.width))
        out = ["   " + header_cells, "   " + "-" * (3 * self.width - 1)]
        for row in range(self.height):
            row_cells = " ".join(
                f" {cell_str(self.get_index(row, c))}" for c in range(self.width)
            )
            out.append(f"{row:2d} |" + row_cells)
        return "\n".join(out)
