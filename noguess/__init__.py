"""
No-Guess Minesweeper Engine

A tile-revealing puzzle engine whose mine layout stays undetermined and is
only required to remain consistent with every clue shown so far:
- Consistency checking: local clue and global mine-budget constraints
- Constraint solving: trivial, exhaustive-frontier and saturation deduction
- Safety estimation: combinatorially weighted probability a hidden cell is safe
- Reveal transactions: validated, snapshot-per-move board updates
"""

from .utils import NO_CONSTRAINT, Cell, CellState, get_neighborhoods
from .board import Board
from .solver import (
    ConstraintSolver,
    FrontierTooLargeError,
    clue_cells,
    frontier_cells,
    is_valid,
)
from .probability import combination, safety_map, safety_probability
from .analysis import (
    plot_fairness_traces,
    random_clue_reveal,
    run_level_analysis,
    run_many_sessions,
    run_session,
)

__version__ = "1.0.0"

__all__ = [
    # Core types
    "Board",
    "Cell",
    "CellState",
    "NO_CONSTRAINT",
    # Engine
    "ConstraintSolver",
    "FrontierTooLargeError",
    "clue_cells",
    "frontier_cells",
    "get_neighborhoods",
    "is_valid",
    "combination",
    "safety_map",
    "safety_probability",
    # Analysis functions
    "plot_fairness_traces",
    "random_clue_reveal",
    "run_level_analysis",
    "run_many_sessions",
    "run_session",
]
