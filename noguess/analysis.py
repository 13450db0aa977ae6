"""Session simulation and fairness benchmarking for the no-guess engine."""

import random
from typing import Dict, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from .board import Board
from .probability import safety_map
from .solver import DEFAULT_MAX_FRONTIER_SIZE
from .utils import NO_CONSTRAINT, Cell, CellState


def random_clue_reveal(
    board: Board,
    row: int,
    column: int,
    rng: random.Random,
    *,
    max_frontier_size: Union[int, float] = DEFAULT_MAX_FRONTIER_SIZE,
) -> Tuple[Optional[Board], int]:
    """
    Reveal a cell with a clue number drawn at random among the realizable ones.

    Candidate numbers 0-8 are tried in random order until the engine accepts one.

    Returns:
        Tuple of (new_board, rejected_count). new_board is None only if the
        cell is already revealed or no number is realizable.
    """
    candidates = list(range(9))
    rng.shuffle(candidates)

    rejected = 0
    for number in candidates:
        new_board = board.reveal(
            row, column, number, max_frontier_size=max_frontier_size
        )
        if new_board is not None:
            return new_board, rejected
        rejected += 1
    return None, rejected


def run_session(
    width: int,
    height: int,
    bombs: int,
    *,
    seed: Optional[int] = None,
    strategy: str = "safest",
    max_frontier_size: Union[int, float] = DEFAULT_MAX_FRONTIER_SIZE,
    show_boards: bool = False,
) -> Dict[str, object]:
    """
    Play one session until every safe cell is revealed or a bomb is hit.

    Args:
        width: Board width.
        height: Board height.
        bombs: Mine budget.
        seed: Seed for the move and clue-number choices.
        strategy: "safest" reveals a hidden cell with the highest safety
            probability; "random" reveals any hidden cell uniformly.
        max_frontier_size: Enumeration limit forwarded to the engine.
        show_boards: If True, print the final board.

    Returns:
        Dict with "status" (1 win, -1 loss), "reveal_moves_count",
        "rejected_numbers_count", "fairness", "fairness_trace" and the
        cells settled per deduction pass over the session
        ("inferred_trivial_count", "inferred_exhaustive_count",
        "inferred_saturation_count").

    Raises:
        ValueError: If strategy is unrecognized.
    """
    if strategy not in ("safest", "random"):
        raise ValueError('strategy must be "safest" or "random".')

    rng = random.Random(seed)
    board = Board(width, height, bombs)

    fairness_trace: List[float] = [board.fairness]
    reveal_moves_count = 0
    rejected_numbers_count = 0
    inferred = {"trivial": 0, "exhaustive": 0, "saturation": 0}

    while not board.is_won() and not board.is_lost():
        if strategy == "safest":
            probabilities = safety_map(board, max_frontier_size=max_frontier_size)
            best = max(probabilities.values())
            candidates = sorted(i for i, p in probabilities.items() if p == best)
        else:
            candidates = [
                i for i, state in enumerate(board.stats) if state == CellState.HIDDEN
            ]

        idx = rng.choice(candidates)
        row, column = board.get_row_col(idx)
        new_board, rejected = random_clue_reveal(
            board, row, column, rng, max_frontier_size=max_frontier_size
        )
        if new_board is None:
            # No consistent layout leaves this cell safe: it is a mine.
            settled = board.copy()
            settled.cells[idx] = Cell.BOMB
            new_board = settled.reveal(row, column, NO_CONSTRAINT)

        board = new_board
        reveal_moves_count += 1
        rejected_numbers_count += rejected
        for method, count in board.deductions.items():
            inferred[method] += count
        fairness_trace.append(board.fairness)

    status = -1 if board.is_lost() else 1

    if show_boards:
        print("Final board (settled cells shown):")
        print(board.format_board(reveal_all=True))
        print()
        print(f"Finished with status {status}, fairness {board.fairness:.4f}.")

    return {
        "status": status,
        "reveal_moves_count": reveal_moves_count,
        "rejected_numbers_count": rejected_numbers_count,
        "fairness": board.fairness,
        "fairness_trace": fairness_trace,
        "inferred_trivial_count": inferred["trivial"],
        "inferred_exhaustive_count": inferred["exhaustive"],
        "inferred_saturation_count": inferred["saturation"],
    }


def run_many_sessions(
    width: int,
    height: int,
    bombs: int,
    runs: int,
    *,
    seed: Optional[int] = None,
    strategy: str = "safest",
    max_frontier_size: Union[int, float] = DEFAULT_MAX_FRONTIER_SIZE,
) -> Dict[str, float]:
    """
    Run many independent sessions and return averaged metrics plus win rate.

    Args:
        width: Board width.
        height: Board height.
        bombs: Mine budget.
        runs: Number of sessions, must be positive.
        seed: Base seed; session i uses seed + i.
        strategy: Move strategy, see run_session().
        max_frontier_size: Enumeration limit forwarded to the engine.

    Returns:
        Dict with win_rate, avg_fairness, min_fairness, std_fairness,
        avg_reveal_moves_count, avg_rejected_numbers_count and the average
        cells settled per deduction pass (avg_inferred_trivial_count,
        avg_inferred_exhaustive_count, avg_inferred_saturation_count).
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    statuses: List[int] = []
    fairness: List[float] = []
    moves: List[int] = []
    rejected: List[int] = []
    inferred: Dict[str, List[int]] = {
        "trivial": [],
        "exhaustive": [],
        "saturation": [],
    }

    for i in range(runs):
        result = run_session(
            width,
            height,
            bombs,
            seed=None if seed is None else seed + i,
            strategy=strategy,
            max_frontier_size=max_frontier_size,
        )
        statuses.append(int(result["status"]))  # type: ignore[call-overload]
        fairness.append(float(result["fairness"]))  # type: ignore[arg-type]
        moves.append(int(result["reveal_moves_count"]))  # type: ignore[call-overload]
        rejected.append(int(result["rejected_numbers_count"]))  # type: ignore[call-overload]
        for method, counts in inferred.items():
            counts.append(int(result[f"inferred_{method}_count"]))  # type: ignore[call-overload]

    fairness_arr = np.array(fairness)
    return {
        "win_rate": float(np.mean(np.array(statuses) == 1)),
        "avg_fairness": float(fairness_arr.mean()),
        "min_fairness": float(fairness_arr.min()),
        "std_fairness": float(fairness_arr.std()),
        "avg_reveal_moves_count": float(np.mean(moves)),
        "avg_rejected_numbers_count": float(np.mean(rejected)),
        "avg_inferred_trivial_count": float(np.mean(inferred["trivial"])),
        "avg_inferred_exhaustive_count": float(np.mean(inferred["exhaustive"])),
        "avg_inferred_saturation_count": float(np.mean(inferred["saturation"])),
    }


def plot_fairness_traces(
    traces: List[List[float]],
    *,
    title: str = "Fairness over a session",
    show: bool = True,
) -> "plt.Figure":
    """Plot one line per fairness trace (fairness after each reveal)."""
    fig = plt.figure()  # type: ignore[misc]
    for trace in traces:
        plt.plot(np.arange(len(trace)), trace, alpha=0.6)  # type: ignore[misc]
    plt.xlabel("Reveal")  # type: ignore[misc]
    plt.ylabel("Fairness")  # type: ignore[misc]
    plt.ylim(0.0, 1.05)  # type: ignore[misc]
    plt.title(title)  # type: ignore[misc]
    plt.tight_layout()
    if show:
        plt.show()  # type: ignore[misc]
    return fig


# Standard difficulty levels: (width, height, bombs)
STANDARD_LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (30, 16, 99),
}


def run_level_analysis(
    runs: int,
    *,
    levels: Optional[Dict[str, Tuple[int, int, int]]] = None,
    strategy: str = "safest",
    max_frontier_size: Union[int, float] = DEFAULT_MAX_FRONTIER_SIZE,
    show: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run aggregated sessions on several board levels and plot fairness and
    deduction summaries.

    Args:
        runs: Number of sessions per level.
        levels: Mapping of level name to (width, height, bombs); defaults to
            STANDARD_LEVELS. Large boards grow large frontiers and run slowly.
        strategy: Move strategy, see run_session().
        max_frontier_size: Enumeration limit forwarded to the engine.
        show: If True, display the plot.

    Returns:
        Mapping from level name to statistics dict returned by run_many_sessions().
    """
    if levels is None:
        levels = STANDARD_LEVELS

    results: Dict[str, Dict[str, float]] = {}
    for level, (w, h, m) in levels.items():
        results[level] = run_many_sessions(
            w, h, m, runs, strategy=strategy, max_frontier_size=max_frontier_size
        )

    level_names = list(levels.keys())
    x = np.arange(len(level_names))

    avg_fairness = [results[n]["avg_fairness"] for n in level_names]
    min_fairness = [results[n]["min_fairness"] for n in level_names]

    bar_w = 0.35
    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, avg_fairness, width=bar_w, label="average")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, min_fairness, width=bar_w, label="minimum")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Fairness")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Final fairness by difficulty level")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    inferred_trivial = [results[n]["avg_inferred_trivial_count"] for n in level_names]
    inferred_exhaustive = [
        results[n]["avg_inferred_exhaustive_count"] for n in level_names
    ]
    inferred_saturation = [
        results[n]["avg_inferred_saturation_count"] for n in level_names
    ]

    bar_w = 0.25
    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w, inferred_trivial, width=bar_w, label="trivial")  # type: ignore[misc]
    plt.bar(x, inferred_exhaustive, width=bar_w, label="exhaustive")  # type: ignore[misc]
    plt.bar(x + bar_w, inferred_saturation, width=bar_w, label="saturation")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average cells settled per session")  # type: ignore[misc]
    plt.title("Deductions by pass and difficulty level")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    if show:
        plt.show()  # type: ignore[misc]

    return results
