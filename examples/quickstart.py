"""
Quickstart example for the No-Guess Minesweeper engine.

This script demonstrates basic usage of the engine.
"""

import random

from noguess import Board, random_clue_reveal, run_many_sessions, safety_map


def main():
    print("=" * 60)
    print("No-Guess Minesweeper - Quickstart Example")
    print("=" * 60)

    # Example 1: Reveal cells by hand
    print("\n1. A 3x3 board with one mine, revealed by hand...")
    print("-" * 60)

    board = Board(width=3, height=3, bombs=1)
    print(board.format_board())

    board = board.reveal(0, 0, 1)
    board = board.reveal(0, 2, 1)
    print()
    print(board.format_board(reveal_all=True))
    print(f"Mines left to place: {board.rest_bombs()}")
    print(f"Unsettled cells: {board.rest_cells()}")

    # Example 2: Rejected clue
    print("\n2. Proposing an impossible clue...")
    print("-" * 60)

    board = Board(width=3, height=3, bombs=1)
    print(f"Reveal (0, 0) showing 3: {board.reveal(0, 0, 3)}")

    # Example 3: Safety probabilities
    print("\n3. Safety of each hidden cell on an 8x8 board with 10 mines...")
    print("-" * 60)

    rng = random.Random(7)
    board = Board(width=8, height=8, bombs=10)
    board, _ = random_clue_reveal(board, 2, 2, rng)
    for idx, p in sorted(safety_map(board).items())[:8]:
        print(f"cell {board.get_row_col(idx)}: {p:.3f}")

    # Example 4: Run multiple sessions for fairness statistics
    print("\n4. Running 10 sessions for fairness statistics...")
    print("-" * 60)

    results = run_many_sessions(width=6, height=6, bombs=5, runs=10, seed=0)
    print(f"Win rate: {results['win_rate']*100:.1f}%")
    print(f"Average fairness: {results['avg_fairness']:.3f}")
    print(f"Average moves per session: {results['avg_reveal_moves_count']:.1f}")

    print("\n" + "=" * 60)
    print("Done! See README.md for more detailed usage instructions.")
    print("=" * 60)


if __name__ == "__main__":
    main()
