"""
Quickstart example for the Minesweeper Autoplayer.

This script demonstrates basic usage of the solver.
"""

import random

from autosweep import (
    Board,
    Minesweeper,
    MinesweeperSolver,
    board_probabilities,
    format_probabilities,
    run_solver_many_tests,
)
from autosweep.config import DIFFICULTY_LEVELS


def main():
    print("=" * 60)
    print("Minesweeper Autoplayer - Quickstart Example")
    print("=" * 60)

    # Example 1: Solve a single game
    print("\n1. Solving a single Intermediate game (16x16, 40 mines)...")
    print("-" * 60)

    game = Minesweeper(16, 16, 40, "safe_neighborhood_rule", rng=random.Random(7))
    solver = MinesweeperSolver(Board(game))
    outcome = solver.run()

    print(f"Result: {'WON' if outcome.won else 'LOST'}")
    print(f"Reveal moves: {outcome.stats['reveal_moves_count']}")
    print(f"Cells revealed: {outcome.stats['revealed_cells_count']}")
    print(f"Mines flagged: {outcome.stats['flags_count']}")
    for method, count in outcome.stats["inferred_counts"].items():
        print(f"  {method}: {count}")
    print(f"Probabilistic guesses: {outcome.stats['guesses_count']}")
    print(f"Luck: {outcome.stats['luck']:.4f}")

    # Example 2: Show final board state
    print("\n2. Final board state:")
    print("-" * 60)
    print(game.format_board(reveal_all=True))

    # Example 3: Step through a game and look at the probabilities
    print("\n3. Mine probabilities after the opening move (percent):")
    print("-" * 60)
    game = Minesweeper(9, 9, 10, "safe_neighborhood_rule", rng=random.Random(3))
    board = Board(game)
    board.reveal((4, 4))
    print(format_probabilities(board, board_probabilities(board)))

    # Example 4: Win rates by difficulty level
    print("\n4. Win rates by difficulty level (10 games each)...")
    print("-" * 60)
    for name, (w, h, m) in DIFFICULTY_LEVELS.items():
        results = run_solver_many_tests(w, h, m, runs=10, seed=0)
        print(
            f"{name:15s} ({w}x{h}, {m:2d} mines): {results['win_rate'] * 100:5.1f}% win rate, "
            f"avg luck {results['avg_luck_won']:.3f}"
        )

    print("\n" + "=" * 60)
    print("Done!")
    print("=" * 60)


if __name__ == "__main__":
    main()
