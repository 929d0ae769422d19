"""Command line driver: play one game and show it, or benchmark many."""

import argparse
import logging
import random
import sys
from typing import List, Optional

from .analysis import run_solver_many_tests
from .board import Board
from .config import (
    DEFAULT_MAX_COMPONENT_SIZE,
    DIFFICULTY_LEVELS,
    GUESSING_STRATEGIES,
    MINES_GENERATION_ALGORITHMS,
    get_difficulty,
)
from .engine import Minesweeper
from .solver import MinesweeperSolver


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autosweep",
        description="Play Minesweeper autonomously with constraint inference and least-risk guessing.",
    )
    parser.add_argument("mode", choices=sorted(DIFFICULTY_LEVELS), help="Difficulty preset.")
    parser.add_argument(
        "-i",
        "--iterations",
        type=int,
        default=None,
        help="Play this many games and report the success rate instead of showing one game.",
    )
    parser.add_argument("-s", "--seed", type=int, default=None, help="Seed for reproducible games.")
    parser.add_argument(
        "--max-component-size",
        type=int,
        default=DEFAULT_MAX_COMPONENT_SIZE,
        help="Largest frontier component enumerated exactly.",
    )
    parser.add_argument(
        "--strategy", choices=GUESSING_STRATEGIES, default="bayesian", help="Guessing strategy."
    )
    parser.add_argument(
        "--mines-generation",
        choices=MINES_GENERATION_ALGORITHMS,
        default="safe_neighborhood_rule",
        help="Mine placement rule for the first click.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every move.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    width, height, mines = get_difficulty(args.mode)

    if args.iterations is not None:
        results = run_solver_many_tests(
            width,
            height,
            mines,
            args.iterations,
            args.mines_generation,
            seed=args.seed,
            max_component_size=args.max_component_size,
            guessing_strategy=args.strategy,
        )
        wins = round(results["win_rate"] * args.iterations)
        print(
            f"Solved {wins}/{args.iterations} successful ({results['win_rate']:.3f}), "
            f"{args.mode}, avg luck {results['avg_luck_won']:.4f}"
        )
        return 0

    game = Minesweeper(
        width,
        height,
        mines,
        args.mines_generation,
        rng=random.Random(args.seed),
    )
    solver = MinesweeperSolver(
        Board(game),
        max_component_size=args.max_component_size,
        guessing_strategy=args.strategy,
        rng=random.Random(args.seed) if args.seed is not None else None,
    )
    outcome = solver.run()

    print(solver.board.format(show_coords=True))
    print()
    print(game.format_board(reveal_all=True, color=not args.no_color))
    print()
    print(f"Solved: {outcome.won}, luck: {solver.luck:.4f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
