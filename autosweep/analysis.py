"""Analysis and benchmarking tools for the Minesweeper autoplayer."""

import random
from collections import defaultdict
from typing import Any, Dict, List, Optional, Union

import matplotlib.pyplot as plt
import numpy as np

from .board import Board
from .config import DEFAULT_MAX_COMPONENT_SIZE, DIFFICULTY_LEVELS
from .engine import Minesweeper
from .probability import ProbabilityMap
from .solver import INFERENCE_METHODS, MinesweeperSolver


def format_probabilities(board: Board, probabilities: ProbabilityMap) -> str:
    """
    Format a probability map over the board as a text grid.

    Hidden cells show their mine probability in percent, other cells their
    board symbol.
    """
    lines: List[str] = []
    for row, cells in enumerate(board.snapshot()):
        out: List[str] = []
        for col, symbol in enumerate(cells):
            pos = (row, col)
            if pos in probabilities:
                out.append(f"{probabilities.probability(pos) * 100:3.0f}")
            else:
                out.append(f"{symbol:>3}")
        lines.append(" ".join(out))
    return "\n".join(lines)


def run_solver_single_test(
    width: int,
    height: int,
    mines_count: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    show_boards: bool = False,
    seed: Optional[int] = None,
    max_component_size: Union[int, float] = DEFAULT_MAX_COMPONENT_SIZE,
    guessing_strategy: str = "bayesian",
) -> Dict[str, Any]:
    """
    Run one end-to-end game with MinesweeperSolver on a fresh Minesweeper instance.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        mines_generation_algorithm: Mine placement rule.
        show_boards: If True, print the underlying board and the solver's final view.
        seed: Seed for mine placement and tie-breaking.
        max_component_size: Enumeration cap passed to the solver.
        guessing_strategy: "bayesian" or "local_density".

    Returns:
        The solver's statistics augmented with "won" and "loss_position".
    """
    rng = random.Random(seed)
    game = Minesweeper(
        width, height, mines_count, mines_generation_algorithm, rng=rng
    )
    solver = MinesweeperSolver(
        Board(game),
        max_component_size=max_component_size,
        guessing_strategy=guessing_strategy,
        rng=random.Random(seed) if seed is not None else None,
    )
    outcome = solver.run()

    if show_boards:
        print(f"Generation mode: {mines_generation_algorithm}")
        print("Underlying board (mines visible):")
        print(game.format_board(reveal_all=True))
        print()
        print("Solver view (hidden cells shown as '.'):")
        print(solver.board.format(show_coords=True))
        print()
        print(f"Won: {outcome.won}, luck: {solver.luck:.4f}")

    out = dict(outcome.stats)
    out["won"] = outcome.won
    out["loss_position"] = outcome.position
    return out


def run_solver_many_tests(
    width: int,
    height: int,
    mines_count: int,
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    max_component_size: Union[int, float] = DEFAULT_MAX_COMPONENT_SIZE,
    guessing_strategy: str = "bayesian",
) -> Dict[str, float]:
    """
    Run many independent solver games and return averaged metrics plus win rate.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        runs: Number of independent games to run.
        mines_generation_algorithm: Mine placement rule.
        seed: Base seed; game i uses seed + i. Unseeded when omitted.
        max_component_size: Enumeration cap passed to the solver.
        guessing_strategy: "bayesian" or "local_density".

    Returns:
        Averages of the solver's numeric statistics (prefixed with "avg_"), plus:
        - win_rate
        - avg_luck_won: mean luck over won games (the figure the CLI reports)
        - luck_std: standard deviation of luck over all games
        - avg_guesses_failed, guess_failure_rate
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    sums: Dict[str, float] = defaultdict(float)
    wins = 0
    lucks: List[float] = []
    won_lucks: List[float] = []
    total_guesses = 0.0
    total_failed_guesses = 0.0

    for i in range(runs):
        payload = run_solver_single_test(
            width,
            height,
            mines_count,
            mines_generation_algorithm,
            seed=None if seed is None else seed + i,
            max_component_size=max_component_size,
            guessing_strategy=guessing_strategy,
        )

        lucks.append(float(payload["luck"]))
        if payload["won"]:
            wins += 1
            won_lucks.append(float(payload["luck"]))
        elif payload["loss_position"] is not None:
            total_failed_guesses += 1.0

        total_guesses += float(payload["guesses_count"])

        for method, count in payload["inferred_counts"].items():
            sums[f"avg_inferred_{method}"] += float(count)
        for k, v in payload.items():
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                sums[f"avg_{k}"] += float(v)

    out: Dict[str, float] = {k: total / runs for k, total in sums.items()}
    out["win_rate"] = wins / runs
    out["avg_luck_won"] = float(np.mean(won_lucks)) if won_lucks else 0.0
    out["luck_std"] = float(np.std(lucks))
    out["avg_guesses_failed"] = total_failed_guesses / runs
    out["guess_failure_rate"] = (
        (total_failed_guesses / total_guesses) if total_guesses > 0 else 0.0
    )
    return out


def run_solver_difficulty_analysis(
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    seed: Optional[int] = None,
    max_component_size: Union[int, float] = DEFAULT_MAX_COMPONENT_SIZE,
    show_plots: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run aggregated solver tests on the standard difficulty levels and plot summaries.

    Returns:
        Mapping from level name to statistics dict returned by run_solver_many_tests().
    """
    results: Dict[str, Dict[str, float]] = {}
    for level, (w, h, m) in DIFFICULTY_LEVELS.items():
        results[level] = run_solver_many_tests(
            w,
            h,
            m,
            runs,
            mines_generation_algorithm,
            seed=seed,
            max_component_size=max_component_size,
        )

    if show_plots:
        plot_difficulty_results(results)
    return results


def plot_difficulty_results(results: Dict[str, Dict[str, float]]) -> None:
    """Bar charts of inferences by method, guesses, and win rate per level."""
    level_names = list(results.keys())
    x = np.arange(len(level_names))

    # 1) Inferences made (by method)
    bar_w = 0.8 / len(INFERENCE_METHODS)
    plt.figure()  # type: ignore[misc]
    for i, method in enumerate(INFERENCE_METHODS):
        values = [results[n].get(f"avg_inferred_{method}", 0.0) for n in level_names]
        offset = (i - (len(INFERENCE_METHODS) - 1) / 2) * bar_w
        plt.bar(x + offset, values, width=bar_w, label=method)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average inferred cells")  # type: ignore[misc]
    plt.title("Average inferences by method (per game)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 2) Guesses and luck
    guesses = [results[n]["avg_guesses_count"] for n in level_names]
    luck = [results[n]["avg_luck"] for n in level_names]
    fig, ax1 = plt.subplots()  # type: ignore[misc]
    ax1.bar(x, guesses, width=0.4, label="guesses")
    ax1.set_ylabel("Average guesses per game")
    ax2 = ax1.twinx()
    ax2.plot(x, luck, color="tab:red", marker="o", label="luck")
    ax2.set_ylim(0.0, 1.0)
    ax2.set_ylabel("Average luck")
    ax1.set_xticks(x)
    ax1.set_xticklabels(level_names)
    fig.suptitle("Guesses and luck by difficulty level")
    fig.tight_layout()
    plt.show()  # type: ignore[misc]

    # 3) Win rate by level
    win_rates = [results[n]["win_rate"] for n in level_names]
    plt.figure()  # type: ignore[misc]
    plt.bar(x, win_rates)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Win rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Win rate by difficulty level")  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]


def summarize_inference_mix(
    results: Dict[str, Dict[str, float]], *, level: str = "expert"
) -> Dict[str, float]:
    """
    Fractions of moves made by each inference method and by guessing for one level.

    Raises:
        KeyError: If the level or a required metric is missing.
        ZeroDivisionError: If no moves were recorded.
    """
    if level not in results:
        raise KeyError(f"Level {level!r} not found in results.")
    m = results[level]

    counts: Dict[str, float] = {
        method: float(m.get(f"avg_inferred_{method}", 0.0)) for method in INFERENCE_METHODS
    }
    if "avg_guesses_count" not in m:
        raise KeyError(f"Missing key 'avg_guesses_count' in metrics for level {level!r}.")
    counts["guess"] = float(m["avg_guesses_count"])

    total = sum(counts.values())
    if total == 0.0:
        raise ZeroDivisionError("No inferences or guesses recorded; cannot compute fractions.")

    out: Dict[str, float] = {f"{name}_frac": value / total for name, value in counts.items()}
    out["total_moves"] = total
    out["guess_success_prob"] = 1.0 - float(m.get("guess_failure_rate", 0.0))
    return out

