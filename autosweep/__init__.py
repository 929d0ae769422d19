"""
Minesweeper Autoplayer

Plays Minesweeper on its own, combining:
- Deterministic inference: all-safe/all-mine rules, subset elimination,
  pairwise overlap and the global mine budget
- Exact enumeration of each independent frontier component, coupled
  through the remaining mine count
- Least-risk guessing when nothing can be proven, with an approximation
  for components too large to enumerate
"""

from .board import MINE, Board, CellState, MineField
from .constraints import Constraint, extract_constraints
from .deduction import Deduction, deduce
from .engine import Minesweeper
from .errors import InconsistentConstraintsError, ProofViolation
from .frontier import FrontierComponent, partition_frontier
from .probability import (
    ComponentCounts,
    ProbabilityMap,
    board_probabilities,
    enumerate_component,
    estimate_probabilities,
)
from .selector import select_move
from .solver import Action, ActionKind, MinesweeperSolver, Outcome
from .analysis import (
    format_probabilities,
    run_solver_single_test,
    run_solver_many_tests,
    run_solver_difficulty_analysis,
    summarize_inference_mix,
)

__version__ = "1.0.0"

__all__ = [
    # Board and game
    "MINE",
    "Board",
    "CellState",
    "MineField",
    "Minesweeper",
    # Inference
    "Constraint",
    "extract_constraints",
    "Deduction",
    "deduce",
    "FrontierComponent",
    "partition_frontier",
    "ComponentCounts",
    "ProbabilityMap",
    "board_probabilities",
    "enumerate_component",
    "estimate_probabilities",
    "select_move",
    # Solver
    "Action",
    "ActionKind",
    "MinesweeperSolver",
    "Outcome",
    # Errors
    "InconsistentConstraintsError",
    "ProofViolation",
    # Analysis functions
    "format_probabilities",
    "run_solver_single_test",
    "run_solver_many_tests",
    "run_solver_difficulty_analysis",
    "summarize_inference_mix",
]
