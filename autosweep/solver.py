"""Autonomous Minesweeper player: deterministic inference first, least-risk guess otherwise."""

import copy
import logging
import random
from collections import deque
from enum import Enum
from typing import Any, Deque, Dict, List, NamedTuple, Optional, Tuple, Union

from .board import MINE, Board
from .config import (
    DEFAULT_MAX_COMPONENT_SIZE,
    validate_guessing_strategy,
    validate_max_component_size,
)
from .constraints import constrained_cells, extract_constraints
from .deduction import (
    BUDGET_INFER,
    PAIRED_INFER,
    SINGLE_INFER,
    SUBSET_INFER,
    deduce,
)
from .errors import ProofViolation
from .probability import ProbabilityMap, board_probabilities
from .selector import select_move
from .utils import Position

logger = logging.getLogger(__name__)

FIRST_MOVE = "first_move"
ENUMERATION_INFER = "enumeration_infer"
PROBABILISTIC_GUESS = "probabilistic_guess"

INFERENCE_METHODS: Tuple[str, ...] = (
    SINGLE_INFER,
    SUBSET_INFER,
    PAIRED_INFER,
    BUDGET_INFER,
    ENUMERATION_INFER,
)


class ActionKind(Enum):
    REVEALED = "revealed"
    FLAGGED = "flagged"
    GUESSED_AND_LOST = "guessed_and_lost"
    SOLVED = "solved"
    STUCK = "stuck"


class Action(NamedTuple):
    """Result of one solver step."""

    kind: ActionKind
    position: Optional[Position] = None
    clue: Optional[int] = None
    method: Optional[str] = None
    probability: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.kind in (
            ActionKind.GUESSED_AND_LOST,
            ActionKind.SOLVED,
            ActionKind.STUCK,
        )

    @property
    def is_guess(self) -> bool:
        return self.method == PROBABILISTIC_GUESS


class Outcome(NamedTuple):
    """Result of a full game: a win, or a loss at the position of the fatal guess."""

    won: bool
    position: Optional[Position]
    stats: Dict[str, Any]


class MinesweeperSolver:
    """
    Plays one game on a Board until it is won or a guess hits a mine.

    Each cycle extracts constraints from the board and runs the
    deterministic rules. Proven cells are queued and applied one per
    step(). When no rule applies, mine probabilities are estimated
    (enumeration may still prove cells, which are queued too); otherwise the
    least risky cell is revealed.
    """

    def __init__(
        self,
        board: Board,
        max_component_size: Union[int, float] = DEFAULT_MAX_COMPONENT_SIZE,
        guessing_strategy: str = "bayesian",
        rng: Optional[random.Random] = None,
        first_move: Optional[Position] = None,
        record_steps: bool = False,
    ) -> None:
        """
        Initialize a solver bound to a board.

        Args:
            board: The board to play; the solver must be its only user.
            max_component_size: Components with more cells are approximated
                instead of enumerated, bounding the cost of a cycle.
            guessing_strategy: "bayesian" (enumeration with budget coupling)
                or "local_density" (constraint density average).
            rng: Seeded source for breaking ties between equally risky cells.
                Without it ties go to the first cell in row-major order.
            first_move: Cell to open first on a fresh board; by default the
                first move is chosen like any other guess.
            record_steps: If True, record a board snapshot per step for replay.
        """
        self.board = board
        self.max_component_size = validate_max_component_size(max_component_size)
        self.guessing_strategy = validate_guessing_strategy(guessing_strategy)
        self.rng = rng
        self.first_move = first_move
        self.record_steps = record_steps

        self._pending: Deque[Tuple[Position, bool, str]] = deque()
        self.last_probabilities: Optional[ProbabilityMap] = None

        # Metrics / counters (for analysis)
        self.reveal_moves_count: int = 0
        self.flags_count: int = 0
        self.cycles_count: int = 0
        self.inferred_counts: Dict[str, int] = {m: 0 for m in INFERENCE_METHODS}
        self.guesses_count: int = 0
        self.approximated_guesses_count: int = 0
        self.max_frontier_size: int = 0
        self.luck: float = 1.0

        self.moves_sequence: List[Tuple[Position, str, str]] = []
        self.steps_history: List[Dict[str, Any]] = []

    @classmethod
    def for_game(cls, game: Any, **kwargs: Any) -> "MinesweeperSolver":
        """Create a solver over a fresh Board wrapping a game engine."""
        return cls(Board(game), **kwargs)

    # -------------------------------------------------------------------------
    # Bookkeeping
    # -------------------------------------------------------------------------

    def _record_step(self, action: Action) -> None:
        if not self.record_steps:
            return
        self.steps_history.append({
            "action": action.kind.value,
            "cell": action.position,
            "method": action.method,
            "probability": action.probability,
            "step_number": len(self.steps_history),
            "snapshot": copy.deepcopy(self.board.snapshot()),
        })

    def stats(self) -> Dict[str, Any]:
        """Counters describing the game so far."""
        inferred = dict(self.inferred_counts)
        return {
            "reveal_moves_count": self.reveal_moves_count,
            "flags_count": self.flags_count,
            "revealed_cells_count": len(self.board.revealed_cells())
            - (1 if self.board.exploded is not None else 0),
            "cycles_count": self.cycles_count,
            "inferred_counts": inferred,
            "inferred_total": sum(inferred.values()),
            "guesses_count": self.guesses_count,
            "approximated_guesses_count": self.approximated_guesses_count,
            "max_frontier_size": self.max_frontier_size,
            "luck": self.luck,
            "moves_sequence": list(self.moves_sequence),
            "steps_history": self.steps_history,
        }

    # -------------------------------------------------------------------------
    # Moves
    # -------------------------------------------------------------------------

    def _apply_proven(self, pos: Position, is_mine: bool, method: str) -> Action:
        if is_mine:
            self.board.flag(pos)
            self.flags_count += 1
            self.moves_sequence.append((pos, "flag", method))
            logger.debug("Flagged %s (%s)", pos, method)
            action = Action(ActionKind.FLAGGED, pos, method=method)
        else:
            clue = self.board.reveal(pos)
            self.reveal_moves_count += 1
            self.moves_sequence.append((pos, "reveal", method))
            if clue == MINE:
                raise ProofViolation(
                    f"Cell {pos} was proven safe by {method} but holds a mine."
                )
            logger.debug("Revealed %s = %d (%s)", pos, clue, method)
            action = Action(ActionKind.REVEALED, pos, clue, method)

        self._record_step(action)
        return action

    def _reveal_guess(self, pos: Position, probability: float, method: str) -> Action:
        self.guesses_count += 1
        if self.last_probabilities is not None and self.last_probabilities.approximated:
            self.approximated_guesses_count += 1
        self.luck *= 1.0 - probability

        clue = self.board.reveal(pos)
        self.reveal_moves_count += 1
        self.moves_sequence.append((pos, "reveal", method))

        if clue == MINE:
            logger.debug("Guess %s (p=%.4f) hit a mine", pos, probability)
            action = Action(
                ActionKind.GUESSED_AND_LOST, pos, method=method, probability=probability
            )
        else:
            logger.debug("Guess %s (p=%.4f) revealed %d", pos, probability, clue)
            action = Action(ActionKind.REVEALED, pos, clue, method, probability)

        self._record_step(action)
        return action

    # -------------------------------------------------------------------------
    # Solving cycle
    # -------------------------------------------------------------------------

    def _plan(self, hidden: List[Position]) -> Optional[ProbabilityMap]:
        """
        Run one inference cycle on the current board.

        Queues every proven move and returns None, or returns the
        probability map to guess from when nothing could be proven.
        """
        self.cycles_count += 1
        constraints = extract_constraints(self.board)
        self.max_frontier_size = max(
            self.max_frontier_size, len(constrained_cells(constraints))
        )

        deduction = deduce(constraints, self.board.mines_remaining, hidden)
        if deduction:
            for pos, is_mine, method in deduction.moves():
                self._pending.append((pos, is_mine, method))
                self.inferred_counts[method] += 1
            logger.debug(
                "Cycle %d: %d cells proven", self.cycles_count, len(deduction)
            )
            return None

        probabilities = board_probabilities(
            self.board,
            max_component_size=self.max_component_size,
            guessing_strategy=self.guessing_strategy,
            constraints=constraints,
        )
        self.last_probabilities = probabilities

        proven = [(pos, False) for pos in sorted(probabilities.certain_safe)]
        proven.extend((pos, True) for pos in sorted(probabilities.certain_mines))
        if proven:
            for pos, is_mine in proven:
                self._pending.append((pos, is_mine, ENUMERATION_INFER))
                self.inferred_counts[ENUMERATION_INFER] += 1
            logger.debug(
                "Cycle %d: %d cells proven by enumeration", self.cycles_count, len(proven)
            )
            return None

        return probabilities

    def step(self) -> Action:
        """
        Make one move.

        Returns:
            REVEALED or FLAGGED for a move on a game still in progress,
            GUESSED_AND_LOST when a guess hit a mine, SOLVED once the game
            reports a win, STUCK if no hidden cell is left without a win.

        Raises:
            ProofViolation: If a proven reveal hits a mine, or the clues are
                inconsistent.
        """
        if self.board.exploded is not None:
            return Action(ActionKind.GUESSED_AND_LOST, self.board.exploded)
        if self.board.won:
            return Action(ActionKind.SOLVED)

        while True:
            while self._pending:
                pos, is_mine, method = self._pending.popleft()
                if self.board.is_hidden(pos):
                    return self._apply_proven(pos, is_mine, method)

            hidden = self.board.hidden_cells()
            if not hidden:
                return Action(ActionKind.STUCK)

            if (
                self.first_move is not None
                and not self.board.revealed_cells()
                and self.board.is_hidden(self.first_move)
            ):
                return self._reveal_guess(
                    self.first_move, self.board.mines_remaining / len(hidden), FIRST_MOVE
                )

            probabilities = self._plan(hidden)
            if probabilities is None:
                continue

            pos, probability = select_move(hidden, probabilities, self.rng)
            return self._reveal_guess(pos, probability, PROBABILISTIC_GUESS)

    def run(self) -> Outcome:
        """Call step() until the game ends and report the outcome."""
        while True:
            action = self.step()
            if not action.is_terminal:
                continue

            won = action.kind is ActionKind.SOLVED
            position = (
                action.position if action.kind is ActionKind.GUESSED_AND_LOST else None
            )
            logger.info(
                "Game %s after %d moves and %d guesses",
                "won" if won else ("lost at %s" % (position,) if position else "stuck"),
                self.reveal_moves_count + self.flags_count,
                self.guesses_count,
            )
            return Outcome(won, position, self.stats())
