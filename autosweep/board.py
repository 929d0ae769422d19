"""Solver-side view of a Minesweeper board: cell states, clues, and the reveal/flag surface."""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .errors import ProofViolation
from .utils import Position, get_neighborhoods

logger = logging.getLogger(__name__)

# Returned by Board.reveal() when the revealed cell held a mine.
MINE = -1


class CellState(Enum):
    HIDDEN = "hidden"
    REVEALED = "revealed"
    FLAGGED = "flagged"


class MineField(Protocol):
    """Game interface the board delegates reveals to (see engine.Minesweeper)."""

    width: int
    height: int
    mines_count: int

    def reveal(self, row: int, col: int) -> Tuple[int, Dict[str, Any]]:
        ...


class Board:
    """
    What the solver knows about a game: which cells are hidden, revealed or flagged.

    Reveals go through the underlying game, which reports the clue of every
    cell it uncovered (a revealed 0 cascades over its neighbors). Flags are
    solver-local and never sent to the game.
    """

    def __init__(self, game: MineField) -> None:
        self.game = game
        self.width: int = game.width
        self.height: int = game.height
        self.mines_count: int = game.mines_count

        self._neighborhoods: Dict[Position, Tuple[Position, ...]] = get_neighborhoods(
            self.width, self.height
        )
        self._states: List[List[CellState]] = [
            [CellState.HIDDEN for _ in range(self.width)] for _ in range(self.height)
        ]
        self._clues: List[List[Optional[int]]] = [
            [None for _ in range(self.width)] for _ in range(self.height)
        ]

        self.hidden_count: int = self.width * self.height
        self.flagged_count: int = 0
        self.exploded: Optional[Position] = None
        self.won: bool = False

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def neighbors(self, pos: Position) -> Tuple[Position, ...]:
        """Return the in-bounds 8-neighborhood of a cell."""
        return self._neighborhoods[pos]

    def state(self, pos: Position) -> CellState:
        row, col = pos
        return self._states[row][col]

    def clue(self, pos: Position) -> Optional[int]:
        """Return the revealed clue of a cell, or None if it is not revealed."""
        row, col = pos
        return self._clues[row][col]

    def is_hidden(self, pos: Position) -> bool:
        """True for hidden cells that are not flagged."""
        return self.state(pos) is CellState.HIDDEN

    def is_flagged(self, pos: Position) -> bool:
        return self.state(pos) is CellState.FLAGGED

    def is_revealed(self, pos: Position) -> bool:
        return self.state(pos) is CellState.REVEALED

    def hidden_cells(self) -> List[Position]:
        """All hidden, unflagged cells in row-major order."""
        return [
            (row, col)
            for row in range(self.height)
            for col in range(self.width)
            if self._states[row][col] is CellState.HIDDEN
        ]

    def revealed_cells(self) -> List[Position]:
        return [
            (row, col)
            for row in range(self.height)
            for col in range(self.width)
            if self._states[row][col] is CellState.REVEALED
        ]

    @property
    def mines_remaining(self) -> int:
        """Mines not yet flagged."""
        return self.mines_count - self.flagged_count

    @property
    def is_over(self) -> bool:
        return self.won or self.exploded is not None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def reveal(self, pos: Position) -> int:
        """
        Reveal a hidden cell through the game.

        Args:
            pos: (row, col) of a hidden, unflagged cell.

        Returns:
            The clue of the cell, or MINE if it held a mine. In the latter
            case the board records the explosion and the game is over.

        Raises:
            ValueError: If the cell is not hidden or the game is over.
        """
        if self.is_over:
            raise ValueError("The game is over.")
        if not self.is_hidden(pos):
            raise ValueError(f"Cell {pos} is not hidden.")

        row, col = pos
        status, payload = self.game.reveal(row, col)

        if status == -1:
            self.exploded = pos
            self._states[row][col] = CellState.REVEALED
            self.hidden_count -= 1
            logger.debug("Mine hit at %s", pos)
            return MINE

        raw_cells = payload.get("revealed_cells")
        if raw_cells is None or not isinstance(raw_cells, list):
            raise ValueError("Expected payload['revealed_cells'] as a list.")

        for cr, cc, clue in raw_cells:
            if self._states[cr][cc] is CellState.REVEALED:
                continue
            if self._states[cr][cc] is CellState.FLAGGED:
                self.flagged_count -= 1
            else:
                self.hidden_count -= 1
            self._states[cr][cc] = CellState.REVEALED
            self._clues[cr][cc] = int(clue)

        if status == 1:
            self.won = True

        clue = self._clues[row][col]
        if clue is None:
            raise ValueError(f"The game did not report a clue for {pos}.")
        return clue

    def flag(self, pos: Position) -> None:
        """
        Mark a hidden cell as a mine.

        Raises:
            ValueError: If the cell is not hidden or the game is over.
            ProofViolation: If all mines are already flagged.
        """
        if self.is_over:
            raise ValueError("The game is over.")
        if not self.is_hidden(pos):
            raise ValueError(f"Cell {pos} is not hidden.")
        if self.flagged_count >= self.mines_count:
            raise ProofViolation(
                f"Flagging {pos} would exceed the mine count {self.mines_count}."
            )
        row, col = pos
        self._states[row][col] = CellState.FLAGGED
        self.flagged_count += 1
        self.hidden_count -= 1

    def unflag(self, pos: Position) -> None:
        if not self.is_flagged(pos):
            raise ValueError(f"Cell {pos} is not flagged.")
        row, col = pos
        self._states[row][col] = CellState.HIDDEN
        self.flagged_count -= 1
        self.hidden_count += 1

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def snapshot(self) -> List[List[str]]:
        """
        Symbolic copy of the board for replay and rendering.

        "." hidden, "F" flagged, "0".."8" revealed clue, "!" exploded mine.
        """
        grid: List[List[str]] = []
        for row in range(self.height):
            line: List[str] = []
            for col in range(self.width):
                state = self._states[row][col]
                if state is CellState.HIDDEN:
                    line.append(".")
                elif state is CellState.FLAGGED:
                    line.append("F")
                elif (row, col) == self.exploded:
                    line.append("!")
                else:
                    line.append(str(self._clues[row][col]))
            grid.append(line)
        return grid

    def format(self, show_coords: bool = True) -> str:
        """Render the board as text, one row per line."""
        lines: List[str] = []
        if show_coords:
            header = " ".join(f"{col:2d}" for col in range(self.width))
            lines.append("   " + header)
            lines.append("   " + "-" * (3 * self.width - 1))

        for row, cells in enumerate(self.snapshot()):
            text = " ".join(f" {ch}" for ch in cells)
            lines.append(f"{row:2d} |" + text if show_coords else text)

        return "\n".join(lines)
