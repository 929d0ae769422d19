"""Ground-truth Minesweeper game with first-click safety and seeded mine placement."""

import random
from collections import deque
from typing import Any, Deque, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from .config import MINES_GENERATION_ALGORITHMS
from .utils import Position, get_neighborhoods

MINE_CELL = -1


class Minesweeper:
    """Minesweeper game engine with first-click safety and constrained mine placement."""

    def __init__(
        self,
        width: int,
        height: int,
        mines_count: int,
        mines_generation_algorithm: str = "safe_neighborhood_rule",
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        Initialize a Minesweeper game engine.

        Args:
            width: Board width (number of columns), must be > 0.
            height: Board height (number of rows), must be > 0.
            mines_count: Total number of mines to place, must be >= 0.
            mines_generation_algorithm: Mine placement rule; one of
                {"safe_first_action_rule", "safe_neighborhood_rule"}.
            rng: Random source used for mine placement. A fresh unseeded
                generator is used when omitted.

        Raises:
            ValueError: If dimensions are invalid or algorithm is unrecognized.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")

        if mines_generation_algorithm not in MINES_GENERATION_ALGORITHMS:
            raise ValueError(
                'mines_generation_algorithm must be "safe_first_action_rule" '
                'or "safe_neighborhood_rule".'
            )

        if mines_count > width * height - 1:
            raise ValueError("Cannot place enough safe cells for the first click.")

        self.mines_generation_algorithm: str = mines_generation_algorithm
        self.width: int = width
        self.height: int = height
        self.mines_count: int = mines_count
        self.rng: random.Random = rng if rng is not None else random.Random()

        # board[row][col]: MINE_CELL or the adjacent mine count
        self.board: List[List[int]] = [[0 for _ in range(width)] for _ in range(height)]
        self.board_blank: bool = True
        self.revealed: List[List[bool]] = [
            [False for _ in range(width)] for _ in range(height)
        ]

        self.unrevealed_count: int = width * height - mines_count
        self.game_over: bool = False

        self._neighborhoods: Dict[Position, Tuple[Position, ...]] = get_neighborhoods(
            width, height
        )

    @classmethod
    def from_mines(
        cls, width: int, height: int, mines: Iterable[Position]
    ) -> "Minesweeper":
        """
        Build a game with a fixed mine layout (no first-click relocation).

        Args:
            width: Board width.
            height: Board height.
            mines: Mine positions as (row, col).

        Raises:
            ValueError: If a mine lies outside the board.
        """
        mine_set: Set[Position] = set(mines)
        game = cls(width, height, 0)
        for row, col in mine_set:
            if not (0 <= row < height and 0 <= col < width):
                raise ValueError(f"Mine {(row, col)} is outside the board.")
            game.board[row][col] = MINE_CELL
        game.mines_count = len(mine_set)
        game.unrevealed_count = width * height - len(mine_set)
        game.board_blank = False
        game.get_adjacent_mine_counts()
        return game

    @classmethod
    def from_layout(cls, rows: List[str]) -> "Minesweeper":
        """Build a game from text rows where '*' marks a mine and any other character is safe."""
        if not rows:
            raise ValueError("Layout must contain at least one row.")
        width = len(rows[0])
        if any(len(r) != width for r in rows):
            raise ValueError("All layout rows must have the same length.")
        mines = [
            (row, col)
            for row, line in enumerate(rows)
            for col, ch in enumerate(line)
            if ch == "*"
        ]
        return cls.from_mines(width, len(rows), mines)

    def reset(self) -> None:
        """
        Reset the game state to allow re-solving the same board.

        Keeps the mine positions but resets all revealed cells and game state.
        """
        self.revealed = [
            [False for _ in range(self.width)] for _ in range(self.height)
        ]
        self.unrevealed_count = self.width * self.height - self.mines_count
        self.game_over = False

    def neighbors(self, row: int, col: int) -> Tuple[Position, ...]:
        """Return precomputed neighbor positions for a cell."""
        return self._neighborhoods[(row, col)]

    def place_mines(self, first_row: int, first_col: int) -> None:
        """
        Place mines on the board (one-time), respecting the selected first-move safety rule.

        Under "safe_neighborhood_rule" the neighborhood of the first click is
        kept free as well, as long as enough cells remain for the mines;
        otherwise only the first click itself is protected.

        Raises:
            ValueError: If the board is not blank.
        """
        if not self.board_blank:
            raise ValueError("The board is not blank.")

        safe: Set[Position] = {(first_row, first_col)}
        if self.mines_generation_algorithm == "safe_neighborhood_rule":
            zone = safe | set(self.neighbors(first_row, first_col))
            if self.width * self.height - len(zone) >= self.mines_count:
                safe = zone

        eligible: List[Position] = [
            (row, col)
            for row in range(self.height)
            for col in range(self.width)
            if (row, col) not in safe
        ]

        for row, col in self.rng.sample(eligible, self.mines_count):
            self.board[row][col] = MINE_CELL

        self.board_blank = False

    def get_adjacent_mine_counts(self) -> None:
        """Populate every non-mine cell with its adjacent mine count."""
        for row in range(self.height):
            for col in range(self.width):
                if self.board[row][col] == MINE_CELL:
                    continue
                self.board[row][col] = sum(
                    1 for nr, nc in self.neighbors(row, col) if self.board[nr][nc] == MINE_CELL
                )

    def mines(self) -> FrozenSet[Position]:
        """Return all mine positions."""
        return frozenset(
            (row, col)
            for row in range(self.height)
            for col in range(self.width)
            if self.board[row][col] == MINE_CELL
        )

    def flood_fill(self, row: int, col: int) -> List[Tuple[int, int, int]]:
        """
        Reveal a connected region starting at (row, col) using Minesweeper flood fill rules.

        Returns:
            A list of newly revealed cells as (row, col, clue).
        """
        frontier: Deque[Position] = deque([(row, col)])
        visited: Set[Position] = {(row, col)}
        revealed_cells: List[Tuple[int, int, int]] = []

        while frontier:
            cr, cc = frontier.popleft()
            if self.revealed[cr][cc]:
                continue

            self.revealed[cr][cc] = True
            self.unrevealed_count -= 1
            revealed_cells.append((cr, cc, self.board[cr][cc]))

            if self.board[cr][cc] == 0:
                for nr, nc in self.neighbors(cr, cc):
                    if (nr, nc) in visited or self.revealed[nr][nc]:
                        continue
                    visited.add((nr, nc))
                    frontier.append((nr, nc))

        return revealed_cells

    def reveal(self, row: int, col: int) -> Tuple[int, Dict[str, Any]]:
        """
        Reveal a single cell and return a status code plus payload.

        Returns:
            Tuple of (status, payload) where status is:
                - -1: Mine hit (loss)
                - 0: Non-terminal reveal (or no-op)
                - 1: Win (all safe cells revealed)

            Payload contains:
                - For status 0 or 1: {"revealed_cells": List[(row, col, clue)]}
                - For status -1: {"revealed_cells_count": int, "all_mines": FrozenSet}

        Raises:
            ValueError: If coordinates are out of bounds.
        """
        if row < 0 or row >= self.height or col < 0 or col >= self.width:
            raise ValueError("Cell coordinates are outside the board.")

        if self.game_over or self.revealed[row][col]:
            return 0, {"revealed_cells": []}

        if self.board_blank:
            self.place_mines(row, col)
            self.get_adjacent_mine_counts()

        if self.board[row][col] == MINE_CELL:
            self.revealed[row][col] = True
            self.game_over = True
            revealed_cells_count = (
                self.width * self.height - self.mines_count
            ) - self.unrevealed_count
            return -1, {
                "revealed_cells_count": revealed_cells_count,
                "all_mines": self.mines(),
            }

        revealed_cells = self.flood_fill(row, col)

        if self.unrevealed_count == 0:
            self.game_over = True
            return 1, {"revealed_cells": revealed_cells}

        return 0, {"revealed_cells": revealed_cells}

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the board as a multi-line string for terminal display.

        Args:
            reveal_all: If True, show mines and all underlying values.
            color: If False, emit plain text without ANSI escapes.
        """
        c = self._c if color else str
        m = self._m if color else str

        def cell_str(row: int, col: int) -> str:
            if reveal_all or self.revealed[row][col]:
                v = self.board[row][col]
                if v == MINE_CELL:
                    return m("M")
                return str(v)
            return "."

        header_cells = " ".join(f"{col:2d}" for col in range(self.width))
        out = [c("   ") + c(header_cells)]
        out.append(c("   " + "-" * (3 * self.width - 1)))

        for row in range(self.height):
            row_cells = " ".join(f" {cell_str(row, col)}" for col in range(self.width))
            out.append(c(f"{row:2d} ") + c("|") + row_cells)

        return "\n".join(out)
