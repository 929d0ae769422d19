"""Constraint extraction: one linear equation over hidden cells per revealed clue."""

from typing import FrozenSet, Iterable, List, NamedTuple, Set, Tuple

from .board import Board
from .errors import InconsistentConstraintsError
from .utils import Position


class Constraint(NamedTuple):
    """Exactly `mines` of `cells` are mines."""

    cells: FrozenSet[Position]
    mines: int

    @property
    def size(self) -> int:
        return len(self.cells)

    def sort_key(self) -> Tuple[Tuple[Position, ...], int]:
        return tuple(sorted(self.cells)), self.mines

    def is_consistent(self) -> bool:
        return 0 <= self.mines <= len(self.cells)


def check_constraint(constraint: Constraint) -> Constraint:
    """Return the constraint unchanged, or raise if no placement can satisfy it."""
    if not constraint.is_consistent():
        raise InconsistentConstraintsError(
            f"Constraint requires {constraint.mines} mines among "
            f"{len(constraint.cells)} cells: {sorted(constraint.cells)}"
        )
    return constraint


def normalize(constraints: Iterable[Constraint]) -> List[Constraint]:
    """
    Deduplicate, validate and order constraints deterministically.

    Empty constraints are dropped (a non-zero count on an empty set raises).
    Two constraints over the same cells with different counts raise.
    """
    by_cells = {}
    for constraint in constraints:
        check_constraint(constraint)
        if not constraint.cells:
            continue
        seen = by_cells.get(constraint.cells)
        if seen is not None and seen != constraint.mines:
            raise InconsistentConstraintsError(
                f"Cells {sorted(constraint.cells)} require both {seen} and "
                f"{constraint.mines} mines."
            )
        by_cells[constraint.cells] = constraint.mines

    out = [Constraint(cells, mines) for cells, mines in by_cells.items()]
    out.sort(key=Constraint.sort_key)
    return out


def extract_constraints(board: Board) -> List[Constraint]:
    """
    Derive the active constraints from the revealed clues of a board.

    Every revealed cell with at least one hidden, unflagged neighbor yields a
    constraint over those neighbors whose count is the clue minus the
    flagged neighbors. Clues whose neighbors are all resolved yield nothing.

    Raises:
        InconsistentConstraintsError: If a clue has more flagged neighbors
            than its value, or fewer hidden neighbors than mines left to place.
    """
    constraints: List[Constraint] = []
    for pos in board.revealed_cells():
        if pos == board.exploded:
            continue
        clue = board.clue(pos)
        if clue is None:
            continue

        hidden: Set[Position] = set()
        flagged = 0
        for nbr in board.neighbors(pos):
            if board.is_hidden(nbr):
                hidden.add(nbr)
            elif board.is_flagged(nbr):
                flagged += 1

        constraint = Constraint(frozenset(hidden), clue - flagged)
        if not constraint.is_consistent():
            raise InconsistentConstraintsError(
                f"Clue {clue} at {pos} has {flagged} flagged and "
                f"{len(hidden)} hidden neighbors."
            )
        if hidden:
            constraints.append(constraint)

    return normalize(constraints)


def constrained_cells(constraints: Iterable[Constraint]) -> Set[Position]:
    """Union of the cells of all constraints (the frontier)."""
    cells: Set[Position] = set()
    for constraint in constraints:
        cells |= constraint.cells
    return cells
