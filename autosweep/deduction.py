"""Deterministic inference: cells proven safe or mined by the visible clues."""

from collections import defaultdict
from typing import DefaultDict, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .constraints import Constraint, check_constraint, normalize
from .errors import InconsistentConstraintsError
from .utils import Position

SINGLE_INFER = "single_infer"
SUBSET_INFER = "subset_infer"
PAIRED_INFER = "paired_infer"
BUDGET_INFER = "budget_infer"


class Deduction:
    """Cells proven safe or mined, with the rule that proved each one."""

    def __init__(self) -> None:
        self.safe: Dict[Position, str] = {}
        self.mines: Dict[Position, str] = {}

    def __bool__(self) -> bool:
        return bool(self.safe or self.mines)

    def __len__(self) -> int:
        return len(self.safe) + len(self.mines)

    def add(self, pos: Position, is_mine: bool, method: str) -> bool:
        """
        Record a proven cell. Returns True if it was new.

        Raises:
            InconsistentConstraintsError: If the cell was already proven the other way.
        """
        same, other = (self.mines, self.safe) if is_mine else (self.safe, self.mines)
        if pos in other:
            raise InconsistentConstraintsError(
                f"Cell {pos} is proven both safe and mined."
            )
        if pos in same:
            return False
        same[pos] = method
        return True

    def moves(self) -> List[Tuple[Position, bool, str]]:
        """Proven moves as (position, is_mine, method): reveals first, each group row-major."""
        out = [(pos, False, self.safe[pos]) for pos in sorted(self.safe)]
        out.extend((pos, True, self.mines[pos]) for pos in sorted(self.mines))
        return out


def apply_single_rules(
    constraints: Iterable[Constraint], deduction: Deduction, method: str
) -> bool:
    """
    All-safe and all-mine rules.

    A constraint requiring 0 mines proves all its cells safe; one requiring
    as many mines as it has cells proves them all mined.
    """
    found = False
    for constraint in constraints:
        if constraint.mines == 0:
            for pos in constraint.cells:
                found |= deduction.add(pos, False, method)
        elif constraint.mines == len(constraint.cells):
            for pos in constraint.cells:
                found |= deduction.add(pos, True, method)
    return found


def _index_by_cell(
    constraints: Iterable[Constraint],
) -> DefaultDict[Position, List[Constraint]]:
    index: DefaultDict[Position, List[Constraint]] = defaultdict(list)
    for constraint in constraints:
        for pos in constraint.cells:
            index[pos].append(constraint)
    return index


def derive_subset_constraints(constraints: Sequence[Constraint]) -> List[Constraint]:
    """
    Subset elimination.

    For every pair where A's cells are a proper subset of B's cells, emit
    the constraint (B - A, B.mines - A.mines).

    Raises:
        InconsistentConstraintsError: If a derived count is impossible.
    """
    index = _index_by_cell(constraints)
    derived: Set[Constraint] = set()

    for a in constraints:
        anchor = min(a.cells)
        for b in index[anchor]:
            if b is a or len(b.cells) <= len(a.cells):
                continue
            if a.cells < b.cells:
                derived.add(
                    check_constraint(Constraint(b.cells - a.cells, b.mines - a.mines))
                )

    return sorted(derived, key=Constraint.sort_key)


def apply_paired_rules(constraints: Sequence[Constraint], deduction: Deduction) -> bool:
    """
    Overlap inference between two intersecting constraints.

    The number of mines t in the shared cells is bounded by both counts;
    those bounds in turn bound the exclusive parts of each constraint, which
    become all-safe or all-mine when the bound is tight.
    """
    index: DefaultDict[Position, List[int]] = defaultdict(list)
    for i, constraint in enumerate(constraints):
        for pos in constraint.cells:
            index[pos].append(i)

    seen_pairs: Set[Tuple[int, int]] = set()
    found = False

    for i, a in enumerate(constraints):
        for pos in a.cells:
            for j in index[pos]:
                if j <= i or (i, j) in seen_pairs:
                    continue
                seen_pairs.add((i, j))
                b = constraints[j]

                intersection = a.cells & b.cells
                only_a = a.cells - intersection
                only_b = b.cells - intersection

                t_low = max(0, a.mines - len(only_a), b.mines - len(only_b))
                t_high = min(len(intersection), a.mines, b.mines)
                if t_low > t_high:
                    raise InconsistentConstraintsError(
                        f"Constraints {a.sort_key()} and {b.sort_key()} cannot both hold."
                    )

                if t_high == 0 or t_low == len(intersection):
                    for cell in intersection:
                        found |= deduction.add(cell, t_low > 0, PAIRED_INFER)

                for only, mines in ((only_a, a.mines), (only_b, b.mines)):
                    if not only:
                        continue
                    if mines - t_low == 0:
                        for cell in only:
                            found |= deduction.add(cell, False, PAIRED_INFER)
                    elif mines - t_high == len(only):
                        for cell in only:
                            found |= deduction.add(cell, True, PAIRED_INFER)

    return found


def apply_budget_rule(
    mines_remaining: int, hidden_cells: Sequence[Position], deduction: Deduction
) -> bool:
    """
    Global mine-count rule.

    With no mines left every hidden cell is safe; with exactly as many mines
    left as hidden cells every hidden cell is a mine.
    """
    if mines_remaining < 0 or mines_remaining > len(hidden_cells):
        raise InconsistentConstraintsError(
            f"{mines_remaining} mines cannot be placed in {len(hidden_cells)} hidden cells."
        )
    if not hidden_cells:
        return False
    if mines_remaining == 0:
        return any([deduction.add(pos, False, BUDGET_INFER) for pos in hidden_cells])
    if mines_remaining == len(hidden_cells):
        return any([deduction.add(pos, True, BUDGET_INFER) for pos in hidden_cells])
    return False


def deduce(
    constraints: Iterable[Constraint],
    mines_remaining: Optional[int] = None,
    hidden_cells: Optional[Sequence[Position]] = None,
    max_rounds: Optional[int] = None,
) -> Deduction:
    """
    Run the deterministic rules until one of them proves something.

    Rules are tried cheapest first: all-safe/all-mine on the clue
    constraints, then repeated subset elimination (each round's derived
    constraints are checked with the single rules and fed into the next
    round), then pairwise overlap, then the global mine budget.

    Args:
        constraints: Active constraints of the current board.
        mines_remaining: Unflagged mines; enables the budget rule together
            with hidden_cells.
        hidden_cells: All hidden, unflagged cells.
        max_rounds: Bound on subset-elimination rounds; defaults to the
            number of constraints.

    Returns:
        A Deduction; empty when the board is at a fixpoint.
    """
    deduction = Deduction()
    current = normalize(constraints)

    if apply_single_rules(current, deduction, SINGLE_INFER):
        return deduction

    known: Set[Constraint] = set(current)
    rounds = max_rounds if max_rounds is not None else max(1, len(current))
    for _ in range(rounds):
        derived = [c for c in derive_subset_constraints(current) if c not in known]
        if not derived:
            break
        if apply_single_rules(derived, deduction, SUBSET_INFER):
            return deduction
        known.update(derived)
        current = normalize(list(current) + derived)

    if apply_paired_rules(current, deduction):
        return deduction

    if mines_remaining is not None and hidden_cells is not None:
        apply_budget_rule(mines_remaining, hidden_cells, deduction)

    return deduction
