"""Mine probabilities for hidden cells when no certain deduction is left."""

import logging
from collections import defaultdict
from typing import (
    DefaultDict,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from .board import Board
from .config import (
    DEFAULT_MAX_COMPONENT_SIZE,
    RELAXATION_MAX_ROUNDS,
    RELAXATION_TOLERANCE,
    validate_guessing_strategy,
)
from .constraints import Constraint, constrained_cells, extract_constraints
from .errors import InconsistentConstraintsError
from .frontier import FrontierComponent, partition_frontier
from .utils import Position, comb_or_zero

logger = logging.getLogger(__name__)


class ComponentCounts:
    """
    Aggregated solutions of one frontier component.

    For every mine count k the component can hold, keeps the number of
    valid assignments with k mines and, per cell, how many of those place a
    mine on it. Individual assignments are not retained.
    """

    def __init__(self, cells: Sequence[Position]) -> None:
        self.cells: Tuple[Position, ...] = tuple(cells)
        self.assignments: Dict[int, int] = {}
        self.mine_counts: Dict[int, DefaultDict[Position, int]] = {}

    def record(self, mines: int, mine_cells: Iterable[Position]) -> None:
        self.assignments[mines] = self.assignments.get(mines, 0) + 1
        tallies = self.mine_counts.get(mines)
        if tallies is None:
            tallies = self.mine_counts[mines] = defaultdict(int)
        for pos in mine_cells:
            tallies[pos] += 1

    @property
    def total(self) -> int:
        return sum(self.assignments.values())

    @property
    def min_mines(self) -> int:
        return min(self.assignments)

    @property
    def max_mines(self) -> int:
        return max(self.assignments)

    def weights(self) -> List[int]:
        """Assignment counts as a dense vector indexed by mine count."""
        vector = [0] * (self.max_mines + 1)
        for k, count in self.assignments.items():
            vector[k] = count
        return vector

    def cell_mines(self, k: int, pos: Position) -> int:
        tallies = self.mine_counts.get(k)
        return tallies[pos] if tallies is not None else 0

    def conditional_probabilities(self, k: int) -> Dict[Position, float]:
        """Per-cell mine probability given that the component holds exactly k mines."""
        count = self.assignments.get(k, 0)
        if count == 0:
            raise ValueError(f"The component has no assignment with {k} mines.")
        return {pos: self.cell_mines(k, pos) / count for pos in self.cells}

    def marginal_probabilities(self) -> Dict[Position, float]:
        """Per-cell mine probability with every valid assignment weighted equally."""
        total = self.total
        return {
            pos: sum(self.cell_mines(k, pos) for k in self.assignments) / total
            for pos in self.cells
        }


def enumerate_component(
    component: FrontierComponent, mine_limit: Optional[int] = None
) -> ComponentCounts:
    """
    Enumerate every mine placement on a component that satisfies all its constraints.

    Depth-first search over the cells with an explicit stack. A partial
    assignment is abandoned as soon as a constraint has too many mines, can
    no longer reach its count with its unassigned cells, or the assignment
    uses more than mine_limit mines.

    Args:
        component: The component to enumerate.
        mine_limit: Upper bound on mines in the component (the global budget).

    Returns:
        Aggregated counts of the valid assignments.

    Raises:
        InconsistentConstraintsError: If no assignment satisfies the constraints.
    """
    cells = component.cells
    n = len(cells)
    counts = ComponentCounts(cells)
    if n == 0:
        counts.record(0, ())
        return counts

    index = {pos: i for i, pos in enumerate(cells)}
    required = [c.mines for c in component.constraints]
    unassigned = [len(c.cells) for c in component.constraints]
    assigned = [0] * len(required)
    touching: List[List[int]] = [[] for _ in range(n)]
    for ci, constraint in enumerate(component.constraints):
        for pos in constraint.cells:
            touching[index[pos]].append(ci)

    limit = n if mine_limit is None else min(n, mine_limit)
    values: List[bool] = [False] * n
    mines_used = 0
    depth = 0
    # (cell index, is_mine) decisions still to explore
    stack: List[Tuple[int, bool]] = [(0, True), (0, False)]

    while stack:
        i, is_mine = stack.pop()

        # Backtrack: undo every decision at or below the popped level.
        while depth > i:
            depth -= 1
            was_mine = values[depth]
            if was_mine:
                mines_used -= 1
            for ci in touching[depth]:
                unassigned[ci] += 1
                if was_mine:
                    assigned[ci] -= 1

        values[i] = is_mine
        if is_mine:
            mines_used += 1
        feasible = mines_used <= limit
        for ci in touching[i]:
            unassigned[ci] -= 1
            if is_mine:
                assigned[ci] += 1
            if assigned[ci] > required[ci] or assigned[ci] + unassigned[ci] < required[ci]:
                feasible = False
        depth = i + 1

        if not feasible:
            continue
        if depth == n:
            counts.record(mines_used, (cells[j] for j in range(n) if values[j]))
            continue
        stack.append((depth, True))
        stack.append((depth, False))

    if not counts.assignments:
        raise InconsistentConstraintsError(
            f"No mine placement satisfies the component starting at {cells[0]}."
        )
    return counts


def relax_component(
    component: FrontierComponent, mines_remaining: int, initial: float
) -> Dict[Position, float]:
    """
    Approximate per-cell probabilities of a component by iterative relaxation.

    Starting from a uniform guess, every constraint spreads the difference
    between its count and the current sum of its cells' probabilities evenly
    over its cells (clamped to [0, 1]). The component total is capped at the
    remaining mines. Stops when no correction exceeds the tolerance.
    """
    probs: Dict[Position, float] = {pos: initial for pos in component.cells}

    for _ in range(RELAXATION_MAX_ROUNDS):
        max_correction = 0.0

        for constraint in component.constraints:
            current = sum(probs[pos] for pos in constraint.cells)
            correction = (constraint.mines - current) / len(constraint.cells)
            max_correction = max(max_correction, abs(correction))
            for pos in constraint.cells:
                probs[pos] = min(1.0, max(0.0, probs[pos] + correction))

        total = sum(probs.values())
        if total > mines_remaining:
            correction = (mines_remaining - total) / len(probs)
            for pos in probs:
                probs[pos] = min(1.0, max(0.0, probs[pos] + correction))
            max_correction = max(max_correction, abs(correction))

        if max_correction < RELAXATION_TOLERANCE:
            break

    return probs


class ProbabilityMap:
    """
    Estimated mine probability of every hidden, unflagged cell.

    Frontier cells carry their own probability; interior cells share one.
    certain_safe / certain_mines hold cells whose probability is exactly 0 or
    1 under exact enumeration (empty whenever an approximation was used).
    """

    def __init__(
        self,
        frontier: Dict[Position, float],
        interior: Iterable[Position] = (),
        interior_probability: Optional[float] = None,
        certain_safe: Iterable[Position] = (),
        certain_mines: Iterable[Position] = (),
        approximated: bool = False,
    ) -> None:
        self.frontier: Dict[Position, float] = frontier
        self.interior: FrozenSet[Position] = frozenset(interior)
        self.interior_probability: Optional[float] = interior_probability
        self.certain_safe: FrozenSet[Position] = frozenset(certain_safe)
        self.certain_mines: FrozenSet[Position] = frozenset(certain_mines)
        self.approximated: bool = approximated

        if self.interior and self.interior_probability is None:
            raise ValueError("Interior cells need an interior probability.")

    def __contains__(self, pos: object) -> bool:
        return pos in self.frontier or pos in self.interior

    def __len__(self) -> int:
        return len(self.frontier) + len(self.interior)

    def probability(self, pos: Position) -> float:
        """
        Raises:
            KeyError: If the cell is neither a frontier nor an interior cell.
        """
        if pos in self.frontier:
            return self.frontier[pos]
        if pos in self.interior:
            return self.interior_probability  # type: ignore[return-value]
        raise KeyError(pos)

    def items(self) -> Iterator[Tuple[Position, float]]:
        yield from self.frontier.items()
        for pos in self.interior:
            yield pos, self.interior_probability  # type: ignore[misc]

    def expected_mines(self) -> float:
        """Expected number of mines among all hidden, unflagged cells."""
        interior = len(self.interior) * (self.interior_probability or 0.0)
        return sum(self.frontier.values()) + interior


def _convolve(a: Sequence[int], b: Sequence[int]) -> List[int]:
    out = [0] * (len(a) + len(b) - 1)
    for i, x in enumerate(a):
        if x == 0:
            continue
        for j, y in enumerate(b):
            out[i + j] += x * y
    return out


def _combine_with_budget(
    exact: Sequence[Tuple[FrontierComponent, ComponentCounts]],
    interior_size: int,
    budget: int,
) -> Optional[
    Tuple[Dict[Position, float], Optional[float], List[Position], List[Position]]
]:
    """
    Couple exactly enumerated components through the global mine budget.

    A choice of per-component mine counts (k1, k2, ...) with total T occurs
    in prod(count_i[k_i]) * C(I, budget - T) full boards, the binomial
    counting the ways to put the leftover mines in the interior. Marginals
    for component j sum over the other components through the convolution
    of their count vectors (prefix/suffix products).

    Returns:
        (frontier probabilities, interior probability, certainly safe cells,
        certainly mined cells), or None if no combination fits the budget.
    """
    vectors = [counts.weights() for _, counts in exact]

    prefix: List[List[int]] = [[1]]
    for vector in vectors:
        prefix.append(_convolve(prefix[-1], vector))
    suffix: List[List[int]] = [[1]] * (len(vectors) + 1)
    for j in range(len(vectors) - 1, -1, -1):
        suffix[j] = _convolve(vectors[j], suffix[j + 1])

    full = prefix[-1]
    ways = [comb_or_zero(interior_size, budget - t) for t in range(len(full))]
    total_weight = sum(f * w for f, w in zip(full, ways))
    if total_weight == 0:
        return None

    interior_probability: Optional[float] = None
    if interior_size:
        leftover = sum(
            f * w * (budget - t) for t, (f, w) in enumerate(zip(full, ways))
        )
        interior_probability = leftover / (total_weight * interior_size)

    probabilities: Dict[Position, float] = {}
    certain_safe: List[Position] = []
    certain_mines: List[Position] = []

    for j, (component, counts) in enumerate(exact):
        others = _convolve(prefix[j], suffix[j + 1])
        # weight of the rest of the board given k mines in this component
        rest = [
            sum(
                o * comb_or_zero(interior_size, budget - k - s)
                for s, o in enumerate(others)
            )
            for k in range(len(vectors[j]))
        ]
        for pos in component.cells:
            numerator = sum(
                counts.cell_mines(k, pos) * rest[k] for k in counts.assignments
            )
            probabilities[pos] = numerator / total_weight
            if numerator == 0:
                certain_safe.append(pos)
            elif numerator == total_weight:
                certain_mines.append(pos)

    return probabilities, interior_probability, certain_safe, certain_mines


def local_density_probabilities(
    constraints: Sequence[Constraint],
    interior: Iterable[Position],
    mines_remaining: int,
    hidden_count: int,
) -> ProbabilityMap:
    """
    Cheap estimate without enumeration.

    Each frontier cell gets the mean density (mines / cells) of the
    constraints touching it; interior cells get the global density.
    """
    touching: DefaultDict[Position, List[float]] = defaultdict(list)
    for constraint in constraints:
        density = constraint.mines / len(constraint.cells)
        for pos in constraint.cells:
            touching[pos].append(density)

    frontier = {pos: sum(ds) / len(ds) for pos, ds in touching.items()}
    interior_cells = frozenset(interior)
    interior_probability = (
        mines_remaining / hidden_count if interior_cells and hidden_count else None
    )
    return ProbabilityMap(
        frontier, interior_cells, interior_probability, approximated=True
    )


def estimate_probabilities(
    components: Sequence[FrontierComponent],
    interior: Iterable[Position],
    mines_remaining: int,
    max_component_size: Union[int, float] = DEFAULT_MAX_COMPONENT_SIZE,
) -> ProbabilityMap:
    """
    Estimate the mine probability of every frontier and interior cell.

    Components up to max_component_size cells are enumerated exactly and
    combined through the global mine budget. Larger components are
    approximated with relaxation, independently of the others; their
    expected mine count (rounded) is taken out of the budget before the
    exact combination.

    Args:
        components: Frontier components of the current board.
        interior: Hidden, unflagged cells touching no constraint.
        mines_remaining: Mines not yet flagged.
        max_component_size: Enumeration cap in cells.

    Raises:
        InconsistentConstraintsError: If the exact computation admits no board.
    """
    interior_cells = frozenset(interior)
    interior_size = len(interior_cells)
    unknown = sum(component.size for component in components) + interior_size
    naive = mines_remaining / unknown if unknown else 0.0

    exact: List[Tuple[FrontierComponent, ComponentCounts]] = []
    approximate: Dict[Position, float] = {}
    for component in components:
        if component.size > max_component_size:
            logger.info(
                "Component at %s has %d cells (cap %s); using relaxation, "
                "probabilities are approximate",
                component.cells[0],
                component.size,
                max_component_size,
            )
            approximate.update(relax_component(component, mines_remaining, naive))
        else:
            exact.append(
                (component, enumerate_component(component, mine_limit=mines_remaining))
            )

    approximated = bool(approximate)
    budget = mines_remaining
    if approximated:
        budget = max(0, mines_remaining - int(round(sum(approximate.values()))))

    combined = _combine_with_budget(exact, interior_size, budget)
    if combined is not None:
        probabilities, interior_probability, certain_safe, certain_mines = combined
        if approximated:
            certain_safe, certain_mines = [], []
            if interior_probability is not None:
                interior_probability = min(1.0, max(0.0, interior_probability))
        probabilities.update(approximate)
        return ProbabilityMap(
            probabilities,
            interior_cells,
            interior_probability,
            certain_safe,
            certain_mines,
            approximated,
        )

    if not approximated:
        raise InconsistentConstraintsError(
            f"No placement of {mines_remaining} mines fits the visible clues."
        )

    # The rounded approximation broke the budget; drop the coupling.
    logger.info("Approximate mine budget infeasible; treating components independently")
    probabilities = dict(approximate)
    for _, counts in exact:
        probabilities.update(counts.marginal_probabilities())
    interior_probability = None
    if interior_size:
        residual = (mines_remaining - sum(probabilities.values())) / interior_size
        interior_probability = min(1.0, max(0.0, residual))
    return ProbabilityMap(
        probabilities, interior_cells, interior_probability, approximated=True
    )


def board_probabilities(
    board: Board,
    max_component_size: Union[int, float] = DEFAULT_MAX_COMPONENT_SIZE,
    guessing_strategy: str = "bayesian",
    constraints: Optional[Sequence[Constraint]] = None,
) -> ProbabilityMap:
    """
    Probability map for the current state of a board.

    Args:
        board: Board to analyse.
        max_component_size: Enumeration cap in cells ("bayesian" only).
        guessing_strategy: "bayesian" (enumeration) or "local_density".
        constraints: Pre-extracted constraints; extracted from the board if omitted.
    """
    validate_guessing_strategy(guessing_strategy)
    if constraints is None:
        constraints = extract_constraints(board)

    frontier = constrained_cells(constraints)
    interior = [pos for pos in board.hidden_cells() if pos not in frontier]

    if guessing_strategy == "local_density":
        return local_density_probabilities(
            constraints, interior, board.mines_remaining, board.hidden_count
        )

    return estimate_probabilities(
        partition_frontier(constraints),
        interior,
        board.mines_remaining,
        max_component_size=max_component_size,
    )
