"""Partition of the constrained frontier into independent components."""

from collections import defaultdict
from typing import DefaultDict, List, NamedTuple, Sequence, Set, Tuple

from .constraints import Constraint
from .utils import Position


class FrontierComponent(NamedTuple):
    """Frontier cells linked through shared constraints, with those constraints."""

    cells: Tuple[Position, ...]
    constraints: Tuple[Constraint, ...]

    @property
    def size(self) -> int:
        return len(self.cells)


def partition_frontier(constraints: Sequence[Constraint]) -> List[FrontierComponent]:
    """
    Split the frontier into connected components.

    Two cells belong to the same component iff a chain of constraints, each
    sharing a cell with the next, links them. Traversal runs over the
    bipartite constraint/cell graph with an explicit stack.

    Returns:
        Components ordered by their first cell, cells in row-major order and
        constraints in their canonical order.
    """
    cell_to_constraints: DefaultDict[Position, List[int]] = defaultdict(list)
    for i, constraint in enumerate(constraints):
        for pos in constraint.cells:
            cell_to_constraints[pos].append(i)

    components: List[FrontierComponent] = []
    seen_constraints: Set[int] = set()

    for start, constraint in enumerate(constraints):
        if start in seen_constraints or not constraint.cells:
            continue

        stack: List[int] = [start]
        seen_constraints.add(start)
        member_constraints: List[int] = []
        cells: Set[Position] = set()

        while stack:
            ci = stack.pop()
            member_constraints.append(ci)
            for pos in constraints[ci].cells:
                if pos in cells:
                    continue
                cells.add(pos)
                for other in cell_to_constraints[pos]:
                    if other not in seen_constraints:
                        seen_constraints.add(other)
                        stack.append(other)

        components.append(
            FrontierComponent(
                cells=tuple(sorted(cells)),
                constraints=tuple(
                    sorted(
                        (constraints[ci] for ci in member_constraints),
                        key=Constraint.sort_key,
                    )
                ),
            )
        )

    components.sort(key=lambda comp: comp.cells[0])
    return components
