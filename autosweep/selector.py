"""Choice of the cell to reveal when nothing can be proven."""

import math
import random
from typing import List, Optional, Sequence, Tuple

from .probability import ProbabilityMap
from .utils import Position

# Probabilities closer than this are considered tied.
TIE_TOLERANCE = 1e-12


def select_move(
    candidates: Sequence[Position],
    probabilities: ProbabilityMap,
    rng: Optional[random.Random] = None,
) -> Tuple[Position, float]:
    """
    Pick the candidate least likely to hold a mine.

    Args:
        candidates: Hidden, unflagged cells; their order is the tie-break
            order when no rng is given (callers pass them row-major).
        probabilities: Estimated mine probability of every candidate.
        rng: Optional seeded source; when given, ties are broken by a
            random choice among the tied cells instead of by order.

    Returns:
        (position, probability) of the chosen cell.

    Raises:
        ValueError: If there are no candidates.
        KeyError: If a candidate has no probability.
    """
    if not candidates:
        raise ValueError("No hidden cells to choose from.")

    scored = [(pos, probabilities.probability(pos)) for pos in candidates]
    best = min(p for _, p in scored)
    tied: List[Position] = [
        pos
        for pos, p in scored
        if math.isclose(p, best, rel_tol=TIE_TOLERANCE, abs_tol=TIE_TOLERANCE)
    ]

    choice = rng.choice(tied) if rng is not None else tied[0]
    return choice, probabilities.probability(choice)
