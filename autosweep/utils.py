"""Utility functions for the Minesweeper autoplayer."""

from math import comb
from typing import Dict, List, Tuple

Position = Tuple[int, int]

# Module-level cache: (width, height) -> {(row, col): ((nrow, ncol), ...), ...}
_NEIGHBORHOODS_CACHE: Dict[
    Tuple[int, int],
    Dict[Position, Tuple[Position, ...]]
] = {}


def get_neighborhoods(
    width: int, height: int
) -> Dict[Position, Tuple[Position, ...]]:
    """
    Precompute and cache 8-connected neighbor positions for every cell in a grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        Mapping from each cell (row, col) to a tuple of valid neighboring
        positions (nrow, ncol) under 8-connectivity, in row-major order.

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: Dict[Position, Tuple[Position, ...]] = {}
    for row in range(height):
        for col in range(width):
            nbrs: List[Position] = []
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    if dr == 0 and dc == 0:
                        continue
                    nr, nc = row + dr, col + dc
                    if 0 <= nr < height and 0 <= nc < width:
                        nbrs.append((nr, nc))
            neighborhoods[(row, col)] = tuple(nbrs)

    _NEIGHBORHOODS_CACHE[key] = neighborhoods
    return neighborhoods


def comb_or_zero(n: int, k: int) -> int:
    """Binomial coefficient that is 0 outside the valid range instead of raising."""
    if k < 0 or k > n:
        return 0
    return comb(n, k)
