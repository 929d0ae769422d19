"""Difficulty presets, solver defaults and option validation."""

from typing import Dict, Tuple, Union

# Standard difficulty levels: name -> (width, height, mines)
DIFFICULTY_LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (30, 16, 99),
}

MINES_GENERATION_ALGORITHMS: Tuple[str, ...] = (
    "safe_first_action_rule",
    "safe_neighborhood_rule",
)

GUESSING_STRATEGIES: Tuple[str, ...] = ("bayesian", "local_density")

# Components with more cells than this are approximated instead of enumerated.
DEFAULT_MAX_COMPONENT_SIZE: int = 24

# Iterative relaxation used for oversized components.
RELAXATION_MAX_ROUNDS: int = 100
RELAXATION_TOLERANCE: float = 1e-4


def get_difficulty(level: str) -> Tuple[int, int, int]:
    """
    Look up a difficulty preset.

    Args:
        level: One of the keys of DIFFICULTY_LEVELS (case-insensitive).

    Returns:
        (width, height, mines) for the level.

    Raises:
        ValueError: If the level is unknown.
    """
    key = level.lower()
    if key not in DIFFICULTY_LEVELS:
        raise ValueError(
            f"Unknown difficulty {level!r}; expected one of {sorted(DIFFICULTY_LEVELS)}."
        )
    return DIFFICULTY_LEVELS[key]


def validate_guessing_strategy(strategy: str) -> str:
    if strategy not in GUESSING_STRATEGIES:
        raise ValueError('guessing_strategy must be "bayesian" or "local_density".')
    return strategy


def validate_max_component_size(value: Union[int, float]) -> Union[int, float]:
    if value <= 0:
        raise ValueError("max_component_size must be positive.")
    return value
