# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""Points for a correctly served cup."""

import math

POINTS_BASE = 5


def calculate_score(
    seconds_remaining: float,
    score_multiplier: float = 1.0,
    base_points: int = POINTS_BASE,
) -> int:
    """
    Score a correct serve.

    Every whole second left on the clock is worth a point on top of the
    base, and the shift multiplier is applied last, rounding up.

    Example:
        >>> calculate_score(7.8, 1.5)
        18
    """
    base = base_points + math.floor(max(0.0, seconds_remaining))
    return math.ceil(base * score_multiplier)
