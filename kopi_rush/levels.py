# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
The shift (level) table.

Each level lists how many correct cups it takes to move past it. The last
level never ends.
"""

import math
from typing import Sequence

from .models import LevelConfig, PoolType


LEVELS: tuple[LevelConfig, ...] = (
    LevelConfig(level=1, name="Morning Shift", timer_seconds=15, cups_to_complete=6,
                queue_size=2, drink_pool=PoolType.STANDARD, score_multiplier=1.0),
    LevelConfig(level=2, name="Breakfast Rush", timer_seconds=15, cups_to_complete=13,
                queue_size=3, drink_pool=PoolType.MEDIUM, score_multiplier=1.2),
    LevelConfig(level=3, name="Lunch Hour", timer_seconds=12, cups_to_complete=10,
                queue_size=4, drink_pool=PoolType.FULL, score_multiplier=1.5),
    LevelConfig(level=4, name="Tea Time", timer_seconds=8, cups_to_complete=10,
                queue_size=5, drink_pool=PoolType.FULL, score_multiplier=1.8),
    LevelConfig(level=5, name="Supper Crowd", timer_seconds=5, cups_to_complete=math.inf,
                queue_size=6, drink_pool=PoolType.FULL, score_multiplier=2.5),
)


def get_level_for_cup(cup_number: int, levels: Sequence[LevelConfig] = LEVELS) -> LevelConfig:
    """
    Find the level that applies after ``cup_number`` correct cups.

    Walks the table subtracting each level's threshold; once the table runs
    out, the final level applies forever.
    """
    cups_remaining = cup_number
    for level in levels:
        if cups_remaining < level.cups_to_complete:
            return level
        cups_remaining -= level.cups_to_complete
    return levels[-1]


def get_cup_threshold_for_level(target_level: int, levels: Sequence[LevelConfig] = LEVELS) -> int:
    """Cumulative correct cups at which ``target_level`` begins."""
    total = 0
    for level in levels:
        if level.level >= target_level:
            return total
        total += level.cups_to_complete
    return total


def validate_levels(levels: Sequence[LevelConfig]) -> None:
    """
    Check a level table is playable.

    Raises:
        ValueError: If the table is empty, level numbers or thresholds are not
            strictly increasing / positive, an earlier level is unbounded,
            or the final level has an end
    """
    if not levels:
        raise ValueError("Level table must contain at least one level")

    previous = None
    for index, level in enumerate(levels):
        if previous is not None and level.level <= previous.level:
            raise ValueError(
                f"Level numbers must be strictly increasing: {previous.level} then {level.level}"
            )
        if level.cups_to_complete <= 0:
            raise ValueError(f"Level {level.level}: cups_to_complete must be positive")
        if math.isinf(level.cups_to_complete) and index < len(levels) - 1:
            raise ValueError(
                f"Level {level.level}: only the final level may have unbounded cups_to_complete"
            )
        if level.timer_seconds <= 0:
            raise ValueError(f"Level {level.level}: timer_seconds must be positive")
        if level.queue_size < 0:
            raise ValueError(f"Level {level.level}: queue_size cannot be negative")
        previous = level

    if not math.isinf(levels[-1].cups_to_complete):
        raise ValueError(f"Final level {levels[-1].level} must have unbounded cups_to_complete")


def level_to_dict(level: LevelConfig) -> dict:
    """Plain-data form of a level (an unbounded threshold becomes None)."""
    return {
        "level": level.level,
        "name": level.name,
        "timer_seconds": level.timer_seconds,
        "cups_to_complete": None if math.isinf(level.cups_to_complete) else int(level.cups_to_complete),
        "queue_size": level.queue_size,
        "drink_pool": level.drink_pool.value,
        "score_multiplier": level.score_multiplier,
    }
