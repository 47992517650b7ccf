# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Configuration schema and loader for game sessions.

Supports YAML files so a stall can be tuned (pacing, lives, regulars,
the level table) without touching code.

Example config.yaml:
    starting_lives: 3
    transition_seconds: 1.0
    first_visit_levels: [2, 3]
    second_visit_levels: [4, 5]
    levels:
      - level: 1
        name: Morning Shift
        timer_seconds: 20
        cups_to_complete: 5
        queue_size: 2
        drink_pool: standard
        score_multiplier: 1.0
      - level: 2
        name: Supper Crowd
        timer_seconds: 10
        cups_to_complete: null  # last level never ends
        queue_size: 4
        drink_pool: full
        score_multiplier: 2.0
"""

import math
from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from ..levels import level_to_dict, validate_levels
from ..models import GameConfig, LevelConfig, PoolType


VALID_POOLS = [p.value for p in PoolType]

_FLOAT_FIELDS = [
    "transition_seconds",
    "level_transition_seconds",
    "quick_transition_seconds",
    "gameover_delay_seconds",
    "tick_interval_seconds",
]
_INT_FIELDS = [
    "starting_lives",
    "points_base",
    "quick_transition_from_level",
    "regular_min_spacing",
    "appearance_retries",
]
_RANGE_FIELDS = ["first_visit_levels", "second_visit_levels"]
_KNOWN_KEYS = {f.name for f in fields(GameConfig)}


def _level_from_dict(data: dict[str, Any]) -> LevelConfig:
    for key in ("level", "name", "timer_seconds", "queue_size", "drink_pool"):
        if key not in data:
            raise ValueError(f"Level entry missing '{key}': {data}")

    pool = data["drink_pool"]
    if pool not in VALID_POOLS:
        raise ValueError(f"Invalid drink_pool: {pool}. Must be one of {VALID_POOLS}")

    cups = data.get("cups_to_complete")
    return LevelConfig(
        level=int(data["level"]),
        name=str(data["name"]),
        timer_seconds=float(data["timer_seconds"]),
        cups_to_complete=math.inf if cups is None else int(cups),
        queue_size=int(data["queue_size"]),
        drink_pool=PoolType(pool),
        score_multiplier=float(data.get("score_multiplier", 1.0)),
    )


def config_from_dict(data: dict[str, Any] | None) -> GameConfig:
    """
    Build a GameConfig from plain data (as read from YAML).

    Missing keys keep their defaults.

    Raises:
        ValueError: On unknown keys or out-of-range values
    """
    if data is None:
        return GameConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    kwargs: dict[str, Any] = {}

    for key in _FLOAT_FIELDS:
        if key in data:
            value = float(data[key])
            if value < 0:
                raise ValueError(f"Invalid {key}: {value}. Must be >= 0")
            kwargs[key] = value

    for key in _INT_FIELDS:
        if key in data:
            value = int(data[key])
            if value < 0:
                raise ValueError(f"Invalid {key}: {value}. Must be >= 0")
            kwargs[key] = value

    if kwargs.get("starting_lives") == 0:
        raise ValueError("Invalid starting_lives: 0. Must be at least 1")

    if "regular_chance" in data:
        chance = float(data["regular_chance"])
        if not 0.0 <= chance <= 1.0:
            raise ValueError(f"Invalid regular_chance: {chance}. Must be between 0 and 1")
        kwargs["regular_chance"] = chance

    for key in _RANGE_FIELDS:
        if key in data:
            bounds = data[key]
            if not isinstance(bounds, (list, tuple)) or len(bounds) != 2:
                raise ValueError(f"Invalid {key}: {bounds}. Must be [low, high]")
            low, high = int(bounds[0]), int(bounds[1])
            if low > high:
                raise ValueError(f"Invalid {key}: {bounds}. Low level must not exceed high level")
            kwargs[key] = (low, high)

    if "regular_drink_pool" in data:
        pool = data["regular_drink_pool"]
        if pool not in VALID_POOLS:
            raise ValueError(f"Invalid regular_drink_pool: {pool}. Must be one of {VALID_POOLS}")
        kwargs["regular_drink_pool"] = PoolType(pool)

    if data.get("levels"):
        levels = [_level_from_dict(entry) for entry in data["levels"]]
        validate_levels(levels)
        kwargs["levels"] = levels

    return GameConfig(**kwargs)


def config_to_dict(config: GameConfig) -> dict[str, Any]:
    """Plain-data form of a GameConfig, suitable for YAML or JSON."""
    data: dict[str, Any] = {}
    for key in _INT_FIELDS + _FLOAT_FIELDS:
        data[key] = getattr(config, key)
    data["regular_chance"] = config.regular_chance
    for key in _RANGE_FIELDS:
        data[key] = list(getattr(config, key))
    data["regular_drink_pool"] = config.regular_drink_pool.value
    data["levels"] = [level_to_dict(level) for level in config.get_levels()]
    return data


def load_config(path: str | Path) -> GameConfig:
    """
    Load a game configuration from a YAML file.

    Args:
        path: Path to YAML config file

    Returns:
        GameConfig instance

    Example:
        config = load_config("stall.yaml")
        env = KopiEnvironment(config=config, seed=42)
    """
    path = Path(path)

    with open(path) as f:
        data = yaml.safe_load(f)

    return config_from_dict(data)


def save_config(config: GameConfig, path: str | Path) -> None:
    """
    Save a game configuration to a YAML file.

    Args:
        config: GameConfig to save
        path: Output path
    """
    path = Path(path)

    with open(path, "w") as f:
        yaml.dump(config_to_dict(config), f, default_flow_style=False, sort_keys=False)


# Example config template
EXAMPLE_CONFIG = """# KopiRush Stall Configuration
# Every key is optional; anything left out keeps the default.

starting_lives: 2
points_base: 5

# Pacing between orders (seconds)
transition_seconds: 1.5
level_transition_seconds: 3.0
quick_transition_seconds: 0.35
quick_transition_from_level: 4
gameover_delay_seconds: 1.5

# Regulars: first visit in these levels, recall visit in these
regular_chance: 0.4
regular_min_spacing: 2
first_visit_levels: [2, 2]
second_visit_levels: [3, 4]
regular_drink_pool: full

levels:
  - level: 1
    name: Morning Shift
    timer_seconds: 15
    cups_to_complete: 6
    queue_size: 2
    drink_pool: standard
    score_multiplier: 1.0
  - level: 2
    name: Breakfast Rush
    timer_seconds: 15
    cups_to_complete: 13
    queue_size: 3
    drink_pool: medium
    score_multiplier: 1.2
  - level: 3
    name: Lunch Hour
    timer_seconds: 12
    cups_to_complete: 10
    queue_size: 4
    drink_pool: full
    score_multiplier: 1.5
  - level: 4
    name: Tea Time
    timer_seconds: 8
    cups_to_complete: 10
    queue_size: 5
    drink_pool: full
    score_multiplier: 1.8
  - level: 5
    name: Supper Crowd
    timer_seconds: 5
    cups_to_complete: null  # never ends
    queue_size: 6
    drink_pool: full
    score_multiplier: 2.5
"""


def create_example_config(path: str | Path = "stall.yaml") -> None:
    """Write the example configuration file."""
    with open(path, "w") as f:
        f.write(EXAMPLE_CONFIG)
