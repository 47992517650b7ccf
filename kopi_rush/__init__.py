# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
KopiRush - A kopitiam order-rush game engine.

Customers queue up at the drinks stall and the player has to:
- Pour the right base (Kopi or Teh) at the right strength
- Add the right milk, sugar, ice and hot water
- Serve before the countdown runs out
- Remember what the regulars drink when they come back for "the usual"

Quick Start:
    # Play in the terminal
    kopi play --seed 42

    # Or drive the engine from Python
    from kopi_rush.server import KopiEnvironment

    env = KopiEnvironment(seed=42)
    obs = env.reset()
    env.add_base("Kopi")
    env.set_milk("Condensed")
    env.add_hot_water()
    obs = env.serve()
"""

from .models import (
    ActionKind,
    BaseType,
    Cup,
    DrinkRecipe,
    GameConfig,
    GamePhase,
    KopiAction,
    KopiObservation,
    LevelConfig,
    MilkType,
    Mismatch,
    MismatchType,
    PoolType,
    SugarLevel,
)
from .catalog import ALL_DRINKS, get_drink_pool
from .validation import validate_order, get_order_mismatches
from .scoring import calculate_score
from .levels import LEVELS, get_level_for_cup

__all__ = [
    # Core models
    "ActionKind",
    "BaseType",
    "Cup",
    "DrinkRecipe",
    "GameConfig",
    "GamePhase",
    "KopiAction",
    "KopiObservation",
    "LevelConfig",
    "MilkType",
    "Mismatch",
    "MismatchType",
    "PoolType",
    "SugarLevel",
    # Rules
    "ALL_DRINKS",
    "get_drink_pool",
    "validate_order",
    "get_order_mismatches",
    "calculate_score",
    "LEVELS",
    "get_level_for_cup",
]
