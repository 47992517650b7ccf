# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Pytest fixtures for KopiRush tests.
"""

import pytest

from kopi_rush.models import (
    BaseType,
    Cup,
    DrinkRecipe,
    GameConfig,
    KopiObservation,
    MilkType,
    SugarLevel,
)
from kopi_rush.server.kopi_environment import KopiEnvironment


class FakeClock:
    """A monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def cup_for(drink: DrinkRecipe) -> Cup:
    """The exact cup a drink asks for."""
    return Cup(
        base=drink.base,
        base_units=drink.base_units,
        sugar=drink.sugar,
        milk=drink.milk,
        milk_units=drink.milk_units if drink.milk != MilkType.NONE else 0.0,
        has_ice=drink.peng,
        has_hot_water=drink.hot_water,
    )


def make_correct_cup(env: KopiEnvironment) -> KopiObservation:
    """Build the current order through player actions. Returns the last observation."""
    drink = env.session.ticket.drink

    if drink.base_units == 0.5:
        env.toggle_less_base()
        obs = env.add_base(drink.base.value)
    else:
        for _ in range(int(drink.base_units)):
            obs = env.add_base(drink.base.value)

    if drink.milk != MilkType.NONE:
        if drink.milk == MilkType.CONDENSED and drink.milk_units == 0.5:
            env.toggle_less_condensed_milk()
        obs = env.set_milk(drink.milk.value)

    if drink.sugar != SugarLevel.NONE:
        if drink.sugar == SugarLevel.HALF:
            env.toggle_less_sugar()
        obs = env.add_sugar()

    if drink.peng:
        obs = env.add_ice()
    if drink.hot_water:
        obs = env.add_hot_water()
    return obs


def make_wrong_cup(env: KopiEnvironment) -> KopiObservation:
    """Pour the other base, which is never right."""
    drink = env.session.ticket.drink
    other = BaseType.TEH if drink.base == BaseType.KOPI else BaseType.KOPI
    return env.add_base(other.value)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def default_config() -> GameConfig:
    """Default game configuration for tests."""
    return GameConfig()


@pytest.fixture
def env(clock: FakeClock, default_config: GameConfig) -> KopiEnvironment:
    """Fresh environment with a fixed seed and a hand-driven clock."""
    return KopiEnvironment(config=default_config, seed=42, clock=clock)


@pytest.fixture
def one_life_env(clock: FakeClock) -> KopiEnvironment:
    """Environment where the first mistake ends the game."""
    return KopiEnvironment(config=GameConfig(starting_lives=1), seed=7, clock=clock)


@pytest.fixture
def playing_env(env: KopiEnvironment) -> KopiEnvironment:
    """Environment with a session started and the first order on the counter."""
    env.reset()
    return env


@pytest.fixture
def build_correct_cup():
    """Helper that pours the current order exactly."""
    return make_correct_cup


@pytest.fixture
def build_wrong_cup():
    """Helper that pours a cup that can never be right."""
    return make_wrong_cup


@pytest.fixture
def exact_cup():
    """Helper that builds the matching Cup for a recipe directly."""
    return cup_for
