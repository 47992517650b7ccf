# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
The drink catalog and difficulty pools.

Every drink on the menu is built from a base recipe and then expanded into
a hot and an iced ("Peng") variant. Pools are plain name filters over the
expanded catalog, so they are deterministic and safe to cache.
"""

from functools import lru_cache
from typing import Dict, List, Sequence, Tuple, Union

from .models import BaseType, DrinkRecipe, MilkType, PoolType, SugarLevel


def _condensed(name: str, base: BaseType, base_units: float = 1.0,
               milk_units: float = 1.0, hot_water: bool = True) -> DrinkRecipe:
    # Sugar is not judged on condensed-milk drinks
    return DrinkRecipe(
        name=name,
        base=base,
        base_units=base_units,
        sugar=SugarLevel.NONE,
        milk=MilkType.CONDENSED,
        milk_units=milk_units,
        hot_water=hot_water,
        sugar_optional=True,
    )


def _sugared(name: str, base: BaseType, sugar: SugarLevel, milk: MilkType) -> DrinkRecipe:
    return DrinkRecipe(name=name, base=base, base_units=1.0, sugar=sugar, milk=milk)


def _family(base: BaseType) -> List[DrinkRecipe]:
    b = base.value
    return [
        _condensed(f"{b}", base),
        _sugared(f"{b} O", base, SugarLevel.FULL, MilkType.NONE),
        _sugared(f"{b} C", base, SugarLevel.FULL, MilkType.EVAPORATED),
        _condensed(f"{b} Po", base, base_units=0.5),
        _condensed(f"{b} Gau", base, base_units=2.0),
        _condensed(f"{b} Di Lo", base, base_units=3.0, hot_water=False),
        _condensed(f"{b} Siu Dai", base, milk_units=0.5),
        _sugared(f"{b} O Siu Dai", base, SugarLevel.HALF, MilkType.NONE),
        _sugared(f"{b} C Siu Dai", base, SugarLevel.HALF, MilkType.EVAPORATED),
        _sugared(f"{b} O Kosong", base, SugarLevel.NONE, MilkType.NONE),
        _sugared(f"{b} C Kosong", base, SugarLevel.NONE, MilkType.EVAPORATED),
    ]


# The canonical menu before iced variants are added
BASE_RECIPES: Tuple[DrinkRecipe, ...] = tuple(_family(BaseType.KOPI) + _family(BaseType.TEH))


def expand_with_peng(recipes: Sequence[DrinkRecipe]) -> List[DrinkRecipe]:
    """
    Expand base recipes into the orderable catalog.

    Each recipe yields exactly two entries, hot first and then iced, with
    " Peng" appended to the iced display name.
    """
    result: List[DrinkRecipe] = []
    for recipe in recipes:
        fields = dict(
            name=recipe.name,
            base=recipe.base,
            base_units=recipe.base_units,
            sugar=recipe.sugar,
            milk=recipe.milk,
            milk_units=recipe.milk_units,
            hot_water=recipe.hot_water,
            sugar_optional=recipe.sugar_optional,
        )
        result.append(DrinkRecipe(**fields, peng=False, display_name=recipe.name))
        result.append(DrinkRecipe(**fields, peng=True, display_name=f"{recipe.name} Peng"))
    return result


ALL_DRINKS: Tuple[DrinkRecipe, ...] = tuple(expand_with_peng(BASE_RECIPES))

# Display-name fragments kept out of the easier pools
POOL_EXCLUSIONS: Dict[PoolType, Tuple[str, ...]] = {
    PoolType.STANDARD: ("Di Lo", "Gau", "Po", "Peng", "Siu Dai"),
    PoolType.MEDIUM: ("Di Lo", "Gau", "Po"),
    PoolType.FULL: (),
}


@lru_cache(maxsize=None)
def _pool(pool: PoolType) -> Tuple[DrinkRecipe, ...]:
    excluded = POOL_EXCLUSIONS[pool]
    return tuple(
        drink for drink in ALL_DRINKS
        if not any(fragment in drink.display_name for fragment in excluded)
    )


def get_drink_pool(pool: Union[PoolType, str]) -> Tuple[DrinkRecipe, ...]:
    """
    Get the drinks that can be ordered from a difficulty pool.

    Args:
        pool: A PoolType or its string value ("standard", "medium", "full")

    Returns:
        The matching catalog entries, in catalog order

    Raises:
        ValueError: If the pool name is unknown
    """
    return _pool(PoolType(pool))


def find_drink(display_name: str) -> DrinkRecipe:
    """Look up a catalog entry by its display name."""
    for drink in ALL_DRINKS:
        if drink.display_name == display_name:
            return drink
    raise KeyError(f"Unknown drink: {display_name}")
