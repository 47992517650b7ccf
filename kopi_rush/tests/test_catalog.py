# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Tests for the drink catalog and difficulty pools.

Covers:
- Base recipe family
- Peng expansion
- Pool filtering
- Lookups
"""

import pytest

from kopi_rush.catalog import (
    ALL_DRINKS,
    BASE_RECIPES,
    expand_with_peng,
    find_drink,
    get_drink_pool,
)
from kopi_rush.models import BaseType, MilkType, PoolType, SugarLevel


class TestBaseRecipes:
    """Tests for the canonical menu."""

    def test_eleven_recipes_per_base(self):
        """Each base has the same eleven-drink family."""
        kopi = [r for r in BASE_RECIPES if r.base == BaseType.KOPI]
        teh = [r for r in BASE_RECIPES if r.base == BaseType.TEH]
        assert len(kopi) == 11
        assert len(teh) == 11

    def test_plain_kopi_is_condensed_and_sugar_optional(self):
        """Plain Kopi uses condensed milk, which does the sweetening."""
        kopi = find_drink("Kopi")
        assert kopi.milk == MilkType.CONDENSED
        assert kopi.milk_units == 1.0
        assert kopi.sugar_optional
        assert kopi.hot_water

    def test_strength_variants(self):
        """Po, Gau and Di Lo change the base units."""
        assert find_drink("Kopi Po").base_units == 0.5
        assert find_drink("Kopi Gau").base_units == 2.0
        assert find_drink("Teh Di Lo").base_units == 3.0

    def test_di_lo_has_no_hot_water(self):
        """Di Lo is undiluted."""
        assert not find_drink("Kopi Di Lo").hot_water
        assert not find_drink("Teh Di Lo").hot_water

    def test_condensed_siu_dai_pours_half(self):
        """Siu Dai on a condensed drink means less condensed milk."""
        drink = find_drink("Teh Siu Dai")
        assert drink.milk == MilkType.CONDENSED
        assert drink.milk_units == 0.5

    def test_o_and_c_siu_dai_use_half_sugar(self):
        """Siu Dai on a sugared drink means half sugar."""
        assert find_drink("Kopi O Siu Dai").sugar == SugarLevel.HALF
        assert find_drink("Kopi C Siu Dai").sugar == SugarLevel.HALF
        assert find_drink("Kopi C Siu Dai").milk == MilkType.EVAPORATED

    def test_kosong_has_no_sugar(self):
        """Kosong means no sugar, and sugar is checked."""
        drink = find_drink("Teh O Kosong")
        assert drink.sugar == SugarLevel.NONE
        assert drink.milk == MilkType.NONE
        assert not drink.sugar_optional

    def test_only_condensed_drinks_are_sugar_optional(self):
        """Sugar leniency never applies to O or C drinks."""
        for recipe in BASE_RECIPES:
            assert recipe.sugar_optional == (recipe.milk == MilkType.CONDENSED)


class TestPengExpansion:
    """Tests for expanding recipes into hot and iced variants."""

    def test_catalog_doubles_base_recipes(self):
        """Every base recipe yields exactly two entries."""
        assert len(ALL_DRINKS) == 2 * len(BASE_RECIPES) == 44

    def test_hot_then_iced(self):
        """The hot variant comes first, then the Peng one."""
        expanded = expand_with_peng([find_drink("Kopi O")])
        assert [d.display_name for d in expanded] == ["Kopi O", "Kopi O Peng"]
        assert not expanded[0].peng
        assert expanded[1].peng

    def test_peng_keeps_the_recipe(self):
        """Only the ice flag and display name differ between variants."""
        hot = find_drink("Teh C Siu Dai")
        iced = find_drink("Teh C Siu Dai Peng")
        assert iced.name == hot.name
        assert iced.base_units == hot.base_units
        assert iced.sugar == hot.sugar
        assert iced.milk == hot.milk
        assert iced.hot_water == hot.hot_water

    def test_display_names_unique(self):
        """No two catalog entries share a display name."""
        names = [d.display_name for d in ALL_DRINKS]
        assert len(names) == len(set(names))


class TestPools:
    """Tests for difficulty pool filtering."""

    def test_standard_pool(self):
        """Standard keeps only plain, O, C and Kosong hot drinks."""
        pool = get_drink_pool(PoolType.STANDARD)
        assert len(pool) == 10
        for drink in pool:
            assert not drink.peng
            assert drink.base_units == 1.0
            for fragment in ("Di Lo", "Gau", "Po", "Peng", "Siu Dai"):
                assert fragment not in drink.display_name

    def test_medium_pool(self):
        """Medium adds Peng and Siu Dai but no strength variants."""
        pool = get_drink_pool(PoolType.MEDIUM)
        assert len(pool) == 32
        assert any(d.peng for d in pool)
        assert all(d.base_units == 1.0 for d in pool)

    def test_full_pool_is_everything(self):
        """Full is the whole catalog."""
        assert get_drink_pool(PoolType.FULL) == ALL_DRINKS

    def test_pools_are_nested(self):
        """Easier pools are subsets of harder ones."""
        standard = set(get_drink_pool("standard"))
        medium = set(get_drink_pool("medium"))
        full = set(get_drink_pool("full"))
        assert standard <= medium <= full

    def test_pool_order_follows_catalog(self):
        """Filtering preserves catalog order."""
        pool = get_drink_pool(PoolType.MEDIUM)
        indices = [ALL_DRINKS.index(d) for d in pool]
        assert indices == sorted(indices)

    def test_pool_accepts_string(self):
        """String pool names are accepted."""
        assert get_drink_pool("medium") == get_drink_pool(PoolType.MEDIUM)

    def test_unknown_pool_rejected(self):
        """Unknown pool names raise ValueError."""
        with pytest.raises(ValueError):
            get_drink_pool("legendary")


class TestFindDrink:
    """Tests for catalog lookup."""

    def test_find_iced(self):
        """Peng display names resolve to the iced entry."""
        assert find_drink("Kopi Peng").peng

    def test_unknown_drink(self):
        """Unknown names raise KeyError."""
        with pytest.raises(KeyError):
            find_drink("Milo Dinosaur")
