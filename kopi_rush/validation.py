# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Cup checking against the order.

``validate_order`` is the yes/no decision used for scoring.
``get_order_mismatches`` explains a wrong cup line by line, always checking
the same dimensions in the same sequence:

    base type, base units, sugar, milk type, condensed milk units, ice, hot water
"""

from typing import List

from .models import Cup, DrinkRecipe, Mismatch, MismatchType, MilkType, SugarLevel


def create_empty_cup() -> Cup:
    """A fresh cup with nothing in it."""
    return Cup()


def _units(value: float) -> str:
    """Format pour units the way the counter shows them (1u, 0.5u, 1.5u)."""
    return f"{value:g}u"


def validate_order(cup: Cup, order: DrinkRecipe) -> bool:
    """
    Check whether the cup is exactly what was ordered.

    No partial credit: every dimension must match exactly. Sugar is skipped
    for drinks where condensed milk does the sweetening, and milk units are
    only compared when the milk is condensed.
    """
    if cup.base != order.base or cup.base_units != order.base_units:
        return False
    if not order.sugar_optional and cup.sugar != order.sugar:
        return False
    if cup.milk != order.milk:
        return False
    if order.milk == MilkType.CONDENSED and cup.milk_units != order.milk_units:
        return False
    return cup.has_ice == order.peng and cup.has_hot_water == order.hot_water


def get_order_mismatches(cup: Cup, order: DrinkRecipe) -> List[Mismatch]:
    """
    List everything that differs between the cup and the order.

    Args:
        cup: The cup as served
        order: The drink that was asked for

    Returns:
        Zero or one Mismatch per dimension, in a fixed order. Empty if and
        only if ``validate_order`` would return True.
    """
    mismatches: List[Mismatch] = []

    # Base type
    if cup.base != order.base:
        if cup.base is None:
            mismatches.append(Mismatch(f"Missed: {order.base.value} base", MismatchType.MISSED))
        else:
            mismatches.append(Mismatch(
                f"Wrong base: used {cup.base.value} instead of {order.base.value}",
                MismatchType.WRONG,
            ))

    # Base units (only meaningful once the base itself is right)
    if cup.base == order.base and cup.base_units != order.base_units:
        if cup.base_units > order.base_units:
            mismatches.append(Mismatch(
                f"Too much base: {_units(cup.base_units)} instead of {_units(order.base_units)}",
                MismatchType.WRONG,
            ))
        else:
            mismatches.append(Mismatch(
                f"Not enough base: {_units(cup.base_units)} instead of {_units(order.base_units)}",
                MismatchType.MISSED,
            ))

    # Sugar
    if not order.sugar_optional and cup.sugar != order.sugar:
        if order.sugar == SugarLevel.NONE:
            mismatches.append(Mismatch("Added sugar (should be Kosong)", MismatchType.WRONG))
        elif cup.sugar == SugarLevel.NONE:
            amount = "half" if order.sugar == SugarLevel.HALF else "full"
            mismatches.append(Mismatch(f"Missed: {amount} sugar", MismatchType.MISSED))
        else:
            mismatches.append(Mismatch(
                f"Wrong sugar: {cup.sugar.value} instead of {order.sugar.value}",
                MismatchType.WRONG,
            ))

    # Milk type
    if cup.milk != order.milk:
        if order.milk == MilkType.NONE:
            mismatches.append(Mismatch(f"Added {cup.milk.value} milk (not needed)", MismatchType.WRONG))
        elif cup.milk == MilkType.NONE:
            mismatches.append(Mismatch(f"Missed: {order.milk.value} milk", MismatchType.MISSED))
        else:
            mismatches.append(Mismatch(
                f"Wrong milk: {cup.milk.value} instead of {order.milk.value}",
                MismatchType.WRONG,
            ))

    # Condensed milk pour
    if (
        cup.milk == MilkType.CONDENSED
        and order.milk == MilkType.CONDENSED
        and cup.milk_units != order.milk_units
    ):
        if cup.milk_units > order.milk_units:
            mismatches.append(Mismatch(
                f"Too much condensed milk: {_units(cup.milk_units)} instead of {_units(order.milk_units)}",
                MismatchType.WRONG,
            ))
        else:
            mismatches.append(Mismatch(
                f"Not enough condensed milk: {_units(cup.milk_units)} instead of {_units(order.milk_units)}",
                MismatchType.MISSED,
            ))

    # Ice
    if cup.has_ice != order.peng:
        if cup.has_ice:
            mismatches.append(Mismatch("Added ice (not Peng)", MismatchType.WRONG))
        else:
            mismatches.append(Mismatch("Missed: Ice (Peng)", MismatchType.MISSED))

    # Hot water
    if cup.has_hot_water != order.hot_water:
        if cup.has_hot_water:
            mismatches.append(Mismatch("Added hot water (not needed)", MismatchType.WRONG))
        else:
            mismatches.append(Mismatch("Missed: Hot water", MismatchType.MISSED))

    return mismatches


# Shorter names used by the session engine and callers outside it
validate = validate_order
diagnose = get_order_mismatches
