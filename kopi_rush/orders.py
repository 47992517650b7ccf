# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Order generation and the customer queue.

The next order either belongs to a scheduled regular or is drawn at random
from the current level's drink pool. Random customers are taken from the
front of the visible queue, avoiding a look-alike of the previous customer.
"""

import random
from dataclasses import dataclass, replace
from typing import List, Optional

from .catalog import get_drink_pool
from .models import CustomerAppearance, DrinkRecipe, LevelConfig, RegularCustomer
from .regulars import RegularScheduler

ETHNICITIES = ["Chinese", "Malay", "Indian", "Eurasian", "Southeast Asian"]
SKIN_TONES = ["#FDDCB1", "#E8B87E", "#8D5524", "#C68642", "#D4A574"]
SHIRT_COLORS = ["#E74C3C", "#3498DB", "#2ECC71", "#F39C12", "#9B59B6", "#1ABC9C", "#E67E22", "#34495E"]

# Hair styles are split by gender; 8 styles exist in total
MALE_HAIR_STYLES = [0, 1, 3, 4, 7]
FEMALE_HAIR_STYLES = [0, 1, 2, 3, 5, 6]
HAIR_STYLE_COUNT = 8


def generate_customer_appearance(rng: random.Random) -> CustomerAppearance:
    """Roll a random customer."""
    gender = "male" if rng.random() < 0.5 else "female"
    return CustomerAppearance(
        skin_tone=rng.choice(SKIN_TONES),
        hair_style=rng.choice(MALE_HAIR_STYLES if gender == "male" else FEMALE_HAIR_STYLES),
        shirt_color=rng.choice(SHIRT_COLORS),
        ethnicity=rng.choice(ETHNICITIES),
        gender=gender,
    )


def looks_alike(a: CustomerAppearance, b: CustomerAppearance) -> bool:
    """Same skin tone and hair style reads as the same person at a glance."""
    return a.skin_tone == b.skin_tone and a.hair_style == b.hair_style


def generate_different_appearance(
    avoid: CustomerAppearance,
    rng: random.Random,
    retries: int = 6,
) -> CustomerAppearance:
    """
    Roll a customer who does not look like ``avoid``.

    Tries ``retries`` times, then forces a different hair style.
    """
    for _ in range(retries):
        candidate = generate_customer_appearance(rng)
        if not looks_alike(candidate, avoid):
            return candidate
    offset = 1 + rng.randrange(HAIR_STYLE_COUNT - 1)
    return replace(
        generate_customer_appearance(rng),
        hair_style=(avoid.hair_style + offset) % HAIR_STYLE_COUNT,
    )


@dataclass(frozen=True, kw_only=True)
class OrderTicket:
    """Everything about the order that just reached the counter."""
    drink: DrinkRecipe
    customer: CustomerAppearance
    regular_index: Optional[int] = None
    regular: Optional[RegularCustomer] = None
    is_second_visit: bool = False

    @property
    def is_regular(self) -> bool:
        return self.regular is not None

    @property
    def display_text(self) -> str:
        # A regular on their second visit just asks for "the usual"
        if self.is_second_visit:
            return ""
        return self.drink.display_name


class OrderGenerator:
    """
    Produces orders and keeps the customer queue moving.

    Args:
        rng: Shared random source for the session
        scheduler: Regular scheduler consulted before every random draw
        queue_size: Initial number of customers waiting behind the counter
        appearance_retries: Attempts at avoiding a look-alike customer
        queue: List to keep the waiting customers in (updated in place)
    """

    def __init__(
        self,
        rng: random.Random,
        scheduler: RegularScheduler,
        queue_size: int,
        appearance_retries: int = 6,
        queue: Optional[List[CustomerAppearance]] = None,
    ):
        self._rng = rng
        self.scheduler = scheduler
        self.appearance_retries = appearance_retries
        self.queue: List[CustomerAppearance] = queue if queue is not None else []
        self.grow_queue(queue_size)
        self.last_customer: Optional[CustomerAppearance] = None

    def next_order(self, level: LevelConfig) -> OrderTicket:
        """Bring the next customer to the counter for the given level."""
        visit = self.scheduler.try_schedule(level.level)

        if visit is not None:
            regular = visit.regular
            self.last_customer = regular.appearance
            return OrderTicket(
                drink=visit.assignment.drink,
                customer=regular.appearance,
                regular_index=visit.assignment.regular_index,
                regular=regular,
                is_second_visit=visit.is_second_visit,
            )

        drink = self._rng.choice(get_drink_pool(level.drink_pool))

        if self.queue:
            customer = self.queue.pop(0)
        else:
            customer = generate_customer_appearance(self._rng)

        last = self.last_customer
        if last is not None and looks_alike(customer, last):
            customer = generate_different_appearance(last, self._rng, self.appearance_retries)

        self.last_customer = customer
        self.queue.append(generate_customer_appearance(self._rng))

        return OrderTicket(drink=drink, customer=customer)

    def grow_queue(self, size: int) -> None:
        """Lengthen the queue to ``size``. Never shrinks it."""
        extra = size - len(self.queue)
        if extra > 0:
            self.queue.extend(generate_customer_appearance(self._rng) for _ in range(extra))
