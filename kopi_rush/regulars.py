# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Regular customers.

Each session pairs every regular with one drink from the full menu. A
regular shows up once in the early shifts to place their order out loud,
then comes back later and only says "the usual" - the player has to
remember what it was.
"""

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .catalog import get_drink_pool
from .models import CustomerAppearance, PoolType, RegularAssignment, RegularCustomer


REGULARS: Tuple[RegularCustomer, ...] = (
    RegularCustomer(
        name="Mr Rajan",
        appearance=CustomerAppearance(
            skin_tone="#8D5524", hair_style=0, shirt_color="#F5F5F5",
            ethnicity="Indian", gender="male",
        ),
        correct_reaction="Wah, you remember me ah!",
        wrong_reaction="Aiyah, you forget me already?!",
    ),
    RegularCustomer(
        name="Makcik Siti",
        appearance=CustomerAppearance(
            skin_tone="#C68642", hair_style=3, shirt_color="#2ECC71",
            ethnicity="Malay", gender="female",
        ),
        correct_reaction="Terima kasih, sayang!",
        wrong_reaction="Aduh, bukan ini lah!",
    ),
    RegularCustomer(
        name="Uncle Lim",
        appearance=CustomerAppearance(
            skin_tone="#D4A574", hair_style=0, shirt_color="#34495E",
            ethnicity="Chinese", gender="male",
        ),
        correct_reaction="Ho ah! Still got the touch!",
        wrong_reaction="Wah lau, I come every day and you still wrong!",
    ),
)

# Starts high so the very first eligible order can bring in a regular
INITIAL_ORDERS_SINCE_REGULAR = 99


@dataclass(frozen=True)
class RegularVisit:
    """A scheduled regular and whether this is the recall visit."""
    assignment: RegularAssignment
    is_second_visit: bool

    @property
    def regular(self) -> RegularCustomer:
        return REGULARS[self.assignment.regular_index]


def create_regular_assignments(
    rng: random.Random,
    pool: PoolType = PoolType.FULL,
    regulars: Sequence[RegularCustomer] = REGULARS,
) -> List[RegularAssignment]:
    """Give every regular their usual drink for this session."""
    drinks = get_drink_pool(pool)
    return [
        RegularAssignment(regular_index=i, drink=rng.choice(drinks))
        for i in range(len(regulars))
    ]


def _in_range(level: int, bounds: Tuple[int, int]) -> bool:
    low, high = bounds
    return low <= level <= high


class RegularScheduler:
    """
    Decides when a regular walks up to the counter.

    Call ``try_schedule`` once per new order. It counts orders since the
    last regular, enforces the minimum spacing, rolls the appearance chance,
    and then picks a shuffled pending regular for the current level:
    first visits in ``first_visit_levels``, recall visits in
    ``second_visit_levels`` (only for regulars already introduced).

    Example:
        >>> rng = random.Random(7)
        >>> scheduler = RegularScheduler(create_regular_assignments(rng), rng)
        >>> visit = scheduler.try_schedule(current_level=2)
    """

    def __init__(
        self,
        assignments: List[RegularAssignment],
        rng: random.Random,
        chance: float = 0.4,
        min_spacing: int = 2,
        first_visit_levels: Tuple[int, int] = (2, 2),
        second_visit_levels: Tuple[int, int] = (3, 4),
        orders_since_last: int = INITIAL_ORDERS_SINCE_REGULAR,
    ):
        self.assignments = assignments
        self._rng = rng
        self.chance = chance
        self.min_spacing = min_spacing
        self.first_visit_levels = tuple(first_visit_levels)
        self.second_visit_levels = tuple(second_visit_levels)
        self.orders_since_last = orders_since_last
        self.active_index: Optional[int] = None

    def try_schedule(self, current_level: int) -> Optional[RegularVisit]:
        """
        Maybe bring a regular in for the next order.

        Args:
            current_level: Level number the next order is played at

        Returns:
            The visit, or None when a regular customer should not appear
        """
        self.orders_since_last += 1
        self.active_index = None

        if self.orders_since_last < self.min_spacing:
            return None

        if self._rng.random() >= self.chance:
            return None

        visit = None
        if _in_range(current_level, self.first_visit_levels):
            pending = [a for a in self.assignments if not a.first_visit_done]
            if pending:
                self._rng.shuffle(pending)
                pending[0].first_visit_done = True
                visit = RegularVisit(pending[0], is_second_visit=False)

        if visit is None and _in_range(current_level, self.second_visit_levels):
            pending = [a for a in self.assignments if a.first_visit_done and not a.second_visit_done]
            if pending:
                self._rng.shuffle(pending)
                pending[0].second_visit_done = True
                visit = RegularVisit(pending[0], is_second_visit=True)

        if visit is not None:
            self.orders_since_last = 0
            self.active_index = visit.assignment.regular_index
        return visit
