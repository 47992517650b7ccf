# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Data models for the KopiRush game.

A hawker-stall order rush where the player must:
- Read the customer's order (or remember a regular's usual)
- Pour the right base, milk, sugar, ice and hot water into the cup
- Serve before the countdown runs out
- Keep going through the shifts without running out of lives
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from openenv_core.env_server.types import Action, Observation


class BaseType(str, Enum):
    """The brewed base of a drink."""
    KOPI = "Kopi"
    TEH = "Teh"


class SugarLevel(str, Enum):
    """How much sugar goes into the cup."""
    FULL = "Full"
    HALF = "Half"  # Siu Dai
    NONE = "None"  # Kosong


class MilkType(str, Enum):
    """Milk choices. Condensed and evaporated are mutually exclusive."""
    CONDENSED = "Condensed"
    EVAPORATED = "Evaporated"  # "C"
    NONE = "None"  # "O"


class PoolType(str, Enum):
    """Named difficulty pools drawn from the drink catalog."""
    STANDARD = "standard"
    MEDIUM = "medium"
    FULL = "full"


class GamePhase(str, Enum):
    """Phases of the session state machine."""
    IDLE = "idle"
    PLAYING = "playing"
    TRANSITION = "transition"
    LEVELUP = "levelup"
    ERROR_ACK = "errorAck"
    GAMEOVER = "gameover"


class OrderResult(str, Enum):
    """Outcome of the order currently on the counter."""
    CORRECT = "correct"
    WRONG = "wrong"
    TIMEOUT = "timeout"


class MismatchType(str, Enum):
    """Whether the player put in something wrong or left something out."""
    WRONG = "wrong"
    MISSED = "missed"


class ActionKind(str, Enum):
    """Everything a player (or a driving loop) can send to the stall."""
    ADD_BASE = "add_base"
    TOGGLE_LESS_BASE = "toggle_less_base"
    SET_MILK = "set_milk"
    ADD_SUGAR = "add_sugar"
    TOGGLE_LESS_SUGAR = "toggle_less_sugar"
    TOGGLE_LESS_CONDENSED = "toggle_less_condensed"
    ADD_ICE = "add_ice"
    ADD_HOT_WATER = "add_hot_water"
    DISCARD = "discard"
    SERVE = "serve"
    ACKNOWLEDGE_ERROR = "acknowledge_error"
    RESTART = "restart"
    PAUSE_TIMER = "pause_timer"
    RESUME_TIMER = "resume_timer"
    TICK = "tick"


@dataclass(frozen=True, kw_only=True)
class DrinkRecipe:
    """
    A canonical orderable drink.

    Base recipes are expanded into a non-iced and an iced ("Peng") variant,
    so every catalog entry carries its own ``peng`` flag and display name.
    """
    name: str
    base: BaseType
    base_units: float  # 0.5 = Po, 1 = normal, 2 = Gau, 3 = Di Lo
    sugar: SugarLevel
    milk: MilkType
    milk_units: float = 1.0  # Only compared for condensed milk (0.5 = Siu Dai pour)
    hot_water: bool = True
    sugar_optional: bool = False  # Condensed milk sweetens the drink, any sugar is fine
    peng: bool = False
    display_name: str = ""

    def __post_init__(self):
        if not self.display_name:
            object.__setattr__(self, "display_name", self.name)


@dataclass(kw_only=True)
class Cup:
    """The in-progress drink on the counter."""
    base: Optional[BaseType] = None
    base_units: float = 0.0
    sugar: SugarLevel = SugarLevel.NONE
    milk: MilkType = MilkType.NONE
    milk_units: float = 0.0
    has_ice: bool = False
    has_hot_water: bool = False

    def is_empty(self) -> bool:
        return (
            self.base is None
            and self.sugar == SugarLevel.NONE
            and self.milk == MilkType.NONE
            and not self.has_ice
            and not self.has_hot_water
        )


@dataclass(frozen=True)
class Mismatch:
    """One line of the "what went wrong" explanation."""
    label: str
    type: MismatchType


@dataclass(frozen=True, kw_only=True)
class LevelConfig:
    """One shift in the level table."""
    level: int
    name: str
    timer_seconds: float
    cups_to_complete: float  # Correct cups needed to advance past this level (inf for the last)
    queue_size: int
    drink_pool: PoolType
    score_multiplier: float


@dataclass(frozen=True, kw_only=True)
class CustomerAppearance:
    """How a customer looks at the counter."""
    skin_tone: str
    hair_style: int
    shirt_color: str
    ethnicity: str
    gender: str  # "male" | "female"


@dataclass(frozen=True, kw_only=True)
class RegularCustomer:
    """A recurring persona who expects you to remember their usual."""
    name: str
    appearance: CustomerAppearance
    correct_reaction: str
    wrong_reaction: str


@dataclass(kw_only=True)
class RegularAssignment:
    """A regular's usual drink for this session and which visits are used up."""
    regular_index: int
    drink: DrinkRecipe
    first_visit_done: bool = False
    second_visit_done: bool = False


@dataclass(kw_only=True)
class KopiAction(Action):
    """
    Action for the KopiRush environment.

    - kind: one of the ActionKind values (e.g. "add_base", "serve")
    - base: "Kopi" or "Teh", required for add_base
    - milk: "Condensed" or "Evaporated", required for set_milk

    Actions that do not make sense for the current cup or phase are
    ignored rather than rejected. Only malformed actions come back as an
    error observation.
    """
    kind: str
    base: Optional[str] = None
    milk: Optional[str] = None


@dataclass(kw_only=True)
class KopiObservation(Observation):
    """
    Observation from the KopiRush environment.

    Everything a renderer, sound player or score sharer needs to read.
    """
    # Session state
    phase: str
    score: int
    lives: int
    cup_number: int  # cumulative correct cups
    order_number: int  # customers seen, correct or not
    level: Dict[str, Any]

    # Counter
    cup: Dict[str, Any]
    order_display_text: str  # empty on a regular's second visit
    order_result: Optional[str] = None
    last_points: int = 0
    less_base: bool = False
    less_sugar: bool = False
    less_condensed: bool = False

    # Countdown
    seconds_remaining: float = 0.0
    timer_running: bool = False

    # Customers
    customer: Optional[Dict[str, Any]] = None
    queue: List[Dict[str, Any]] = field(default_factory=list)
    is_regular: bool = False
    regular_name: str = ""
    is_second_visit: bool = False

    # Feedback text
    mismatches: List[Dict[str, str]] = field(default_factory=list)
    correct_reaction: str = ""
    wrong_reaction: str = ""
    current_quote: str = ""
    level_up_comment: str = ""

    # End-of-game reporting
    drinks_served: int = 0
    avg_time: float = 0.0

    # Error feedback (when action validation fails)
    action_errors: List[str] = field(default_factory=list)
    is_error_response: bool = False


@dataclass(kw_only=True)
class GameConfig:
    """Configuration for a KopiRush session."""
    starting_lives: int = 2
    points_base: int = 5

    # Pacing (seconds)
    transition_seconds: float = 1.5
    level_transition_seconds: float = 3.0
    quick_transition_seconds: float = 0.35  # Faster hand-off in the busy shifts
    quick_transition_from_level: int = 4
    gameover_delay_seconds: float = 1.5
    tick_interval_seconds: float = 0.05

    # Regulars
    regular_chance: float = 0.4
    regular_min_spacing: int = 2
    first_visit_levels: Tuple[int, int] = (2, 2)
    second_visit_levels: Tuple[int, int] = (3, 4)
    regular_drink_pool: PoolType = PoolType.FULL

    # Customers
    appearance_retries: int = 6

    # Level table (None = the standard five shifts)
    levels: Optional[List[LevelConfig]] = None

    def get_levels(self) -> List[LevelConfig]:
        """The level table this config plays with."""
        if self.levels:
            return list(self.levels)
        from .levels import LEVELS
        return list(LEVELS)
