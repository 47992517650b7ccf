# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
KopiRush Environment Implementation.

The game session engine. A session moves through these phases:

    idle -> playing -> transition -> playing             (correct serve)
                    -> transition -> levelup -> playing  (correct serve, new shift)
                    -> errorAck -> playing | gameover    (wrong cup, needs acknowledging)
                    -> transition -> playing | gameover  (countdown ran out)

All state lives in one ``SessionState`` and is only changed inside
``step()``. Timed phases carry an absolute deadline that ``tick()`` checks
against the clock, so there are no hidden callbacks or threads.
"""

import random
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar
from uuid import uuid4

from openenv_core.env_server.interfaces import Environment
from openenv_core.env_server.types import State

from ..levels import get_level_for_cup, level_to_dict, validate_levels
from ..models import (
    ActionKind,
    BaseType,
    Cup,
    CustomerAppearance,
    GameConfig,
    GamePhase,
    KopiAction,
    KopiObservation,
    LevelConfig,
    MilkType,
    Mismatch,
    OrderResult,
    RegularAssignment,
    SugarLevel,
)
from ..orders import OrderGenerator, OrderTicket
from ..reactions import CORRECT_REACTIONS, CROWD_COMMENTS, QUOTES, WRONG_REACTIONS, ShuffleCycle
from ..regulars import INITIAL_ORDERS_SINCE_REGULAR, RegularScheduler, create_regular_assignments
from ..scoring import calculate_score
from ..validation import create_empty_cup, get_order_mismatches, validate_order
from .timer import CountdownTimer

E = TypeVar("E", BaseType, MilkType)


@dataclass(kw_only=True)
class SessionState:
    """Everything about one playthrough, in one place."""
    level: LevelConfig
    phase: GamePhase = GamePhase.IDLE
    score: int = 0
    lives: int = 0
    cup_number: int = 0  # correct cups served
    order_number: int = 0  # customers seen

    # Current order
    ticket: Optional[OrderTicket] = None
    cup: Cup = field(default_factory=create_empty_cup)
    less_base: bool = False
    less_sugar: bool = False
    less_condensed: bool = False

    # Outcome of the current order
    order_result: Optional[OrderResult] = None
    last_points: int = 0
    mismatches: List[Mismatch] = field(default_factory=list)
    correct_reaction: str = ""
    wrong_reaction: str = ""
    current_quote: str = ""
    level_up_comment: str = ""

    # Timed phase hand-off
    pending_phase: Optional[GamePhase] = None
    phase_deadline: Optional[float] = None

    # Countdown (absolute deadline, or frozen seconds while paused)
    timer_deadline: Optional[float] = None
    timer_paused_remaining: Optional[float] = None

    # Customers and regulars
    queue: List[CustomerAppearance] = field(default_factory=list)
    last_customer: Optional[CustomerAppearance] = None
    regular_assignments: List[RegularAssignment] = field(default_factory=list)
    orders_since_regular: int = INITIAL_ORDERS_SINCE_REGULAR
    active_regular_index: Optional[int] = None

    # Seconds spent on correctly served cups
    total_time_used: float = 0.0

    @property
    def drinks_served(self) -> int:
        return self.cup_number

    @property
    def avg_time(self) -> float:
        return self.total_time_used / self.cup_number if self.cup_number > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly snapshot."""
        return asdict(self)


def _parse_enum(enum_cls: Type[E], value: Optional[str]) -> Optional[E]:
    """Match an enum by value or name, ignoring case."""
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    wanted = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == wanted or member.name.lower() == wanted:
            return member
    return None


def _cup_to_dict(cup: Cup) -> Dict[str, Any]:
    return {
        "base": cup.base.value if cup.base else None,
        "base_units": cup.base_units,
        "sugar": cup.sugar.value,
        "milk": cup.milk.value,
        "milk_units": cup.milk_units,
        "has_ice": cup.has_ice,
        "has_hot_water": cup.has_hot_water,
    }


class KopiEnvironment(Environment):
    """
    A kopitiam order-rush game session.

    The player builds each customer's drink from ingredient actions and
    serves it before the countdown runs out. Correct cups score points and
    move the player through the shifts; wrong cups and timeouts cost a life.

    Game Mechanics:
    - Points = (base points + whole seconds left) x shift multiplier
    - Each shift has its own timer, drink pool and queue length
    - Regulars order once in an early shift and return later for "the usual"
    - Ingredient actions are ignored outside the playing phase

    Example:
        >>> env = KopiEnvironment(seed=42)
        >>> obs = env.reset()
        >>> print(obs.order_display_text)
        >>> env.add_base("Kopi")
        >>> env.add_hot_water()
        >>> obs = env.serve()
        >>> print(obs.phase, obs.score)
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the environment.

        Args:
            config: Game configuration (uses defaults if None)
            seed: Random seed for reproducibility
            clock: Monotonic clock in seconds, injectable for tests
        """
        self.config = config or GameConfig()
        self._levels = self.config.get_levels()
        validate_levels(self._levels)
        self._seed = seed
        self._clock = clock
        self._rng = random.Random(seed)
        self._state = State(episode_id=str(uuid4()), step_count=0)
        self._timer = CountdownTimer(
            on_timeout=self._handle_timeout,
            clock=clock,
            tick_interval=self.config.tick_interval_seconds,
        )
        self._session = SessionState(level=self._levels[0], lives=self.config.starting_lives)
        self._orders: Optional[OrderGenerator] = None
        self._handlers: Dict[ActionKind, Callable[[KopiAction], None]] = {
            ActionKind.ADD_BASE: lambda a: self._add_base(_parse_enum(BaseType, a.base)),
            ActionKind.TOGGLE_LESS_BASE: lambda a: self._toggle("less_base"),
            ActionKind.SET_MILK: lambda a: self._set_milk(_parse_enum(MilkType, a.milk)),
            ActionKind.ADD_SUGAR: lambda a: self._add_sugar(),
            ActionKind.TOGGLE_LESS_SUGAR: lambda a: self._toggle("less_sugar"),
            ActionKind.TOGGLE_LESS_CONDENSED: lambda a: self._toggle("less_condensed"),
            ActionKind.ADD_ICE: lambda a: self._add_ice(),
            ActionKind.ADD_HOT_WATER: lambda a: self._add_hot_water(),
            ActionKind.DISCARD: lambda a: self._discard_cup(),
            ActionKind.SERVE: lambda a: self._serve(),
            ActionKind.ACKNOWLEDGE_ERROR: lambda a: self._acknowledge_error(),
            ActionKind.PAUSE_TIMER: lambda a: self._timer.pause(),
            ActionKind.RESUME_TIMER: lambda a: self._resume_timer(),
            ActionKind.TICK: lambda a: None,
        }

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _start_session(self):
        """Reinitialize every piece of session state and serve the first customer."""
        self._rng = random.Random(self._seed)
        self._timer.stop()

        first_level = self._levels[0]
        self._session = s = SessionState(
            level=first_level,
            lives=self.config.starting_lives,
            regular_assignments=create_regular_assignments(self._rng, self.config.regular_drink_pool),
        )

        # The scheduler and the generator work on the session's own lists
        scheduler = RegularScheduler(
            s.regular_assignments,
            self._rng,
            chance=self.config.regular_chance,
            min_spacing=self.config.regular_min_spacing,
            first_visit_levels=self.config.first_visit_levels,
            second_visit_levels=self.config.second_visit_levels,
        )
        self._orders = OrderGenerator(
            self._rng,
            scheduler,
            queue_size=first_level.queue_size,
            appearance_retries=self.config.appearance_retries,
            queue=s.queue,
        )
        self._wrong_cycle = ShuffleCycle(WRONG_REACTIONS, self._rng)
        self._correct_cycle = ShuffleCycle(CORRECT_REACTIONS, self._rng)
        self._quote_cycle = ShuffleCycle(QUOTES, self._rng)

        self._advance_to_next_customer()
        self._sync_session()

    def _sync_session(self):
        """Copy the scheduler counters and the countdown into the session."""
        s = self._session
        if self._orders is not None:
            s.orders_since_regular = self._orders.scheduler.orders_since_last
            s.active_regular_index = self._orders.scheduler.active_index
            s.last_customer = self._orders.last_customer
        s.timer_deadline = self._timer.deadline
        s.timer_paused_remaining = self._timer.paused_remaining

    def _clear_counter(self):
        s = self._session
        s.cup = create_empty_cup()
        s.less_base = False
        s.less_sugar = False
        s.less_condensed = False
        s.order_result = None
        s.last_points = 0
        s.mismatches = []
        s.correct_reaction = ""
        s.wrong_reaction = ""

    def _advance_to_next_customer(self):
        s = self._session
        s.order_number += 1
        self._clear_counter()
        s.ticket = self._orders.next_order(s.level)
        s.phase = GamePhase.PLAYING
        s.pending_phase = None
        s.phase_deadline = None
        self._timer.start(s.level.timer_seconds)

    def _schedule(self, phase: GamePhase, then: GamePhase, delay: float):
        s = self._session
        s.phase = phase
        s.pending_phase = then
        s.phase_deadline = self._clock() + delay

    def _advance_pending(self):
        """Apply every timed phase change whose deadline has passed."""
        s = self._session
        now = self._clock()
        while s.phase_deadline is not None and now >= s.phase_deadline:
            target = s.pending_phase
            if target == GamePhase.LEVELUP:
                s.phase = GamePhase.LEVELUP
                s.pending_phase = GamePhase.PLAYING
                s.phase_deadline += self.config.level_transition_seconds
            elif target == GamePhase.GAMEOVER:
                s.phase = GamePhase.GAMEOVER
                s.pending_phase = None
                s.phase_deadline = None
            else:
                self._advance_to_next_customer()

    def _poll(self):
        if self._session.phase == GamePhase.PLAYING:
            self._timer.tick()
        self._advance_pending()

    # ------------------------------------------------------------------
    # Order outcomes
    # ------------------------------------------------------------------

    def _regular_line(self, correct: bool) -> Optional[str]:
        ticket = self._session.ticket
        if ticket is None or ticket.regular is None:
            return None
        return ticket.regular.correct_reaction if correct else ticket.regular.wrong_reaction

    def _handle_timeout(self):
        s = self._session
        if s.phase != GamePhase.PLAYING:
            return
        s.order_result = OrderResult.TIMEOUT
        s.wrong_reaction = self._regular_line(False) or self._wrong_cycle.next()
        s.mismatches = []
        s.lives -= 1

        if s.lives <= 0:
            self._schedule(GamePhase.TRANSITION, GamePhase.GAMEOVER, self.config.gameover_delay_seconds)
        else:
            self._schedule(GamePhase.TRANSITION, GamePhase.PLAYING, self.config.transition_seconds)

    def _serve(self):
        s = self._session
        if s.phase != GamePhase.PLAYING or s.ticket is None:
            return

        seconds_remaining = self._timer.seconds_remaining
        self._timer.stop()
        order = s.ticket.drink

        if not validate_order(s.cup, order):
            s.order_result = OrderResult.WRONG
            s.mismatches = get_order_mismatches(s.cup, order)
            s.wrong_reaction = self._regular_line(False) or self._wrong_cycle.next()
            s.lives -= 1
            # Always wait for the player to read the explanation
            s.current_quote = self._quote_cycle.next()
            s.phase = GamePhase.ERROR_ACK
            s.pending_phase = None
            s.phase_deadline = None
            return

        level = s.level
        s.total_time_used += level.timer_seconds - seconds_remaining
        points = calculate_score(seconds_remaining, level.score_multiplier, self.config.points_base)
        s.score += points
        s.last_points = points
        s.order_result = OrderResult.CORRECT
        s.correct_reaction = self._regular_line(True) or self._correct_cycle.next()

        s.cup_number += 1
        new_level = get_level_for_cup(s.cup_number, self._levels)

        if new_level.level > level.level:
            s.level = new_level
            s.level_up_comment = self._rng.choice(CROWD_COMMENTS)
            self._orders.grow_queue(new_level.queue_size)
            self._schedule(GamePhase.TRANSITION, GamePhase.LEVELUP, self.config.transition_seconds)
        else:
            quick = level.level >= self.config.quick_transition_from_level
            delay = self.config.quick_transition_seconds if quick else self.config.transition_seconds
            self._schedule(GamePhase.TRANSITION, GamePhase.PLAYING, delay)

    def _acknowledge_error(self):
        s = self._session
        if s.phase != GamePhase.ERROR_ACK:
            return
        if s.lives <= 0:
            s.phase = GamePhase.GAMEOVER
        else:
            self._advance_to_next_customer()

    def _resume_timer(self):
        if self._session.phase == GamePhase.PLAYING:
            self._timer.resume()

    # ------------------------------------------------------------------
    # Cup building
    # ------------------------------------------------------------------

    def _playing(self) -> bool:
        return self._session.phase == GamePhase.PLAYING

    def _add_base(self, base: BaseType):
        if not self._playing():
            return
        cup = self._session.cup
        units = 0.5 if self._session.less_base else 1.0
        if cup.base is None:
            cup.base = base
            cup.base_units += units
        elif cup.base == base:
            cup.base_units += units
        # A second, different base is ignored

    def _toggle(self, flag: str):
        if not self._playing():
            return
        setattr(self._session, flag, not getattr(self._session, flag))

    def _set_milk(self, milk: MilkType):
        if not self._playing():
            return
        cup = self._session.cup
        if cup.milk != MilkType.NONE:
            return
        cup.milk = milk
        cup.milk_units = 0.5 if milk == MilkType.CONDENSED and self._session.less_condensed else 1.0

    def _add_sugar(self):
        if not self._playing():
            return
        cup = self._session.cup
        if cup.sugar != SugarLevel.NONE:
            return
        cup.sugar = SugarLevel.HALF if self._session.less_sugar else SugarLevel.FULL

    def _add_ice(self):
        if self._playing():
            self._session.cup.has_ice = True

    def _add_hot_water(self):
        if self._playing():
            self._session.cup.has_hot_water = True

    def _discard_cup(self):
        if not self._playing():
            return
        s = self._session
        s.cup = create_empty_cup()
        s.less_base = False
        s.less_sugar = False
        s.less_condensed = False

    # ------------------------------------------------------------------
    # Observations
    # ------------------------------------------------------------------

    def session_summary(self) -> Dict[str, Any]:
        """End-of-game numbers for leaderboards and score cards."""
        s = self._session
        return {
            "score": s.score,
            "drinks_served": s.drinks_served,
            "avg_time": round(s.avg_time, 1),
            "orders_seen": s.order_number,
            "level": s.level.level,
            "level_name": s.level.name,
            "lives": s.lives,
        }

    def _observation(
        self,
        reward: float = 0.0,
        errors: Optional[List[str]] = None,
    ) -> KopiObservation:
        s = self._session
        ticket = s.ticket
        regular = ticket.regular if ticket else None
        return KopiObservation(
            phase=s.phase.value,
            score=s.score,
            lives=s.lives,
            cup_number=s.cup_number,
            order_number=s.order_number,
            level=level_to_dict(s.level),
            cup=_cup_to_dict(s.cup),
            order_display_text=ticket.display_text if ticket else "",
            order_result=s.order_result.value if s.order_result else None,
            last_points=s.last_points,
            less_base=s.less_base,
            less_sugar=s.less_sugar,
            less_condensed=s.less_condensed,
            seconds_remaining=self._timer.seconds_remaining,
            timer_running=self._timer.is_running,
            customer=asdict(ticket.customer) if ticket else None,
            queue=[asdict(c) for c in s.queue],
            is_regular=regular is not None,
            regular_name=regular.name if regular else "",
            is_second_visit=ticket.is_second_visit if ticket else False,
            mismatches=[{"label": m.label, "type": m.type.value} for m in s.mismatches],
            correct_reaction=s.correct_reaction,
            wrong_reaction=s.wrong_reaction,
            current_quote=s.current_quote,
            level_up_comment=s.level_up_comment,
            drinks_served=s.drinks_served,
            avg_time=s.avg_time,
            action_errors=errors or [],
            is_error_response=bool(errors),
            done=s.phase == GamePhase.GAMEOVER,
            reward=reward,
            metadata={
                "episode_id": self._state.episode_id,
                "pending_phase": s.pending_phase.value if s.pending_phase else None,
                "timer_paused": self._timer.is_paused,
            },
        )

    # ------------------------------------------------------------------
    # Environment API
    # ------------------------------------------------------------------

    def reset(self) -> KopiObservation:
        """
        Start (or restart) a session.

        Returns:
            Observation of the first order, timer running
        """
        self._state = State(episode_id=str(uuid4()), step_count=0)
        self._start_session()
        return self._observation()

    def validate_action(self, action: KopiAction) -> List[str]:
        """
        Check an action is well-formed (empty list if valid).

        Only the shape of the action is checked. Actions that are merely
        pointless right now (sugar twice, serving during a transition) are
        valid and simply do nothing.
        """
        errors = []
        try:
            kind = ActionKind(action.kind)
        except ValueError:
            return [f"Invalid action kind: {action.kind}"]

        if kind == ActionKind.ADD_BASE:
            if action.base is None:
                errors.append("add_base requires a base (Kopi or Teh)")
            elif _parse_enum(BaseType, action.base) is None:
                errors.append(f"Invalid base: {action.base}")

        if kind == ActionKind.SET_MILK:
            milk = _parse_enum(MilkType, action.milk)
            if action.milk is None:
                errors.append("set_milk requires a milk (Condensed or Evaporated)")
            elif milk is None or milk == MilkType.NONE:
                errors.append(f"Invalid milk: {action.milk}")

        return errors

    def step(self, action: KopiAction) -> KopiObservation:
        """
        Apply one action to the session.

        Elapsed countdowns and timed phase changes are applied first, so an
        order that ran out of time cannot be served late.

        Returns:
            Observation after the action. Malformed actions come back as an
            error observation with the session unchanged.
        """
        errors = self.validate_action(action)
        if errors:
            return self._observation(errors=errors)

        kind = ActionKind(action.kind)
        if kind == ActionKind.RESTART:
            return self.reset()

        self._state.step_count += 1
        score_before = self._session.score

        self._poll()
        self._handlers[kind](action)
        self._sync_session()

        return self._observation(reward=float(self._session.score - score_before))

    @property
    def state(self) -> State:
        """Get the current environment state."""
        return self._state

    @property
    def session(self) -> SessionState:
        """The live session state (read it, don't write it)."""
        return self._session

    @property
    def timer(self) -> CountdownTimer:
        return self._timer

    # ------------------------------------------------------------------
    # Player-facing shortcuts
    # ------------------------------------------------------------------

    def start_or_restart_session(self) -> KopiObservation:
        return self.reset()

    def add_base(self, kind: str) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.ADD_BASE.value, base=kind))

    def toggle_less_base(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.TOGGLE_LESS_BASE.value))

    def set_milk(self, kind: str) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.SET_MILK.value, milk=kind))

    def add_sugar(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.ADD_SUGAR.value))

    def toggle_less_sugar(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.TOGGLE_LESS_SUGAR.value))

    def toggle_less_condensed_milk(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.TOGGLE_LESS_CONDENSED.value))

    def add_ice(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.ADD_ICE.value))

    def add_hot_water(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.ADD_HOT_WATER.value))

    def discard_cup(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.DISCARD.value))

    def serve(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.SERVE.value))

    def acknowledge_error(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.ACKNOWLEDGE_ERROR.value))

    def pause_timer(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.PAUSE_TIMER.value))

    def resume_timer(self) -> KopiObservation:
        return self.step(KopiAction(kind=ActionKind.RESUME_TIMER.value))

    def tick(self) -> KopiObservation:
        """Poll the clock: fires an expired countdown and finishes timed phases."""
        return self.step(KopiAction(kind=ActionKind.TICK.value))
