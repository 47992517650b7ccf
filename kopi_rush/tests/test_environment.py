# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Tests for the KopiEnvironment class.

Covers:
- Environment initialization
- Reset functionality
- Action validation
- Cup building
- Serving, wrong cups and acknowledging
- Timeouts, pausing and restarting
"""

import pytest

from kopi_rush.catalog import get_drink_pool
from kopi_rush.levels import LEVELS
from kopi_rush.models import (
    ActionKind,
    GameConfig,
    GamePhase,
    KopiAction,
    KopiObservation,
    PoolType,
    SugarLevel,
)
from kopi_rush.server.kopi_environment import KopiEnvironment


class TestEnvironmentInitialization:
    """Tests for environment initialization."""

    def test_default_initialization(self):
        env = KopiEnvironment()
        assert env.config is not None
        assert env.session.phase == GamePhase.IDLE
        assert env.session.lives == env.config.starting_lives

    def test_initialization_with_config(self):
        env = KopiEnvironment(config=GameConfig(starting_lives=5))
        assert env.config.starting_lives == 5

    def test_bad_level_table_rejected(self):
        """A level table whose last shift ends is refused."""
        with pytest.raises(ValueError):
            KopiEnvironment(config=GameConfig(levels=[LEVELS[0]]))

    def test_seeded_sessions_repeat(self, clock):
        env1 = KopiEnvironment(seed=42, clock=clock)
        env2 = KopiEnvironment(seed=42, clock=clock)
        obs1 = env1.reset()
        obs2 = env2.reset()
        assert obs1.order_display_text == obs2.order_display_text
        assert obs1.customer == obs2.customer
        assert obs1.queue == obs2.queue


class TestReset:
    """Tests for the reset() method."""

    def test_reset_returns_observation(self, env: KopiEnvironment):
        assert isinstance(env.reset(), KopiObservation)

    def test_reset_starts_playing(self, env: KopiEnvironment):
        obs = env.reset()
        assert obs.phase == GamePhase.PLAYING.value
        assert obs.score == 0
        assert obs.lives == 2
        assert obs.cup_number == 0
        assert obs.order_number == 1
        assert not obs.done

    def test_reset_starts_timer(self, env: KopiEnvironment):
        obs = env.reset()
        assert obs.timer_running
        assert obs.seconds_remaining == 15

    def test_first_order_from_standard_pool(self, env: KopiEnvironment):
        obs = env.reset()
        names = [d.display_name for d in get_drink_pool(PoolType.STANDARD)]
        assert obs.order_display_text in names
        assert not obs.is_regular

    def test_first_level(self, env: KopiEnvironment):
        obs = env.reset()
        assert obs.level["level"] == 1
        assert obs.level["name"] == "Morning Shift"
        assert len(obs.queue) == 2
        assert obs.customer is not None

    def test_empty_cup(self, env: KopiEnvironment):
        obs = env.reset()
        assert obs.cup["base"] is None
        assert obs.cup["sugar"] == "None"
        assert obs.cup["milk"] == "None"
        assert not obs.cup["has_ice"]

    def test_reset_clears_previous_session(self, playing_env: KopiEnvironment, build_wrong_cup):
        build_wrong_cup(playing_env)
        playing_env.serve()
        obs = playing_env.reset()
        assert obs.lives == 2
        assert obs.mismatches == []
        assert obs.phase == GamePhase.PLAYING.value

    def test_reset_new_episode(self, env: KopiEnvironment):
        env.reset()
        first = env.state.episode_id
        env.reset()
        assert env.state.episode_id != first
        assert env.state.step_count == 0


class TestActionValidation:
    """Tests for malformed actions."""

    def test_unknown_kind(self, playing_env: KopiEnvironment):
        obs = playing_env.step(KopiAction(kind="brew"))
        assert obs.is_error_response
        assert "Invalid action kind" in obs.action_errors[0]

    def test_add_base_requires_base(self, playing_env: KopiEnvironment):
        obs = playing_env.step(KopiAction(kind="add_base"))
        assert obs.is_error_response
        assert "requires a base" in obs.action_errors[0]

    def test_invalid_base(self, playing_env: KopiEnvironment):
        obs = playing_env.add_base("Milo")
        assert obs.is_error_response
        assert obs.cup["base"] is None

    def test_set_milk_requires_milk(self, playing_env: KopiEnvironment):
        obs = playing_env.step(KopiAction(kind="set_milk"))
        assert obs.is_error_response

    def test_none_is_not_a_milk(self, playing_env: KopiEnvironment):
        obs = playing_env.set_milk("None")
        assert obs.is_error_response

    def test_case_insensitive(self, playing_env: KopiEnvironment):
        obs = playing_env.add_base("teh")
        assert not obs.is_error_response
        assert obs.cup["base"] == "Teh"
        obs = playing_env.set_milk("EVAPORATED")
        assert obs.cup["milk"] == "Evaporated"

    def test_error_does_not_count_as_step(self, playing_env: KopiEnvironment):
        before = playing_env.state.step_count
        playing_env.step(KopiAction(kind="brew"))
        assert playing_env.state.step_count == before

    def test_validate_action_lists_errors(self, env: KopiEnvironment):
        assert env.validate_action(KopiAction(kind="serve")) == []
        assert env.validate_action(KopiAction(kind="add_base", base="Kopi")) == []
        assert env.validate_action(KopiAction(kind="nope")) != []


class TestCupBuilding:
    """Tests for the ingredient actions."""

    def test_add_base_pours_full_unit(self, playing_env: KopiEnvironment):
        obs = playing_env.add_base("Kopi")
        assert obs.cup["base"] == "Kopi"
        assert obs.cup["base_units"] == 1.0

    def test_base_accumulates(self, playing_env: KopiEnvironment):
        playing_env.add_base("Kopi")
        playing_env.add_base("Kopi")
        obs = playing_env.add_base("Kopi")
        assert obs.cup["base_units"] == 3.0

    def test_less_base_pours_half(self, playing_env: KopiEnvironment):
        playing_env.toggle_less_base()
        obs = playing_env.add_base("Teh")
        assert obs.cup["base_units"] == 0.5
        assert obs.less_base

    def test_second_base_type_ignored(self, playing_env: KopiEnvironment):
        playing_env.add_base("Kopi")
        obs = playing_env.add_base("Teh")
        assert obs.cup["base"] == "Kopi"
        assert obs.cup["base_units"] == 1.0

    def test_milk_set_once(self, playing_env: KopiEnvironment):
        playing_env.set_milk("Evaporated")
        obs = playing_env.set_milk("Condensed")
        assert obs.cup["milk"] == "Evaporated"
        assert obs.cup["milk_units"] == 1.0

    def test_less_condensed(self, playing_env: KopiEnvironment):
        playing_env.toggle_less_condensed_milk()
        obs = playing_env.set_milk("Condensed")
        assert obs.cup["milk_units"] == 0.5

    def test_less_condensed_does_not_affect_evaporated(self, playing_env: KopiEnvironment):
        playing_env.toggle_less_condensed_milk()
        obs = playing_env.set_milk("Evaporated")
        assert obs.cup["milk_units"] == 1.0

    def test_sugar(self, playing_env: KopiEnvironment):
        obs = playing_env.add_sugar()
        assert obs.cup["sugar"] == SugarLevel.FULL.value

    def test_less_sugar(self, playing_env: KopiEnvironment):
        playing_env.toggle_less_sugar()
        obs = playing_env.add_sugar()
        assert obs.cup["sugar"] == SugarLevel.HALF.value

    def test_sugar_set_once(self, playing_env: KopiEnvironment):
        playing_env.toggle_less_sugar()
        playing_env.add_sugar()
        playing_env.toggle_less_sugar()
        obs = playing_env.add_sugar()
        assert obs.cup["sugar"] == SugarLevel.HALF.value

    def test_toggles_flip(self, playing_env: KopiEnvironment):
        playing_env.toggle_less_sugar()
        obs = playing_env.toggle_less_sugar()
        assert not obs.less_sugar

    def test_ice_and_hot_water_idempotent(self, playing_env: KopiEnvironment):
        playing_env.add_ice()
        playing_env.add_ice()
        playing_env.add_hot_water()
        obs = playing_env.add_hot_water()
        assert obs.cup["has_ice"]
        assert obs.cup["has_hot_water"]

    def test_discard(self, playing_env: KopiEnvironment):
        playing_env.toggle_less_base()
        playing_env.add_base("Kopi")
        playing_env.set_milk("Condensed")
        playing_env.add_ice()
        obs = playing_env.discard_cup()
        assert obs.cup["base"] is None
        assert obs.cup["milk"] == "None"
        assert not obs.cup["has_ice"]
        assert not obs.less_base
        assert obs.phase == GamePhase.PLAYING.value

    def test_actions_ignored_before_start(self, env: KopiEnvironment):
        obs = env.add_base("Kopi")
        assert obs.cup["base"] is None
        assert obs.phase == GamePhase.IDLE.value


class TestServing:
    """Tests for serving a cup."""

    def test_correct_serve_scores(self, playing_env: KopiEnvironment, build_correct_cup):
        build_correct_cup(playing_env)
        obs = playing_env.serve()
        assert obs.order_result == "correct"
        assert obs.last_points == 20  # (5 + 15 whole seconds) x 1.0
        assert obs.score == 20
        assert obs.reward == 20
        assert obs.cup_number == 1
        assert obs.correct_reaction
        assert obs.phase == GamePhase.TRANSITION.value
        assert not obs.timer_running

    def test_slower_serve_scores_less(self, playing_env: KopiEnvironment, clock, build_correct_cup):
        build_correct_cup(playing_env)
        clock.advance(3.4)
        obs = playing_env.serve()
        assert obs.last_points == 16  # 5 + 11
        assert obs.avg_time == pytest.approx(3.4)

    def test_next_order_after_transition(self, playing_env: KopiEnvironment, clock, build_correct_cup):
        build_correct_cup(playing_env)
        playing_env.serve()
        clock.advance(1.0)
        assert playing_env.tick().phase == GamePhase.TRANSITION.value
        clock.advance(0.5)
        obs = playing_env.tick()
        assert obs.phase == GamePhase.PLAYING.value
        assert obs.order_number == 2
        assert obs.order_result is None
        assert obs.cup["base"] is None
        assert obs.seconds_remaining == 15

    def test_actions_ignored_during_transition(self, playing_env: KopiEnvironment, build_correct_cup):
        build_correct_cup(playing_env)
        before = playing_env.serve()
        obs = playing_env.discard_cup()
        assert obs.cup == before.cup
        assert playing_env.serve().score == before.score

    def test_wrong_serve(self, playing_env: KopiEnvironment, build_wrong_cup):
        build_wrong_cup(playing_env)
        obs = playing_env.serve()
        assert obs.order_result == "wrong"
        assert obs.phase == GamePhase.ERROR_ACK.value
        assert obs.lives == 1
        assert obs.score == 0
        assert obs.mismatches
        assert obs.mismatches[0]["label"].startswith("Wrong base")
        assert obs.mismatches[0]["type"] == "wrong"
        assert obs.wrong_reaction
        assert obs.current_quote

    def test_empty_cup_is_wrong(self, playing_env: KopiEnvironment):
        obs = playing_env.serve()
        assert obs.order_result == "wrong"
        assert all(m["type"] == "missed" for m in obs.mismatches)

    def test_error_ack_waits(self, playing_env: KopiEnvironment, clock, build_wrong_cup):
        """The wrong-cup screen stays until acknowledged."""
        build_wrong_cup(playing_env)
        playing_env.serve()
        clock.advance(60)
        assert playing_env.tick().phase == GamePhase.ERROR_ACK.value

    def test_acknowledge_moves_on(self, playing_env: KopiEnvironment, build_wrong_cup):
        build_wrong_cup(playing_env)
        playing_env.serve()
        obs = playing_env.acknowledge_error()
        assert obs.phase == GamePhase.PLAYING.value
        assert obs.order_number == 2
        assert obs.mismatches == []
        assert obs.timer_running

    def test_acknowledge_ignored_while_playing(self, playing_env: KopiEnvironment):
        obs = playing_env.acknowledge_error()
        assert obs.order_number == 1

    def test_wrong_on_last_life_ends_game(self, one_life_env: KopiEnvironment, build_wrong_cup):
        one_life_env.reset()
        build_wrong_cup(one_life_env)
        obs = one_life_env.serve()
        assert obs.phase == GamePhase.ERROR_ACK.value
        assert obs.lives == 0
        obs = one_life_env.acknowledge_error()
        assert obs.phase == GamePhase.GAMEOVER.value
        assert obs.done


class TestTimeout:
    """Tests for running out of time."""

    def test_timeout_costs_a_life(self, playing_env: KopiEnvironment, clock):
        clock.advance(15)
        obs = playing_env.tick()
        assert obs.order_result == "timeout"
        assert obs.lives == 1
        assert obs.phase == GamePhase.TRANSITION.value
        assert obs.mismatches == []
        assert obs.wrong_reaction

    def test_no_timeout_just_before(self, playing_env: KopiEnvironment, clock):
        clock.advance(14.9)
        obs = playing_env.tick()
        assert obs.phase == GamePhase.PLAYING.value
        assert obs.lives == 2

    def test_late_serve_is_a_timeout(self, playing_env: KopiEnvironment, clock, build_correct_cup):
        """Serving after the deadline can't score, even without a tick in between."""
        build_correct_cup(playing_env)
        clock.advance(16)
        obs = playing_env.serve()
        assert obs.order_result == "timeout"
        assert obs.score == 0

    def test_next_order_after_timeout(self, playing_env: KopiEnvironment, clock):
        clock.advance(15)
        playing_env.tick()
        clock.advance(1.5)
        obs = playing_env.tick()
        assert obs.phase == GamePhase.PLAYING.value
        assert obs.order_number == 2


class TestPause:
    """Tests for pausing the countdown."""

    def test_pause_freezes_countdown(self, playing_env: KopiEnvironment, clock):
        clock.advance(5)
        playing_env.pause_timer()
        clock.advance(100)
        obs = playing_env.tick()
        assert obs.phase == GamePhase.PLAYING.value
        assert obs.seconds_remaining == 10
        assert obs.metadata["timer_paused"]

    def test_resume(self, playing_env: KopiEnvironment, clock):
        clock.advance(5)
        playing_env.pause_timer()
        clock.advance(100)
        playing_env.resume_timer()
        clock.advance(10)
        obs = playing_env.tick()
        assert obs.order_result == "timeout"

    def test_resume_ignored_outside_playing(self, playing_env: KopiEnvironment, build_correct_cup):
        build_correct_cup(playing_env)
        playing_env.serve()
        obs = playing_env.resume_timer()
        assert not obs.timer_running


class TestRestart:
    """Tests for restarting through an action."""

    def test_restart_action(self, playing_env: KopiEnvironment, build_correct_cup):
        first_order = playing_env.session.ticket.drink
        build_correct_cup(playing_env)
        playing_env.serve()
        obs = playing_env.step(KopiAction(kind=ActionKind.RESTART.value))
        assert obs.score == 0
        assert obs.order_number == 1
        assert obs.phase == GamePhase.PLAYING.value
        assert playing_env.session.ticket.drink == first_order

    def test_start_or_restart_session(self, env: KopiEnvironment):
        obs = env.start_or_restart_session()
        assert obs.phase == GamePhase.PLAYING.value


class TestSummary:
    """Tests for the end-of-session summary."""

    def test_summary(self, playing_env: KopiEnvironment, clock, build_correct_cup):
        build_correct_cup(playing_env)
        clock.advance(2)
        playing_env.serve()
        summary = playing_env.session_summary()
        assert summary["score"] == 18
        assert summary["drinks_served"] == 1
        assert summary["avg_time"] == 2.0
        assert summary["orders_seen"] == 1
        assert summary["level"] == 1

    def test_session_to_dict(self, playing_env: KopiEnvironment):
        data = playing_env.session.to_dict()
        assert data["phase"] == GamePhase.PLAYING
        assert data["order_number"] == 1


class TestSessionSnapshot:
    """The session snapshot holds everything needed to pick a game back up."""

    def test_snapshot_has_customers_and_regulars(self, playing_env: KopiEnvironment):
        data = playing_env.session.to_dict()
        assert len(data["queue"]) == LEVELS[0].queue_size
        assert data["last_customer"] is not None
        assert len(data["regular_assignments"]) == 3
        assert all(not a["first_visit_done"] for a in data["regular_assignments"])
        # Regulars never visit in the first shift, so the counter just grows
        assert data["orders_since_regular"] == 100
        assert data["active_regular_index"] is None

    def test_queue_matches_observation(self, playing_env: KopiEnvironment, clock, build_correct_cup):
        build_correct_cup(playing_env)
        playing_env.serve()
        clock.advance(1.5)
        obs = playing_env.tick()
        assert obs.queue == playing_env.session.to_dict()["queue"]
        assert playing_env.session.order_number == 2
        assert playing_env.session.orders_since_regular == 101

    def test_snapshot_has_countdown(self, playing_env: KopiEnvironment, clock):
        session = playing_env.session
        assert session.timer_deadline == clock() + LEVELS[0].timer_seconds
        assert session.timer_paused_remaining is None

        clock.advance(4)
        playing_env.pause_timer()
        assert session.timer_deadline is None
        assert session.timer_paused_remaining == LEVELS[0].timer_seconds - 4

    def test_regular_visit_recorded(self, clock):
        env = KopiEnvironment(
            config=GameConfig(regular_chance=1.0, first_visit_levels=(1, 1)),
            seed=5,
            clock=clock,
        )
        env.reset()
        session = env.session
        assert session.ticket.is_regular
        assert session.orders_since_regular == 0
        assert session.active_regular_index == session.ticket.regular_index
        visited = [a for a in session.regular_assignments if a.first_visit_done]
        assert [a.regular_index for a in visited] == [session.ticket.regular_index]
