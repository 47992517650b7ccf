# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
Session logging for KopiRush.

Every played session can be recorded to disk as a run directory:

    runs/<timestamp>_<hex>/
        config.json     game configuration and seed
        events.jsonl    one JSON object per step
        summary.json    final score card
"""

import json
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from ..models import KopiAction, KopiObservation


def observation_to_dict(obs: KopiObservation) -> dict:
    """Convert observation to a JSON-serializable dict."""
    return {
        "phase": obs.phase,
        "score": obs.score,
        "lives": obs.lives,
        "cup_number": obs.cup_number,
        "order_number": obs.order_number,
        "level": obs.level.get("level") if obs.level else None,
        "order": obs.order_display_text,
        "is_regular": obs.is_regular,
        "regular_name": obs.regular_name,
        "is_second_visit": obs.is_second_visit,
        "cup": obs.cup,
        "order_result": obs.order_result,
        "last_points": obs.last_points,
        "mismatches": obs.mismatches,
        "seconds_remaining": round(obs.seconds_remaining, 2),
        "done": obs.done,
    }


def action_to_dict(action: KopiAction) -> dict:
    """Convert action to a JSON-serializable dict."""
    data: dict[str, Any] = {"kind": action.kind}
    if action.base is not None:
        data["base"] = action.base
    if action.milk is not None:
        data["milk"] = action.milk
    return data


class VerboseCallback:
    """Callback that prints per-order progress to console."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def on_session_start(self, observation: KopiObservation) -> None:
        self.console.print("[bold]═" * 50 + "[/bold]")
        self.console.print("[bold yellow]☕ Stall open![/bold yellow]")
        self.console.print("[bold]═" * 50 + "[/bold]")
        self.console.print(f"Lives: {observation.lives}")
        self.console.print()

    def on_order_start(self, observation: KopiObservation) -> None:
        level = observation.level or {}
        who = escape(observation.regular_name) if observation.is_regular else "Customer"
        if observation.is_second_visit:
            order = "[italic]\"the usual\"[/italic]"
        else:
            order = f"[bold]{escape(observation.order_display_text)}[/bold]"
        self.console.print(
            f"[cyan]#{observation.order_number}[/cyan] "
            f"[dim]{escape(str(level.get('name', '')))}[/dim] {who}: {order} "
            f"[dim]({observation.seconds_remaining:.0f}s)[/dim]"
        )

    def on_order_end(self, observation: KopiObservation) -> None:
        result = observation.order_result
        if result == "correct":
            self.console.print(
                f"   [green]✓ +{observation.last_points}[/green] "
                f"[dim]{escape(observation.correct_reaction)}[/dim]"
            )
        elif result == "wrong":
            self.console.print(f"   [red]✗ Wrong cup![/red] [dim]{escape(observation.wrong_reaction)}[/dim]")
            for mismatch in observation.mismatches:
                color = "red" if mismatch["type"] == "wrong" else "yellow"
                self.console.print(f"     [{color}]• {escape(mismatch['label'])}[/{color}]")
            if observation.current_quote:
                self.console.print(f"   [dim italic]{escape(observation.current_quote)}[/dim italic]")
        elif result == "timeout":
            self.console.print(f"   [yellow]⏰ Too slow![/yellow] [dim]{escape(observation.wrong_reaction)}[/dim]")
        self.console.print(f"   [dim]Score {observation.score} · Lives {observation.lives}[/dim]")

    def on_level_up(self, observation: KopiObservation) -> None:
        level = observation.level or {}
        self.console.print()
        self.console.print(
            f"[bold magenta]⬆ Level {level.get('level')}: {escape(str(level.get('name', '')))}[/bold magenta]"
        )
        if observation.level_up_comment:
            self.console.print(f"   [dim]{escape(observation.level_up_comment)}[/dim]")
        self.console.print()

    def on_session_end(self, summary: dict) -> None:
        pass  # Summary handled by CLI


class SessionLogger:
    """Logs played sessions to disk."""

    def __init__(self, base_dir: str | Path = "runs"):
        # Short UUID keeps two sessions started in the same second apart
        self.timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S") + f"_{uuid.uuid4().hex[:6]}"
        self.run_dir = Path(base_dir) / self.timestamp
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self.events_file = self.run_dir / "events.jsonl"
        self.events: list[dict] = []

    def save_config(self, config: dict[str, Any]):
        """Save session configuration."""
        config_file = self.run_dir / "config.json"
        with open(config_file, "w") as f:
            json.dump(config, f, indent=2)

    def log_event(self, step: int, action: KopiAction, observation: KopiObservation):
        """Log a single step."""
        event = {
            "step": step,
            "action": action_to_dict(action),
            "phase": observation.phase,
            "score": observation.score,
            "lives": observation.lives,
            "result": observation.order_result,
            "is_error": observation.is_error_response,
        }
        if observation.mismatches:
            event["mismatches"] = observation.mismatches
        if observation.action_errors:
            event["error_messages"] = observation.action_errors

        self.events.append(event)

        with open(self.events_file, "a") as f:
            f.write(json.dumps(event) + "\n")

    def save_summary(self, summary: dict[str, Any]):
        """Save the end-of-session score card."""
        summary = dict(summary)
        summary["steps"] = len(self.events)
        summary["error_count"] = sum(1 for e in self.events if e["is_error"])

        summary_file = self.run_dir / "summary.json"
        with open(summary_file, "w") as f:
            json.dump(summary, f, indent=2)
        return summary
