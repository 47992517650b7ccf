#!/usr/bin/env python3
# Copyright (c) 2025 KopiRush Contributors
# BSD-3-Clause License

"""
CLI entry point for KopiRush.

Play the game in a terminal and inspect the drink menu and shift table.

Usage:
    # Play with defaults
    kopi play

    # Reproducible session with a tuned stall
    kopi play --seed 42 --config stall.yaml

    # Show the drinks a pool can order
    kopi menu --pool medium

    # Show the shift table
    kopi levels

    # Write an example config to edit
    kopi init-config stall.yaml
"""

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dotenv import load_dotenv
load_dotenv()

from ..catalog import get_drink_pool
from ..levels import level_to_dict
from ..models import ActionKind, GameConfig, GamePhase, KopiAction, KopiObservation, MilkType
from .config import VALID_POOLS, create_example_config, load_config

CONFIG_ENV_VAR = "KOPI_RUSH_CONFIG"

app = typer.Typer(
    name="kopi",
    help="KopiRush - Serve the kopitiam queue before the timer runs out",
    add_completion=False,
)
console = Console()


@dataclass(frozen=True)
class ShortcutEntry:
    action: str
    label: str
    key: str


DEFAULT_SHORTCUTS = [
    ShortcutEntry("kopi", "Kopi", "a"),
    ShortcutEntry("teh", "Teh", "s"),
    ShortcutEntry("lessBase", "Less (Kopi/Teh)", "d"),
    ShortcutEntry("condensedMilk", "Condensed Milk", "j"),
    ShortcutEntry("lessCondensed", "Less (Condensed)", "h"),
    ShortcutEntry("evaporatedMilk", "Evaporated Milk", "k"),
    ShortcutEntry("sugar", "Sugar", "l"),
    ShortcutEntry("lessSugar", "Less (Sugar)", ";"),
    ShortcutEntry("ice", "Ice", "i"),
    ShortcutEntry("hotWater", "Hot Water", " "),
    ShortcutEntry("discard", "Discard", "g"),
    ShortcutEntry("serve", "Serve", "Enter"),
]

# Line input can't carry a bare space or Enter reliably, so these also work
KEY_ALIASES = {"w": "hotWater", "": "serve"}

SHORTCUT_ACTIONS = {
    "kopi": KopiAction(kind=ActionKind.ADD_BASE.value, base="Kopi"),
    "teh": KopiAction(kind=ActionKind.ADD_BASE.value, base="Teh"),
    "lessBase": KopiAction(kind=ActionKind.TOGGLE_LESS_BASE.value),
    "condensedMilk": KopiAction(kind=ActionKind.SET_MILK.value, milk="Condensed"),
    "lessCondensed": KopiAction(kind=ActionKind.TOGGLE_LESS_CONDENSED.value),
    "evaporatedMilk": KopiAction(kind=ActionKind.SET_MILK.value, milk="Evaporated"),
    "sugar": KopiAction(kind=ActionKind.ADD_SUGAR.value),
    "lessSugar": KopiAction(kind=ActionKind.TOGGLE_LESS_SUGAR.value),
    "ice": KopiAction(kind=ActionKind.ADD_ICE.value),
    "hotWater": KopiAction(kind=ActionKind.ADD_HOT_WATER.value),
    "discard": KopiAction(kind=ActionKind.DISCARD.value),
    "serve": KopiAction(kind=ActionKind.SERVE.value),
}


def format_key_display(key: str) -> str:
    """Human-readable name for a shortcut key."""
    if key == " ":
        return "Space"
    if key == "Enter":
        return "Enter"
    return key.upper()


def action_for_key(line: str, shortcuts: list[ShortcutEntry] = DEFAULT_SHORTCUTS) -> Optional[KopiAction]:
    """
    Map one line of terminal input to an action.

    An empty line is Enter, a line of spaces is Space, anything else is
    matched case-insensitively against the shortcut keys.
    """
    if line == "":
        key = "Enter"
    elif line.strip() == "":
        key = " "
    else:
        key = line.strip().lower()

    for entry in shortcuts:
        if entry.key.lower() == key.lower():
            return SHORTCUT_ACTIONS[entry.action]

    alias = KEY_ALIASES.get(line.strip().lower())
    if alias is not None:
        return SHORTCUT_ACTIONS[alias]
    return None


def _resolve_config(config_file: Optional[Path]) -> GameConfig:
    """Load the game config from --config, then $KOPI_RUSH_CONFIG, else defaults."""
    if config_file is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return GameConfig()
        config_file = Path(env_path)

    if not config_file.exists():
        console.print(f"[red]Config file not found: {escape(str(config_file))}[/red]")
        raise typer.Exit(1)

    try:
        return load_config(config_file)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid config {escape(str(config_file))}: {escape(str(e))}[/red]")
        raise typer.Exit(1)


def _print_help():
    table = Table(title="Controls")
    table.add_column("Key", style="cyan")
    table.add_column("Action", style="white")
    for entry in DEFAULT_SHORTCUTS:
        table.add_row(format_key_display(entry.key), entry.label)
    table.add_row("W", "Hot Water (alias)")
    table.add_row("?", "Show this help")
    table.add_row("Q", "Quit")
    console.print(table)


def _print_counter(obs: KopiObservation):
    cup = obs.cup
    parts = []
    if cup["base"]:
        parts.append(f"{cup['base']} x{cup['base_units']:g}")
    if cup["milk"] != "None":
        parts.append(f"{cup['milk']} milk x{cup['milk_units']:g}")
    if cup["sugar"] != "None":
        parts.append(f"{cup['sugar']} sugar")
    if cup["has_ice"]:
        parts.append("ice")
    if cup["has_hot_water"]:
        parts.append("hot water")

    toggles = [name for name, on in (
        ("less base", obs.less_base),
        ("less sugar", obs.less_sugar),
        ("less condensed", obs.less_condensed),
    ) if on]

    line = f"   [dim]Cup:[/dim] {escape(', '.join(parts)) if parts else '[dim]empty[/dim]'}"
    if toggles:
        line += f"  [yellow]({', '.join(toggles)})[/yellow]"
    line += f"  [dim]{obs.seconds_remaining:.1f}s[/dim]"
    console.print(line)


def _print_summary(summary: dict):
    console.print()
    console.print("[bold]═" * 50 + "[/bold]")
    console.print("[bold red]☕ GAME OVER![/bold red]")
    console.print("[bold]═" * 50 + "[/bold]")

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Score", str(summary["score"]))
    table.add_row("Drinks Served", str(summary["drinks_served"]))
    table.add_row("Avg Time", f"{summary['avg_time']:.1f}s")
    table.add_row("Orders Seen", str(summary["orders_seen"]))
    table.add_row("Reached", f"Level {summary['level']}: {escape(summary['level_name'])}")

    console.print(table)


@app.command()
def play(
    seed: Optional[int] = typer.Option(
        None,
        "--seed", "-s",
        help="Random seed for reproducibility"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help=f"YAML game config (defaults to ${CONFIG_ENV_VAR})"
    ),
    output_dir: str = typer.Option(
        "runs",
        "--output", "-o",
        help="Directory to save session logs"
    ),
    no_log: bool = typer.Option(
        False,
        "--no-log",
        help="Disable session logging"
    ),
):
    """
    Play a session in the terminal.

    Type one key per line and press Enter. An empty line serves the cup.

    Examples:
        kopi play
        kopi play --seed 42 --config stall.yaml
    """
    from ..server.kopi_environment import KopiEnvironment
    from .config import config_to_dict
    from .runner import SessionLogger, VerboseCallback

    config = _resolve_config(config_file)
    env = KopiEnvironment(config=config, seed=seed)
    callback = VerboseCallback(console)

    logger = None
    if not no_log:
        logger = SessionLogger(base_dir=output_dir)
        logger.save_config({
            "seed": seed,
            "timestamp": logger.timestamp,
            "game": config_to_dict(config),
        })

    console.print("\n[bold yellow]☕ KopiRush[/bold yellow]")
    if seed is not None:
        console.print(f"[dim]Seed: {seed}[/dim]")
    console.print("[dim]Type ? for controls, q to quit[/dim]\n")

    step = 0

    def record(action: KopiAction) -> KopiObservation:
        nonlocal step
        obs = env.step(action)
        step += 1
        if logger:
            logger.log_event(step, action, obs)
        return obs

    obs = env.reset()
    callback.on_session_start(obs)
    callback.on_order_start(obs)
    seen_order = obs.order_number
    reported_result = False

    while obs.phase != GamePhase.GAMEOVER.value:
        if obs.phase == GamePhase.PLAYING.value:
            if obs.order_number != seen_order:
                seen_order = obs.order_number
                reported_result = False
                callback.on_order_start(obs)
            _print_counter(obs)

            line = console.input("[bold]> [/bold]")
            command = line.strip().lower()
            if command == "?":
                _print_help()
                continue
            if command == "q":
                obs = record(KopiAction(kind=ActionKind.PAUSE_TIMER.value))
                if typer.confirm("Quit this session?", default=False):
                    break
                obs = record(KopiAction(kind=ActionKind.RESUME_TIMER.value))
                continue

            action = action_for_key(line)
            if action is None:
                console.print(f"[red]Unknown key: {escape(line.strip())}[/red] [dim](? for help)[/dim]")
                continue
            obs = record(action)

        elif obs.phase == GamePhase.ERROR_ACK.value:
            if not reported_result:
                callback.on_order_end(obs)
                reported_result = True
            console.input("[dim]Press Enter to continue[/dim]")
            obs = record(KopiAction(kind=ActionKind.ACKNOWLEDGE_ERROR.value))

        else:
            # transition / levelup: wait out the pause
            time.sleep(env.timer.tick_interval)
            previous = obs.phase
            obs = env.tick()
            if obs.phase == GamePhase.LEVELUP.value and previous != obs.phase:
                callback.on_level_up(obs)

        if obs.order_result and not reported_result and obs.phase != GamePhase.PLAYING.value:
            callback.on_order_end(obs)
            reported_result = True

    summary = env.session_summary()
    summary["seed"] = seed
    callback.on_session_end(summary)
    if logger:
        logger.save_summary(summary)
        console.print(f"\n[dim]Session saved to: {logger.run_dir}[/dim]")
    _print_summary(summary)


@app.command()
def menu(
    pool: str = typer.Option(
        "full",
        "--pool", "-p",
        help=f"Drink pool: {', '.join(VALID_POOLS)}"
    ),
):
    """
    List the drinks a pool can order.

    Example:
        kopi menu --pool standard
    """
    if pool not in VALID_POOLS:
        console.print(f"[red]Invalid pool: {escape(pool)}. Must be one of: {', '.join(VALID_POOLS)}[/red]")
        raise typer.Exit(1)

    drinks = get_drink_pool(pool)
    table = Table(title=f"{pool.title()} Menu ({len(drinks)} drinks)")
    table.add_column("Order", style="cyan")
    table.add_column("Base", style="white")
    table.add_column("Milk", style="white")
    table.add_column("Sugar", style="white")
    table.add_column("Finish", style="dim")

    for drink in drinks:
        milk = "-" if drink.milk == MilkType.NONE else drink.milk.value
        if drink.milk == MilkType.CONDENSED and drink.milk_units != 1:
            milk += f" x{drink.milk_units:g}"
        sugar = "any" if drink.sugar_optional else drink.sugar.value
        finish = [("ice" if drink.peng else "hot")]
        if drink.hot_water:
            finish.append("hot water")
        table.add_row(
            drink.display_name,
            f"{drink.base.value} x{drink.base_units:g}",
            milk,
            sugar,
            ", ".join(finish),
        )

    console.print(table)


@app.command()
def levels(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help=f"YAML game config (defaults to ${CONFIG_ENV_VAR})"
    ),
):
    """
    Show the shift table.

    Example:
        kopi levels --config stall.yaml
    """
    config = _resolve_config(config_file)

    table = Table(title="Shifts")
    table.add_column("Level", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Timer", style="white")
    table.add_column("Cups", style="white")
    table.add_column("Queue", style="white")
    table.add_column("Pool", style="white")
    table.add_column("Multiplier", style="white")

    for level in config.get_levels():
        row = level_to_dict(level)
        cups = "∞" if row["cups_to_complete"] is None else str(row["cups_to_complete"])
        table.add_row(
            str(row["level"]),
            escape(row["name"]),
            f"{row['timer_seconds']:g}s",
            cups,
            str(row["queue_size"]),
            row["drink_pool"],
            f"x{row['score_multiplier']:g}",
        )

    console.print(table)


@app.command("init-config")
def init_config(
    path: Path = typer.Argument(
        Path("stall.yaml"),
        help="Where to write the example config"
    ),
    force: bool = typer.Option(
        False,
        "--force", "-f",
        help="Overwrite an existing file"
    ),
):
    """
    Write an example game config to edit.

    Example:
        kopi init-config stall.yaml
    """
    if path.exists() and not force:
        console.print(f"[red]{escape(str(path))} already exists (use --force to overwrite)[/red]")
        raise typer.Exit(1)

    create_example_config(path)
    console.print(f"[green]✓ Wrote {escape(str(path))}[/green]")
    console.print(f"[dim]Play with it: kopi play --config {escape(str(path))}[/dim]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
