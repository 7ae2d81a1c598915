#!/usr/bin/env python3
"""Mahjong Trainer - wait recognition and tile efficiency drills in the terminal"""

import argparse
import logging
import random

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from mahjong_trainer.core.tile import Tile
from mahjong_trainer.engine.config import GeneratorConfig, Level, MAX_SUITS, VALID_SIZES
from mahjong_trainer.engine.diagnostics import run_shanten_self_check
from mahjong_trainer.engine.generator import (
    GenerationStatus, generate_efficiency_hand, generate_rehab_hand,
)
from mahjong_trainer.ui.tile_display import (
    describe_win, efficiency_table, format_pool, tiles_to_rich_text,
)

console = Console()


class Settings:
    """Session settings chosen from the menu."""

    def __init__(self):
        self.size = 7
        self.level = Level.EASY
        self.suits = 1

    def __str__(self):
        return f"{self.size} tiles, {self.level.value}, {self.suits} suit(s)"


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def read_tile(prompt: str):
    """Read a tile code like '5s'; empty input returns None."""
    while True:
        try:
            text = console.input(prompt).strip()
        except EOFError:
            return None
        if not text:
            return None
        try:
            return Tile.from_code(text)
        except ValueError:
            console.print("  [red]Enter a tile like 5s, 3m or 7p[/red]")


NO_WAITS = "none"


def read_answer(prompt: str):
    """Read a tile code like '5s' or 'none'; empty input returns None."""
    while True:
        try:
            text = console.input(prompt).strip().lower()
        except EOFError:
            return None
        if not text:
            return None
        if text == NO_WAITS:
            return NO_WAITS
        try:
            return Tile.from_code(text)
        except ValueError:
            console.print("  [red]Enter a tile like 5s, 3m or 7p, or 'none'[/red]")


def choose(prompt: str, options):
    """Pick one of `options` by number."""
    for i, option in enumerate(options, start=1):
        console.print(f"    {i}. {getattr(option, 'value', option)}")
    while True:
        try:
            choice = int(console.input(f"  > {prompt} ").strip())
            if 1 <= choice <= len(options):
                return options[choice - 1]
        except ValueError:
            pass
        console.print("  [red]Invalid input[/red]")


def show_menu(settings: Settings) -> int:
    console.print()
    console.print(Panel(
        "[bold cyan]Mahjong Trainer[/bold cyan]\n"
        f"[dim]{settings}[/dim]",
        border_style="cyan",
        padding=(1, 4),
    ))
    console.print("    1. Win training (find every wait)")
    console.print("    2. Efficiency training (pick the best discard)")
    console.print("    3. Settings")
    console.print("    4. Shanten self-check")
    console.print("    0. Quit")

    while True:
        try:
            choice = int(console.input("  > Choose (0-4): ").strip())
            if 0 <= choice <= 4:
                return choice
        except ValueError:
            pass
        console.print("  [red]Invalid input[/red]")


def change_settings(settings: Settings):
    console.print("\n  Hand size:")
    settings.size = choose("size:", list(VALID_SIZES))
    console.print("\n  Level:")
    settings.level = choose("level:", list(Level))
    console.print("\n  Suits:")
    settings.suits = choose("suits:", list(range(1, MAX_SUITS + 1)))


def play_win_training(settings: Settings, config: GeneratorConfig, rng: random.Random):
    with console.status("Generating hand..."):
        outcome = generate_rehab_hand(settings.size, settings.level,
                                      settings.suits, config, rng)
    puzzle = outcome.puzzle
    if outcome.status == GenerationStatus.EXHAUSTED_FALLBACK:
        console.print("  [yellow]Generator ran out of attempts, serving a stock hand[/yellow]")

    waits = set(puzzle.waits)
    found, wrong = set(), set()
    said_none = False
    console.print("\n  Hand: ", tiles_to_rich_text(puzzle.hand))
    console.print("  [dim]Enter waiting tiles one at a time, 'none' if the hand "
                  "is not tenpai, empty line when done[/dim]")

    while not waits or found != waits:
        answer = read_answer("  wait> ")
        if answer is None:
            break
        if answer == NO_WAITS:
            said_none = True
            break
        if answer in waits:
            found.add(answer)
        else:
            wrong.add(answer)
        console.print("  ", format_pool(puzzle.pool, found, wrong))

    if not waits:
        if said_none and not wrong:
            console.print("  [green]Correct, this hand was not tenpai.[/green]")
        else:
            console.print("  [bold]This hand was not tenpai.[/bold]")
        return

    if said_none:
        console.print("  [red]This hand is tenpai.[/red]")
    elif found == waits:
        console.print("  [green]All waits found![/green]")
    console.print("  Waits: ", tiles_to_rich_text(puzzle.waits))
    for wait in puzzle.waits:
        console.print(f"    {wait.code}: {describe_win(puzzle.hand + [wait])}")


def play_efficiency_training(settings: Settings, config: GeneratorConfig,
                             rng: random.Random):
    with console.status("Generating hand..."):
        outcome = generate_efficiency_hand(settings.size, settings.suits, config, rng)
    if outcome.failed:
        console.print("  [red]Failed to generate hand. Please try again.[/red]")
        return

    puzzle = outcome.puzzle
    eff = puzzle.efficiency
    console.print(f"\n  Base hand: {eff.initial_shanten}-shanten")
    console.print("  Hand: ", tiles_to_rich_text(puzzle.hand,
                                                 highlight={puzzle.drawn_tile}))
    console.print("  Drew: ", tiles_to_rich_text([puzzle.drawn_tile]))

    while True:
        tile = read_tile("  discard> ")
        if tile is None:
            break
        if tile not in puzzle.hand:
            console.print("  [red]That tile is not in your hand[/red]")
            continue
        if tile in eff.best_discards:
            console.print("  [green]Best discard![/green]")
        else:
            console.print("  [red]Not the most efficient discard[/red]")
        break

    console.print(efficiency_table(eff))


def show_self_check():
    for case in run_shanten_self_check():
        mark = "[green]✓[/green]" if case.passed else "[red]✗[/red]"
        console.print(f"  {mark} {case.name}: expected {case.expected}, got {case.actual}")
        console.print("     ", tiles_to_rich_text(case.tiles))


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Mahjong wait and efficiency trainer")
    parser.add_argument("--verbose", action="store_true", help="show generator debug logs")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    args = parser.parse_args()

    setup_logging(args.verbose)
    rng = random.Random(args.seed)
    config = GeneratorConfig()
    settings = Settings()

    try:
        while True:
            choice = show_menu(settings)
            if choice == 0:
                console.print("\n  Bye!\n")
                break
            elif choice == 1:
                play_win_training(settings, config, rng)
            elif choice == 2:
                play_efficiency_training(settings, config, rng)
            elif choice == 3:
                change_settings(settings)
            elif choice == 4:
                show_self_check()
    except (KeyboardInterrupt, EOFError):
        console.print("\n\n  [dim]Exited[/dim]\n")


if __name__ == "__main__":
    main()
