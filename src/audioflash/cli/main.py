"""CLI entry point for audioflash.

Uses Click to expose the ``audioflash`` command group: list the categories
or play a game in the terminal.
"""

from __future__ import annotations

import logging
import random
import sys
from typing import Callable, Optional, TypeVar

import click

import audioflash
from audioflash.cli.console import ConsoleUnavailableError, run_game
from audioflash.core.catalog import Category, categories_from_mask, parse_categories
from audioflash.core.session import DEFAULT_DURATION, MAX_DURATION, MIN_DURATION, clamp_duration

T = TypeVar("T")

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _run(action: Callable[[], T]) -> T:
    """Execute *action*, converting ``ConsoleUnavailableError`` to a CLI error.

    On ``ConsoleUnavailableError`` the message is printed to stderr and the
    process exits with code 1.
    """
    try:
        return action()
    except ConsoleUnavailableError as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)


def _select(names: tuple[str, ...], mask: Optional[int]) -> set[Category]:
    """Categories named on the command line, else those of *mask*, else all."""
    if names:
        return parse_categories(names)
    if mask is not None:
        return categories_from_mask(mask)
    return set(Category)


@click.group()
@click.version_option(version=audioflash.__version__, prog_name="audioflash")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="AUDIOFLASH_LOG_LEVEL",
    show_default=True,
    help="Logging verbosity.",
)
def cli(log_level: str) -> None:
    """audioflash: a timed audio flashcard game."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
def categories() -> None:
    """List the categories and their items."""
    for category in Category:
        labels = ", ".join(item.label for item in category.items())
        click.echo(f"{category.value:>3}  {category.folder:<22} {category.label}: {labels}")


@cli.command()
@click.option(
    "-c",
    "--category",
    "names",
    multiple=True,
    type=click.Choice([c.folder for c in Category], case_sensitive=False),
    help="Category to play (repeatable). Defaults to all of them.",
)
@click.option("--mask", type=int, default=None, help="Categories as a bitmask, see `categories`.")
@click.option(
    "--duration",
    type=float,
    default=DEFAULT_DURATION,
    envvar="AUDIOFLASH_DURATION",
    show_default=True,
    help=f"Seconds between two items, clamped to {MIN_DURATION}-{MAX_DURATION}.",
)
@click.option("--clip-length", type=click.FloatRange(min=0.0), default=1.5, show_default=True)
@click.option("--seed", type=int, default=None, help="Seed the shuffle for a repeatable order.")
def play(
    names: tuple[str, ...],
    mask: Optional[int],
    duration: float,
    clip_length: float,
    seed: Optional[int],
) -> None:
    """Play a game with the selected categories."""
    selected = _select(names, mask)
    rng = random.Random(seed) if seed is not None else None
    click.echo("Categories: " + ", ".join(c.label for c in Category if c in selected))
    _run(lambda: run_game(selected, clamp_duration(duration), clip_length, rng))
