"""Terminal stand-ins for the audio player, the countdown display and user input."""

from __future__ import annotations

import asyncio
import logging
import random
import sys
from typing import Callable, Iterable, Optional, TextIO

import click

from audioflash.core.catalog import Category
from audioflash.core.events import (
    ClipFinished,
    DurationChanged,
    Event,
    NextRequested,
    PauseRequested,
    PermissionGranted,
    ResumeRequested,
    ReturnToSelectionRequested,
)
from audioflash.core.pool import ItemPool
from audioflash.core.runner import SessionRunner
from audioflash.core.session import Session

logger = logging.getLogger(__name__)

HELP = """\
Keys (then Enter):
  <Enter>  start the game        p  pause        r  resume
  n        next item now         d N  N seconds between items
  q        back to the category selection"""

_SIMPLE_COMMANDS: dict[str, Callable[[], Event]] = {
    "p": PauseRequested,
    "r": ResumeRequested,
    "n": NextRequested,
    "q": ReturnToSelectionRequested,
}


class ConsoleUnavailableError(Exception):
    """Raised when standard input cannot be watched by the event loop."""


def parse_command(line: str) -> Optional[Event]:
    """Translate a line typed by the player into an event (``None`` if unknown)."""
    words = line.strip().lower().split()
    if not words:
        return PermissionGranted()
    if words[0] == "d" and len(words) == 2:
        try:
            return DurationChanged(float(words[1]))
        except ValueError:
            return None
    factory = _SIMPLE_COMMANDS.get(words[0]) if len(words) == 1 else None
    return factory() if factory is not None else None


class ConsoleAudio:
    """Prints clips instead of playing them.

    Playback of a clip "ends" *clip_length* seconds after :meth:`play`, at
    which point *on_ended* is called.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        on_ended: Callable[[], None],
        clip_length: float = 1.5,
        echo: Callable[[str], None] = click.echo,
    ) -> None:
        self._loop = loop
        self._on_ended = on_ended
        self._clip_length = clip_length
        self._echo = echo
        self._clip: Optional[str] = None
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def clip(self) -> Optional[str]:
        return self._clip

    @property
    def playing(self) -> bool:
        return self._handle is not None

    def set_clip(self, clip: str) -> None:
        self._cancel()
        self._clip = clip

    def play(self) -> None:
        self._cancel()
        self._echo(f"♪ {self._clip}")
        self._handle = self._loop.call_later(self._clip_length, self._ended)

    def pause(self) -> None:
        self._cancel()

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _ended(self) -> None:
        self._handle = None
        self._on_ended()


class ConsoleDisplay:
    def __init__(self, echo: Callable[[str], None] = click.echo) -> None:
        self._echo = echo

    def show_countdown(self, seconds: int, paused: bool) -> None:
        suffix = " (pause)" if paused else ""
        self._echo(f"Next item in ... {seconds}s{suffix}")


class StdinCommands:
    """Feeds lines read from *stream* to *post* as events."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        post: Callable[[Event], None],
        stream: Optional[TextIO] = None,
    ) -> None:
        self._loop = loop
        self._post = post
        self._stream = stream if stream is not None else sys.stdin
        self._attached = False

    def attach(self) -> None:
        try:
            self._loop.add_reader(self._stream.fileno(), self._read)
        except (NotImplementedError, OSError, ValueError) as exc:
            raise ConsoleUnavailableError(f"cannot read commands from stdin: {exc}") from exc
        self._attached = True

    def detach(self) -> None:
        if self._attached:
            self._loop.remove_reader(self._stream.fileno())
            self._attached = False

    def _read(self) -> None:
        line = self._stream.readline()
        if not line:
            # End of input is the same as leaving the game.
            self.detach()
            self._post(ReturnToSelectionRequested())
            return
        event = parse_command(line)
        logger.debug("Command %r -> %r", line, event)
        if event is None:
            click.echo(f"Unknown command {line.strip()!r}", err=True)
            return
        self._post(event)


async def play_game(
    categories: Iterable[Category],
    duration: float,
    clip_length: float,
    rng: random.Random | None = None,
) -> Session:
    """Run one game in the terminal until it is finished or abandoned."""
    loop = asyncio.get_running_loop()
    runner = SessionRunner()
    audio = ConsoleAudio(loop, lambda: runner.post(ClipFinished()), clip_length)
    session = Session(
        ItemPool.create(categories, rng),
        audio,
        loop,
        display=ConsoleDisplay(),
        duration=duration,
        post=runner.post,
        on_finished=lambda: click.echo("Jeu terminé !"),
    )
    click.echo(f"{len(session.pool)} items, {session.duration:g}s between items.")
    click.echo(HELP)

    commands = StdinCommands(loop, runner.post)
    commands.attach()
    try:
        await runner.run(session, stop_on_finish=True)
    finally:
        commands.detach()
        session.handle(ReturnToSelectionRequested())
    return session


def run_game(
    categories: Iterable[Category],
    duration: float,
    clip_length: float,
    rng: random.Random | None = None,
) -> Session:
    return asyncio.run(play_game(categories, duration, clip_length, rng))
