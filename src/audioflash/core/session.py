"""Session state machine: sequences permission, playback, countdown and pauses.

A :class:`Session` reacts to one :mod:`event <audioflash.core.events>` at a
time.  Each (state, event) pair listed in ``_TRANSITIONS`` names the handler
that moves the session forward; every other pair is a no-op that leaves the
state, the configured duration and the pool untouched.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Protocol, Union

from audioflash.core.catalog import Category, Item
from audioflash.core.events import (
    ClipFinished,
    CountdownElapsed,
    DurationChanged,
    Event,
    NextRequested,
    PauseRequested,
    PermissionGranted,
    ResumeRequested,
    ReturnToSelectionRequested,
    Tick,
)
from audioflash.core.pool import ItemPool
from audioflash.core.timer import TICK_INTERVAL, Countdown

logger = logging.getLogger(__name__)

MIN_DURATION = 3
MAX_DURATION = 60
DEFAULT_DURATION = 20


def clamp_duration(seconds: float) -> float:
    """Clamp *seconds* into ``[MIN_DURATION, MAX_DURATION]``.

    NaN falls back to ``DEFAULT_DURATION``; infinities clamp to the bounds.
    """
    if math.isnan(seconds):
        return float(DEFAULT_DURATION)
    return float(min(max(seconds, MIN_DURATION), MAX_DURATION))


class AudioPlaybackError(Exception):
    """Raised by an audio player that could not carry out a request."""


class AudioPlayer(Protocol):
    """Long-lived audio output whose clip is swapped on every transition.

    The playback-ended notification is wired into the concrete player when it
    is built and must end up as a :class:`ClipFinished` event.
    """

    def set_clip(self, clip: str) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...


class CountdownDisplay(Protocol):
    def show_countdown(self, seconds: int, paused: bool) -> None: ...


class ClipPhase(Enum):
    """Which of the two clips of an item is playing."""

    CATEGORY = "category"
    ITEM = "item"


# -- states ------------------------------------------------------------------


@dataclass(frozen=True)
class AwaitingAudioPermission:
    pass


@dataclass(frozen=True)
class Playing:
    item: Item
    phase: ClipPhase


@dataclass(frozen=True)
class PlayingPaused:
    item: Item
    phase: ClipPhase


@dataclass
class Waiting:
    time_left: float
    countdown: Countdown = field(repr=False, compare=False)


@dataclass
class WaitingPaused:
    time_left: float
    countdown: Countdown = field(repr=False, compare=False)


@dataclass(frozen=True)
class Finished:
    pass


State = Union[AwaitingAudioPermission, Playing, PlayingPaused, Waiting, WaitingPaused, Finished]

_TRANSITIONS: dict[tuple[type, type], str] = {
    (AwaitingAudioPermission, PermissionGranted): "_draw_next",
    (Waiting, CountdownElapsed): "_next_after_wait",
    (Waiting, NextRequested): "_next_after_wait",
    (Playing, ClipFinished): "_clip_finished",
    (Playing, PauseRequested): "_pause_playing",
    (Waiting, PauseRequested): "_pause_waiting",
    (PlayingPaused, ResumeRequested): "_resume_playing",
    (WaitingPaused, ResumeRequested): "_resume_waiting",
    (AwaitingAudioPermission, DurationChanged): "_change_duration",
    (WaitingPaused, DurationChanged): "_change_duration",
    (PlayingPaused, DurationChanged): "_change_duration",
    (Waiting, Tick): "_tick",
}


class Session:
    """One run of the game, from the permission gate to Finished.

    *post* receives the countdown events; it should feed the same queue as
    the other events (see :class:`~audioflash.core.runner.SessionRunner`).
    Without it, countdown events are handled straight away.
    """

    def __init__(
        self,
        pool: ItemPool,
        audio: AudioPlayer,
        loop: asyncio.AbstractEventLoop,
        *,
        display: Optional[CountdownDisplay] = None,
        duration: float = DEFAULT_DURATION,
        post: Optional[Callable[[Event], object]] = None,
        on_finished: Optional[Callable[[], None]] = None,
        on_exit: Optional[Callable[[], None]] = None,
    ) -> None:
        self._pool = pool
        self._audio = audio
        self._loop = loop
        self._display = display
        self._duration: float = clamp_duration(duration)
        self._post: Callable[[Event], object] = post if post is not None else self.handle
        self._on_finished = on_finished
        self._on_exit = on_exit
        self._state: State = AwaitingAudioPermission()
        self._closed = False
        self._lock = threading.RLock()

    @classmethod
    def for_categories(
        cls,
        categories: Iterable[Category],
        audio: AudioPlayer,
        loop: asyncio.AbstractEventLoop,
        rng: random.Random | None = None,
        **kwargs: Any,
    ) -> Session:
        """Start a session over a freshly shuffled pool of *categories*."""
        return cls(ItemPool.create(categories, rng), audio, loop, **kwargs)

    # -- public API ----------------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @property
    def duration(self) -> float:
        """Configured time between two items, in seconds."""
        return self._duration

    @property
    def pool(self) -> ItemPool:
        return self._pool

    @property
    def closed(self) -> bool:
        return self._closed

    def handle(self, event: Event) -> bool:
        """Apply *event*; return ``True`` if it caused a transition."""
        with self._lock:
            if self._closed:
                logger.debug("Session closed, ignoring %r", event)
                return False
            if isinstance(event, ReturnToSelectionRequested):
                self._close()
                return True

            name = _TRANSITIONS.get((type(self._state), type(event)))
            if name is None:
                logger.debug("Ignoring %r in %r", event, self._state)
                return False
            applied = getattr(self, name)(self._state, event)
            if applied:
                logger.debug("%r -> %r", event, self._state)
            return applied

    # -- transitions ---------------------------------------------------------

    def _draw_next(self, state: State, event: Event) -> bool:
        item = self._pool.draw_one()
        if item is None:
            self._finish()
            return True
        logger.info("Playing %s / %s (%d left)", item.category.label, item.label, len(self._pool))
        self._play(item, ClipPhase.CATEGORY)
        return True

    def _next_after_wait(self, state: Waiting, event: Union[CountdownElapsed, NextRequested]) -> bool:
        if not self._is_live(state, event):
            return False
        state.countdown.stop()
        return self._draw_next(state, event)

    def _clip_finished(self, state: Playing, event: ClipFinished) -> bool:
        if state.phase is ClipPhase.CATEGORY:
            self._play(state.item, ClipPhase.ITEM)
        elif self._pool.is_empty():
            self._finish()
        else:
            self._wait(self._duration)
        return True

    def _pause_playing(self, state: Playing, event: PauseRequested) -> bool:
        self._state = PlayingPaused(state.item, state.phase)
        self._request("pause")
        return True

    def _pause_waiting(self, state: Waiting, event: PauseRequested) -> bool:
        remaining = state.countdown.pause()
        self._state = WaitingPaused(remaining, state.countdown)
        self._show(remaining, paused=True)
        return True

    def _resume_playing(self, state: PlayingPaused, event: ResumeRequested) -> bool:
        # The clip restarts from its beginning.
        self._play(state.item, state.phase)
        return True

    def _resume_waiting(self, state: WaitingPaused, event: ResumeRequested) -> bool:
        state.countdown.resume()
        self._state = Waiting(state.time_left, state.countdown)
        self._show(state.time_left, paused=False)
        return True

    def _change_duration(self, state: State, event: DurationChanged) -> bool:
        self._duration = clamp_duration(event.seconds)
        logger.info("Time between items set to %gs", self._duration)
        return True

    def _tick(self, state: Waiting, event: Tick) -> bool:
        if not self._is_live(state, event):
            return False
        state.time_left = max(state.time_left - TICK_INTERVAL, 0.0)
        self._show(state.time_left, paused=False)
        return True

    # -- private helpers -----------------------------------------------------

    def _is_live(self, state: Waiting, event: Event) -> bool:
        """Whether a countdown event comes from the countdown of *state*."""
        emitter = getattr(event, "countdown", None)
        if emitter is not None and emitter is not state.countdown:
            logger.debug("Dropping %r from a stale countdown", event)
            return False
        return True

    def _wait(self, seconds: float) -> None:
        countdown = Countdown(
            self._loop,
            on_elapsed=lambda c: self._post(CountdownElapsed(c)),
            on_tick=lambda c: self._post(Tick(c)),
        )
        countdown.start(seconds)
        self._state = Waiting(seconds, countdown)
        self._show(seconds, paused=False)

    def _finish(self) -> None:
        self._state = Finished()
        logger.info("All items played, session finished")
        if self._on_finished is not None:
            self._on_finished()

    def _close(self) -> None:
        """Dispose of the session: no callback may fire and no audio may play afterwards."""
        state = self._state
        if isinstance(state, (Waiting, WaitingPaused)):
            state.countdown.stop()
        elif isinstance(state, Playing):
            self._request("pause")
        self._pool.clear()
        self._closed = True
        logger.info("Session closed from %r", state)
        if self._on_exit is not None:
            self._on_exit()

    def _play(self, item: Item, phase: ClipPhase) -> None:
        self._state = Playing(item, phase)
        clip = item.category_clip if phase is ClipPhase.CATEGORY else item.item_clip
        self._request("set_clip", clip)
        self._request("play")

    def _request(self, method: str, *args: str) -> None:
        """Forward a request to the audio player; failures are logged, not raised."""
        try:
            getattr(self._audio, method)(*args)
        except AudioPlaybackError as exc:
            logger.warning("Audio %s failed: %s", method, exc)

    def _show(self, seconds: float, paused: bool) -> None:
        if self._display is not None:
            self._display.show_countdown(math.ceil(seconds), paused)
