"""Timer core: a resumable countdown scheduled on an asyncio event loop."""

from __future__ import annotations

import asyncio
import math
from enum import Enum
from typing import Callable, Optional


class TimerState(Enum):
    """Possible states of the timer."""

    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    EXPIRED = "expired"
    STOPPED = "stopped"


class InvalidStateError(Exception):
    """Raised when an invalid state transition is attempted."""


_VALID_START_STATES = frozenset({TimerState.IDLE, TimerState.EXPIRED, TimerState.STOPPED})

# Largest delay, in seconds, a scheduled callback may be asked to wait for.
MAX_DELAY = (2**32 - 1) / 1000
TICK_INTERVAL = 1.0


def clamp_delay(seconds: float) -> float:
    """Clamp *seconds* into ``[0, MAX_DELAY]``; NaN counts as 0."""
    seconds = float(seconds)
    if math.isnan(seconds):
        return 0.0
    return min(max(seconds, 0.0), MAX_DELAY)


class ResumableTimer:
    """A countdown that fires a callback once and can be paused and resumed.

    Scheduling goes through ``loop.call_later`` and elapsed time is measured
    with ``loop.time()``, which is monotonic.  Cancelling the pending handle
    is synchronous, so once :meth:`pause` or :meth:`stop` returns the
    callback can no longer run.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._state: TimerState = TimerState.IDLE
        self._duration: float = 0.0
        self._remaining: float = 0.0
        self._start_time: float = 0.0
        self._handle: Optional[asyncio.TimerHandle] = None
        self._on_fire: Optional[Callable[[], None]] = None

    # -- public interface ----------------------------------------------------

    def start(self, duration: float, on_fire: Callable[[], None]) -> None:
        """Schedule *on_fire* to run once after *duration* seconds.

        Valid from IDLE, EXPIRED or STOPPED states.
        """
        self._require_state("start", _VALID_START_STATES)

        self._duration = clamp_delay(duration)
        self._remaining = self._duration
        self._begin_running(on_fire)

    def pause(self) -> float:
        """Cancel the pending callback and freeze the remaining time.

        Valid only from RUNNING state.  Returns the remaining seconds.
        """
        self._require_state("pause", frozenset({TimerState.RUNNING}))

        self._cancel_handle()
        self._remaining = self._running_remaining()
        self._state = TimerState.PAUSED
        return self._remaining

    def resume(self, on_fire: Optional[Callable[[], None]] = None) -> None:
        """Reschedule with the time left at the last pause.

        Valid only from PAUSED state.  Without *on_fire* the callback given to
        :meth:`start` is reused.
        """
        self._require_state("resume", frozenset({TimerState.PAUSED}))

        self._begin_running(on_fire if on_fire is not None else self._on_fire)

    def stop(self) -> float:
        """Cancel the timer for good and return what was left of it.

        Valid from any state; no callback fires for this run afterwards.
        """
        remaining = self.remaining()
        self._cancel_handle()
        if self._state in (TimerState.RUNNING, TimerState.PAUSED):
            self._state = TimerState.STOPPED
        self._remaining = remaining
        self._on_fire = None
        return remaining

    def remaining(self) -> float:
        """Return the remaining time in seconds.

        Returns 0.0 when the timer is IDLE or EXPIRED.
        """
        if self._state == TimerState.RUNNING:
            return self._running_remaining()
        if self._state in (TimerState.PAUSED, TimerState.STOPPED):
            return self._remaining
        return 0.0

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def duration(self) -> float:
        """The duration given to the last :meth:`start`, after clamping."""
        return self._duration

    def __enter__(self) -> ResumableTimer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # -- private helpers -----------------------------------------------------

    def _require_state(self, method: str, valid: frozenset[TimerState]) -> None:
        """Raise ``InvalidStateError`` if the current state is not in *valid*."""
        if self._state not in valid:
            raise InvalidStateError(f"{method}() is not valid from {self._state.value} state")

    def _begin_running(self, on_fire: Optional[Callable[[], None]]) -> None:
        """Record the start time, schedule the callback and enter RUNNING."""
        self._on_fire = on_fire
        self._start_time = self._loop.time()
        self._handle = self._loop.call_later(self._remaining, self._fire)
        self._state = TimerState.RUNNING

    def _running_remaining(self) -> float:
        elapsed = self._loop.time() - self._start_time
        # Never more than the configured duration, whatever the pause history.
        return min(max(self._remaining - elapsed, 0.0), self._duration)

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._remaining = 0.0
        self._state = TimerState.EXPIRED
        on_fire, self._on_fire = self._on_fire, None
        if on_fire is not None:
            on_fire()


class Ticker:
    """Calls *on_tick* every *interval* seconds until cancelled."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        on_tick: Callable[[], None],
        interval: float = TICK_INTERVAL,
    ) -> None:
        self._loop = loop
        self._on_tick = on_tick
        self._interval = interval
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        self.cancel()
        self._handle = self._loop.call_later(self._interval, self._tick)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        # Reschedule first so that on_tick may cancel us.
        self._handle = self._loop.call_later(self._interval, self._tick)
        self._on_tick()


class Countdown:
    """A :class:`ResumableTimer` and a display :class:`Ticker` run as one.

    Both are started, paused and cancelled together.  Only the timer's
    completion reaches *on_elapsed*; the ticker merely feeds *on_tick*.
    Callbacks receive the countdown itself so that a receiver can tell a
    live countdown from a discarded one.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        on_elapsed: Callable[[Countdown], None],
        on_tick: Callable[[Countdown], None],
        tick_interval: float = TICK_INTERVAL,
    ) -> None:
        self._timer = ResumableTimer(loop)
        self._ticker = Ticker(loop, lambda: on_tick(self), tick_interval)
        self._on_elapsed = on_elapsed

    @property
    def state(self) -> TimerState:
        return self._timer.state

    def remaining(self) -> float:
        return self._timer.remaining()

    def start(self, duration: float) -> None:
        self._timer.start(duration, self._elapsed)
        self._ticker.start()

    def pause(self) -> float:
        self._ticker.cancel()
        if self._timer.state is TimerState.RUNNING:
            return self._timer.pause()
        return self._timer.remaining()

    def resume(self) -> None:
        if self._timer.state is TimerState.PAUSED:
            self._timer.resume(self._elapsed)
        else:
            # Fired while the pause was still queued: fire again right away.
            self._timer.start(0.0, self._elapsed)
        self._ticker.start()

    def stop(self) -> float:
        self._ticker.cancel()
        return self._timer.stop()

    def _elapsed(self) -> None:
        self._ticker.cancel()
        self._on_elapsed(self)

    def __repr__(self) -> str:
        return f"Countdown(state={self.state.value}, remaining={self.remaining():.1f})"
