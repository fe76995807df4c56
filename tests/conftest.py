"""Shared fixtures: a hand-cranked event loop and recording capabilities."""

from __future__ import annotations

import itertools
from typing import Any, Callable

import pytest


class FakeHandle:
    """Mimics ``asyncio.TimerHandle``: can be cancelled, runs at most once."""

    def __init__(self, when: float, seq: int, callback: Callable[..., Any], args: tuple) -> None:
        self.when = when
        self.seq = seq
        self._callback = callback
        self._args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def run(self) -> None:
        self._callback(*self._args)


class FakeLoop:
    """The subset of an asyncio loop used by timers, driven by :meth:`advance`."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: list[FakeHandle] = []
        self._seq = itertools.count()
        self.readers: dict[int, Callable[[], None]] = {}

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeHandle:
        handle = FakeHandle(self.now + delay, next(self._seq), callback, args)
        self._handles.append(handle)
        return handle

    def add_reader(self, fd: int, callback: Callable[[], None]) -> None:
        self.readers[fd] = callback

    def remove_reader(self, fd: int) -> bool:
        return self.readers.pop(fd, None) is not None

    def pending(self) -> list[FakeHandle]:
        return [h for h in self._handles if not h.cancelled()]

    def advance(self, seconds: float) -> None:
        """Move time forward, running every callback that falls due, in order."""
        target = self.now + seconds
        while True:
            due = [h for h in self.pending() if h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self._handles.remove(handle)
            self.now = handle.when
            handle.run()
        self.now = target


class RecordingAudio:
    """Audio player that records requests instead of making sound."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.clip: str | None = None

    def set_clip(self, clip: str) -> None:
        self.clip = clip
        self.calls.append(("set_clip", clip))

    def play(self) -> None:
        self.calls.append(("play",))

    def pause(self) -> None:
        self.calls.append(("pause",))

    def played(self) -> list[str]:
        """Clips for which ``play()`` was requested, in order."""
        clips = []
        current = None
        for call in self.calls:
            if call[0] == "set_clip":
                current = call[1]
            elif call[0] == "play":
                clips.append(current)
        return clips


class RecordingDisplay:
    def __init__(self) -> None:
        self.shown: list[tuple[int, bool]] = []

    def show_countdown(self, seconds: int, paused: bool) -> None:
        self.shown.append((seconds, paused))


@pytest.fixture()
def loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture()
def audio() -> RecordingAudio:
    return RecordingAudio()


@pytest.fixture()
def display() -> RecordingDisplay:
    return RecordingDisplay()
