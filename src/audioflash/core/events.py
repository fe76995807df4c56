"""Events fed one at a time into a :class:`~audioflash.core.session.Session`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from audioflash.core.timer import Countdown


@dataclass(frozen=True)
class PermissionGranted:
    """The first user gesture: audio may now be played."""


@dataclass(frozen=True)
class ClipFinished:
    """The audio player reached the end of the current clip."""


@dataclass(frozen=True)
class PauseRequested:
    pass


@dataclass(frozen=True)
class ResumeRequested:
    pass


@dataclass(frozen=True)
class NextRequested:
    """Skip the rest of the countdown and draw the next item now."""


@dataclass(frozen=True)
class DurationChanged:
    seconds: float


@dataclass(frozen=True)
class ReturnToSelectionRequested:
    pass


@dataclass(frozen=True)
class CountdownElapsed:
    """The countdown between two items completed.

    *countdown* identifies the emitter; ``None`` matches any live countdown.
    """

    countdown: Optional[Countdown] = field(default=None, compare=False)


@dataclass(frozen=True)
class Tick:
    """One second of the countdown display went by."""

    countdown: Optional[Countdown] = field(default=None, compare=False)


Event = Union[
    PermissionGranted,
    ClipFinished,
    PauseRequested,
    ResumeRequested,
    NextRequested,
    DurationChanged,
    ReturnToSelectionRequested,
    CountdownElapsed,
    Tick,
]
