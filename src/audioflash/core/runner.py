"""Single-consumer event queue driving a :class:`~audioflash.core.session.Session`."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from audioflash.core.events import Event
from audioflash.core.session import Finished, Session

logger = logging.getLogger(__name__)


class SessionRunner:
    """Serialises every event of a game into one queue.

    User input, audio notifications and countdown callbacks all go through
    :meth:`post`; :meth:`run` hands them to the session one at a time, so no
    two transitions ever interleave.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Event] = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def post(self, event: Event) -> None:
        """Enqueue *event* from the event loop's thread."""
        self._queue.put_nowait(event)

    def post_threadsafe(self, event: Event) -> None:
        """Enqueue *event* from any other thread."""
        if self._loop is None:
            raise RuntimeError("post_threadsafe() needs a running SessionRunner")
        self._loop.call_soon_threadsafe(self._queue.put_nowait, event)

    def pending(self) -> int:
        return self._queue.qsize()

    async def run(self, session: Session, stop_on_finish: bool = False) -> None:
        """Process events until *session* is closed (or finished, if asked)."""
        self._loop = asyncio.get_running_loop()
        try:
            while not self._done(session, stop_on_finish):
                event = await self._queue.get()
                try:
                    session.handle(event)
                finally:
                    self._queue.task_done()
        finally:
            self._loop = None
        logger.debug("Runner stopped in %r", session.state)

    @staticmethod
    def _done(session: Session, stop_on_finish: bool) -> bool:
        return session.closed or (stop_on_finish and isinstance(session.state, Finished))
