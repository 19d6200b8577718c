"""
Debounced auto-save.

Debouncer is a trailing-edge timer on the running asyncio loop: every arm()
cancels the pending call and schedules a new one, so a burst of edits
produces a single save carrying the last state.
"""

import asyncio
import logging
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_AUTOSAVE_INTERVAL = 3.0  # seconds


class Debouncer:
    """Cancellable deferred call: arm on every mutation, flush or cancel on teardown."""

    def __init__(self, callback: Callable[[], None], interval: float = DEFAULT_AUTOSAVE_INTERVAL):
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self._callback = callback
        self.interval = interval
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self) -> None:
        """
        (Re)start the timer.

        Outside a running event loop there is nothing to schedule on, so the
        callback runs immediately.
        """
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, saving immediately")
            self._callback()
            return
        self._handle = loop.call_later(self.interval, self._fire)

    def flush(self) -> None:
        """Run a pending call now. No-op when nothing is pending."""
        if self._handle is None:
            return
        self.cancel()
        self._callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()
