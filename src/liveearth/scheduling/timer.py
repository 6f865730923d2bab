"""Repeating timers used by the scheduler and the reaper."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Final, Protocol

logger: Final = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """An armed timer that can be cancelled."""

    interval: float

    def cancel(self) -> None:
        """Stop the timer; the callback never runs again."""
        ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


class RepeatingTimer:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread.

    The first call happens one interval after creation. A callback that
    raises is logged and the timer keeps running.
    """

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "liveearth-timer",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    @property
    def active(self) -> bool:
        """Whether the timer is still armed."""
        return not self._cancelled.is_set()

    def cancel(self) -> None:
        """Stop the timer; a callback already running finishes normally."""
        self._cancelled.set()

    def _run(self) -> None:
        while not self._cancelled.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Timer callback failed")
