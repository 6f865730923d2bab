"""Periodic wallpaper refresh scheduling."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from functools import partial
from typing import TYPE_CHECKING, Final, Protocol

from liveearth.notifications import LoggingListener, RefreshListener
from liveearth.scheduling.models import ScheduleState
from liveearth.scheduling.timer import RepeatingTimer, TimerFactory, TimerHandle
from liveearth.settings.user import UserSettings
from liveearth.utils.time import TimeUtils

if TYPE_CHECKING:
    from liveearth.settings.store import SettingsStore

logger: Final = logging.getLogger(__name__)

NO_TOKEN_MESSAGE: Final = "Please configure your API token in settings first."
BUSY_MESSAGE: Final = "Refresh already in progress"
CRASH_MESSAGE: Final = "Unexpected error while refreshing wallpaper"

CycleExecutor = Callable[[Callable[[], None]], None]


class Refresher(Protocol):
    """Runs one fetch+apply cycle."""

    def refresh(self, config: UserSettings) -> bool:
        """Run a cycle with ``config``; return True on success."""
        ...


def run_in_thread(job: Callable[[], None]) -> None:
    """Default cycle executor: one daemon worker thread per cycle."""
    threading.Thread(target=job, name="liveearth-cycle", daemon=True).start()


class Scheduler:
    """Owns the refresh timer and guarantees one cycle at a time.

    - ``configure`` tears down any armed timer and arms exactly one new
      timer when the configuration has a token.
    - A timer tick publishes the next fire time first, then starts a cycle
      unless one is already running (the tick is skipped in that case).
    - ``trigger_manual`` starts a cycle right away; while a cycle is running
      it is rejected, never queued.

    Cycles run through ``executor`` (a worker thread by default) so network
    I/O never blocks the timer or the UI thread.
    """

    def __init__(
        self,
        refresher: Refresher,
        listener: RefreshListener | None = None,
        timer_factory: TimerFactory = RepeatingTimer,
        executor: CycleExecutor = run_in_thread,
        clock: Callable[[], datetime] = TimeUtils.now_localized,
    ) -> None:
        """Initialize the scheduler in the IDLE state.

        Args:
            refresher: Runs a single cycle
            listener: Receives next-refresh and status events
            timer_factory: Creates armed repeating timers
            executor: Runs a cycle job (must not run it on the timer's thread
                if cycles can outlast the interval)
            clock: Source of "now"
        """
        self.refresher = refresher
        self.listener: RefreshListener = listener or LoggingListener()
        self._timer_factory = timer_factory
        self._executor = executor
        self._clock = clock

        self._lock = threading.RLock()
        self._idle = threading.Event()
        self._idle.set()
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._config: UserSettings | None = None
        self._next_fire: datetime | None = None
        self._in_flight = False
        self._unsubscribe: Callable[[], None] | None = None
        self.last_result: bool | None = None

    # ---- state ----
    @property
    def state(self) -> ScheduleState:
        """Current scheduler state."""
        with self._lock:
            if self._in_flight:
                return ScheduleState.RUNNING
            if self._timer is not None:
                return ScheduleState.SCHEDULED
            return ScheduleState.IDLE

    @property
    def next_fire(self) -> datetime | None:
        """When the timer fires next, or None without a timer."""
        with self._lock:
            return self._next_fire

    @property
    def config(self) -> UserSettings | None:
        """Configuration used for the next cycle."""
        with self._lock:
            return self._config

    # ---- transitions ----
    def configure(self, config: UserSettings) -> None:
        """Apply a new configuration, re-arming the timer from scratch."""
        with self._lock:
            self._config = config
            self._disarm()
            if config.has_token:
                self._arm(config)
            else:
                logger.info("No API token configured; automatic refresh disabled")
            next_fire = self._next_fire

        self.listener.next_refresh_changed(next_fire)

    def trigger_manual(self) -> bool:
        """Start a cycle now.

        Returns:
            True if a cycle was started, False if one is already running or
            no token is configured
        """
        rearmed = False
        next_fire: datetime | None = None
        with self._lock:
            config = self._config
            if self._in_flight:
                rejected = BUSY_MESSAGE
            elif config is None or not config.has_token:
                rejected = NO_TOKEN_MESSAGE
            else:
                rejected = None
                self._begin_cycle()
                # Restart the interval from now so the published time is real
                rearmed = self._timer is not None
                if rearmed:
                    self._disarm()
                    self._arm(config)
                next_fire = self._next_fire

        if rejected is not None:
            logger.info("Manual refresh ignored: %s", rejected)
            self.listener.status_changed(rejected)
            return False

        if rearmed:
            self.listener.next_refresh_changed(next_fire)
        return self._dispatch(config)

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._config is None:
                return  # stale tick from a cancelled timer
            config = self._config
            self._next_fire = self._clock() + config.refresh_interval
            next_fire = self._next_fire
            start = not self._in_flight
            if start:
                self._begin_cycle()

        self.listener.next_refresh_changed(next_fire)
        if not start:
            logger.warning("Previous refresh still running; skipping this tick")
            return
        self._dispatch(config)

    def _dispatch(self, config: UserSettings) -> bool:
        try:
            self._executor(partial(self._run_cycle, config))
        except Exception:
            logger.exception("Could not start refresh cycle")
            with self._lock:
                self._in_flight = False
                self.last_result = False
            self._idle.set()
            self.listener.error_raised(CRASH_MESSAGE)
            self.listener.status_changed(CRASH_MESSAGE)
            return False
        return True

    def _run_cycle(self, config: UserSettings) -> None:
        ok = False
        try:
            ok = self.refresher.refresh(config)
        except Exception:
            logger.exception("Refresh cycle crashed")
            self.listener.error_raised(CRASH_MESSAGE)
            self.listener.status_changed(CRASH_MESSAGE)
        finally:
            with self._lock:
                self._in_flight = False
                self.last_result = ok
            self._idle.set()

    # ---- lifecycle ----
    def attach(self, store: SettingsStore) -> None:
        """Follow a settings store: configure now and on every change."""
        self.detach()
        self.configure(store.current())
        self._unsubscribe = store.subscribe(self.configure)

    def detach(self) -> None:
        """Stop following the settings store."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no cycle is running.

        Returns:
            False if the timeout expired first
        """
        return self._idle.wait(timeout)

    def shutdown(self) -> None:
        """Detach, cancel the timer and return to IDLE (a running cycle finishes)."""
        self.detach()
        with self._lock:
            self._disarm()
        self.listener.next_refresh_changed(None)

    # ---- helpers (call with the lock held) ----
    def _arm(self, config: UserSettings) -> None:
        self._generation += 1
        interval = config.refresh_interval
        self._timer = self._timer_factory(
            interval.total_seconds(), partial(self._on_timer, self._generation)
        )
        self._next_fire = self._clock() + interval
        logger.debug("Timer armed every %d min", config.refresh_minutes)

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            self._generation += 1
        self._next_fire = None

    def _begin_cycle(self) -> None:
        self._in_flight = True
        self._idle.clear()
