"""Housekeeping for persisted wallpaper files."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Final

from liveearth.constants import STALE_FILE_AGE, WALLPAPER_SUFFIX
from liveearth.scheduling.timer import RepeatingTimer, TimerFactory, TimerHandle
from liveearth.utils.time import TimeUtils

logger: Final = logging.getLogger(__name__)


def reap(
    directory: Path,
    max_age: timedelta = STALE_FILE_AGE,
    now: datetime | None = None,
    suffix: str = WALLPAPER_SUFFIX,
) -> list[Path]:
    """Delete wallpaper files older than ``max_age``.

    A file's age is taken from its modification time; wallpapers are never
    rewritten, so that is when they were created. Failing to delete one file
    does not stop the sweep, and an unreadable directory is simply skipped.

    Args:
        directory: Managed wallpaper directory
        max_age: Files strictly older than this are deleted
        now: Reference time (default: current time)
        suffix: Only files with this extension (case-insensitive) are considered

    Returns:
        Paths that were deleted
    """
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        logger.debug("Skipping cleanup of %s: %s", directory, exc)
        return []

    cutoff = (now or TimeUtils.now_localized()).timestamp() - max_age.total_seconds()
    removed: list[Path] = []
    for path in entries:
        if path.suffix.lower() != suffix:
            continue
        try:
            if not path.is_file() or path.stat().st_mtime >= cutoff:
                continue
            path.unlink()
        except OSError as exc:
            logger.warning("Could not delete old wallpaper %s: %s", path.name, exc)
            continue
        removed.append(path)

    if removed:
        logger.info("Removed %d old wallpaper file(s) from %s", len(removed), directory)
    return removed


def reap_in_background(
    directory: Path, max_age: timedelta = STALE_FILE_AGE
) -> threading.Thread:
    """Run :func:`reap` on a daemon thread and return immediately."""
    thread = threading.Thread(
        target=reap, args=(directory, max_age), name="liveearth-reaper", daemon=True
    )
    thread.start()
    return thread


class StaleFileReaper:
    """Reaps once on start and then every ``interval``."""

    def __init__(
        self,
        directory: Path,
        max_age: timedelta = STALE_FILE_AGE,
        interval: timedelta = timedelta(hours=1),
        timer_factory: TimerFactory = RepeatingTimer,
    ) -> None:
        self.directory = directory
        self.max_age = max_age
        self.interval = interval
        self._timer_factory = timer_factory
        self._timer: TimerHandle | None = None

    @property
    def running(self) -> bool:
        """Whether periodic reaping is armed."""
        return self._timer is not None

    def start(self) -> threading.Thread:
        """Start a sweep now and arm the periodic timer.

        Returns:
            The thread running the initial sweep
        """
        self.stop()
        self._timer = self._timer_factory(self.interval.total_seconds(), self._tick)
        return reap_in_background(self.directory, self.max_age)

    def stop(self) -> None:
        """Cancel periodic reaping."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _tick(self) -> None:
        reap_in_background(self.directory, self.max_age)
