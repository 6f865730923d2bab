"""Event sinks that receive refresh progress."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final, Protocol, runtime_checkable

import typer
from PIL import Image

from liveearth.utils.time import TimeUtils

logger: Final = logging.getLogger(__name__)


@runtime_checkable
class RefreshListener(Protocol):
    """Receives everything a status display would show.

    Events are delivered synchronously on the thread that produced them, in
    the order the refresh cycle produced them.
    """

    def status_changed(self, message: str) -> None:
        """A new human-readable status line."""
        ...

    def last_success_changed(self, when: datetime) -> None:
        """A composite was fetched successfully at ``when``."""
        ...

    def next_refresh_changed(self, when: datetime | None) -> None:
        """The next automatic refresh moved (None: no refresh scheduled)."""
        ...

    def preview_changed(self, image: Image.Image) -> None:
        """A new composite is available for preview."""
        ...

    def error_raised(self, message: str) -> None:
        """A cycle failed with a user-facing message."""
        ...


class LoggingListener:
    """Writes every event to the application log."""

    def status_changed(self, message: str) -> None:
        logger.info("Status: %s", message)

    def last_success_changed(self, when: datetime) -> None:
        logger.debug("Last successful fetch at %s", when.isoformat(timespec="seconds"))

    def next_refresh_changed(self, when: datetime | None) -> None:
        if when is None:
            logger.info("Automatic refresh disabled")
        else:
            logger.info("Next refresh at %s", when.strftime("%H:%M:%S"))

    def preview_changed(self, image: Image.Image) -> None:
        logger.debug("Preview updated (%dx%d)", *image.size)

    def error_raised(self, message: str) -> None:
        logger.error("%s", message)


class ConsoleListener:
    """Prints status changes for the CLI."""

    def status_changed(self, message: str) -> None:
        typer.echo(message)

    def last_success_changed(self, when: datetime) -> None:
        pass

    def next_refresh_changed(self, when: datetime | None) -> None:
        if when is not None:
            remaining = TimeUtils.format_countdown(when - TimeUtils.now_localized())
            typer.echo(f"Next refresh at {when.strftime('%H:%M')} (in {remaining})")

    def preview_changed(self, image: Image.Image) -> None:
        pass

    def error_raised(self, message: str) -> None:
        typer.secho(message, fg=typer.colors.RED, err=True)


class FanOutListener:
    """Forwards every event to several listeners, in order."""

    def __init__(self, *listeners: RefreshListener) -> None:
        self.listeners = list(listeners)

    def status_changed(self, message: str) -> None:
        for listener in self.listeners:
            listener.status_changed(message)

    def last_success_changed(self, when: datetime) -> None:
        for listener in self.listeners:
            listener.last_success_changed(when)

    def next_refresh_changed(self, when: datetime | None) -> None:
        for listener in self.listeners:
            listener.next_refresh_changed(when)

    def preview_changed(self, image: Image.Image) -> None:
        for listener in self.listeners:
            listener.preview_changed(image)

    def error_raised(self, message: str) -> None:
        for listener in self.listeners:
            listener.error_raised(message)


@dataclass
class RecordingListener:
    """Listener for testing; keeps every event as ``(name, value)``."""

    events: list[tuple[str, Any]] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _record(self, name: str, value: Any) -> None:
        with self._lock:
            self.events.append((name, value))

    def status_changed(self, message: str) -> None:
        self._record("status", message)

    def last_success_changed(self, when: datetime) -> None:
        self._record("last_success", when)

    def next_refresh_changed(self, when: datetime | None) -> None:
        self._record("next_refresh", when)

    def preview_changed(self, image: Image.Image) -> None:
        self._record("preview", image)

    def error_raised(self, message: str) -> None:
        self._record("error", message)

    def values(self, name: str) -> list[Any]:
        """All recorded values for one event name, oldest first."""
        with self._lock:
            return [value for event, value in self.events if event == name]

    @property
    def statuses(self) -> list[str]:
        return self.values("status")

    @property
    def errors(self) -> list[str]:
        return self.values("error")
