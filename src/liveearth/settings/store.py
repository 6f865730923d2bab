"""Change-notifying configuration source."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, Final

from liveearth.settings.user import UserSettings

logger: Final = logging.getLogger(__name__)

SettingsCallback = Callable[[UserSettings], None]


class SettingsStore:
    """Holds the current UserSettings and notifies subscribers on change.

    Subscribers are called synchronously, in subscription order, with the new
    settings. Setting an identical value does not notify anybody.
    """

    def __init__(self, settings: UserSettings | None = None) -> None:
        self._settings = settings or UserSettings()
        self._subscribers: list[SettingsCallback] = []
        self._lock = threading.Lock()

    def current(self) -> UserSettings:
        """Return the current settings snapshot."""
        with self._lock:
            return self._settings

    def subscribe(self, callback: SettingsCallback) -> Callable[[], None]:
        """Register a change callback.

        Args:
            callback: Called with the new settings after every change

        Returns:
            Function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def replace(self, settings: UserSettings) -> bool:
        """Swap in a new settings object.

        Returns:
            True if the settings changed and subscribers were notified
        """
        with self._lock:
            if settings == self._settings:
                return False
            self._settings = settings
            subscribers = list(self._subscribers)

        logger.debug("Settings changed; notifying %d subscriber(s)", len(subscribers))
        for callback in subscribers:
            callback(settings)
        return True

    def update(self, **changes: Any) -> bool:
        """Change individual fields, re-validating the whole configuration.

        Raises:
            pydantic.ValidationError: If the resulting settings are invalid
        """
        merged = {**self.current().model_dump(), **changes}
        return self.replace(UserSettings.model_validate(merged))

    def reload(self, path: Path | None = None) -> bool:
        """Reload settings from a YAML file (see UserSettings.load)."""
        return self.replace(UserSettings.load(path))
