"""Application settings management.

This package provides:
- UserSettings: User-configurable settings loaded from config.yaml
- ApplicationSettings: Internal application settings and defaults
- SettingsStore: Change-notifying holder of the current UserSettings
"""

from liveearth.settings.application import AppPaths, ApplicationSettings
from liveearth.settings.store import SettingsStore
from liveearth.settings.user import ImageSize, UserSettings

__all__ = [
    "AppPaths",
    "ApplicationSettings",
    "ImageSize",
    "SettingsStore",
    "UserSettings",
]
