"""Internal application settings derived from user settings."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

from liveearth.constants import (
    PERSIST_JPEG_QUALITY,
    WALLPAPER_DIR_NAME,
    WALLPAPER_PREFIX,
    WALLPAPER_SUFFIX,
)
from liveearth.settings.user import UserSettings


@dataclass
class AppPaths:
    """Application file and directory paths.

    The wallpaper directory is owned by this process: every persisted
    wallpaper lives there and the reaper only ever deletes from it.
    """

    wallpaper_dir: Path
    wallpaper_prefix: str = WALLPAPER_PREFIX
    wallpaper_suffix: str = WALLPAPER_SUFFIX

    @classmethod
    def from_temp_dir(cls, temp_dir: Path | None = None) -> AppPaths:
        """Create paths under the system temporary directory."""
        base = temp_dir or Path(tempfile.gettempdir())
        return cls(wallpaper_dir=base / WALLPAPER_DIR_NAME)

    def wallpaper_file(self, timestamp: int, attempt: int = 0) -> Path:
        """Path of the wallpaper written at ``timestamp`` (epoch seconds)."""
        suffix = f"_{attempt}" if attempt else ""
        return self.wallpaper_dir / f"{self.wallpaper_prefix}{timestamp}{suffix}{self.wallpaper_suffix}"


class ApplicationSettings:
    """Application settings container.

    Combines user-provided configuration with application defaults:

    - Path configuration (managed wallpaper directory)
    - Persist quality for the JPEG handed to the OS

    Examples:
        user_settings = UserSettings.load()
        app_settings = ApplicationSettings(user_settings)
        wallpaper_dir = app_settings.paths.wallpaper_dir
    """

    def __init__(
        self,
        user_settings: UserSettings,
        paths: AppPaths | None = None,
        persist_quality: int = PERSIST_JPEG_QUALITY,
    ):
        """Initialize application settings with configuration sources."""
        self.user = user_settings
        self.paths = paths or AppPaths.from_temp_dir()
        self.persist_quality = persist_quality
