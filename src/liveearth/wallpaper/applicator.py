"""Persist a composite and apply it to every active display."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Final

from PIL import Image

from liveearth.constants import PERSIST_JPEG_QUALITY
from liveearth.display.protocols import Desktop
from liveearth.display.ui_thread import UiThread
from liveearth.errors import (
    DisplayEnumerationError,
    ImagePersistError,
    NoDisplaysFoundError,
    WallpaperApplyError,
)
from liveearth.settings.application import AppPaths
from liveearth.utils.file import ensure_directory_exists, write_file_durably
from liveearth.utils.time import TimeUtils
from liveearth.wallpaper.image import encode_jpeg

logger: Final = logging.getLogger(__name__)

# Same-second writes get a numeric suffix; this bounds the search
MAX_NAME_ATTEMPTS: Final = 100


class WallpaperApplicator:
    """Writes the wallpaper file and hands it to the desktop backend.

    Encoding and writing happen on the calling (worker) thread. Display
    enumeration and every ``set_background`` call run on the UI thread.
    The file written for a cycle is never deleted here; the reaper removes
    it once it is old enough.
    """

    def __init__(
        self,
        desktop: Desktop,
        ui_thread: UiThread,
        paths: AppPaths | None = None,
        quality: int = PERSIST_JPEG_QUALITY,
        clock: Callable[[], datetime] = TimeUtils.now_localized,
    ) -> None:
        """Initialize the applicator.

        Args:
            desktop: Platform backend
            ui_thread: Thread that owns display mutations
            paths: Managed wallpaper directory layout
            quality: JPEG quality of the persisted file
            clock: Source of "now" for file names
        """
        self.desktop = desktop
        self.ui_thread = ui_thread
        self.paths = paths or AppPaths.from_temp_dir()
        self.quality = quality
        self._clock = clock

    def apply(self, image: Image.Image) -> Path:
        """Persist ``image`` and set it as background on all displays.

        Returns:
            Path of the file now used as wallpaper

        Raises:
            ImagePersistError: If encoding or writing fails
            DisplayEnumerationError: If the displays cannot be listed
            NoDisplaysFoundError: If no display is active
            WallpaperApplyError: If any display failed (others keep the new image)
        """
        path = self.persist(image)
        self.ui_thread.call(self._apply_to_all_displays, path)
        logger.info("Wallpaper applied from %s", path.name)
        return path

    def persist(self, image: Image.Image) -> Path:
        """Encode ``image`` as JPEG and write it, fully flushed, to a new file.

        Raises:
            ImagePersistError: If encoding or writing fails
        """
        try:
            data = encode_jpeg(image, self.quality)
        except (OSError, ValueError) as exc:
            logger.error("JPEG encoding failed: %s", exc)
            raise ImagePersistError(original_error=exc) from exc

        try:
            ensure_directory_exists(self.paths.wallpaper_dir)
            path = self._write_unique(data)
        except OSError as exc:
            logger.error("Could not write wallpaper file: %s", exc)
            raise ImagePersistError(original_error=exc) from exc

        logger.debug("Wrote %d bytes to %s", len(data), path)
        return path

    def _write_unique(self, data: bytes) -> Path:
        timestamp = TimeUtils.datetime_to_epoch(self._clock())
        for attempt in range(MAX_NAME_ATTEMPTS):
            path = self.paths.wallpaper_file(timestamp, attempt)
            try:
                write_file_durably(path, data)
            except FileExistsError:
                continue
            return path
        raise FileExistsError(f"No free wallpaper file name for timestamp {timestamp}")

    def _apply_to_all_displays(self, image_path: Path) -> None:
        """Set the background on every display; runs on the UI thread."""
        if not self.ui_thread.is_current():
            raise RuntimeError("display backgrounds must be changed on the UI thread")

        try:
            displays = self.desktop.active_displays()
        except Exception as exc:
            logger.error("Could not enumerate displays: %s", exc)
            raise DisplayEnumerationError(exc) from exc

        if not displays:
            raise NoDisplaysFoundError()

        errors: dict[str, Exception] = {}
        for display in displays:
            try:
                self.desktop.set_background(display, image_path)
            except Exception as exc:
                logger.warning("Failed to set background on %s: %s", display, exc)
                errors[display.id] = exc

        if errors:
            logger.error(
                "Wallpaper failed on %d of %d display(s)", len(errors), len(displays)
            )
            raise WallpaperApplyError(errors)
