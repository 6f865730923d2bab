# filepath: src/liveearth/controller.py
"""Core controller for Live Earth Wallpaper."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import Final

from liveearth.composite.api import CompositeAPI
from liveearth.composite.connectivity import AlwaysOnline
from liveearth.composite.models import CompositeImage
from liveearth.display.protocols import Desktop, MockDesktop
from liveearth.display.ui_thread import UiThread
from liveearth.errors import RefreshError
from liveearth.notifications import LoggingListener, RefreshListener
from liveearth.scheduling.scheduler import CRASH_MESSAGE, NO_TOKEN_MESSAGE
from liveearth.settings.application import AppPaths, ApplicationSettings
from liveearth.settings.store import SettingsStore
from liveearth.settings.user import UserSettings
from liveearth.wallpaper.applicator import WallpaperApplicator
from liveearth.wallpaper.reaper import StaleFileReaper

logger: Final = logging.getLogger(__name__)

FETCHING_MESSAGE: Final = "Generating Earth composite..."
APPLYING_MESSAGE: Final = "Setting wallpaper..."
SUCCESS_MESSAGE: Final = "Wallpaper updated successfully!"


class EarthWallpaper:
    """Main controller class for the wallpaper application.

    This class orchestrates one refresh cycle:
    - Reading the settings snapshot for the cycle
    - Fetching the composite from the compositor API
    - Publishing the preview and the success time
    - Persisting the image and applying it to every display
    - Reporting the outcome to the listener

    All application dependencies are created here unless injected, making
    this the central coordination point for the application.
    """

    def __init__(
        self,
        store: SettingsStore,
        desktop: Desktop,
        ui_thread: UiThread | None = None,
        composite_api: CompositeAPI | None = None,
        applicator: WallpaperApplicator | None = None,
        listener: RefreshListener | None = None,
        paths: AppPaths | None = None,
    ):
        """Initialize the wallpaper controller.

        Args:
            store: Source of the current settings
            desktop: Platform desktop backend
            ui_thread: Thread that owns display mutations
            composite_api: Optional custom compositor client
            applicator: Optional custom applicator
            listener: Receives status events (default: log only)
            paths: Optional custom managed directory layout
        """
        self.store = store
        self.settings = ApplicationSettings(store.current(), paths=paths)
        self.listener: RefreshListener = listener or LoggingListener()
        self.ui_thread = ui_thread or UiThread()

        # Allow dependency injection or create defaults
        self.composite_api = composite_api or CompositeAPI()
        self.applicator = applicator or WallpaperApplicator(
            desktop,
            self.ui_thread,
            paths=self.settings.paths,
            quality=self.settings.persist_quality,
        )
        self.last_composite: CompositeImage | None = None
        self._reaper: StaleFileReaper | None = None

    @classmethod
    def from_config(
        cls,
        config_path: Path,
        desktop: Desktop,
        ui_thread: UiThread | None = None,
        listener: RefreshListener | None = None,
        debug: bool = False,
    ) -> EarthWallpaper:
        """Build a controller from a config file, configuring logging first.

        Args:
            config_path: Path to config.yaml
            desktop: Platform desktop backend
            ui_thread: Thread that owns display mutations
            listener: Receives status events
            debug: Enable debug logging
        """
        # Configure logging
        logging.basicConfig(
            level=logging.DEBUG if debug else logging.INFO,
            format="%(asctime)s [%(levelname)s] %(message)s",
        )

        settings = UserSettings.load(config_path)
        logger.debug("Loaded %s (token %s)", config_path, settings.masked_token)
        return cls(SettingsStore(settings), desktop, ui_thread=ui_thread, listener=listener)

    @property
    def paths(self) -> AppPaths:
        """Managed wallpaper directory layout."""
        return self.settings.paths

    def refresh(self, config: UserSettings | None = None, at: datetime | None = None) -> bool:
        """Fetch a composite and apply it as wallpaper.

        This is the main application workflow, orchestrating:
        1. Checking that an API token is configured
        2. Fetching the composite (network, on the calling thread)
        3. Publishing the preview image and fetch time
        4. Persisting and applying it (display changes on the UI thread)

        Args:
            config: Settings snapshot (default: the store's current settings)
            at: Optional point in time to render

        Returns:
            True if successful, False on error
        """
        cfg = config or self.store.current()
        if not cfg.has_token:
            self.listener.status_changed(NO_TOKEN_MESSAGE)
            return False

        self.listener.status_changed(FETCHING_MESSAGE)
        try:
            composite = self.composite_api.fetch(cfg, at)
        except RefreshError as err:
            self._report_failure("Failed to fetch wallpaper", err)
            return False
        except Exception:
            logger.exception("Unexpected error while fetching composite")
            self._report_crash("Failed to fetch wallpaper")
            return False

        self.last_composite = composite
        self.listener.preview_changed(composite.image)
        self.listener.last_success_changed(composite.fetched_at)

        self.listener.status_changed(APPLYING_MESSAGE)
        try:
            self.applicator.apply(composite.image)
        except RefreshError as err:
            self._report_failure("Failed to set wallpaper", err)
            return False
        except Exception:
            logger.exception("Unexpected error while applying wallpaper")
            self._report_crash("Failed to set wallpaper")
            return False

        self.listener.status_changed(SUCCESS_MESSAGE)
        return True

    def start_housekeeping(self) -> threading.Thread:
        """Sweep old wallpapers now and keep sweeping periodically.

        Returns:
            The thread running the initial sweep
        """
        cfg = self.store.current()
        if self._reaper is None:
            self._reaper = StaleFileReaper(self.paths.wallpaper_dir)
        self._reaper.max_age = cfg.cleanup_age
        self._reaper.interval = timedelta(minutes=cfg.cleanup_interval_minutes)
        return self._reaper.start()

    def stop_housekeeping(self) -> None:
        """Cancel periodic sweeping."""
        if self._reaper is not None:
            self._reaper.stop()

    def _report_failure(self, prefix: str, err: RefreshError) -> None:
        if err.original_error is not None:
            logger.debug("Cycle failure cause: %r", err.original_error)
        self.listener.error_raised(err.message)
        self.listener.status_changed(f"{prefix}: {err.message}")

    def _report_crash(self, prefix: str) -> None:
        self.listener.error_raised(CRASH_MESSAGE)
        self.listener.status_changed(f"{prefix}: {CRASH_MESSAGE}")

    @classmethod
    def create_for_testing(
        cls,
        settings: UserSettings | None = None,
        desktop: Desktop | None = None,
        paths: AppPaths | None = None,
        listener: RefreshListener | None = None,
    ) -> EarthWallpaper:
        """Create an EarthWallpaper configured for testing.

        Network prechecks are disabled and a MockDesktop is used unless
        another desktop is given.

        Args:
            settings: Settings to start with (default: a test token)
            desktop: Desktop backend (default: MockDesktop)
            paths: Managed directory layout
            listener: Event listener

        Returns:
            EarthWallpaper instance configured for testing
        """
        store = SettingsStore(settings or UserSettings(api_token="test-token-1234"))
        return cls(
            store,
            desktop or MockDesktop(),
            composite_api=CompositeAPI(connectivity=AlwaysOnline()),
            listener=listener,
            paths=paths,
        )
