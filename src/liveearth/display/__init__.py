"""Display package - desktop backends and the UI thread they run on."""

from __future__ import annotations

import sys

from liveearth.display.protocols import Desktop, DisplayInfo, MockDesktop
from liveearth.display.ui_thread import UiThread


def create_desktop(platform: str | None = None) -> Desktop:
    """Create the desktop backend for the running platform.

    Args:
        platform: ``sys.platform`` style name (default: current platform)

    Returns:
        A Desktop implementation

    Raises:
        RuntimeError: If the platform has no backend
    """
    platform = platform or sys.platform
    if platform.startswith("win"):
        from liveearth.display.windows import WindowsDesktop

        return WindowsDesktop()
    if platform.startswith("linux"):
        from liveearth.display.gnome import GnomeDesktop

        return GnomeDesktop()
    raise RuntimeError(f"No desktop backend for platform {platform!r}")


__all__ = ["Desktop", "DisplayInfo", "MockDesktop", "UiThread", "create_desktop"]
