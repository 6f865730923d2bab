"""Windows desktop backend (user32 via ctypes)."""

from __future__ import annotations

import ctypes
import logging
from contextlib import suppress
from pathlib import Path
from typing import Any, Final

from liveearth.display.protocols import DisplayInfo

logger: Final = logging.getLogger(__name__)

SPI_SETDESKWALLPAPER: Final = 20
SPIF_UPDATEINIFILE: Final = 0x1
SPIF_SENDWININICHANGE: Final = 0x2

# HKCU\Control Panel\Desktop WallpaperStyle "10" is "Fill"
DESKTOP_KEY: Final = r"Control Panel\Desktop"
WALLPAPER_STYLE_FILL: Final = "10"


class WindowsDesktop:
    """Sets the wallpaper with SystemParametersInfoW using the Fill style.

    Windows applies the SPI wallpaper to every monitor, so per-display calls
    repeat the same system-wide setting.
    """

    def __init__(self) -> None:
        self._user32: Any = ctypes.windll.user32  # type: ignore[attr-defined]

    def active_displays(self) -> list[DisplayInfo]:
        """Enumerate monitors with EnumDisplayMonitors."""
        from ctypes import wintypes

        displays: list[DisplayInfo] = []

        with suppress(AttributeError):
            self._user32.SetProcessDPIAware()

        monitor_enum_proc = ctypes.WINFUNCTYPE(  # type: ignore[attr-defined]
            ctypes.c_int,
            wintypes.HMONITOR,
            wintypes.HDC,
            ctypes.POINTER(wintypes.RECT),
            wintypes.LPARAM,
        )

        def callback(hmonitor: Any, _hdc: Any, rect_ptr: Any, _lparam: Any) -> int:
            rect = rect_ptr.contents
            displays.append(
                DisplayInfo(
                    id=hex(int(hmonitor)),
                    name=f"Monitor {len(displays) + 1}",
                    width=rect.right - rect.left,
                    height=rect.bottom - rect.top,
                    x=rect.left,
                    y=rect.top,
                )
            )
            return 1

        if not self._user32.EnumDisplayMonitors(None, None, monitor_enum_proc(callback), 0):
            raise ctypes.WinError()  # type: ignore[attr-defined]

        displays.sort(key=lambda d: (d.x, d.y))
        return displays

    def set_background(self, display: DisplayInfo, image_path: Path) -> None:
        """Set the Fill style and the wallpaper file.

        Raises:
            OSError: If SystemParametersInfoW fails
        """
        import winreg  # type: ignore[import-not-found]

        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, DESKTOP_KEY, 0, winreg.KEY_SET_VALUE) as key:
            winreg.SetValueEx(key, "WallpaperStyle", 0, winreg.REG_SZ, WALLPAPER_STYLE_FILL)
            winreg.SetValueEx(key, "TileWallpaper", 0, winreg.REG_SZ, "0")

        ok = self._user32.SystemParametersInfoW(
            SPI_SETDESKWALLPAPER,
            0,
            str(image_path.resolve()),
            SPIF_UPDATEINIFILE | SPIF_SENDWININICHANGE,
        )
        if not ok:
            raise ctypes.WinError()  # type: ignore[attr-defined]
        logger.debug("Wallpaper for %s set to %s", display, image_path)
