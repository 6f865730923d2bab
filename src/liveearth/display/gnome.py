"""GNOME desktop backend (gsettings + xrandr)."""

from __future__ import annotations

import logging
import re
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any, Final

from liveearth.display.protocols import DisplayInfo

logger: Final = logging.getLogger(__name__)

BACKGROUND_SCHEMA: Final = "org.gnome.desktop.background"

# " 0: +*eDP-1 1920/344x1080/194+0+0  eDP-1"
_MONITOR_LINE: Final = re.compile(
    r"^\s*\d+:\s+\+?\*?(?P<name>\S+)\s+"
    r"(?P<w>\d+)/\d+x(?P<h>\d+)/\d+\+(?P<x>-?\d+)\+(?P<y>-?\d+)"
)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def parse_xrandr_monitors(output: str) -> list[DisplayInfo]:
    """Parse ``xrandr --listmonitors`` output into displays.

    Args:
        output: Command stdout

    Returns:
        Displays sorted left-to-right, top-to-bottom
    """
    displays: list[DisplayInfo] = []
    for line in output.splitlines():
        m = _MONITOR_LINE.match(line)
        if not m:
            continue
        displays.append(
            DisplayInfo(
                id=m["name"],
                name=m["name"],
                width=int(m["w"]),
                height=int(m["h"]),
                x=int(m["x"]),
                y=int(m["y"]),
            )
        )
    displays.sort(key=lambda d: (d.x, d.y))
    return displays


class GnomeDesktop:
    """Sets the GNOME background through gsettings.

    GNOME keeps one background for all monitors, so setting it for each
    display applies the same picture-uri repeatedly; that keeps the
    per-display contract while being idempotent.
    """

    def __init__(self, runner: Runner | None = None) -> None:
        """Initialize the backend.

        Args:
            runner: ``subprocess.run`` compatible callable (for testing)
        """
        self._run: Runner = runner or subprocess.run

    def active_displays(self) -> list[DisplayInfo]:
        """Enumerate monitors with xrandr.

        Without xrandr (pure Wayland sessions) a single logical display is
        reported, since gsettings still applies to all of them.
        """
        try:
            result = self._run(
                ["xrandr", "--listmonitors"], capture_output=True, text=True, check=True
            )
        except (FileNotFoundError, subprocess.CalledProcessError) as exc:
            logger.debug("xrandr unavailable (%s); assuming one display", exc)
            return [DisplayInfo("default", "Default display")]
        return parse_xrandr_monitors(result.stdout)

    def set_background(self, display: DisplayInfo, image_path: Path) -> None:
        """Point the GNOME background at ``image_path`` with zoom scaling.

        Raises:
            subprocess.CalledProcessError: If gsettings rejects a key
            FileNotFoundError: If gsettings is not installed
        """
        uri = image_path.resolve().as_uri()
        for key, value in (
            ("picture-options", "zoom"),
            ("picture-uri", uri),
            ("picture-uri-dark", uri),
        ):
            self._gsettings_set(key, value)
        logger.debug("Background for %s set to %s", display, image_path)

    def _gsettings_set(self, key: str, value: str) -> None:
        kwargs: dict[str, Any] = {"capture_output": True, "text": True, "check": True}
        self._run(["gsettings", "set", BACKGROUND_SCHEMA, key, value], **kwargs)
