import subprocess
from pathlib import Path
from unittest.mock import Mock

import pytest

from liveearth.display import create_desktop
from liveearth.display.gnome import BACKGROUND_SCHEMA, GnomeDesktop, parse_xrandr_monitors
from liveearth.display.protocols import DisplayInfo

XRANDR_OUTPUT = """\
Monitors: 2
 0: +HDMI-1 2560/597x1440/336+1920+0  HDMI-1
 1: +*eDP-1 1920/344x1080/194+0+0  eDP-1
"""


def completed(stdout: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout, stderr="")


def test_parse_xrandr_orders_left_to_right() -> None:
    displays = parse_xrandr_monitors(XRANDR_OUTPUT)

    assert [d.id for d in displays] == ["eDP-1", "HDMI-1"]
    assert displays[1] == DisplayInfo("HDMI-1", "HDMI-1", 2560, 1440, 1920, 0)


def test_parse_xrandr_ignores_noise() -> None:
    assert parse_xrandr_monitors("Monitors: 0\n") == []


def test_active_displays_uses_xrandr() -> None:
    runner = Mock(return_value=completed(XRANDR_OUTPUT))
    displays = GnomeDesktop(runner=runner).active_displays()

    assert len(displays) == 2
    assert runner.call_args.args[0] == ["xrandr", "--listmonitors"]


@pytest.mark.parametrize(
    "error",
    [FileNotFoundError("xrandr"), subprocess.CalledProcessError(1, ["xrandr"])],
)
def test_active_displays_falls_back_without_xrandr(error: Exception) -> None:
    runner = Mock(side_effect=error)
    displays = GnomeDesktop(runner=runner).active_displays()
    assert [d.id for d in displays] == ["default"]


def test_set_background_uses_gsettings(tmp_path: Path) -> None:
    image = tmp_path / "earth.jpg"
    image.write_bytes(b"jpeg")
    runner = Mock(return_value=completed())

    GnomeDesktop(runner=runner).set_background(DisplayInfo("eDP-1"), image)

    commands = [c.args[0] for c in runner.call_args_list]
    uri = image.resolve().as_uri()
    assert commands == [
        ["gsettings", "set", BACKGROUND_SCHEMA, "picture-options", "zoom"],
        ["gsettings", "set", BACKGROUND_SCHEMA, "picture-uri", uri],
        ["gsettings", "set", BACKGROUND_SCHEMA, "picture-uri-dark", uri],
    ]
    assert all(c.kwargs["check"] for c in runner.call_args_list)


def test_set_background_propagates_failures(tmp_path: Path) -> None:
    runner = Mock(side_effect=subprocess.CalledProcessError(1, ["gsettings"]))
    with pytest.raises(subprocess.CalledProcessError):
        GnomeDesktop(runner=runner).set_background(DisplayInfo("eDP-1"), tmp_path / "x.jpg")


def test_create_desktop_by_platform() -> None:
    assert isinstance(create_desktop("linux"), GnomeDesktop)
    with pytest.raises(RuntimeError, match="darwin"):
        create_desktop("darwin")
