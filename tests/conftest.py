import base64
import errno
import socket
from collections.abc import Callable, Generator
from io import BytesIO
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from PIL import Image

from liveearth.display.ui_thread import UiThread
from liveearth.settings import AppPaths, UserSettings


class FakeTimer:
    """Timer that only fires when the test says so."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.callback()


class FakeTimerFactory:
    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, interval: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]


def make_jpeg(width: int = 64, height: int = 32, color: tuple[int, int, int] = (10, 80, 160)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="JPEG", quality=90)
    return buf.getvalue()


def make_b64_jpeg(width: int = 64, height: int = 32) -> str:
    return base64.b64encode(make_jpeg(width, height)).decode("ascii")


@pytest.fixture
def settings() -> UserSettings:
    return UserSettings(api_token="test-token-abc123", refresh_minutes=60)


@pytest.fixture
def paths(tmp_path: Path) -> AppPaths:
    return AppPaths(wallpaper_dir=tmp_path / "wallpapers")


@pytest.fixture
def ui_thread() -> Generator[UiThread, None, None]:
    thread = UiThread(name="test-ui")
    yield thread
    thread.stop()


@pytest.fixture
def timer_factory() -> FakeTimerFactory:
    return FakeTimerFactory()


@pytest.fixture
def b64_jpeg() -> str:
    return make_b64_jpeg()


def sockets_without_route(*families: int) -> Callable[..., MagicMock]:
    """socket.socket replacement whose connect fails for the given families."""

    def make(family: int = socket.AF_INET, *args: object) -> MagicMock:
        sock = MagicMock()
        sock.__enter__.return_value = sock
        if family in families:
            sock.connect.side_effect = OSError(errno.ENETUNREACH, "Network is unreachable")
        return sock

    return make
