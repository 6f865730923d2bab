from datetime import UTC, datetime, timedelta
from unittest.mock import Mock

import pytest
from PIL import Image

from liveearth.notifications import (
    ConsoleListener,
    FanOutListener,
    LoggingListener,
    RecordingListener,
    RefreshListener,
)
from liveearth.utils.time import TimeUtils


@pytest.mark.parametrize("cls", [LoggingListener, ConsoleListener, RecordingListener])
def test_listeners_satisfy_protocol(cls: type) -> None:
    assert isinstance(cls(), RefreshListener)


def test_recording_listener_keeps_order() -> None:
    listener = RecordingListener()
    when = datetime(2024, 5, 1, tzinfo=UTC)

    listener.status_changed("one")
    listener.next_refresh_changed(when)
    listener.error_raised("bad")
    listener.status_changed("two")

    assert listener.statuses == ["one", "two"]
    assert listener.errors == ["bad"]
    assert listener.values("next_refresh") == [when]
    assert [name for name, _ in listener.events] == ["status", "next_refresh", "error", "status"]


def test_fan_out_forwards_everything() -> None:
    a, b = Mock(), Mock()
    fan = FanOutListener(a, b)
    image = Image.new("RGB", (4, 4))
    when = datetime(2024, 5, 1, tzinfo=UTC)

    fan.status_changed("s")
    fan.last_success_changed(when)
    fan.next_refresh_changed(None)
    fan.preview_changed(image)
    fan.error_raised("e")

    for mock in (a, b):
        mock.status_changed.assert_called_once_with("s")
        mock.last_success_changed.assert_called_once_with(when)
        mock.next_refresh_changed.assert_called_once_with(None)
        mock.preview_changed.assert_called_once_with(image)
        mock.error_raised.assert_called_once_with("e")


def test_console_listener_output(capsys: pytest.CaptureFixture[str]) -> None:
    listener = ConsoleListener()
    listener.status_changed("Setting wallpaper...")
    listener.next_refresh_changed(TimeUtils.now_localized() + timedelta(minutes=90, seconds=30))
    listener.next_refresh_changed(None)
    listener.error_raised("Rate limit exceeded")

    out, err = capsys.readouterr()
    assert "Setting wallpaper..." in out
    assert "(in 1h 30m)" in out
    assert "Rate limit exceeded" in err
