import os
from datetime import timedelta
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import requests

from conftest import make_b64_jpeg
from liveearth.controller import (
    APPLYING_MESSAGE,
    FETCHING_MESSAGE,
    SUCCESS_MESSAGE,
    EarthWallpaper,
)
from liveearth.display.protocols import MockDesktop, create_error_simulating_desktop
from liveearth.notifications import RecordingListener
from liveearth.scheduling.scheduler import CRASH_MESSAGE, NO_TOKEN_MESSAGE
from liveearth.settings import AppPaths, UserSettings
from liveearth.utils.time import TimeUtils


def ok_response() -> Mock:
    resp = Mock(status_code=200)
    resp.json.return_value = {"image_data": make_b64_jpeg(80, 40), "success": True}
    return resp


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


def test_successful_cycle(paths: AppPaths, listener: RecordingListener) -> None:
    desktop = MockDesktop()
    controller = EarthWallpaper.create_for_testing(desktop=desktop, paths=paths, listener=listener)

    with patch("liveearth.composite.api.requests.post", return_value=ok_response()):
        assert controller.refresh() is True

    assert listener.statuses == [FETCHING_MESSAGE, APPLYING_MESSAGE, SUCCESS_MESSAGE]
    assert listener.errors == []
    [preview] = listener.values("preview")
    assert preview.size == (80, 40)
    assert listener.values("last_success") == [controller.last_composite.fetched_at]
    assert desktop.updated_display_ids() == ["display-1"]
    assert len(list(paths.wallpaper_dir.glob("*.jpg"))) == 1


def test_preview_is_published_before_apply(paths: AppPaths, listener: RecordingListener) -> None:
    controller = EarthWallpaper.create_for_testing(paths=paths, listener=listener)
    with patch("liveearth.composite.api.requests.post", return_value=ok_response()):
        controller.refresh()

    names = [name for name, _ in listener.events]
    assert names.index("preview") < listener.events.index(("status", APPLYING_MESSAGE))


def test_fetch_failure(paths: AppPaths, listener: RecordingListener) -> None:
    desktop = MockDesktop()
    controller = EarthWallpaper.create_for_testing(desktop=desktop, paths=paths, listener=listener)

    with patch(
        "liveearth.composite.api.requests.post", side_effect=requests.Timeout("read timeout")
    ):
        assert controller.refresh() is False

    msg = "Request timed out. The server may be busy, please try again."
    assert listener.errors == [msg]
    assert listener.statuses[-1] == f"Failed to fetch wallpaper: {msg}"
    assert listener.values("preview") == []
    assert desktop.background_calls == []


def test_apply_failure_keeps_other_displays(paths: AppPaths, listener: RecordingListener) -> None:
    desktop = create_error_simulating_desktop(3, fail_on_displays=["display-2"])
    controller = EarthWallpaper.create_for_testing(desktop=desktop, paths=paths, listener=listener)

    with patch("liveearth.composite.api.requests.post", return_value=ok_response()):
        assert controller.refresh() is False

    assert listener.statuses[-1] == "Failed to set wallpaper: Simulated failure on display-2"
    assert listener.errors == ["Simulated failure on display-2"]
    assert desktop.updated_display_ids() == ["display-1", "display-3"]
    # The preview was still published
    assert len(listener.values("preview")) == 1


def test_no_displays(paths: AppPaths, listener: RecordingListener) -> None:
    controller = EarthWallpaper.create_for_testing(
        desktop=MockDesktop(displays=[]), paths=paths, listener=listener
    )
    with patch("liveearth.composite.api.requests.post", return_value=ok_response()):
        assert controller.refresh() is False
    assert listener.statuses[-1] == "Failed to set wallpaper: No screens found to set wallpaper"


def test_display_enumeration_failure(paths: AppPaths, listener: RecordingListener) -> None:
    desktop = MockDesktop()
    desktop.active_displays = Mock(side_effect=OSError("EnumDisplayMonitors failed"))
    controller = EarthWallpaper.create_for_testing(desktop=desktop, paths=paths, listener=listener)

    with patch("liveearth.composite.api.requests.post", return_value=ok_response()):
        assert controller.refresh() is False

    assert listener.errors == ["Failed to list screens: EnumDisplayMonitors failed"]
    assert listener.statuses[-1].startswith("Failed to set wallpaper: Failed to list screens")
    assert desktop.background_calls == []


def test_unexpected_error_ends_cycle(paths: AppPaths, listener: RecordingListener) -> None:
    controller = EarthWallpaper.create_for_testing(paths=paths, listener=listener)
    controller.ui_thread.stop()

    with patch("liveearth.composite.api.requests.post", return_value=ok_response()):
        assert controller.refresh() is False

    assert listener.errors == [CRASH_MESSAGE]
    assert listener.statuses[-1] == f"Failed to set wallpaper: {CRASH_MESSAGE}"


def test_unexpected_fetch_error_ends_cycle(paths: AppPaths, listener: RecordingListener) -> None:
    controller = EarthWallpaper.create_for_testing(paths=paths, listener=listener)
    controller.composite_api = Mock()
    controller.composite_api.fetch.side_effect = ValueError("bad state")

    assert controller.refresh() is False
    assert listener.statuses[-1] == f"Failed to fetch wallpaper: {CRASH_MESSAGE}"
    assert listener.values("preview") == []


def test_no_token_makes_no_request(paths: AppPaths, listener: RecordingListener) -> None:
    controller = EarthWallpaper.create_for_testing(
        settings=UserSettings(), paths=paths, listener=listener
    )
    with patch("liveearth.composite.api.requests.post") as mock_post:
        assert controller.refresh() is False

    mock_post.assert_not_called()
    assert listener.statuses == [NO_TOKEN_MESSAGE]


def test_uses_given_settings_snapshot(paths: AppPaths, listener: RecordingListener) -> None:
    controller = EarthWallpaper.create_for_testing(paths=paths, listener=listener)
    snapshot = UserSettings(api_token="snap-token", quality=55)

    with patch("liveearth.composite.api.requests.post", return_value=ok_response()) as mock_post:
        controller.refresh(snapshot)

    kwargs = mock_post.call_args.kwargs
    assert kwargs["json"]["quality"] == 55
    assert kwargs["headers"]["Authorization"] == "Bearer snap-token"


def test_housekeeping_removes_stale_files(tmp_path: Path) -> None:
    paths = AppPaths(wallpaper_dir=tmp_path)
    stale = tmp_path / "earth_wallpaper_1.jpg"
    stale.write_bytes(b"old")
    ts = (TimeUtils.now_localized() - timedelta(hours=30)).timestamp()
    os.utime(stale, (ts, ts))

    controller = EarthWallpaper.create_for_testing(paths=paths)
    try:
        controller.start_housekeeping().join(timeout=5)
    finally:
        controller.stop_housekeeping()

    assert not stale.exists()


def test_from_config(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("api_token: from-file\nrefresh_minutes: 15\n")

    controller = EarthWallpaper.from_config(config, MockDesktop())

    assert controller.store.current().api_token == "from-file"
    assert controller.store.current().refresh_minutes == 15
