import threading

import pytest

from liveearth.display.ui_thread import UiThread


def test_call_runs_on_ui_thread(ui_thread: UiThread) -> None:
    name = ui_thread.call(lambda: threading.current_thread().name)
    assert name == "test-ui"
    assert not ui_thread.is_current()


def test_call_passes_arguments(ui_thread: UiThread) -> None:
    assert ui_thread.call(pow, 2, 10) == 1024
    assert ui_thread.call(sorted, [3, 1, 2], reverse=True) == [3, 2, 1]


def test_call_propagates_exceptions(ui_thread: UiThread) -> None:
    def fail() -> None:
        raise ValueError("nope")

    with pytest.raises(ValueError, match="nope"):
        ui_thread.call(fail)
    # The thread survives a failing job
    assert ui_thread.call(lambda: 42) == 42


def test_call_from_ui_thread_runs_inline() -> None:
    owned = UiThread(dedicated=False)
    assert owned.is_current()
    assert owned.call(lambda: threading.current_thread()) is threading.current_thread()


def test_owned_thread_processes_jobs_from_workers() -> None:
    owned = UiThread(dedicated=False)
    results: list[threading.Thread] = []

    def worker() -> None:
        results.append(owned.call(threading.current_thread))
        owned.stop()

    t = threading.Thread(target=worker)
    t.start()
    owned.run_forever(poll_seconds=0.05)
    t.join(timeout=5)

    assert results == [threading.current_thread()]


def test_submit_after_stop_fails(ui_thread: UiThread) -> None:
    ui_thread.stop()
    with pytest.raises(RuntimeError, match="stopped"):
        ui_thread.submit(lambda: None)
