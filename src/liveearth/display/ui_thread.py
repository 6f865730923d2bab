"""The single thread allowed to change desktop backgrounds."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, Final, TypeVar

logger: Final = logging.getLogger(__name__)

T = TypeVar("T")

_Job = tuple[Callable[..., Any], tuple[Any, ...], dict[str, Any], "Future[Any]"]


class UiThread:
    """Serializes display mutations onto one designated thread.

    Desktop backends give inconsistent results on multi-display setups when
    backgrounds are changed from arbitrary threads, so every
    ``set_background`` goes through :meth:`call`.

    Two modes:
    - dedicated (default): a daemon thread is started and pumps the queue
    - owned: the creating thread is the UI thread and must call
      :meth:`run_forever` (the CLI does this on the main thread)
    """

    def __init__(self, name: str = "liveearth-ui", dedicated: bool = True) -> None:
        self._queue: queue.Queue[_Job | None] = queue.Queue()
        self._stopped = threading.Event()
        if dedicated:
            self._thread = threading.Thread(target=self.run_forever, name=name, daemon=True)
            self._thread.start()
        else:
            self._thread = threading.current_thread()

    @property
    def thread(self) -> threading.Thread:
        """The UI thread."""
        return self._thread

    def is_current(self) -> bool:
        """Whether the caller is running on the UI thread."""
        return threading.current_thread() is self._thread

    def call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``fn`` on the UI thread and wait for its result.

        Called from the UI thread itself, ``fn`` runs inline.

        Raises:
            RuntimeError: If the UI thread has been stopped
            Exception: Whatever ``fn`` raised
        """
        if self.is_current():
            return fn(*args, **kwargs)
        return self.submit(fn, *args, **kwargs).result()

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future[T]:
        """Queue ``fn`` for the UI thread without waiting."""
        if self._stopped.is_set():
            raise RuntimeError("UI thread is stopped")
        future: Future[T] = Future()
        self._queue.put((fn, args, kwargs, future))
        return future

    def run_forever(self, poll_seconds: float = 0.5) -> None:
        """Process queued jobs until :meth:`stop` is called."""
        while not self._stopped.is_set():
            try:
                job = self._queue.get(timeout=poll_seconds)
            except queue.Empty:
                continue
            if job is None:
                break
            self._run_job(job)
        self._drain()

    def stop(self) -> None:
        """Stop processing; queued jobs are cancelled."""
        self._stopped.set()
        self._queue.put(None)

    @staticmethod
    def _run_job(job: _Job) -> None:
        fn, args, kwargs, future = job
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)

    def _drain(self) -> None:
        while True:
            try:
                job = self._queue.get_nowait()
            except queue.Empty:
                return
            if job is not None:
                job[3].cancel()
