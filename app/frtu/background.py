"""In-process fire-and-forget execution for best-effort outbound calls."""
from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor

logger = logging.getLogger(__name__)

ErrorSink = Callable[[str, BaseException], None]


def log_failure(label: str, exc: BaseException) -> None:
    logger.warning("Background task %s failed: %s", label, exc)


class BackgroundDispatcher:
    """
    Submits callables to a thread pool and never waits on them.

    `submit` does not raise and does not return the future; a failed task is
    reported to `on_error` and then dropped (no retry).
    """

    def __init__(self, executor: Executor | None = None, *, max_workers: int = 2, on_error: ErrorSink | None = None):
        self._executor = executor or ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="frtu-bg")
        self._on_error = on_error or log_failure

    def submit(self, label: str, fn: Callable, *args, **kwargs) -> None:
        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except RuntimeError as exc:
            # Executor already shut down (interpreter exit, test teardown).
            self._report(label, exc)
            return
        future.add_done_callback(lambda f: self._finished(label, f))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _finished(self, label: str, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._report(label, exc)

    def _report(self, label: str, exc: BaseException) -> None:
        try:
            self._on_error(label, exc)
        except Exception:
            logger.exception("Error sink raised while reporting %s", label)
