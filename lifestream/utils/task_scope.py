"""
Cancellation-Scoped Background Tasks.

Screens fetch data on worker threads and must only touch widgets from
the Tk main loop.  A ``TaskScope`` ties every task a view starts to the
view's lifetime: results are marshalled back through ``dispatch``
(normally ``widget.after(0, ...)``) and silently dropped once the scope
is closed, so a response that arrives after the view was destroyed
never reaches it.

Usage::

    class MyView(ctk.CTkFrame):
        def __init__(self, parent, ...):
            super().__init__(parent)
            self._tasks = TaskScope(lambda cb: self.after(0, cb), logger)
            self._tasks.submit(service.load, on_done=self._render)

        def destroy(self):
            self._tasks.close()
            super().destroy()
"""

from __future__ import annotations

import threading
from typing import Callable, Optional, TypeVar

from lifestream.logger import StructuredLogger

T = TypeVar("T")

Dispatch = Callable[[Callable[[], None]], None]


class TaskHandle:
    """Handle for one submitted task; ``cancel()`` drops its result."""

    __slots__ = ("_cancelled", "name")

    def __init__(self, name: str) -> None:
        self.name = name
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class TaskScope:
    """Runs work off the UI thread and delivers results while open.

    Parameters
    ----------
    dispatch:
        Schedules a zero-argument callback on the UI thread.
    logger:
        Structured logger instance.
    spawn:
        Starts a worker; defaults to a daemon ``threading.Thread``.
        Tests pass a synchronous runner.
    """

    def __init__(
        self,
        dispatch: Dispatch,
        logger: StructuredLogger,
        spawn: Optional[Callable[[Callable[[], None], str], None]] = None,
    ) -> None:
        self._dispatch = dispatch
        self._logger = logger
        self._spawn = spawn or _spawn_daemon
        self._lock = threading.Lock()
        self._closed = False
        self._handles: set[TaskHandle] = set()

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def submit(
        self,
        work: Callable[[], T],
        on_done: Callable[[T], None],
        *,
        name: str = "view-task",
    ) -> TaskHandle:
        """Run *work* in the background and pass its result to *on_done*.

        Services return ``ServiceResult`` envelopes rather than raising,
        so an exception escaping *work* is a programming error: it is
        logged and the callback is not invoked.
        """
        handle = TaskHandle(name)
        with self._lock:
            if self._closed:
                handle.cancel()
                return handle
            self._handles.add(handle)

        def run() -> None:
            try:
                result = work()
            except Exception as exc:
                self._logger.error("Background task '%s' failed: %s", name, exc, exc_info=True)
                self._forget(handle)
                return

            def deliver() -> None:
                self._forget(handle)
                if handle.cancelled or self.closed:
                    self._logger.debug("Dropped result of '%s' after cancellation.", name)
                    return
                on_done(result)

            if handle.cancelled or self.closed:
                self._forget(handle)
                return
            self._dispatch(deliver)

        self._spawn(run, name)
        return handle

    def close(self) -> None:
        """Cancel every outstanding task; later results are discarded."""
        with self._lock:
            self._closed = True
            handles = list(self._handles)
            self._handles.clear()
        for handle in handles:
            handle.cancel()

    def _forget(self, handle: TaskHandle) -> None:
        with self._lock:
            self._handles.discard(handle)


def _spawn_daemon(target: Callable[[], None], name: str) -> None:
    threading.Thread(target=target, name=name, daemon=True).start()
