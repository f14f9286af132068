"""Single-threaded execution context for subscriber callbacks."""
from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)

_STOP = object()


class CallbackExecutor:
    """Runs submitted callables one at a time, in submission order.

    Callbacks execute on a dedicated worker thread fed by a
    :class:`queue.Queue`, never on the thread that submitted them. A callback
    that raises is logged and does not stop later callbacks.
    """

    def __init__(self, name: str = "eventsource-callbacks") -> None:
        self._queue: queue.Queue[Any] = queue.Queue()
        self._closed = False
        self._lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, fn: Callable[..., Any], *args: Any) -> bool:
        """Queue ``fn(*args)``. Returns ``False`` once the executor is shut down."""
        with self._lock:
            if self._closed:
                logger.debug("Dropping callback %r: executor is shut down", fn)
                return False
            self._queue.put((fn, args))
        return True

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every submitted callback has run.

        Returns ``False`` if *timeout* elapsed first.
        """
        done = threading.Event()
        if not self.submit(done.set):
            return True
        return done.wait(timeout)

    def shutdown(self, wait: bool = True, timeout: float | None = None) -> None:
        """Stop accepting callbacks; pending ones still run before the worker exits."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        if wait and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            fn, args = item
            try:
                fn(*args)
            except Exception:
                logger.exception("Event handler %r raised", fn)
