"""Subscriber registry: one handler per event type plus lifecycle slots."""
from __future__ import annotations

import threading

from eventsource.types import EventHandler, LifecycleHandler

MESSAGE = "message"


class SubscriberTable:
    """Thread-safe mapping from event names to handlers.

    Registering a second handler under the same name replaces the first.
    Registration normally happens on the application thread while lookups
    happen on the transport thread, so every access takes the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: dict[str, EventHandler] = {}
        self._on_open: LifecycleHandler | None = None
        self._on_error: LifecycleHandler | None = None

    # --- registration ---------------------------------------------------------

    def set_open(self, handler: LifecycleHandler | None) -> None:
        with self._lock:
            self._on_open = handler

    def set_error(self, handler: LifecycleHandler | None) -> None:
        with self._lock:
            self._on_error = handler

    def set_message(self, handler: EventHandler | None) -> None:
        """Register the handler for events without an explicit type."""
        self.set_listener(MESSAGE, handler)

    def set_listener(self, event_type: str, handler: EventHandler | None) -> None:
        """Register *handler* for *event_type*; ``None`` removes it."""
        with self._lock:
            if handler is None:
                self._listeners.pop(event_type, None)
            else:
                self._listeners[event_type] = handler

    # --- lookup ---------------------------------------------------------------

    @property
    def open_handler(self) -> LifecycleHandler | None:
        with self._lock:
            return self._on_open

    @property
    def error_handler(self) -> LifecycleHandler | None:
        with self._lock:
            return self._on_error

    def listener(self, event_type: str) -> EventHandler | None:
        with self._lock:
            return self._listeners.get(event_type)

    def event_types(self) -> list[str]:
        with self._lock:
            return sorted(self._listeners)

    def __contains__(self, event_type: str) -> bool:
        with self._lock:
            return event_type in self._listeners
