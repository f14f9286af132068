"""High-level event-stream client."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from eventsource._auth import basic_auth
from eventsource._parser import StreamParser
from eventsource.config import EventSourceConfig
from eventsource.controller import ConnectionController
from eventsource.dispatch import CallbackExecutor
from eventsource.errors import ConfigurationError
from eventsource.transport import HttpxTransport, Transport, build_request_headers
from eventsource.types import EventHandler, LifecycleHandler, ReadyState

logger = logging.getLogger(__name__)


class EventSource:
    """Connects to a URL and delivers its server-sent events to handlers.

    Handlers run on a dedicated callback thread. Register them before the
    connection starts (pass ``autostart=False`` and call :meth:`start`) to be
    sure no early event is missed.
    """

    basic_auth = staticmethod(basic_auth)

    def __init__(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        *,
        last_event_id: str | None = None,
        config: EventSourceConfig | None = None,
        transport: Transport | None = None,
        executor: CallbackExecutor | None = None,
        autostart: bool = True,
    ) -> None:
        if not url:
            raise ConfigurationError("An event stream URL is required")

        self.url = url
        self._config = config or EventSourceConfig()
        self._owns_executor = executor is None
        self._executor = executor or CallbackExecutor()
        self._transport = transport or HttpxTransport(self._config)
        self._controller = ConnectionController(
            self._executor,
            parser=StreamParser(buffered=self._config.buffered_parsing),
            default_retry_ms=self._config.default_retry_ms,
            last_event_id=last_event_id,
        )
        self._controller.attach(self._transport)
        self.headers = build_request_headers(headers, last_event_id)
        self._started = False

        if autostart:
            self.start()

    # --- lifecycle ------------------------------------------------------------

    def start(self) -> None:
        """Issue the request. Calling it again has no effect."""
        if self._started:
            return
        self._started = True
        logger.debug("Starting event source for %s", self.url)
        self._transport.start(self.url, self.headers, self._controller)

    def close(self) -> None:
        """Close the stream. Idempotent."""
        self._controller.close()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until every handler queued so far has run."""
        return self._executor.wait_idle(timeout)

    def shutdown(self) -> None:
        """Close the stream and stop the callback thread once it drains."""
        self.close()
        if self._owns_executor:
            self._executor.shutdown()

    def __enter__(self) -> EventSource:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.shutdown()

    # --- state ----------------------------------------------------------------

    @property
    def ready_state(self) -> ReadyState:
        return self._controller.ready_state

    @property
    def retry_interval(self) -> int:
        return self._controller.retry_interval

    @property
    def last_event_id(self) -> str | None:
        return self._controller.last_event_id

    @property
    def controller(self) -> ConnectionController:
        return self._controller

    # --- handlers -------------------------------------------------------------

    def on_open(self, handler: LifecycleHandler) -> None:
        self._controller.on_open(handler)

    def on_error(self, handler: LifecycleHandler) -> None:
        self._controller.on_error(handler)

    def on_message(self, handler: EventHandler) -> None:
        self._controller.on_message(handler)

    def add_event_listener(self, event_type: str, handler: EventHandler) -> None:
        self._controller.add_event_listener(event_type, handler)

    def remove_event_listener(self, event_type: str) -> None:
        self._controller.remove_event_listener(event_type)

    def __repr__(self) -> str:
        return f"EventSource(url={self.url!r}, ready_state={self.ready_state.value!r})"
