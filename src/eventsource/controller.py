"""Connection state machine and event dispatch."""
from __future__ import annotations

import codecs
import logging
import threading
from typing import TYPE_CHECKING

from eventsource._parser import StreamParser
from eventsource.config import DEFAULT_RETRY_MS
from eventsource.dispatch import CallbackExecutor
from eventsource.errors import is_benign_cancellation
from eventsource.registry import MESSAGE, SubscriberTable
from eventsource.types import (
    EventHandler,
    EventRecord,
    LifecycleHandler,
    ParseResult,
    ReadyState,
)

if TYPE_CHECKING:
    from eventsource.transport import Transport

logger = logging.getLogger(__name__)


class ConnectionController:
    """Owns the lifecycle of one event-stream connection.

    The transport drives the controller through three signals,
    :meth:`on_response_received`, :meth:`on_data_received` and
    :meth:`on_completed`, and is expected to deliver them one at a time.
    Parsed events are routed through the :class:`SubscriberTable` and every
    handler call is handed to a :class:`CallbackExecutor`, so handlers run in
    parse order and never on the transport's thread.
    """

    def __init__(
        self,
        executor: CallbackExecutor,
        *,
        subscribers: SubscriberTable | None = None,
        parser: StreamParser | None = None,
        default_retry_ms: int = DEFAULT_RETRY_MS,
        last_event_id: str | None = None,
    ) -> None:
        self._executor = executor
        self._subscribers = subscribers or SubscriberTable()
        self._parser = parser or StreamParser()
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._state_lock = threading.Lock()
        self._ready_state = ReadyState.CONNECTING
        self._retry_interval = default_retry_ms
        self._last_event_id = last_event_id
        self._transport: Transport | None = None
        self._cancel_requested = False

    # --- observable state -----------------------------------------------------

    @property
    def ready_state(self) -> ReadyState:
        return self._ready_state

    @property
    def retry_interval(self) -> int:
        """Reconnection delay in milliseconds last suggested by the server."""
        return self._retry_interval

    @property
    def last_event_id(self) -> str | None:
        return self._last_event_id

    @property
    def subscribers(self) -> SubscriberTable:
        return self._subscribers

    def attach(self, transport: Transport) -> None:
        """Bind the transport that :meth:`close` will cancel."""
        self._transport = transport

    # --- registration ---------------------------------------------------------

    def on_open(self, handler: LifecycleHandler) -> None:
        self._subscribers.set_open(handler)

    def on_error(self, handler: LifecycleHandler) -> None:
        self._subscribers.set_error(handler)

    def on_message(self, handler: EventHandler) -> None:
        self._subscribers.set_message(handler)

    def add_event_listener(self, event_type: str, handler: EventHandler) -> None:
        self._subscribers.set_listener(event_type, handler)

    def remove_event_listener(self, event_type: str) -> None:
        self._subscribers.set_listener(event_type, None)

    # --- transport signals ----------------------------------------------------

    def on_response_received(self) -> None:
        """The server accepted the request; the stream is now open."""
        with self._state_lock:
            if self._ready_state is not ReadyState.CONNECTING:
                logger.debug("Response received in state %s, ignoring", self._ready_state)
                return
            self._ready_state = ReadyState.OPEN

        logger.debug("Connection open")
        handler = self._subscribers.open_handler
        if handler is not None:
            self._executor.submit(handler)

    def on_data_received(self, chunk: bytes) -> None:
        """Decode and parse one chunk of the response body."""
        if self._ready_state is ReadyState.CLOSED:
            logger.debug("Dropping %d bytes received after close", len(chunk))
            return

        try:
            text = self._decoder.decode(chunk)
        except UnicodeDecodeError:
            logger.debug("Dropping chunk that is not valid UTF-8 (%d bytes)", len(chunk))
            self._decoder.reset()
            return

        if text:
            self._apply(self._parser.parse(text))

    def on_completed(self, error: BaseException | None = None) -> None:
        """The transport finished, cleanly or with *error*."""
        if self._ready_state is not ReadyState.CLOSED:
            try:
                text = self._decoder.decode(b"", final=True)
            except UnicodeDecodeError:
                logger.debug("Dropping incomplete UTF-8 sequence at end of stream")
                text = ""
            if text:
                self._apply(self._parser.parse(text))
            self._apply(self._parser.flush())

        with self._state_lock:
            self._ready_state = ReadyState.CLOSED

        if error is None:
            logger.debug("Connection completed")
            return

        if is_benign_cancellation(error):
            logger.debug("Connection cancelled: %s", error)
            return

        logger.info("Connection failed: %s", error)
        handler = self._subscribers.error_handler
        if handler is not None:
            self._executor.submit(handler)

    # --- control --------------------------------------------------------------

    def close(self) -> None:
        """Close the connection and cancel the underlying request."""
        with self._state_lock:
            self._ready_state = ReadyState.CLOSED
            if self._cancel_requested:
                return
            self._cancel_requested = True

        logger.debug("Connection closed by caller")
        if self._transport is not None:
            self._transport.cancel()

    # --- dispatch -------------------------------------------------------------

    def _apply(self, result: ParseResult) -> None:
        for retry in result.retry_updates:
            logger.debug("Retry interval set to %d ms", retry)
            self._retry_interval = retry

        for record in result.records:
            self._dispatch(record)

    def _dispatch(self, record: EventRecord) -> None:
        if record.id is not None:
            self._last_event_id = record.id

        if record.data is None:
            return

        event_type = record.event_type if record.event_type is not None else MESSAGE
        handler = self._subscribers.listener(event_type)
        if handler is None:
            logger.debug("No listener for event type %r", event_type)
            return

        # close() may run on another thread while this chunk is being parsed.
        with self._state_lock:
            if self._ready_state is ReadyState.CLOSED:
                logger.debug("Dropping %r event parsed after close", event_type)
                return
            self._executor.submit(handler, self._last_event_id, event_type, record.data)
