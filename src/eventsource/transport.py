"""HTTP transport that feeds an event stream into a controller."""
from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

import httpx

from eventsource.config import EventSourceConfig
from eventsource.errors import (
    AbortError,
    InvalidContentTypeError,
    NetworkError,
    RequestTimeoutError,
    TransportError,
    error_from_status_code,
)

logger = logging.getLogger(__name__)

EVENT_STREAM = "text/event-stream"


@runtime_checkable
class SignalSink(Protocol):
    """Receiver of transport lifecycle signals."""

    def on_response_received(self) -> None: ...

    def on_data_received(self, chunk: bytes) -> None: ...

    def on_completed(self, error: BaseException | None = None) -> None: ...


@runtime_checkable
class Transport(Protocol):
    """Protocol every transport must satisfy.

    A transport delivers one ``on_response_received`` before any data,
    zero or more ``on_data_received`` calls, and exactly one terminal
    ``on_completed``, never two signals at the same time.
    """

    def start(self, url: str, headers: Mapping[str, str], sink: SignalSink) -> None:
        """Issue the request and begin delivering signals to *sink*."""
        ...

    def cancel(self) -> None:
        """Abort the request. Must not block."""
        ...


def build_request_headers(
    headers: Mapping[str, str] | None = None,
    last_event_id: str | None = None,
) -> dict[str, str]:
    """Return *headers* plus the headers every event-stream request carries."""
    result = dict(headers or {})
    if last_event_id is not None:
        result["Last-Event-Id"] = last_event_id
    result["Accept"] = EVENT_STREAM
    result["Cache-Control"] = "no-cache"
    return result


class HttpxTransport:
    """Streams a GET request with :mod:`httpx` on a background thread."""

    def __init__(
        self,
        config: EventSourceConfig | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config or EventSourceConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(
                connect=self._config.connect_timeout,
                read=self._config.read_timeout,
                write=self._config.connect_timeout,
                pool=self._config.connect_timeout,
            ),
        )
        self._cancelled = threading.Event()
        self._response: httpx.Response | None = None
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self, url: str, headers: Mapping[str, str], sink: SignalSink) -> None:
        if self._thread is not None:
            raise TransportError("Transport already started")
        self._thread = threading.Thread(
            target=self.run,
            args=(url, dict(headers), sink),
            name="eventsource-transport",
            daemon=True,
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the reader thread; return ``True`` once it has finished."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def cancel(self) -> None:
        self._cancelled.set()
        with self._lock:
            response = self._response
        if response is not None:
            # Unblocks the reader; it reports the resulting error as an abort.
            try:
                response.close()
            except httpx.HTTPError:
                logger.debug("Error while closing cancelled response", exc_info=True)

    def run(self, url: str, headers: Mapping[str, str], sink: SignalSink) -> None:
        """Perform the request on the calling thread and signal *sink*."""
        try:
            error = self._stream(url, headers, sink)
        finally:
            if self._owns_client:
                self._client.close()
        sink.on_completed(error)

    def _stream(
        self, url: str, headers: Mapping[str, str], sink: SignalSink
    ) -> BaseException | None:
        if self._cancelled.is_set():
            return AbortError("Request cancelled before it was sent")

        logger.debug("Opening event stream: %s", url)
        try:
            with self._client.stream("GET", url, headers=dict(headers)) as resp:
                with self._lock:
                    self._response = resp

                if resp.status_code >= 300:
                    return error_from_status_code(
                        resp.status_code,
                        f"Event stream request failed with HTTP {resp.status_code}",
                    )

                content_type = resp.headers.get("content-type", "")
                if self._config.require_event_stream and not content_type.startswith(
                    EVENT_STREAM
                ):
                    return InvalidContentTypeError(
                        f"Expected {EVENT_STREAM}, got {content_type or 'no content type'}",
                        content_type=content_type,
                    )

                sink.on_response_received()
                for chunk in resp.iter_bytes():
                    if self._cancelled.is_set():
                        return AbortError("Request cancelled")
                    sink.on_data_received(chunk)
        except httpx.TimeoutException as exc:
            return self._classify(RequestTimeoutError(str(exc), cause=exc))
        except httpx.TransportError as exc:
            return self._classify(NetworkError(str(exc), cause=exc))
        except httpx.StreamError as exc:
            return self._classify(NetworkError(str(exc), cause=exc))
        finally:
            with self._lock:
                self._response = None

        if self._cancelled.is_set():
            return AbortError("Request cancelled")
        return None

    def _classify(self, error: TransportError) -> BaseException:
        if self._cancelled.is_set():
            return AbortError("Request cancelled", cause=error.cause)
        return error


class StubTransport:
    """In-memory transport for testing: replays scripted chunks synchronously."""

    def __init__(
        self,
        chunks: list[bytes] | None = None,
        *,
        error: BaseException | None = None,
        respond: bool = True,
    ) -> None:
        self._chunks = chunks or []
        self._error = error
        self._respond = respond
        self.url: str | None = None
        self.headers: dict[str, str] = {}
        self.cancel_calls = 0

    def start(self, url: str, headers: Mapping[str, str], sink: SignalSink) -> None:
        self.url = url
        self.headers = dict(headers)
        if self._respond:
            sink.on_response_received()
            for chunk in self._chunks:
                if self.cancel_calls:
                    break
                sink.on_data_received(chunk)
        if self.cancel_calls:
            sink.on_completed(AbortError("Request cancelled"))
        else:
            sink.on_completed(self._error)

    def cancel(self) -> None:
        self.cancel_calls += 1
