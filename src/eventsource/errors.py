"""Error hierarchy for the event-stream client."""
from __future__ import annotations


class EventSourceError(Exception):
    """Base error for all eventsource errors."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigurationError(EventSourceError):
    """Invalid client configuration."""


class AbortError(EventSourceError):
    """The request was cancelled by the caller."""


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------


class TransportError(EventSourceError):
    """The underlying HTTP transport failed."""


class NetworkError(TransportError):
    """A network-level error occurred."""


class RequestTimeoutError(TransportError):
    """Connecting to or reading from the server timed out."""


class HTTPStatusError(TransportError):
    """The server answered with a non-success status code."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code


class InvalidContentTypeError(TransportError):
    """The response body is not an event stream."""

    def __init__(self, message: str, *, content_type: str = "") -> None:
        super().__init__(message)
        self.content_type = content_type


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def error_from_status_code(status_code: int, message: str = "") -> HTTPStatusError:
    """Wrap an HTTP status code in an :class:`HTTPStatusError`."""
    return HTTPStatusError(
        message or f"Unexpected HTTP status {status_code}",
        status_code=status_code,
    )


def is_benign_cancellation(error: BaseException | None) -> bool:
    """Return ``True`` if *error* only reports the caller's own cancellation."""
    return isinstance(error, AbortError)
