"""eventsource: a Server-Sent Events client."""
from __future__ import annotations

__version__ = "0.1.0"

# Types
from eventsource.types import EventHandler, EventRecord, LifecycleHandler, ParseResult, ReadyState

# Errors
from eventsource.errors import (
    AbortError,
    ConfigurationError,
    EventSourceError,
    HTTPStatusError,
    InvalidContentTypeError,
    NetworkError,
    RequestTimeoutError,
    TransportError,
    error_from_status_code,
    is_benign_cancellation,
)

# Core
from eventsource._parser import StreamParser
from eventsource.config import EventSourceConfig
from eventsource.controller import ConnectionController
from eventsource.dispatch import CallbackExecutor
from eventsource.registry import SubscriberTable

# Transport / client
from eventsource._auth import basic_auth
from eventsource.transport import HttpxTransport, StubTransport, Transport, build_request_headers
from eventsource.client import EventSource

__all__ = [
    "__version__",
    # Types
    "EventHandler",
    "EventRecord",
    "LifecycleHandler",
    "ParseResult",
    "ReadyState",
    # Errors
    "AbortError",
    "ConfigurationError",
    "EventSourceError",
    "HTTPStatusError",
    "InvalidContentTypeError",
    "NetworkError",
    "RequestTimeoutError",
    "TransportError",
    "error_from_status_code",
    "is_benign_cancellation",
    # Core
    "StreamParser",
    "EventSourceConfig",
    "ConnectionController",
    "CallbackExecutor",
    "SubscriberTable",
    # Transport / client
    "basic_auth",
    "HttpxTransport",
    "StubTransport",
    "Transport",
    "build_request_headers",
    "EventSource",
]
