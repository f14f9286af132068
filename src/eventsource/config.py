"""Client configuration."""
from __future__ import annotations

from dataclasses import dataclass

from eventsource.errors import ConfigurationError

DEFAULT_RETRY_MS = 3000


@dataclass(frozen=True)
class EventSourceConfig:
    """Settings for one event-stream connection.

    ``read_timeout`` defaults to ``None`` because an event stream may stay
    silent for arbitrarily long between events.
    """

    default_retry_ms: int = DEFAULT_RETRY_MS
    connect_timeout: float = 10.0
    read_timeout: float | None = None
    require_event_stream: bool = False
    buffered_parsing: bool = True

    def __post_init__(self) -> None:
        if self.default_retry_ms < 0:
            raise ConfigurationError(
                f"default_retry_ms must be non-negative, got {self.default_retry_ms}"
            )
        if self.connect_timeout <= 0:
            raise ConfigurationError(
                f"connect_timeout must be positive, got {self.connect_timeout}"
            )
        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ConfigurationError(
                f"read_timeout must be positive or None, got {self.read_timeout}"
            )
