"""Data types shared by the parser and the connection controller."""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Callable


class ReadyState(StrEnum):
    """Lifecycle state of a single event-stream connection."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class EventRecord:
    """One fully parsed event block."""

    id: str | None = None
    event_type: str | None = None
    data: str | None = None


@dataclass(frozen=True)
class ParseResult:
    """Records and retry directives recovered from one chunk, in input order."""

    records: tuple[EventRecord, ...] = ()
    retry_updates: tuple[int, ...] = ()


# (last_event_id, event_type, data)
EventHandler = Callable[[str | None, str, str], None]
LifecycleHandler = Callable[[], None]
