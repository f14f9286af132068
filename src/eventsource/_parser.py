"""Incremental parser for ``text/event-stream`` payloads."""
from __future__ import annotations

import logging

from eventsource.types import EventRecord, ParseResult

logger = logging.getLogger(__name__)

BLOCK_DELIMITER = "\n\n"


class StreamParser:
    """Turns raw event-stream text into :class:`EventRecord` instances.

    Input is cut into blocks at each blank line. A block starting with ``:``
    is a comment, a block mentioning ``retry:`` is a reconnection directive,
    and anything else is an event made of ``key: value`` lines.

    With *buffered* set (the default) the text after the last complete block
    is kept and prepended to the next chunk, so a block split across chunk
    boundaries is parsed once it is complete. Without it every call is a
    self-contained segment and its remainder is parsed immediately.
    """

    def __init__(self, buffered: bool = True) -> None:
        self._buffered = buffered
        self._pending = ""
        self._carriage_return = False

    @property
    def pending(self) -> str:
        """Text held back waiting for the end of its block."""
        return self._pending

    def parse(self, chunk: str) -> ParseResult:
        """Parse *chunk* and return every complete record and retry update."""
        text = self._normalize_newlines(chunk)
        if self._buffered:
            text = self._pending + text
            # Without a delimiter the whole text stays pending.
            text, _, self._pending = text.rpartition(BLOCK_DELIMITER)
        return self._parse_blocks(text.split(BLOCK_DELIMITER))

    def flush(self) -> ParseResult:
        """Parse whatever is still buffered, e.g. when the stream has ended."""
        text = self._pending
        if self._carriage_return:
            text += "\n"
        self._pending = ""
        self._carriage_return = False
        return self._parse_blocks(text.split(BLOCK_DELIMITER))

    def reset(self) -> None:
        """Discard buffered text."""
        self._pending = ""
        self._carriage_return = False

    # --- helpers --------------------------------------------------------------

    def _normalize_newlines(self, chunk: str) -> str:
        if self._carriage_return:
            chunk = "\r" + chunk
            self._carriage_return = False
        # A trailing CR may be the first half of a CRLF pair.
        if chunk.endswith("\r") and self._buffered:
            chunk = chunk[:-1]
            self._carriage_return = True
        return chunk.replace("\r\n", "\n").replace("\r", "\n")

    def _parse_blocks(self, blocks: list[str]) -> ParseResult:
        records: list[EventRecord] = []
        retry_updates: list[int] = []

        for block in blocks:
            if not block:
                continue

            if block.startswith(":"):
                continue

            if "retry:" in block:
                retry = parse_retry(block)
                if retry is not None:
                    retry_updates.append(retry)
                else:
                    logger.debug("Ignoring invalid retry directive: %r", block)
                continue

            record = parse_event(block)
            if record is not None:
                records.append(record)

        return ParseResult(records=tuple(records), retry_updates=tuple(retry_updates))


def parse_event(block: str) -> EventRecord | None:
    """Build a record from the ``key: value`` lines of one block.

    Lines without a colon, and lines whose key or value is empty, are
    skipped. A repeated key is joined to its earlier value with a newline.
    Returns ``None`` when the block carries none of ``id``, ``event`` and
    ``data``.
    """
    fields: dict[str, str] = {}

    for line in block.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        # Strip at most one leading space per SSE spec
        if value.startswith(" "):
            value = value[1:]
        if not key or not value:
            continue
        if key in fields:
            fields[key] = f"{fields[key]}\n{value}"
        else:
            fields[key] = value

    if not fields.keys() & {"id", "event", "data"}:
        return None

    return EventRecord(
        id=fields.get("id"),
        event_type=fields.get("event"),
        data=fields.get("data"),
    )


def parse_retry(block: str) -> int | None:
    """Return the interval from a ``retry:`` block, or ``None`` if invalid.

    The value is the text after the last colon, trimmed. Only non-negative
    base-10 integers are accepted.
    """
    value = block.split(":")[-1].strip()
    if not value.isascii() or not value.isdigit():
        return None
    return int(value)
