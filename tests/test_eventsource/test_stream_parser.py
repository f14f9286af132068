"""Tests for the event-stream parser."""
from __future__ import annotations

import pytest

from eventsource._parser import StreamParser, parse_event, parse_retry
from eventsource.types import EventRecord, ParseResult


def _parse(text: str, buffered: bool = True) -> ParseResult:
    return StreamParser(buffered=buffered).parse(text)


# ---------------------------------------------------------------------------
# Basic events
# ---------------------------------------------------------------------------


def test_full_event_block() -> None:
    result = _parse("id: 1\nevent: foo\ndata: bar\n\n")
    assert result.records == (EventRecord(id="1", event_type="foo", data="bar"),)
    assert result.retry_updates == ()


def test_data_only_event() -> None:
    result = _parse("data: hello\n\n")
    assert result.records == (EventRecord(data="hello"),)


def test_event_without_data_is_kept() -> None:
    result = _parse("event: ping\n\n")
    assert result.records == (EventRecord(event_type="ping"),)


def test_id_only_block_is_kept() -> None:
    result = _parse("id: 7\n\n")
    assert result.records == (EventRecord(id="7"),)


def test_block_without_known_fields_is_discarded() -> None:
    result = _parse("foo: bar\n\n")
    assert result.records == ()


def test_multiple_events_keep_order() -> None:
    result = _parse("data: first\n\ndata: second\n\ndata: third\n\n")
    assert [r.data for r in result.records] == ["first", "second", "third"]


def test_empty_input() -> None:
    assert _parse("") == ParseResult()


# ---------------------------------------------------------------------------
# Multi-line data
# ---------------------------------------------------------------------------


def test_multi_line_data() -> None:
    result = _parse("data: a\ndata: b\n\n")
    assert result.records[0].data == "a\nb"


def test_multi_line_data_three_lines() -> None:
    result = _parse("data: line1\ndata: line2\ndata: line3\n\n")
    assert result.records[0].data == "line1\nline2\nline3"


def test_empty_data_line_is_skipped() -> None:
    result = _parse("data: a\ndata:\ndata: c\n\n")
    assert result.records[0].data == "a\nc"


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


def test_comment_block_yields_nothing() -> None:
    assert _parse(":keepalive\n\n") == ParseResult()


def test_comment_line_inside_event_is_ignored() -> None:
    result = _parse("data: x\n: note\n\n")
    assert result.records == (EventRecord(data="x"),)


# ---------------------------------------------------------------------------
# Retry directives
# ---------------------------------------------------------------------------


def test_retry_directive() -> None:
    result = _parse("retry: 5000\n\n")
    assert result.records == ()
    assert result.retry_updates == (5000,)


def test_retry_not_a_number_is_ignored() -> None:
    assert _parse("retry: notanumber\n\n") == ParseResult()


def test_negative_retry_is_ignored() -> None:
    assert _parse("retry: -5\n\n") == ParseResult()


def test_retry_block_is_not_an_event() -> None:
    result = _parse("retry: 100\ndata: hidden\n\n")
    assert result.records == ()


def test_retry_updates_keep_order() -> None:
    result = _parse("retry: 1\n\ndata: x\n\nretry: 2\n\n")
    assert result.retry_updates == (1, 2)
    assert len(result.records) == 1


@pytest.mark.parametrize(
    ("block", "expected"),
    [
        ("retry: 3000", 3000),
        ("retry:42", 42),
        ("retry:   7  ", 7),
        ("retry: 1.5", None),
        ("retry: ", None),
        ("retry: +10", None),
    ],
)
def test_parse_retry(block: str, expected: int | None) -> None:
    assert parse_retry(block) == expected


# ---------------------------------------------------------------------------
# Field parsing
# ---------------------------------------------------------------------------


def test_no_space_after_colon() -> None:
    assert parse_event("data:nospace") == EventRecord(data="nospace")


def test_only_one_leading_space_stripped() -> None:
    assert parse_event("data:  two spaces") == EventRecord(data=" two spaces")


def test_value_keeps_later_colons() -> None:
    assert parse_event("data: http://example.com") == EventRecord(data="http://example.com")


def test_line_without_colon_is_skipped() -> None:
    assert parse_event("garbage\ndata: ok") == EventRecord(data="ok")


def test_unknown_fields_are_ignored() -> None:
    assert parse_event("foo: bar\ndata: ok") == EventRecord(data="ok")


# ---------------------------------------------------------------------------
# Chunk boundaries
# ---------------------------------------------------------------------------


class TestBuffered:
    def test_block_split_across_chunks(self) -> None:
        parser = StreamParser()
        first = parser.parse("id: 1\nda")
        assert first == ParseResult()
        assert parser.pending == "id: 1\nda"
        second = parser.parse("ta: hello\n\n")
        assert second.records == (EventRecord(id="1", data="hello"),)
        assert parser.pending == ""

    def test_chunk_without_delimiter_is_held(self) -> None:
        parser = StreamParser()
        assert parser.parse("data: hel") == ParseResult()
        assert parser.pending == "data: hel"
        assert parser.parse("lo\n\n").records == (EventRecord(data="hello"),)

    def test_pending_accumulates_over_several_chunks(self) -> None:
        parser = StreamParser()
        for piece in ("id: 3\n", "event: up", "date\nda", "ta: x"):
            assert parser.parse(piece).records == ()
        assert parser.pending == "id: 3\nevent: update\ndata: x"
        assert parser.parse("\n\n").records == (
            EventRecord(id="3", event_type="update", data="x"),
        )

    def test_delimiter_split_across_chunks(self) -> None:
        parser = StreamParser()
        assert parser.parse("data: a\n").records == ()
        assert parser.parse("\ndata: b\n\n").records == (
            EventRecord(data="a"),
            EventRecord(data="b"),
        )

    def test_flush_emits_trailing_block(self) -> None:
        parser = StreamParser()
        parser.parse("data: tail")
        assert parser.flush().records == (EventRecord(data="tail"),)
        assert parser.flush() == ParseResult()

    def test_reset_discards_pending(self) -> None:
        parser = StreamParser()
        parser.parse("data: partial")
        parser.reset()
        assert parser.pending == ""
        assert parser.flush() == ParseResult()

    def test_crlf_line_endings(self) -> None:
        parser = StreamParser()
        result = parser.parse("event: a\r\ndata: b\r\n\r\n")
        assert result.records == (EventRecord(event_type="a", data="b"),)

    def test_crlf_split_across_chunks(self) -> None:
        parser = StreamParser()
        assert parser.parse("data: a\r\n\r").records == ()
        assert parser.parse("\ndata: b\r\n\r\n").records == (
            EventRecord(data="a"),
            EventRecord(data="b"),
        )


class TestUnbuffered:
    def test_each_chunk_is_self_contained(self) -> None:
        parser = StreamParser(buffered=False)
        result = parser.parse("data: a\n\ndata: b")
        assert [r.data for r in result.records] == ["a", "b"]
        assert parser.pending == ""

    def test_split_block_is_not_reassembled(self) -> None:
        parser = StreamParser(buffered=False)
        first = parser.parse("id: 1\nda")
        second = parser.parse("ta: x\n\n")
        assert first.records == (EventRecord(id="1"),)
        # The second half starts with "ta:", an unknown field.
        assert second.records == ()
