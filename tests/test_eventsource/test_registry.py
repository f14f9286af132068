"""Tests for the subscriber registry."""
from __future__ import annotations

from eventsource.registry import MESSAGE, SubscriberTable


def _handler(event_id: str | None, event_type: str, data: str) -> None:
    pass


def _other(event_id: str | None, event_type: str, data: str) -> None:
    pass


class TestSubscriberTable:
    def test_empty(self) -> None:
        table = SubscriberTable()
        assert table.open_handler is None
        assert table.error_handler is None
        assert table.listener(MESSAGE) is None
        assert table.event_types() == []

    def test_set_listener(self) -> None:
        table = SubscriberTable()
        table.set_listener("update", _handler)
        assert table.listener("update") is _handler
        assert "update" in table

    def test_replace_listener(self) -> None:
        table = SubscriberTable()
        table.set_listener("update", _handler)
        table.set_listener("update", _other)
        assert table.listener("update") is _other
        assert table.event_types() == ["update"]

    def test_remove_listener(self) -> None:
        table = SubscriberTable()
        table.set_listener("update", _handler)
        table.set_listener("update", None)
        assert "update" not in table
        table.set_listener("missing", None)

    def test_message_slot(self) -> None:
        table = SubscriberTable()
        table.set_message(_handler)
        assert table.listener(MESSAGE) is _handler

    def test_lifecycle_slots_replace(self) -> None:
        table = SubscriberTable()
        first, second = (lambda: None), (lambda: None)
        table.set_open(first)
        table.set_open(second)
        table.set_error(first)
        assert table.open_handler is second
        assert table.error_handler is first
