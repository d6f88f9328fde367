"""
Tests for the Event System (Observer Pattern)

Tests the dispatcher that carries ledger events to collaborators.
"""

import pytest
from datetime import datetime
from unittest.mock import Mock

from wallet_ledger.events import EventDispatcher, EventPayload, LedgerEvent


def make_event(event_type=LedgerEvent.TRANSACTION_APPLIED):
    return EventPayload(
        event_type=event_type,
        entity_type="transaction",
        entity_id="1",
        data={"amount": "10.00"}
    )


class TestEventPayload:
    """Test EventPayload creation and serialization"""

    def test_event_payload_creation(self):
        event = make_event()

        assert event.event_type == LedgerEvent.TRANSACTION_APPLIED
        assert event.entity_id == "1"
        assert isinstance(event.timestamp, datetime)
        assert event.timestamp.tzinfo is not None
        assert len(event.event_id) > 0

    def test_to_dict(self):
        event_dict = make_event(LedgerEvent.ACCOUNT_CREATED).to_dict()

        assert event_dict['event_type'] == "account.created"
        assert event_dict['data'] == {"amount": "10.00"}
        assert isinstance(event_dict['timestamp'], str)


class TestEventDispatcher:
    """Test subscribe/publish behavior"""

    def test_subscribe_and_publish(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe(LedgerEvent.TRANSACTION_APPLIED, handler)

        event = make_event()
        dispatcher.publish(event)

        handler.assert_called_once_with(event)

    def test_handlers_only_receive_their_event_type(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe(LedgerEvent.ACCOUNT_CREATED, handler)

        dispatcher.publish(make_event(LedgerEvent.TRANSACTION_APPLIED))

        handler.assert_not_called()

    def test_global_handlers_receive_everything(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe_all(handler)

        dispatcher.publish(make_event(LedgerEvent.ACCOUNT_CREATED))
        dispatcher.publish(make_event(LedgerEvent.TRANSACTION_APPLIED))

        assert handler.call_count == 2

    def test_unsubscribe(self):
        dispatcher = EventDispatcher()
        handler = Mock()
        dispatcher.subscribe(LedgerEvent.TRANSACTION_APPLIED, handler)
        dispatcher.subscribe_all(handler)
        assert dispatcher.get_handler_count() == 2

        dispatcher.unsubscribe(LedgerEvent.TRANSACTION_APPLIED, handler)
        dispatcher.unsubscribe_all(handler)
        dispatcher.publish(make_event())

        handler.assert_not_called()
        assert dispatcher.get_handler_count() == 0

    def test_unsubscribe_unknown_handler_is_harmless(self):
        dispatcher = EventDispatcher()
        dispatcher.unsubscribe(LedgerEvent.ACCOUNT_CREATED, Mock())
        dispatcher.unsubscribe_all(Mock())

    def test_handler_error_isolated(self):
        """Test that one failing handler does not stop the others"""
        dispatcher = EventDispatcher()
        failing = Mock(side_effect=RuntimeError("boom"))
        failing.__name__ = "failing"
        healthy = Mock()

        dispatcher.subscribe(LedgerEvent.TRANSACTION_APPLIED, failing)
        dispatcher.subscribe(LedgerEvent.TRANSACTION_APPLIED, healthy)
        dispatcher.publish(make_event())

        failing.assert_called_once()
        healthy.assert_called_once()

    def test_clear(self):
        dispatcher = EventDispatcher()
        dispatcher.subscribe(LedgerEvent.ACCOUNT_CREATED, Mock())
        dispatcher.subscribe_all(Mock())

        dispatcher.clear()

        assert dispatcher.get_handler_count() == 0
        assert dispatcher.get_handler_count(LedgerEvent.ACCOUNT_CREATED) == 0
