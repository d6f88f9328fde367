"""
Tests for the transaction journal collaborator
"""

import pytest
import threading
from decimal import Decimal

from wallet_ledger.errors import InsufficientFunds
from wallet_ledger.events import EventDispatcher
from wallet_ledger.journal import TransactionJournal
from wallet_ledger.ledger import Ledger, TransactionKind, TransactionRecord


def make_ledger():
    dispatcher = EventDispatcher()
    journal = TransactionJournal(dispatcher)
    return Ledger(event_dispatcher=dispatcher), journal


class TestTransactionJournal:
    """Test recording and querying the transaction stream"""

    def test_records_applied_transactions(self):
        ledger, journal = make_ledger()
        alice = ledger.create_account("Alice").id
        bob = ledger.create_account("Bob").id

        deposit = ledger.deposit(alice, "10.00")
        transfer = ledger.transfer(alice, bob, "5.00")
        withdraw = ledger.withdraw(bob, "1.00")

        assert journal.all() == [deposit, transfer, withdraw]
        assert journal.get(2) == transfer
        assert journal.get(99) is None
        assert len(journal) == 3

    def test_for_account(self):
        ledger, journal = make_ledger()
        alice = ledger.create_account("Alice").id
        bob = ledger.create_account("Bob").id
        carol = ledger.create_account("Carol").id

        ledger.deposit(alice, "10.00")
        ledger.transfer(bob, carol, "5.00")
        ledger.transfer(carol, alice, "2.00")

        assert [r.id for r in journal.for_account(alice)] == [1, 3]
        assert [r.id for r in journal.for_account(bob)] == [2]
        assert journal.for_account("acct-99") == []

    def test_failed_operations_not_recorded(self):
        ledger, journal = make_ledger()
        alice = ledger.create_account("Alice").id
        with pytest.raises(InsufficientFunds):
            ledger.withdraw(alice, "5000")
        assert len(journal) == 0

    def test_record_is_idempotent_and_sorted(self):
        journal = TransactionJournal()
        later = TransactionRecord(
            id=2, kind=TransactionKind.DEPOSIT, amount=Decimal('1.00'),
            destination_account_id="acct-1"
        )
        earlier = TransactionRecord(
            id=1, kind=TransactionKind.WITHDRAW, amount=Decimal('1.00'),
            source_account_id="acct-1"
        )

        journal.record(later)
        journal.record(earlier)
        journal.record(later)

        assert [r.id for r in journal.all()] == [1, 2]

    def test_detach(self):
        dispatcher = EventDispatcher()
        journal = TransactionJournal(dispatcher)
        ledger = Ledger(event_dispatcher=dispatcher)
        alice = ledger.create_account("Alice").id

        journal.detach(dispatcher)
        ledger.deposit(alice, "1.00")

        assert len(journal) == 0

    def test_concurrent_stream_is_complete(self):
        ledger, journal = make_ledger()
        alice = ledger.create_account("Alice").id

        def deposit_many():
            for _ in range(50):
                ledger.deposit(alice, "1.00")

        threads = [threading.Thread(target=deposit_many) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert [r.id for r in journal.all()] == list(range(1, 301))
        assert ledger.get_balance(alice) == Decimal('1300.00')
