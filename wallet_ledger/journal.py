"""
Transaction Journal

Collaborator that keeps the stream of applied transaction records so they
can be queried after the fact. The ledger itself only returns records; the
journal subscribes to the ledger's events and stores them.
"""

import threading
from typing import Dict, List, Optional

from .events import EventDispatcher, EventPayload, LedgerEvent
from .ledger import TransactionRecord


class TransactionJournal:
    """
    Thread-safe in-memory store of transaction records

    Events may arrive slightly out of id order when several threads apply
    mutations at once, so queries always return records sorted by id.
    """

    def __init__(self, dispatcher: Optional[EventDispatcher] = None):
        self._records: Dict[int, TransactionRecord] = {}
        self._lock = threading.Lock()
        if dispatcher is not None:
            self.attach(dispatcher)

    def attach(self, dispatcher: EventDispatcher) -> None:
        """Start receiving applied transactions from a dispatcher"""
        dispatcher.subscribe(LedgerEvent.TRANSACTION_APPLIED, self._on_transaction)

    def detach(self, dispatcher: EventDispatcher) -> None:
        dispatcher.unsubscribe(LedgerEvent.TRANSACTION_APPLIED, self._on_transaction)

    def record(self, record: TransactionRecord) -> None:
        """Store a record; storing the same id again is a no-op"""
        with self._lock:
            self._records.setdefault(record.id, record)

    def get(self, transaction_id: int) -> Optional[TransactionRecord]:
        with self._lock:
            return self._records.get(transaction_id)

    def all(self) -> List[TransactionRecord]:
        """All records ordered by transaction id"""
        with self._lock:
            return [self._records[key] for key in sorted(self._records)]

    def for_account(self, account_id: str) -> List[TransactionRecord]:
        """Records that debit or credit an account, ordered by id"""
        return [record for record in self.all() if record.involves(account_id)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _on_transaction(self, event: EventPayload) -> None:
        self.record(TransactionRecord.from_dict(event.data))
