"""
Ledger Engine

Owns the account table and the transaction-id sequence. Every balance
mutation (deposit, withdraw, transfer) is validated in full and applied in a
single critical section, so concurrent callers observe a global
serialization order: no overdraft, no half-applied transfer, and each
applied mutation gets exactly one strictly increasing transaction id.
"""

from decimal import Decimal
from datetime import datetime, timezone
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
import re
import threading

from .currency import (
    DEFAULT_PRECISION, AmountLike, add_exact, to_amount, to_non_negative_amount,
    to_positive_amount
)
from .config import get_config
from .errors import AccountNotFound, InsufficientFunds, SameAccount, SnapshotError
from .events import EventDispatcher, EventPayload, LedgerEvent
from .logging_config import get_logger, log_action


DEFAULT_OPENING_BALANCE = Decimal('1000.00')
SNAPSHOT_VERSION = 1
ACCOUNT_ID_PREFIX = "acct-"
_ACCOUNT_ID_PATTERN = re.compile(r"^acct-(\d+)$")


class TransactionKind(Enum):
    """Kinds of balance mutation"""
    DEPOSIT = "deposit"      # Credit one account from outside the ledger
    WITHDRAW = "withdraw"    # Debit one account to outside the ledger
    TRANSFER = "transfer"    # Move funds between two ledger accounts


@dataclass(frozen=True)
class Account:
    """
    Read-only view of an account at one point in time

    The ledger hands these out instead of its internal rows, so holding an
    Account never lets a caller change a balance.
    """
    id: str
    display_name: str
    balance: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'display_name': self.display_name,
            'balance': str(self.balance),
        }


@dataclass(frozen=True)
class TransactionRecord:
    """Immutable record of one applied balance mutation"""
    id: int
    kind: TransactionKind
    amount: Decimal
    source_account_id: Optional[str] = None
    destination_account_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        if self.amount <= Decimal('0'):
            raise ValueError("Transaction amount must be positive")

        needs_source = self.kind in (TransactionKind.WITHDRAW, TransactionKind.TRANSFER)
        needs_destination = self.kind in (TransactionKind.DEPOSIT, TransactionKind.TRANSFER)

        if needs_source != (self.source_account_id is not None):
            raise ValueError(f"{self.kind.value} record has wrong source account")
        if needs_destination != (self.destination_account_id is not None):
            raise ValueError(f"{self.kind.value} record has wrong destination account")

    def involves(self, account_id: str) -> bool:
        """Check if the record debits or credits an account"""
        return account_id in (self.source_account_id, self.destination_account_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary; amounts as strings"""
        return {
            'id': self.id,
            'kind': self.kind.value,
            'amount': str(self.amount),
            'source_account_id': self.source_account_id,
            'destination_account_id': self.destination_account_id,
            'created_at': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransactionRecord':
        created_at = data.get('created_at')
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)

        return cls(
            id=int(data['id']),
            kind=TransactionKind(data['kind']),
            amount=Decimal(data['amount']),
            source_account_id=data.get('source_account_id'),
            destination_account_id=data.get('destination_account_id'),
            created_at=created_at or datetime.now(timezone.utc),
        )


@dataclass
class _AccountRow:
    """Mutable account state, private to the ledger"""
    id: str
    display_name: str
    balance: Decimal

    def view(self) -> Account:
        return Account(id=self.id, display_name=self.display_name, balance=self.balance)


class Ledger:
    """
    In-memory account ledger

    A single re-entrant lock guards the account table and both counters.
    Validation always completes before any write, so a rejected operation
    leaves every balance and counter exactly as it was.
    """

    def __init__(
        self,
        opening_balance: Optional[AmountLike] = None,
        precision: int = DEFAULT_PRECISION,
        event_dispatcher: Optional[EventDispatcher] = None
    ):
        self.precision = precision
        if opening_balance is None:
            opening_balance = DEFAULT_OPENING_BALANCE
        self.opening_balance = to_non_negative_amount(opening_balance, precision)

        self._accounts: Dict[str, _AccountRow] = {}
        self._next_transaction_id = 1
        self._next_account_number = 1
        self._lock = threading.RLock()

        self._event_dispatcher = event_dispatcher
        self.logger = get_logger("wallet_ledger.ledger")

    @classmethod
    def from_config(cls, config=None, event_dispatcher: Optional[EventDispatcher] = None) -> 'Ledger':
        """Build an empty ledger from a LedgerConfig (global config if omitted)"""
        if config is None:
            config = get_config()

        return cls(
            opening_balance=config.opening_balance_amount,
            precision=config.amount_precision,
            event_dispatcher=event_dispatcher
        )

    @property
    def event_dispatcher(self) -> Optional[EventDispatcher]:
        return self._event_dispatcher

    def create_account(self, display_name: str, opening_balance: Optional[AmountLike] = None) -> Account:
        """
        Open a new account

        Args:
            display_name: Caller-supplied label
            opening_balance: Starting balance (ledger default if omitted)

        Returns:
            Account view with its newly allocated id

        Raises:
            InvalidAmount: If an explicit opening balance is negative or malformed
        """
        if opening_balance is None:
            balance = self.opening_balance
        else:
            balance = to_non_negative_amount(opening_balance, self.precision)

        with self._lock:
            account_id = f"{ACCOUNT_ID_PREFIX}{self._next_account_number}"
            self._next_account_number += 1
            row = _AccountRow(id=account_id, display_name=display_name, balance=balance)
            self._accounts[account_id] = row
            account = row.view()

        log_action(
            self.logger, "debug", f"Account created: {account_id}",
            account_id=account_id, action="create_account",
            extra={"opening_balance": str(balance)}
        )
        self._publish(LedgerEvent.ACCOUNT_CREATED, "account", account_id, account.to_dict())
        return account

    def get_account(self, account_id: str) -> Account:
        """Get a point-in-time view of an account"""
        with self._lock:
            return self._get_row(account_id).view()

    def get_balance(self, account_id: str) -> Decimal:
        """Get the current balance of an account"""
        with self._lock:
            return self._get_row(account_id).balance

    def has_account(self, account_id: str) -> bool:
        with self._lock:
            return account_id in self._accounts

    def list_accounts(self) -> List[Account]:
        """All accounts in creation order, read as one consistent snapshot"""
        with self._lock:
            return [row.view() for row in self._accounts.values()]

    def total_balance(self) -> Decimal:
        """Sum of every balance in the ledger"""
        with self._lock:
            return sum((row.balance for row in self._accounts.values()), Decimal('0'))

    def deposit(self, account_id: str, amount: AmountLike) -> TransactionRecord:
        """
        Credit an account

        Raises:
            AccountNotFound: If the account does not exist
            InvalidAmount: If amount is not positive, or the new balance
                would not be exact
        """
        with self._lock:
            row = self._get_row(account_id)
            value = to_positive_amount(amount, self.precision)

            new_balance = add_exact(row.balance, value, amount)
            record = self._build_record(TransactionKind.DEPOSIT, value, destination=account_id)

            row.balance = new_balance
            self._next_transaction_id += 1

        self._applied(record)
        return record

    def withdraw(self, account_id: str, amount: AmountLike) -> TransactionRecord:
        """
        Debit an account

        Raises:
            AccountNotFound: If the account does not exist
            InvalidAmount: If amount is not positive
            InsufficientFunds: If the balance is lower than amount
        """
        with self._lock:
            row = self._get_row(account_id)
            value = to_positive_amount(amount, self.precision)
            if row.balance < value:
                raise InsufficientFunds(account_id, row.balance, value)

            new_balance = add_exact(row.balance, -value, amount)
            record = self._build_record(TransactionKind.WITHDRAW, value, source=account_id)

            row.balance = new_balance
            self._next_transaction_id += 1

        self._applied(record)
        return record

    def transfer(self, source_id: str, destination_id: str, amount: AmountLike) -> TransactionRecord:
        """
        Move funds between two accounts

        The debit, the credit and the funds check happen in one critical
        section; no reader can see one side without the other.

        Raises:
            AccountNotFound: If either account does not exist
            InvalidAmount: If amount is not positive, or a new balance
                would not be exact
            SameAccount: If source and destination are the same account
            InsufficientFunds: If the source balance is lower than amount
        """
        with self._lock:
            source = self._get_row(source_id)
            destination = self._get_row(destination_id)
            value = to_positive_amount(amount, self.precision)
            if source is destination:
                raise SameAccount(source_id)
            if source.balance < value:
                raise InsufficientFunds(source_id, source.balance, value)

            new_source_balance = add_exact(source.balance, -value, amount)
            new_destination_balance = add_exact(destination.balance, value, amount)
            record = self._build_record(
                TransactionKind.TRANSFER, value, source=source_id, destination=destination_id
            )

            source.balance = new_source_balance
            destination.balance = new_destination_balance
            self._next_transaction_id += 1

        self._applied(record)
        return record

    def snapshot_state(self) -> Dict[str, Any]:
        """
        Serialize the ledger for a persistence collaborator

        Returns:
            {"version", "accounts", "next_transaction_id", "next_account_number"}
            with balances as strings
        """
        with self._lock:
            return {
                'version': SNAPSHOT_VERSION,
                'accounts': [row.view().to_dict() for row in self._accounts.values()],
                'next_transaction_id': self._next_transaction_id,
                'next_account_number': self._next_account_number,
            }

    @classmethod
    def restore_state(
        cls,
        snapshot: Dict[str, Any],
        event_dispatcher: Optional[EventDispatcher] = None,
        opening_balance: Optional[AmountLike] = None,
        precision: int = DEFAULT_PRECISION
    ) -> 'Ledger':
        """
        Rebuild a ledger from snapshot_state() output

        Raises:
            SnapshotError: If the snapshot is malformed or violates a ledger
                invariant (negative balance, duplicate id, stale counters)
        """
        if not isinstance(snapshot, dict):
            raise SnapshotError("Snapshot must be a mapping")

        version = snapshot.get('version', SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise SnapshotError(f"Unsupported snapshot version: {version}")

        ledger = cls(opening_balance=opening_balance, precision=precision,
                     event_dispatcher=event_dispatcher)

        accounts = snapshot.get('accounts', [])
        if not isinstance(accounts, list):
            raise SnapshotError(f"Snapshot accounts must be a list, got {type(accounts).__name__}")

        highest_number = 0
        for entry in accounts:
            if not isinstance(entry, dict):
                raise SnapshotError(f"Malformed account entry {entry!r}: expected a mapping")
            try:
                account_id = entry['id']
                display_name = entry['display_name']
                balance = to_amount(entry['balance'], precision)
            except (KeyError, TypeError, ValueError) as e:
                raise SnapshotError(f"Malformed account entry {entry!r}: {e}") from e

            if not isinstance(account_id, str) or not account_id:
                raise SnapshotError(f"Account id must be a non-empty string: {account_id!r}")
            if not isinstance(display_name, str):
                raise SnapshotError(f"Display name for {account_id} must be a string: {display_name!r}")
            if account_id in ledger._accounts:
                raise SnapshotError(f"Duplicate account id in snapshot: {account_id}")
            if balance < Decimal('0'):
                raise SnapshotError(f"Negative balance for {account_id}: {balance}")

            match = _ACCOUNT_ID_PATTERN.match(account_id)
            if match:
                highest_number = max(highest_number, int(match.group(1)))

            ledger._accounts[account_id] = _AccountRow(
                id=account_id, display_name=display_name, balance=balance
            )

        next_transaction_id = snapshot.get('next_transaction_id', 1)
        next_account_number = snapshot.get('next_account_number', highest_number + 1)
        for name, value in (('next_transaction_id', next_transaction_id),
                            ('next_account_number', next_account_number)):
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise SnapshotError(f"{name} must be a positive integer, got {value!r}")
        if next_account_number <= highest_number:
            raise SnapshotError(
                f"next_account_number {next_account_number} would reissue {ACCOUNT_ID_PREFIX}{highest_number}"
            )

        ledger._next_transaction_id = next_transaction_id
        ledger._next_account_number = next_account_number
        return ledger

    def _get_row(self, account_id: str) -> _AccountRow:
        row = self._accounts.get(account_id)
        if row is None:
            raise AccountNotFound(account_id)
        return row

    def _build_record(
        self,
        kind: TransactionKind,
        amount: Decimal,
        source: Optional[str] = None,
        destination: Optional[str] = None
    ) -> TransactionRecord:
        # Caller holds self._lock and bumps the counter once the mutation is applied
        record = TransactionRecord(
            id=self._next_transaction_id,
            kind=kind,
            amount=amount,
            source_account_id=source,
            destination_account_id=destination,
        )
        return record

    def _applied(self, record: TransactionRecord) -> None:
        log_action(
            self.logger, "debug", f"Transaction applied: {record.kind.value} {record.amount}",
            account_id=record.source_account_id or record.destination_account_id,
            transaction_id=record.id, action=record.kind.value
        )
        self._publish(LedgerEvent.TRANSACTION_APPLIED, "transaction", str(record.id), record.to_dict())

    def _publish(self, event_type: LedgerEvent, entity_type: str, entity_id: str,
                 data: Dict[str, Any]) -> None:
        if self._event_dispatcher is None:
            return
        self._event_dispatcher.publish(EventPayload(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            data=data
        ))
