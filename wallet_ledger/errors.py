"""
Ledger Error Taxonomy

Every ledger operation either succeeds or raises exactly one of these.
They are expected, caller-recoverable conditions and subclass ValueError.
"""

from decimal import Decimal
from typing import Any


class LedgerError(ValueError):
    """Base class for rejected ledger operations"""

    kind = "LedgerError"


class AccountNotFound(LedgerError):
    """Account id is not known to the ledger"""

    kind = "AccountNotFound"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class InvalidAmount(LedgerError):
    """Amount is non-positive, non-numeric or too precise"""

    kind = "InvalidAmount"

    def __init__(self, amount: Any, reason: str = "amount must be positive"):
        self.amount = amount
        self.reason = reason
        super().__init__(f"Invalid amount {amount!r}: {reason}")


class InsufficientFunds(LedgerError):
    """Account balance is lower than the requested debit"""

    kind = "InsufficientFunds"

    def __init__(self, account_id: str, balance: Decimal, amount: Decimal):
        self.account_id = account_id
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"Insufficient funds in {account_id}: balance {balance}, requested {amount}"
        )


class SameAccount(LedgerError):
    """Transfer source and destination are the same account"""

    kind = "SameAccount"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Cannot transfer from {account_id} to itself")


class SnapshotError(ValueError):
    """Snapshot payload cannot be restored into a ledger"""
