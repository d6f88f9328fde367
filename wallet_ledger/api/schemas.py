"""
Pydantic schemas for API requests and responses
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from ..ledger import Account, TransactionRecord


# Account schemas
class CreateAccountRequest(BaseModel):
    display_name: str = Field(..., min_length=1, description="Account holder label")
    opening_balance: Optional[str] = Field(None, description="Decimal amount as string; ledger default if omitted")


class AccountResponse(BaseModel):
    id: str
    display_name: str
    balance: str

    @classmethod
    def from_account(cls, account: Account) -> 'AccountResponse':
        return cls(id=account.id, display_name=account.display_name, balance=str(account.balance))


class BalanceResponse(BaseModel):
    account_id: str
    balance: str


# Transaction schemas
class DepositRequest(BaseModel):
    account_id: str
    amount: str = Field(..., description="Decimal amount as string")


class WithdrawRequest(BaseModel):
    account_id: str
    amount: str = Field(..., description="Decimal amount as string")


class TransferRequest(BaseModel):
    source_account_id: str
    destination_account_id: str
    amount: str = Field(..., description="Decimal amount as string")


class TransactionResponse(BaseModel):
    id: int
    kind: str
    amount: str
    source_account_id: Optional[str] = None
    destination_account_id: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_record(cls, record: TransactionRecord) -> 'TransactionResponse':
        return cls(
            id=record.id,
            kind=record.kind.value,
            amount=str(record.amount),
            source_account_id=record.source_account_id,
            destination_account_id=record.destination_account_id,
            created_at=record.created_at
        )


class ErrorResponse(BaseModel):
    """Body of every rejected ledger operation"""
    error: str = Field(..., description="Failure kind, e.g. InsufficientFunds")
    detail: str


def error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """OpenAPI `responses=` entries documenting ErrorResponse bodies"""
    return {status_code: {"model": ErrorResponse} for status_code in status_codes}
