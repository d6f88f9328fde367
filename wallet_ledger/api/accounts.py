"""
Account endpoints
"""

from typing import List

from fastapi import APIRouter, Depends

from .dependencies import get_correlation_id, get_journal, get_ledger
from .schemas import (
    AccountResponse, BalanceResponse, CreateAccountRequest, TransactionResponse, error_responses
)
from ..journal import TransactionJournal
from ..ledger import Ledger
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger("wallet_ledger.api.accounts")


@router.post("", status_code=201, response_model=AccountResponse, responses=error_responses(422))
async def create_account(
    request: CreateAccountRequest,
    ledger: Ledger = Depends(get_ledger),
    correlation_id: str = Depends(get_correlation_id)
):
    """Open a new account"""
    account = ledger.create_account(request.display_name, request.opening_balance)

    log_action(
        logger, "info", "Account created",
        account_id=account.id, action="create_account", correlation_id=correlation_id,
        extra={"balance": str(account.balance)}
    )
    return AccountResponse.from_account(account)


@router.get("", response_model=List[AccountResponse])
async def list_accounts(ledger: Ledger = Depends(get_ledger)):
    """List all accounts"""
    return [AccountResponse.from_account(account) for account in ledger.list_accounts()]


@router.get("/{account_id}", response_model=AccountResponse, responses=error_responses(404))
async def get_account(account_id: str, ledger: Ledger = Depends(get_ledger)):
    """Get account details"""
    return AccountResponse.from_account(ledger.get_account(account_id))


@router.get("/{account_id}/balance", response_model=BalanceResponse, responses=error_responses(404))
async def get_balance(account_id: str, ledger: Ledger = Depends(get_ledger)):
    """Get current balance"""
    balance = ledger.get_balance(account_id)
    return BalanceResponse(account_id=account_id, balance=str(balance))


@router.get(
    "/{account_id}/transactions",
    response_model=List[TransactionResponse],
    responses=error_responses(404)
)
async def get_account_transactions(
    account_id: str,
    ledger: Ledger = Depends(get_ledger),
    journal: TransactionJournal = Depends(get_journal)
):
    """Transactions that debit or credit the account, oldest first"""
    # Raises AccountNotFound for unknown ids
    ledger.get_account(account_id)
    return [TransactionResponse.from_record(record) for record in journal.for_account(account_id)]
