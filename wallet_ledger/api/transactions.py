"""
Transaction endpoints
"""

from fastapi import APIRouter, Depends

from .dependencies import get_correlation_id, get_ledger
from .schemas import (
    DepositRequest, TransactionResponse, TransferRequest, WithdrawRequest, error_responses
)
from ..ledger import Ledger, TransactionRecord
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger("wallet_ledger.api.transactions")


def _logged(record: TransactionRecord, correlation_id: str) -> TransactionResponse:
    log_action(
        logger, "info", f"{record.kind.value.capitalize()} processed successfully",
        account_id=record.source_account_id or record.destination_account_id,
        transaction_id=record.id, action=record.kind.value, correlation_id=correlation_id,
        extra={
            "amount": str(record.amount),
            "source_account_id": record.source_account_id,
            "destination_account_id": record.destination_account_id,
        }
    )
    return TransactionResponse.from_record(record)


@router.post("/deposit", status_code=201, response_model=TransactionResponse,
             responses=error_responses(404, 422))
async def deposit(
    request: DepositRequest,
    ledger: Ledger = Depends(get_ledger),
    correlation_id: str = Depends(get_correlation_id)
):
    """Make a deposit"""
    record = ledger.deposit(request.account_id, request.amount)
    return _logged(record, correlation_id)


@router.post("/withdraw", status_code=201, response_model=TransactionResponse,
             responses=error_responses(404, 409, 422))
async def withdraw(
    request: WithdrawRequest,
    ledger: Ledger = Depends(get_ledger),
    correlation_id: str = Depends(get_correlation_id)
):
    """Make a withdrawal"""
    record = ledger.withdraw(request.account_id, request.amount)
    return _logged(record, correlation_id)


@router.post("/transfer", status_code=201, response_model=TransactionResponse,
             responses=error_responses(400, 404, 409, 422))
async def transfer(
    request: TransferRequest,
    ledger: Ledger = Depends(get_ledger),
    correlation_id: str = Depends(get_correlation_id)
):
    """Make a transfer between accounts"""
    record = ledger.transfer(
        request.source_account_id, request.destination_account_id, request.amount
    )
    return _logged(record, correlation_id)
