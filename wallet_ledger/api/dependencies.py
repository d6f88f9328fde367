"""
Request dependencies shared by the routers
"""

import uuid
from typing import Optional

from fastapi import Header, HTTPException, Request

from ..journal import TransactionJournal
from ..ledger import Ledger
from ..storage import SnapshotStore


def get_ledger(request: Request) -> Ledger:
    return request.app.state.ledger


def get_journal(request: Request) -> TransactionJournal:
    journal = request.app.state.journal
    if journal is None:
        raise HTTPException(status_code=501, detail="Transaction history is not enabled")
    return journal


def get_snapshot_store(request: Request) -> Optional[SnapshotStore]:
    return request.app.state.snapshot_store


def get_correlation_id(x_correlation_id: Optional[str] = Header(None)) -> str:
    """Correlation id from the X-Correlation-ID header, generated if absent"""
    return x_correlation_id or str(uuid.uuid4())
