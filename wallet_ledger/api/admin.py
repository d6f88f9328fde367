"""
Admin endpoints for ledger snapshots
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from .dependencies import get_ledger, get_snapshot_store
from ..ledger import Ledger
from ..storage import SnapshotStore, save_ledger


router = APIRouter()


@router.get("/snapshot")
async def get_snapshot(ledger: Ledger = Depends(get_ledger)):
    """Current ledger state in snapshot form"""
    return ledger.snapshot_state()


@router.post("/snapshot")
async def save_snapshot(
    ledger: Ledger = Depends(get_ledger),
    store: Optional[SnapshotStore] = Depends(get_snapshot_store)
):
    """Persist the ledger to the configured snapshot store"""
    if store is None:
        raise HTTPException(status_code=409, detail="Snapshot persistence is not configured")

    snapshot = save_ledger(ledger, store)
    return {
        "message": "Snapshot saved",
        "accounts": len(snapshot["accounts"]),
        "next_transaction_id": snapshot["next_transaction_id"]
    }
