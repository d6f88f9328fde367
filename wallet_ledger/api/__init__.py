"""
Wallet Ledger API Application Factory
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .accounts import router as accounts_router
from .transactions import router as transactions_router
from .admin import router as admin_router
from .. import __version__
from ..config import LedgerConfig, get_config
from ..errors import AccountNotFound, InsufficientFunds, InvalidAmount, LedgerError, SameAccount
from ..events import EventDispatcher
from ..journal import TransactionJournal
from ..ledger import Ledger
from ..logging_config import get_logger, log_action, setup_logging
from ..storage import SnapshotStore, create_snapshot_store, load_ledger, save_ledger


ERROR_STATUS_CODES = {
    AccountNotFound: 404,
    InvalidAmount: 422,
    InsufficientFunds: 409,
    SameAccount: 400,
}

logger = get_logger("wallet_ledger.api")


def status_code_for(exc: LedgerError) -> int:
    """HTTP status for a ledger failure kind"""
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = status_code_for(exc)
    log_action(
        logger, "warning", f"Ledger operation rejected: {exc}",
        action=f"{request.method} {request.url.path}",
        correlation_id=request.headers.get("x-correlation-id"),
        extra={"error": exc.kind, "status_code": status_code}
    )
    return JSONResponse(status_code=status_code, content={"error": exc.kind, "detail": str(exc)})


def create_app(
    ledger: Optional[Ledger] = None,
    config: Optional[LedgerConfig] = None,
    store: Optional[SnapshotStore] = None,
    journal: Optional[TransactionJournal] = None
) -> FastAPI:
    """
    Create and configure the FastAPI application

    Args:
        ledger: Ledger to serve; restored from store (or built empty) if omitted
        config: Configuration; global config if omitted
        store: Snapshot store; built from config.snapshot_backend if omitted.
            The ledger is saved to it on shutdown.
        journal: Transaction journal; one is attached to the ledger's event
            dispatcher if omitted and the ledger has one
    """
    config = config or get_config()
    if store is None:
        store = create_snapshot_store(config)

    if ledger is None:
        dispatcher = EventDispatcher()
        if store is not None:
            ledger = load_ledger(store, config, event_dispatcher=dispatcher)
        else:
            ledger = Ledger.from_config(config, event_dispatcher=dispatcher)

    if journal is None and ledger.event_dispatcher is not None:
        journal = TransactionJournal(ledger.event_dispatcher)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if store is not None:
            save_ledger(app.state.ledger, store)
            store.close()

    app = FastAPI(
        title="Wallet Ledger API",
        description="In-memory account ledger with exact Decimal balances",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    app.state.ledger = ledger
    app.state.journal = journal
    app.state.snapshot_store = store

    app.add_exception_handler(LedgerError, ledger_error_handler)

    # Include routers
    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
    app.include_router(transactions_router, prefix="/transactions", tags=["Transactions"])
    app.include_router(admin_router, prefix="/admin", tags=["Admin"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "wallet_ledger_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Wallet Ledger API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "accounts": "/accounts",
                "transactions": "/transactions",
                "admin": "/admin",
            }
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None,
               config: Optional[LedgerConfig] = None):
    """Run the FastAPI server"""
    config = config or get_config()
    setup_logging(config.log_level, fmt=config.log_format)

    app = create_app(config=config)
    uvicorn.run(
        app,
        host=host or config.api_host,
        port=port or config.api_port,
        log_level=config.log_level.lower()
    )
