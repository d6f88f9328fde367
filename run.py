#!/usr/bin/env python3
"""
Wallet Ledger Entry Point

Starts the FastAPI server with settings from WALLET_LEDGER_* environment
variables (see wallet_ledger.config).
"""

import sys

from wallet_ledger.api import run_server
from wallet_ledger.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting Wallet Ledger...")
    print(f"Opening balance for new accounts: {config.opening_balance}")
    print(f"Snapshot backend: {config.snapshot_backend}")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(config=config)
    except KeyboardInterrupt:
        print("\nShutting down Wallet Ledger...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
