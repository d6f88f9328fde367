"""
Wallet Ledger

A minimal account ledger: per-user balances, deposits, withdrawals and
transfers with exact Decimal arithmetic and a single serialization point
for every balance mutation.
"""

__version__ = "1.0.0"
