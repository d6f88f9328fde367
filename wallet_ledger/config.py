"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings

from .currency import to_non_negative_amount


class LedgerConfig(BaseSettings):
    """Wallet ledger configuration"""

    # Ledger rules
    opening_balance: str = "1000.00"  # Balance given to new accounts
    amount_precision: int = 2  # Minor-unit decimal places

    # Snapshot persistence
    snapshot_backend: str = "none"  # none, memory, json, sqlite
    snapshot_path: str = "wallet_ledger_snapshot.json"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    class Config:
        env_prefix = "WALLET_LEDGER_"
        env_file = ".env"
        case_sensitive = False

    @property
    def opening_balance_amount(self) -> Decimal:
        """Opening balance parsed as an exact amount"""
        return to_non_negative_amount(self.opening_balance, self.amount_precision)


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
