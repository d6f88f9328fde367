"""
Tests for configuration management
"""

import pytest
from decimal import Decimal

from wallet_ledger import config as config_module
from wallet_ledger.config import LedgerConfig, get_config, reload_config
from wallet_ledger.errors import InvalidAmount


class TestLedgerConfig:
    """Test defaults and environment overrides"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("WALLET_LEDGER_OPENING_BALANCE", raising=False)
        config = LedgerConfig(_env_file=None)

        assert config.opening_balance == "1000.00"
        assert config.opening_balance_amount == Decimal('1000.00')
        assert config.amount_precision == 2
        assert config.snapshot_backend == "none"
        assert config.log_format == "json"

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("WALLET_LEDGER_OPENING_BALANCE", "250.00")
        monkeypatch.setenv("WALLET_LEDGER_API_PORT", "9000")

        config = LedgerConfig(_env_file=None)

        assert config.opening_balance_amount == Decimal('250.00')
        assert config.api_port == 9000

    def test_invalid_opening_balance(self):
        config = LedgerConfig(opening_balance="-10", _env_file=None)
        with pytest.raises(InvalidAmount):
            config.opening_balance_amount

    def test_reload_config(self, monkeypatch):
        original = config_module.config
        try:
            monkeypatch.setenv("WALLET_LEDGER_LOG_LEVEL", "DEBUG")
            reloaded = reload_config()
            assert reloaded.log_level == "DEBUG"
            assert get_config() is reloaded
        finally:
            config_module.config = original
