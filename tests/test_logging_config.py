"""
Tests for structured logging
"""

import json
import logging
import sys

from wallet_ledger.logging_config import JSONFormatter, get_logger, log_action, setup_logging


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestJSONFormatter:
    """Test JSON log output"""

    def test_structured_fields(self):
        logger = logging.getLogger("wallet_ledger.test.formatter")
        record = logger.makeRecord(logger.name, logging.INFO, __name__, 0, "hello", (), None)
        record.account_id = "acct-1"
        record.transaction_id = 7

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["account_id"] == "acct-1"
        assert entry["transaction_id"] == 7
        assert "correlation_id" not in entry

    def test_exception_info(self):
        logger = logging.getLogger("wallet_ledger.test.formatter")
        try:
            raise RuntimeError("bad")
        except RuntimeError:
            record = logger.makeRecord(logger.name, logging.ERROR, __name__, 0, "failed", (), sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: bad" in entry["exception"]


class TestSetupLogging:
    """Test logger configuration"""

    def test_json_handler(self):
        logger = setup_logging("DEBUG", logger_name="wallet_ledger.test.setup")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)
        assert logger.propagate is False

    def test_text_handler_replaces_previous(self):
        setup_logging("INFO", logger_name="wallet_ledger.test.text")
        logger = setup_logging("WARNING", logger_name="wallet_ledger.test.text", fmt="text")
        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_get_logger(self):
        assert get_logger("wallet_ledger.x") is logging.getLogger("wallet_ledger.x")


class TestLogAction:
    """Test structured action logging"""

    def test_attaches_fields(self):
        logger = logging.getLogger("wallet_ledger.test.action")
        logger.setLevel(logging.INFO)
        handler = ListHandler()
        logger.addHandler(handler)
        try:
            log_action(logger, "info", "Deposit processed", account_id="acct-1",
                       transaction_id=3, action="deposit", correlation_id="abc",
                       extra={"amount": "5.00"})
        finally:
            logger.removeHandler(handler)

        record = handler.records[0]
        assert record.getMessage() == "Deposit processed"
        assert record.account_id == "acct-1"
        assert record.transaction_id == 3
        assert record.action == "deposit"
        assert record.correlation_id == "abc"
        assert record.extra == {"amount": "5.00"}

    def test_respects_level(self):
        logger = logging.getLogger("wallet_ledger.test.level")
        logger.setLevel(logging.WARNING)
        handler = ListHandler()
        logger.addHandler(handler)
        try:
            log_action(logger, "debug", "ignored")
        finally:
            logger.removeHandler(handler)

        assert handler.records == []
