"""Tests for structured logging and quote context."""
from __future__ import annotations

import json
import logging
import sys

import pytest

from dymension_bridge.logging_config import (
    QuoteContextFilter,
    StructuredFormatter,
    clear_context,
    generate_quote_id,
    get_quote_id,
    set_quote_id,
    set_route_context,
    setup_logging,
)


def make_record(message: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="dymension_bridge.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestQuoteContext:
    """Test context variables."""

    def test_generate_quote_id(self):
        """Test ids are prefixed and unique."""
        first, second = generate_quote_id(), generate_quote_id()
        assert first.startswith("qt_") and len(first) == 19
        assert first != second

    def test_set_and_clear(self):
        """Test setting and clearing the context."""
        set_quote_id("qt_1")
        assert get_quote_id() == "qt_1"
        clear_context()
        assert get_quote_id() is None

    def test_filter_attaches_context(self):
        """Test the filter copies context onto records."""
        set_quote_id("qt_abc")
        set_route_context("ethereum", "kaspa", "KAS")
        record = make_record()
        assert QuoteContextFilter().filter(record)
        assert record.quote_id == "qt_abc"
        assert record.route == "ethereum->kaspa"
        assert record.token == "KAS"


class TestStructuredFormatter:
    """Test JSON output."""

    def test_fields(self):
        """Test the base fields and context."""
        record = make_record("Built transfer", quote_id="qt_x", route="a->b", token=None)
        data = json.loads(StructuredFormatter().format(record))
        assert data["message"] == "Built transfer"
        assert data["level"] == "INFO"
        assert data["logger"] == "dymension_bridge.test"
        assert data["quote_id"] == "qt_x"
        assert data["route"] == "a->b"
        assert "token" not in data

    def test_extra_fields(self):
        """Test extra= values are included."""
        record = make_record(mode="via_hub", amount="100")
        data = json.loads(StructuredFormatter().format(record))
        assert data["mode"] == "via_hub"
        assert data["amount"] == "100"

    def test_exception(self):
        """Test exceptions are formatted."""
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record("failed")
            record.exc_info = sys.exc_info()
        data = json.loads(StructuredFormatter().format(record))
        assert "ValueError: boom" in data["exception"]


class TestSetupLogging:
    """Test root logger configuration."""

    def test_json_handler(self, restore_root_logger):
        """Test a single JSON handler with the context filter is installed."""
        setup_logging(level="debug", json_format=True)
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler.formatter, StructuredFormatter)
        assert any(isinstance(f, QuoteContextFilter) for f in handler.filters)

    def test_file_handler(self, restore_root_logger, tmp_path):
        """Test an optional file handler."""
        log_file = tmp_path / "bridge.log"
        setup_logging(json_format=False, log_file=str(log_file))
        try:
            assert len(restore_root_logger.handlers) == 2
            logging.getLogger("dymension_bridge").info("to file")
            for handler in restore_root_logger.handlers:
                handler.flush()
            assert "to file" in log_file.read_text()
        finally:
            for handler in restore_root_logger.handlers:
                if isinstance(handler, logging.FileHandler):
                    handler.close()
