"""Unit tests for telemetry module."""

import asyncio
import json
import logging
import sys

from mongokit.commons.telemetry.logger import (
    JsonFormatter,
    TextFormatter,
    clear_log_context,
    configure_logging,
    correlation_id_var,
    get_correlation_id,
    get_log_context,
    set_correlation_id,
    set_log_context,
)


def _record(msg="Test message", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="/test/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationId:
    """Tests for correlation ID management."""

    def teardown_method(self):
        correlation_id_var.set(None)

    def test_set_and_get_correlation_id(self):
        cid = set_correlation_id("test-123")
        assert cid == "test-123"
        assert get_correlation_id() == "test-123"

    def test_auto_generate_correlation_id(self):
        cid = set_correlation_id()
        assert len(cid) == 36  # UUID format

    def test_correlation_id_isolated_per_task(self):
        set_correlation_id("outer")

        async def call(cid):
            set_correlation_id(cid)
            await asyncio.sleep(0)
            return get_correlation_id()

        async def run_calls():
            return await asyncio.gather(call("a"), call("b"))

        assert asyncio.run(run_calls()) == ["a", "b"]
        assert get_correlation_id() == "outer"


class TestLogContext:
    """Tests for logging context management."""

    def setup_method(self):
        clear_log_context()

    def teardown_method(self):
        clear_log_context()

    def test_set_and_get_context(self):
        set_log_context(rpc_method="/orders.Orders/Get")
        set_log_context(collection="orders")
        assert get_log_context() == {
            "rpc_method": "/orders.Orders/Get",
            "collection": "orders",
        }

    def test_context_is_copied(self):
        set_log_context(key="value")
        ctx = get_log_context()
        ctx["new_key"] = "new_value"
        assert "new_key" not in get_log_context()


class TestJsonFormatter:
    """Tests for JSON log formatter."""

    def teardown_method(self):
        correlation_id_var.set(None)
        clear_log_context()

    def test_basic_format(self):
        data = json.loads(JsonFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["path"] == "/test/file.py:42"

    def test_path_can_be_omitted(self):
        data = json.loads(JsonFormatter(include_path=False).format(_record()))
        assert "path" not in data

    def test_format_with_correlation_and_context(self):
        set_correlation_id("test-cid")
        set_log_context(rpc_method="/orders.Orders/Get")

        data = json.loads(JsonFormatter().format(_record()))

        assert data["correlation_id"] == "test-cid"
        assert data["context"] == {"rpc_method": "/orders.Orders/Get"}

    def test_extra_fields_are_included(self):
        record = _record(collection="orders", inserted_id="abc")

        data = json.loads(JsonFormatter().format(record))

        assert data["collection"] == "orders"
        assert data["inserted_id"] == "abc"
        assert "msg" not in data
        assert "args" not in data

    def test_format_with_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record(level=logging.ERROR, exc_info=sys.exc_info())

        data = json.loads(JsonFormatter().format(record))

        assert "ValueError" in data["exception"]


class TestTextFormatter:
    """Tests for text log formatter."""

    def test_basic_format(self):
        output = TextFormatter().format(_record())

        assert "INFO" in output
        assert "[test.logger]" in output
        assert "Test message" in output


class TestConfigureLogging:
    """Tests for logger configuration."""

    def test_configure_json_logger(self):
        logger = configure_logging(
            level="DEBUG", format_type="json", logger_name="test.json"
        )
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logger.propagate is False

    def test_configure_text_logger(self):
        logger = configure_logging(
            level="INFO", format_type="text", logger_name="test.text"
        )
        assert isinstance(logger.handlers[0].formatter, TextFormatter)

    def test_reconfigure_replaces_handlers(self):
        configure_logging(logger_name="test.again")
        logger = configure_logging(logger_name="test.again")
        assert len(logger.handlers) == 1
