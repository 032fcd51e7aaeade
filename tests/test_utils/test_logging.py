"""
Tests for broker_matcher.utils.logging — root logger setup.

Covers:
  - JsonFormatter: core fields, extra= fields, exception text, no LogRecord
    internals leaking into the payload
  - configure_logging(): root level, debug flag on broker_matcher loggers,
    quiet_loggers, optional log file
"""

from __future__ import annotations

import json
import logging
import sys

import pytest

from broker_matcher.config import LoggingConfig
from broker_matcher.utils.logging import (
    PACKAGE_LOGGER,
    JsonFormatter,
    configure_logging,
)


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    touched = [logging.getLogger(n) for n in (PACKAGE_LOGGER, "asyncio", "noisy.lib")]
    levels = [lg.level for lg in touched]
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    for lg, lvl in zip(touched, levels):
        lg.setLevel(lvl)


def _record(msg: str, *args, extra=None, exc_info=None) -> logging.LogRecord:
    return logging.getLogger("broker_matcher.test").makeRecord(
        "broker_matcher.test", logging.INFO, __file__, 1, msg, args, exc_info, extra=extra,
    )


class TestJsonFormatter:
    def test_core_fields(self):
        payload = json.loads(JsonFormatter().format(_record("Loaded %d brokers", 8)))
        assert payload["level"] == "INFO"
        assert payload["logger"] == "broker_matcher.test"
        assert payload["msg"] == "Loaded 8 brokers"
        assert payload["ts"].endswith("Z")

    def test_extra_fields_copied(self):
        record = _record("Filter pass", extra={"matches": 3, "catalog_size": 8})
        payload = json.loads(JsonFormatter().format(record))
        assert payload["matches"] == 3
        assert payload["catalog_size"] == 8

    def test_record_internals_not_copied(self):
        payload = json.loads(JsonFormatter().format(_record("x")))
        assert set(payload) == {"ts", "level", "logger", "msg"}

    def test_exception_text(self):
        try:
            raise RuntimeError("scoring failed")
        except RuntimeError:
            record = _record("Error filtering brokers", exc_info=sys.exc_info())
        payload = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: scoring failed" in payload["exc"]


class TestConfigureLogging:
    def test_root_level_and_json_handler(self):
        configure_logging(LoggingConfig(level="warning", json_format=True))
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_debug_lowers_package_loggers_only(self):
        configure_logging(LoggingConfig(level="INFO"), debug=True)
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG
        assert logging.getLogger("broker_matcher.service").isEnabledFor(logging.DEBUG)
        assert not logging.getLogger("noisy.lib").isEnabledFor(logging.DEBUG)

    def test_without_debug_package_follows_root(self):
        configure_logging(LoggingConfig(level="INFO"), debug=True)
        configure_logging(LoggingConfig(level="INFO"))
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.NOTSET
        assert not logging.getLogger("broker_matcher.service").isEnabledFor(logging.DEBUG)

    def test_quiet_loggers(self):
        configure_logging(LoggingConfig(level="DEBUG", quiet_loggers=("noisy.lib",)))
        assert logging.getLogger("noisy.lib").level == logging.WARNING

    def test_log_file(self, tmp_path):
        log_path = tmp_path / "logs" / "broker_matcher.log"
        configure_logging(LoggingConfig(log_file=str(log_path)))
        logging.getLogger("broker_matcher.test").info("Catalog set: %d brokers", 4)
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "Catalog set: 4 brokers" in log_path.read_text(encoding="utf-8")
