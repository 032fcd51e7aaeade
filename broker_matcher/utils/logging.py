"""
Logging setup for Broker Matcher.

Call ``configure_logging(config.logging, debug=config.debug)`` once from the
composition root (the CLI, or the host application that owns the
``BrokerFilterService``). Library modules only call
``logging.getLogger(__name__)``.

Levels:
  - The root logger uses ``logging.level``.
  - ``debug = true`` lowers the ``broker_matcher`` loggers to DEBUG without
    flooding the output with third-party debug records (superseded
    debounce passes and per-pass match counts are logged at DEBUG).
  - Loggers named in ``logging.quiet_loggers`` are capped at WARNING.

JSON format (``json_format = true``) emits one object per line. Fields passed
with ``extra=`` are copied to the top level::

    {"ts": "2026-03-01T09:30:00Z", "level": "INFO",
     "logger": "broker_matcher.ingestion.catalog",
     "msg": "Loaded 8 brokers from sample_brokers.json"}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from broker_matcher.config import LoggingConfig

PACKAGE_LOGGER = "broker_matcher"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came from ``extra=``.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime",
}


class JsonFormatter(logging.Formatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg``,
    ``exc`` when an exception is attached, plus any ``extra=`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(
            (key, val) for key, val in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return JsonFormatter()
    return logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def configure_logging(config: "LoggingConfig", debug: bool = False) -> None:
    """Install stdout (and optional file) handlers on the root logger.

    Handlers carry no level of their own, so the per-logger levels set here
    decide what is emitted.

    Args:
        config: ``AppConfig.logging``.
        debug:  ``AppConfig.debug``; lowers ``broker_matcher.*`` to DEBUG.
    """
    formatter = build_formatter(config.json_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, config.level, logging.INFO),
        handlers=handlers,
        force=True,
    )

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if debug else logging.NOTSET)
    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
