# masonry_support/logging_config.py
"""Logging setup for the command line and for services embedding the engine."""

import json
import logging
import sys
from datetime import datetime, timezone

# Fields passed through `extra=` that are copied into JSON records
EXTRA_FIELDS = ("stage", "candidates", "duration_ms")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure the root logger with a single stderr handler."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
        ))

    root.handlers = [handler]
