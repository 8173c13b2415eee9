"""Structured Logging - JSON formatter and setup.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (review_id, path_name, error_code, operation) surfaced when present
    - JSON format by default, human-readable when log_format = "text"

Design Decisions:
    - setup_logging called once by open_store(); library code only creates loggers
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "review_id", "path_name", "error_code", "operation", "schema_version",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure the `reviewdb` logger hierarchy."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    root = logging.getLogger("reviewdb")
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
