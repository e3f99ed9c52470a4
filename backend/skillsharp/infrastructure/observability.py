"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (user_id, exam_id, attempt_id, error_code, path) surfaced when present
    - JSON format in production, human-readable in development
    - setup_logging is idempotent: repeated calls replace its own handler
"""

import logging
import json
from datetime import datetime, timezone


_EXTRA_FIELDS = (
    "user_id", "exam_id", "attempt_id", "institute_id",
    "error_code", "path", "method", "status_code", "duration_ms",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

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
                log[key] = str(val) if not isinstance(val, (int, float, bool)) else val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Install one root handler. Safe to call again (API lifespan and CLI both do)."""
    for existing in list(logging.root.handlers):
        if getattr(existing, "_skillsharp", False):
            logging.root.removeHandler(existing)
    handler = logging.StreamHandler()
    handler._skillsharp = True
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # request lines come from the API middleware
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
