"""Structured Logging — JSON formatter fields and repeatable setup."""

import json
import logging
import uuid

from skillsharp.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("skillsharp.test", logging.INFO, __file__, 1, "hello", None, None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_surfaces_known_extras():
    user_id = uuid.uuid4()
    line = json.loads(JSONFormatter().format(_record(user_id=user_id, status_code=200, noise="x")))
    assert line["message"] == "hello"
    assert line["user_id"] == str(user_id)
    assert line["status_code"] == 200
    assert "noise" not in line


def test_setup_logging_is_repeatable():
    before = len(logging.root.handlers)
    setup_logging("DEBUG", "text")
    setup_logging("INFO", "json")
    owned = [h for h in logging.root.handlers if getattr(h, "_skillsharp", False)]
    assert len(owned) == 1
    assert isinstance(owned[0].formatter, JSONFormatter)
    assert len(logging.root.handlers) <= before + 1
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
