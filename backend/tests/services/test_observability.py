"""JSON log formatter tests."""

import json
import logging

from sitefeed.infrastructure.observability import JSONFormatter


def _record(**extra):
    record = logging.LogRecord("sitefeed.test", logging.ERROR, __file__, 1, "boom", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_known_extras():
    line = JSONFormatter().format(_record(resource="posts", status_code=500, unrelated="x"))
    data = json.loads(line)
    assert data["message"] == "boom"
    assert data["level"] == "ERROR"
    assert data["resource"] == "posts"
    assert data["status_code"] == 500
    assert "unrelated" not in data


def test_json_formatter_serializes_violations():
    violations = [{"path": "slug", "reason": "invalid_slug", "detail": "x"}]
    data = json.loads(JSONFormatter().format(_record(violations=violations)))
    assert data["violations"] == violations
