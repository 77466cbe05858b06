"""Tests for structured request logging helpers."""

from __future__ import annotations

import json
import logging
import sys

from api.observability import (
    JsonFormatter,
    bind_race_fields,
    get_race_fields,
    get_request_id,
    new_request_id,
    request_log_fields,
    reset_race_fields,
    reset_request_id,
    set_request_id,
    start_race_fields,
)


def _record(msg="hello %s", args=("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="tripace.test", level=logging.INFO, pathname="test.py",
        lineno=1, msg=msg, args=args, exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_outputs_valid_json():
    parsed = json.loads(JsonFormatter().format(_record()))
    assert parsed["message"] == "hello world"
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "tripace.test"
    assert "ts" in parsed
    assert "request_id" not in parsed


def test_json_formatter_merges_extra_fields():
    parsed = json.loads(JsonFormatter().format(_record(distance="full", duration_ms=12.5)))
    assert parsed["distance"] == "full"
    assert parsed["duration_ms"] == 12.5


def test_json_formatter_stamps_request_id():
    token = set_request_id("req-42")
    try:
        assert get_request_id() == "req-42"
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["request_id"] == "req-42"
    finally:
        reset_request_id(token)
    assert get_request_id() is None


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        exc_info = sys.exc_info()
    record = _record(msg="fail", args=())
    record.exc_info = exc_info
    parsed = json.loads(JsonFormatter().format(record))
    assert "ValueError: boom" in parsed["exc_info"]


def test_request_log_fields_rounds_duration():
    fields = request_log_fields(method="POST", path="/api/v1/pace-plan", status_code=200, duration_ms=3.14159, client_ip=None)
    assert fields == {
        "method": "POST",
        "path": "/api/v1/pace-plan",
        "status_code": 200,
        "duration_ms": 3.14,
        "client_ip": "",
    }


def test_new_request_id_is_unique_hex():
    a, b = new_request_id(), new_request_id()
    assert a != b
    assert len(a) == 32


def test_json_formatter_stamps_bound_race_fields():
    token = start_race_fields()
    try:
        bind_race_fields(distance="half", strategy="generative", pro=None)
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["distance"] == "half"
        assert parsed["strategy"] == "generative"
        assert "pro" not in parsed

        explicit = json.loads(JsonFormatter().format(_record(distance="full")))
        assert explicit["distance"] == "full"
    finally:
        reset_race_fields(token)
    assert get_race_fields() == {}
    assert "strategy" not in json.loads(JsonFormatter().format(_record()))


def test_bind_race_fields_outside_a_request_is_ignored():
    bind_race_fields(distance="sprint")
    assert get_race_fields() == {}
