from __future__ import annotations

import contextvars
import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4


_request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)
# Race fields (distance, strategy) bound by a route; mutated in place so the
# request log line written by the middleware sees what the endpoint bound.
_race_fields_var: contextvars.ContextVar[Optional[dict]] = contextvars.ContextVar("race_fields", default=None)
_logging_configured = False
_STANDARD_LOG_RECORD_FIELDS = set(logging.makeLogRecord({}).__dict__.keys())

# Server loggers are re-routed through the root JSON handler.
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")
# HTTP client loggers log every outbound generative call at INFO.
_CLIENT_LOGGERS = ("httpx", "httpcore")


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def set_request_id(value: Optional[str]):
    return _request_id_var.set(value)


def reset_request_id(token) -> None:
    _request_id_var.reset(token)


def new_request_id() -> str:
    return uuid4().hex


def start_race_fields():
    return _race_fields_var.set({})


def reset_race_fields(token) -> None:
    _race_fields_var.reset(token)


def bind_race_fields(**fields) -> None:
    """Stamp fields on every record logged for the rest of the current request."""
    bound = _race_fields_var.get()
    if bound is None:
        return
    bound.update({key: value for key, value in fields.items() if value is not None})


def get_race_fields() -> dict:
    return dict(_race_fields_var.get() or {})


class JsonFormatter(logging.Formatter):
    """One JSON object per record; `extra=` fields are merged in at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = get_request_id()
        if request_id:
            payload["request_id"] = request_id
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _STANDARD_LOG_RECORD_FIELDS or key.startswith("_") or key in payload:
                continue
            payload[key] = value
        for key, value in get_race_fields().items():
            payload.setdefault(key, value)
        return json.dumps(payload, default=str, separators=(",", ":"))


def configure_logging(level: str = "INFO") -> None:
    global _logging_configured
    if _logging_configured:
        return

    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    for name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True
    for name in _CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logging_configured = True


def request_log_fields(*, method: str, path: str, status_code: int, duration_ms: float, client_ip: Optional[str]) -> dict[str, object]:
    return {
        "method": method,
        "path": path,
        "status_code": int(status_code),
        "duration_ms": round(float(duration_ms), 2),
        "client_ip": client_ip or "",
    }


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0
