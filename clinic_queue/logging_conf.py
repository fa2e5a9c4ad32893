"""Logging configuration for the queue service.

JSON-line output on stdout, one object per record. Structured context goes in
through `extra={...}`; the engine always sets an `event` key so log lines can
be filtered without parsing the message.

setup_logging() is idempotent: calling it again won't duplicate handlers.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from logging import Handler, LogRecord
from typing import Any

from .config import get_log_level_from_env

SERVICE_NAME = "clinic_queue"

# LogRecord attributes that are plumbing, not structured context.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON object.

    Core keys (ts, level, logger, service, message) win over extras with the
    same name. Values json can't encode (enums, datetimes) fall back to str().
    """

    def format(self, record: LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
        }

        msg = record.msg
        if isinstance(msg, dict):
            payload.update(msg)
        else:
            payload["message"] = record.getMessage()

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in payload:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def _make_stream_handler(level: int) -> Handler:
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    return handler


def setup_logging(level: str | int | None = None) -> None:
    """Configure the root logger and uvicorn's loggers for JSON output.

    Idempotent: only attaches a handler if the root logger has none.
    """
    root = logging.getLogger()
    if level is None:
        level = get_log_level_from_env()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if root.handlers:  # reload / pytest already configured logging
        return

    root.setLevel(level)
    root.addHandler(_make_stream_handler(level))

    # uvicorn installs its own handlers; route everything through root instead.
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.propagate = True
        for h in list(lg.handlers):
            lg.removeHandler(h)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the service namespace.

    get_logger("engine") -> "clinic_queue.engine"
    """
    if not name:
        return logging.getLogger(SERVICE_NAME)
    if name == SERVICE_NAME or name.startswith(SERVICE_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{SERVICE_NAME}.{name}")
