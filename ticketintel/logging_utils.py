# logging_utils.py
# Central structured logging for ticketintel (one JSON object per line)

import json
import logging
import os
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import ENV, LOG_FILE, LOG_LEVEL, SERVICE_NAME

# Per-ticket correlation id (set by the ticket processor)
_ticket_id: ContextVar[Optional[str]] = ContextVar("ticket_id", default=None)

# Built-in LogRecord fields that must never be overwritten
_RESERVED_LOG_FIELDS = {
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
    "message",
    "asctime",
}


class LokiJSONFormatter(logging.Formatter):
    """
    Format log records as single-line JSON.

    Each log line looks like:
        {
            "ts": "...",
            "level": "INFO",
            "logger": "ticketintel.matcher",
            "service": "ticketintel",
            "env": "dev",
            "message": "...",
            "ticket_id": "...",
            ... plus all structured fields ...
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "env": ENV,
            "message": record.getMessage(),
        }

        tid = _ticket_id.get()
        if tid:
            payload["ticket_id"] = tid

        for key, value in record.__dict__.items():
            if key.startswith("_"):
                continue
            if key in payload or key in _RESERVED_LOG_FIELDS:
                continue
            payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging() -> None:
    """
    Configure root logging once for the whole process.
    Output -> JSON to stdout, and to LOG_FILE when one is configured.
    """
    root = logging.getLogger()

    # Prevent double config
    if getattr(root, "_ticketintel_configured", False):
        return

    root.setLevel(LOG_LEVEL)
    formatter = LokiJSONFormatter()

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if LOG_FILE:
        try:
            log_dir = os.path.dirname(LOG_FILE)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(LOG_FILE)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)
        except OSError as e:
            # Keep stdout logging only
            root.error(f"Failed to set up file logging: {e}")

    root._ticketintel_configured = True  # type: ignore[attr-defined]


def new_ticket_id() -> str:
    tid = uuid.uuid4().hex
    _ticket_id.set(tid)
    return tid


def set_ticket_id(tid: Optional[str]) -> None:
    _ticket_id.set(tid)


def current_ticket_id() -> Optional[str]:
    return _ticket_id.get()


def log_event(
    logger: logging.Logger,
    event: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """
    Structured logging helper.

    Ensures fields never collide with LogRecord built-ins.
    Automatically rewrites:
        filename → field_filename
        module   → field_module
        etc.
    """
    safe_fields: Dict[str, Any] = {}

    for key, value in fields.items():
        if key in _RESERVED_LOG_FIELDS or key == "event":
            safe_fields[f"field_{key}"] = value
        else:
            safe_fields[key] = value

    logger.log(level, event, extra={"event": event, **safe_fields})


class TicketIntelLogger:
    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.timers: Dict[str, float] = {}

    def start_timer(self, name: str):
        tid = _ticket_id.get() or "global"
        self.timers[f"{tid}:{name}"] = time.perf_counter()

    def end_timer(self, name: str) -> float:
        tid = _ticket_id.get() or "global"
        start = self.timers.pop(f"{tid}:{name}", None)
        if start is None:
            return 0.0
        return time.perf_counter() - start


def get_logger(name: str) -> TicketIntelLogger:
    return TicketIntelLogger(name)
