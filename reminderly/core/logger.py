from __future__ import annotations

import json
import logging
import sys
from typing import Any

from reminderly.core.config import settings

# Brevo calls go through httpx, which logs every request at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore", "celery.redirected")

# Promoted out of "extra" so reminder and job lines can be filtered directly.
_CONTEXT_KEYS = ("reminder_id", "employee_id", "job_type", "trigger_type")


class JsonFormatter(logging.Formatter):
    def __init__(self, service: str | None = None, env: str | None = None) -> None:
        super().__init__()
        self.service = service or settings.APP_NAME.lower()
        self.env = env or settings.ENV

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "service": self.service,
            "env": self.env,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_KEYS:
            if key in record.__dict__:
                payload[key] = record.__dict__[key]
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("_") or key in payload or key in _STANDARD_ATTRS:
                continue
            payload.setdefault("extra", {})[key] = value
        return json.dumps(payload, default=str)


_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


def init_logging(level: int | None = None) -> None:
    if logging.getLogger().handlers:
        return
    effective_level = level or getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT.lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        fmt = f"%(asctime)s | {settings.APP_NAME.lower()} | %(levelname)s | %(name)s | %(message)s"
        handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger()
    root.setLevel(effective_level)
    root.addHandler(handler)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(effective_level, logging.WARNING))
