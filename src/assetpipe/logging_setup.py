"""Structured logging for builds."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any


# Fields the engine passes through `extra=`; anything else is dropped.
BUILD_FIELDS = (
    "event",
    "manifest",
    "location",
    "logical_path",
    "kind",
    "artifacts",
    "size",
    "error",
    "error_type",
)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, carrying the build fields that were set."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in BUILD_FIELDS:
            value = record.__dict__.get(name)
            if value is not None:
                payload[name] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str) -> logging.Logger:
    """Send `assetpipe` logs to stderr as JSON lines."""
    logger = logging.getLogger("assetpipe")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger
