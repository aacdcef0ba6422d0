"""
Central logging configuration.

- JSON logs when LOG_JSON=1 or the app runs in production.
- LOG_LEVEL from settings (error|warn|info|debug, default info).
- Never log PII or secrets: no passwords, tokens or request bodies. Pass
  structured context with extra={"meta": {...}} instead of formatting it
  into the message.
"""
import json
import logging
import os
import sys
from typing import Any

from config.settings import get_settings

_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def _json_serial(obj: Any):
    if hasattr(obj, "isoformat"):
        return obj.isoformat()
    return str(obj)


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S") + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            payload["exception"] = self.formatException(record.exc_info)
        meta = getattr(record, "meta", None)
        if isinstance(meta, dict):
            for k, v in meta.items():
                if k not in payload and v is not None:
                    payload[k] = v
        return json.dumps(payload, default=_json_serial)


class TextFormatter(logging.Formatter):
    """Plain format; appends meta as k=v pairs."""

    def __init__(self):
        super().__init__("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        meta = getattr(record, "meta", None)
        if isinstance(meta, dict) and meta:
            line += " | " + " ".join(f"{k}={v}" for k, v in meta.items())
        return line


def resolve_level(name: str | None) -> int:
    return _LEVELS.get((name or "info").lower(), logging.INFO)


def configure_logging() -> None:
    """Configure root logger: level from LOG_LEVEL, JSON format in production."""
    settings = get_settings()
    level = resolve_level(settings.log_level)

    use_json = (
        os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes")
        or settings.is_production
    )

    root = logging.getLogger()
    root.setLevel(level)
    # Avoid duplicate handlers when reloading
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter() if use_json else TextFormatter())
    root.addHandler(handler)

    # Reduce noise from third-party libs
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
