"""JSON logging for the directory service.

Log calls pass context through ``extra=``; queries and filter predicates are
frozen dataclasses and pydantic models, and are rendered as nested JSON so a
failed search line shows exactly which filters were applied.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

SERVICE_NAME = "directory"

_CONFIGURED = False
_DEFAULT_LEVEL = "INFO"
# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime", "taskName"}


def to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
        return {"type": type(value).__name__, **fields}
    if hasattr(value, "model_dump"):
        return to_jsonable(value.model_dump())
    if isinstance(value, dict):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _context_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: to_jsonable(value)
        for key, value in record.__dict__.items()
        if key not in _RESERVED and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "event": record.getMessage(),
            **_context_fields(record),
        }
        if record.exc_info:
            payload["error_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def _resolve_level(level_name: Optional[str]) -> int:
    level = logging.getLevelName((level_name or _DEFAULT_LEVEL).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level_name: Optional[str] = None) -> None:
    """Install the JSON handler on the root logger once; later calls only adjust the level."""
    global _CONFIGURED
    root = logging.getLogger()
    if level_name is not None or not _CONFIGURED:
        root.setLevel(_resolve_level(level_name or os.getenv("LOG_LEVEL")))
    if _CONFIGURED:
        return
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
