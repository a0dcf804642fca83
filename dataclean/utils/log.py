from __future__ import annotations
import json, logging, sys
from typing import Any, Dict

# LogRecord attributes that are plumbing, not payload
_RESERVED = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
    "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread", "threadName",
    "processName", "process", "taskName", "message", "asctime",
))

class JsonFormatter(logging.Formatter):
    """One JSON object per line; anything passed via ``extra=`` is merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for k, v in record.__dict__.items():
            if k not in _RESERVED:
                payload[k] = v
        return json.dumps(payload, separators=(",", ":"), default=str)

def get_logger(name: str = "dataclean", level: str = "INFO", structured_json: bool = True) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler(sys.stdout)
    if structured_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger

def configure_from(cfg: Any, name: str = "dataclean") -> logging.Logger:
    """Build the package logger from a ``LoggingCfg``-like object."""
    level = str(getattr(cfg, "level", "INFO"))
    structured = bool(getattr(cfg, "structured_json", True))
    return get_logger(name, level=level, structured_json=structured)
