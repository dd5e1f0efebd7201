from __future__ import annotations

import json
import logging
import os

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_LOGGER_INITIALIZED = False

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

class _JsonFormatter(logging.Formatter):
    def format(self, record):  # type: ignore
        data = {
            "level": record.levelname.lower(),
            "name": record.name,
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                data[key] = value
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)

def init_logging(force: bool = False, json_logs: bool | None = None, level: str | None = None):
    """Configure the root logger; unset arguments fall back to the CRAWCHAIN_* env vars."""
    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED and not force:
        return
    if json_logs is None:
        json_logs = os.getenv("CRAWCHAIN_JSON_LOGS", "0").lower() in ("1","true","yes")
    level = (level or os.getenv("CRAWCHAIN_LOG_LEVEL", "INFO")).upper()
    handler = logging.StreamHandler()
    if json_logs:
        handler.setFormatter(_JsonFormatter())
    logging.basicConfig(level=level, format=_FORMAT, handlers=[handler], force=True)
    _LOGGER_INITIALIZED = True

def get_logger(name: str):
    if not _LOGGER_INITIALIZED:
        init_logging()
    return logging.getLogger(name)

__all__ = ["get_logger", "init_logging"]
