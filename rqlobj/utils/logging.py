"""
Logging setup shared by the generator CLI and the `DBU` runtime.

Everything logs under the `rqlobj` logger tree. `configure_logging` installs
one stream handler on that tree, either human readable or one JSON object
per record; without it, records go wherever the application's own logging
sends them.
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

ROOT_LOGGER = "rqlobj"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# attributes every LogRecord carries; anything else came in through `extra`
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object, `extra` fields included."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return json.dumps(self.payload(record), default=str)

    def payload(self, record: logging.LogRecord) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        data.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and key not in data
        )
        return data


def logging_config(level: str = "INFO", json_logs: bool = False) -> Dict[str, Any]:
    """Return the `dictConfig` mapping used by `configure_logging`."""

    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": CONSOLE_FORMAT, "datefmt": CONSOLE_DATEFMT},
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "rqlobj": {
                "class": "logging.StreamHandler",
                "formatter": "json" if json_logs else "console",
                "level": level,
            }
        },
        "loggers": {
            ROOT_LOGGER: {"handlers": ["rqlobj"], "level": level, "propagate": False},
        },
    }


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Install the `rqlobj` handler at `level`, as JSON when `json_logs`."""

    logging.config.dictConfig(logging_config(level, json_logs))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return `name`'s logger, or the package logger when omitted."""

    return logging.getLogger(name or ROOT_LOGGER)


__all__ = ["JsonFormatter", "configure_logging", "get_logger", "logging_config"]
