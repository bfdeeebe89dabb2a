"""
Process-wide logging setup.

Monitoring code attaches context with ``extra=`` (``cycle``, ``gas``,
``severity``, ``value``, ``reason``); the formatter appends whichever of
those are set as ``key=value`` pairs after the message.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Iterable, Optional

CONTEXT_KEYS = ("cycle", "gas", "severity", "value", "reason")
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured = False


class ContextualFormatter(logging.Formatter):
    """Formatter appending the monitoring context carried by a record."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        extra_keys: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._keys = tuple(extra_keys or CONTEXT_KEYS)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = " ".join(f"{k}={getattr(record, k)}" for k in self._keys if getattr(record, k, None) is not None)
        return f"{message} | {context}" if context else message


def configure_logging(level: str | int = "INFO") -> None:
    """
    Install the console handler on the root logger, once per process.

    Werkzeug's per-request access lines are raised to WARNING so cycle and
    alert output is not drowned by sensor POSTs every few seconds.
    """
    global _configured
    if _configured:
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "contextual": {
                    "()": ContextualFormatter,
                    "fmt": LOG_FORMAT,
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                }
            },
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "contextual"},
            },
            "loggers": {"werkzeug": {"level": "WARNING"}},
            "root": {"handlers": ["console"], "level": level},
        }
    )
    _configured = True
