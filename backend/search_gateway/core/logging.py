"""Structured logging for the search gateway.

Search log lines carry request context as ``ctx_*`` record attributes, built
with :func:`log_context`. The JSON formatter groups them under ``context``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import orjson

_DEFAULT_LEVEL = os.environ.get("SGW_LOG_LEVEL", "INFO")
_CONTEXT_PREFIX = "ctx_"

SERVICE_NAME = "search-gateway"

# Context keys emitted by the gateway; anything else is rejected early.
CONTEXT_FIELDS = frozenset({"mode", "tenant", "kind", "results", "latency_ms", "doc_id", "path"})


def log_context(**fields: Any) -> dict[str, Any]:
    """Build an ``extra`` mapping for ``logger.*`` calls from context fields."""
    unknown = set(fields) - CONTEXT_FIELDS
    if unknown:
        raise ValueError(f"unknown log context fields: {sorted(unknown)}")
    return {f"{_CONTEXT_PREFIX}{key}": value for key, value in fields.items()}


class JsonFormatter(logging.Formatter):
    """One JSON object per record with the search context nested under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {
            key[len(_CONTEXT_PREFIX) :]: value
            for key, value in record.__dict__.items()
            if key.startswith(_CONTEXT_PREFIX)
        }
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode("utf-8")


def configure_logging(level: str | int = _DEFAULT_LEVEL, use_json: bool = True) -> None:
    """Install a single stdout handler on the root logger."""
    logging.captureWarnings(True)
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    if use_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.handlers = [handler]


def get_logger(name: str = "search_gateway") -> logging.Logger:
    """Return a module logger, configuring the root logger on first use."""
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


__all__ = ["CONTEXT_FIELDS", "JsonFormatter", "configure_logging", "get_logger", "log_context"]
