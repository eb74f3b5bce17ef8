"""
Logging setup for Shipyard processes.

Standard library logging with JSON or text output, service name and
OpenTelemetry trace context injected into every record. Modules log through
``logging.getLogger(__name__)``; entry points call
``setup_logging`` once at startup.
"""

import json
import logging
import sys
from datetime import datetime
from typing import Any

from opentelemetry import trace

TRACE_LOG_FORMAT = (
    "%(asctime)s - %(levelname)s - [%(service_name)s] - [%(trace_id)s:%(span_id)s] - "
    "[%(name)s] - %(message)s"
)

LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

DEFAULT_LOG_LEVEL = "INFO"

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "service_name", "trace_id", "span_id"}


class ServiceNameFilter(logging.Filter):
    """Filter to inject service name into log records."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name  # type: ignore[attr-defined]
        return True


class TraceContextFilter(logging.Filter):
    """Filter to inject trace context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        current_span = trace.get_current_span()
        span_context = current_span.get_span_context()
        if span_context.is_valid:
            record.trace_id = format(span_context.trace_id, "032x")  # type: ignore[attr-defined]
            record.span_id = format(span_context.span_id, "016x")  # type: ignore[attr-defined]
        else:
            record.trace_id = "0" * 32  # type: ignore[attr-defined]
            record.span_id = "0" * 16  # type: ignore[attr-defined]
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, extra fields included."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "service": getattr(record, "service_name", "unknown"),
            "logger": record.name,
            "message": record.getMessage(),
        }

        trace_id = getattr(record, "trace_id", None)
        if trace_id:
            log_entry["trace_id"] = trace_id
            log_entry["span_id"] = getattr(record, "span_id", None)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str, ensure_ascii=False)


class ConsoleHandler(logging.StreamHandler):
    """Stream handler bound to whatever ``sys.stderr`` is when a record is emitted."""

    def __init__(self) -> None:
        logging.Handler.__init__(self)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr


def setup_logging(
    service_name: str = "shipyard",
    log_level: str = DEFAULT_LOG_LEVEL,
    enable_json: bool = True,
    stream=None,
) -> logging.Logger:
    """Configure the ``shipyard`` logger hierarchy.

    Replaces previously installed handlers, so calling it twice is safe.
    """
    logger = logging.getLogger("shipyard")
    logger.handlers.clear()
    logger.setLevel(LOG_LEVELS.get(log_level.upper(), logging.INFO))

    handler = logging.StreamHandler(stream) if stream is not None else ConsoleHandler()
    if enable_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TRACE_LOG_FORMAT))
    handler.addFilter(ServiceNameFilter(service_name))
    handler.addFilter(TraceContextFilter())

    logger.addHandler(handler)
    return logger


__all__ = [
    "TRACE_LOG_FORMAT",
    "LOG_LEVELS",
    "ServiceNameFilter",
    "TraceContextFilter",
    "JSONFormatter",
    "ConsoleHandler",
    "setup_logging",
]
