"""
Structured JSON logging with OpenTelemetry trace context injection.

``setup_logging()`` configures the root logger once per process: every line
is a JSON object carrying the level, logger name and, when a span is active,
the OTel trace/span IDs of the backend query that produced it.

Usage::

    from healthboard.observability.logging import setup_logging, get_logger

    setup_logging()                        # call once at process startup
    logger = get_logger("healthboard")     # get a named logger
    logger.info("snapshot ready")          # {"timestamp": ..., "level": "INFO", ...}

The CLI passes ``stream=sys.stderr`` so that log lines never interleave with
the dashboard written to stdout.
"""

import logging
from typing import TextIO

from opentelemetry.instrumentation.logging import LoggingInstrumentor
from pythonjsonlogger.json import JsonFormatter


_FORMAT_STRING = "%(timestamp)s %(level)s %(name)s %(message)s"
_setup_done = False


class JsonTraceFormatter(JsonFormatter):
    """JSON formatter that adds standard fields to every log record."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = record.created
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["message"] = record.getMessage()
        trace_id = getattr(record, "otelTraceID", None)
        if trace_id and trace_id != "0":
            log_record["trace_id"] = trace_id
            log_record["span_id"] = getattr(record, "otelSpanID", "")


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> None:
    """
    Configure the root logger with structured JSON output and trace context.

    Safe to call multiple times; subsequent calls are no-ops.

    Args:
        level: The root log level (default ``logging.INFO``).
        stream: Where JSON lines are written. ``None`` keeps the
            ``StreamHandler`` default (``sys.stderr``).
    """
    global _setup_done
    if _setup_done:
        return
    _setup_done = True

    # Instrument stdlib logging so OTel injects trace/span IDs
    LoggingInstrumentor().instrument(set_logging_format=False)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonTraceFormatter(_FORMAT_STRING))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    # httpx logs every request at INFO; keep it for DEBUG runs only
    if level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger (thin wrapper for discoverability)."""
    return logging.getLogger(name)
