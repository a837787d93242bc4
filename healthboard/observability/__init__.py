"""
healthboard.observability: logging, metrics and tracing for healthboard.

Submodules
----------
logging      Structured JSON logging with OTel trace-context injection.
metrics      Prometheus metric factories and the metrics endpoint.
tracing      OpenTelemetry tracing of backend queries (OTLP exporter).
testing      In-memory tracing exporter & metric-reset helpers for tests.

Quick start
-----------
::

    from healthboard.observability import init_observability, get_logger

    init_observability("healthboard", "0.1.0")
    logger = get_logger("healthboard")
"""

import logging as _logging
import os as _os
from typing import TextIO

# ── logging ──────────────────────────────────────────────────────
from .logging import JsonTraceFormatter, get_logger, setup_logging

# ── metrics ──────────────────────────────────────────────────────
from .metrics import (
    create_counter,
    create_gauge,
    create_histogram,
    create_info,
    create_service_info,
    start_metrics_server,
)

# ── tracing ──────────────────────────────────────────────────────
from .tracing import get_tracer, init_tracing, shutdown_tracing


# ── bootstrap ────────────────────────────────────────────────────

def init_observability(
    service_name: str,
    version: str,
    *,
    log_level: int = _logging.INFO,
    log_stream: TextIO | None = None,
    environment: str | None = None,
    backend_url: str | None = None,
) -> None:
    """
    One-call bootstrap for logging, tracing, and service-info metrics.

    1. ``setup_logging(log_level, log_stream)``
    2. ``init_tracing(service_name, version=, environment=)``, only when
       ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set; failures are logged and
       swallowed so they never stop the dashboard.
    3. ``create_service_info(service_name, version, environment, backend_url)``
    """
    setup_logging(log_level, log_stream)
    logger = get_logger(service_name)

    if _os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT"):
        try:
            init_tracing(service_name, version=version, environment=environment)
        except Exception as exc:
            logger.warning("Tracing init failed (non-fatal): %s", exc)
    else:
        logger.debug("Tracing disabled (OTEL_EXPORTER_OTLP_ENDPOINT not set)")

    create_service_info(
        service_name.replace("-", "_"),
        version,
        environment,
        backend_url,
    )

    logger.debug("Observability initialised for %s v%s", service_name, version)


__all__ = [
    "init_observability",
    "setup_logging",
    "get_logger",
    "JsonTraceFormatter",
    "create_counter",
    "create_histogram",
    "create_info",
    "create_gauge",
    "create_service_info",
    "start_metrics_server",
    "get_tracer",
    "init_tracing",
    "shutdown_tracing",
]
