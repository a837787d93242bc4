"""
Prometheus metric factories and the CLI's metrics endpoint.

The ``create_*`` factories return the already-registered collector when
``healthboard.telemetry`` is imported twice (tests reload modules, the CLI
may be invoked in-process). ``create_service_info`` publishes the version,
environment and backend being queried; ``start_metrics_server`` exposes all
of it while the dashboard runs.
"""

import logging
import os

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
)

logger = logging.getLogger(__name__)


def _get_or_create(metric_cls, name, documentation, **kwargs):
    """Create a metric or return the existing one if already registered."""
    try:
        return metric_cls(name, documentation, **kwargs)
    except ValueError:
        # Already registered; look it up in the default registry
        for collector in REGISTRY._names_to_collectors.values():
            if hasattr(collector, "_name") and (
                collector._name == name
                or getattr(collector, "_original_name", None) == name
            ):
                return collector
        raise


def create_counter(name: str, documentation: str, labelnames: list[str] = None) -> Counter:
    return _get_or_create(Counter, name, documentation, labelnames=labelnames or [])


def create_histogram(
    name: str,
    documentation: str,
    buckets: list[float] = None,
    labelnames: list[str] = None,
) -> Histogram:
    kwargs = {}
    if buckets:
        kwargs["buckets"] = buckets
    if labelnames:
        kwargs["labelnames"] = labelnames
    return _get_or_create(Histogram, name, documentation, **kwargs)


def create_gauge(name: str, documentation: str, labelnames: list[str] = None) -> Gauge:
    return _get_or_create(Gauge, name, documentation, labelnames=labelnames or [])


def create_info(name: str, documentation: str) -> Info:
    return _get_or_create(Info, name, documentation)


def create_service_info(
    service_name: str,
    version: str,
    environment: str | None = None,
    backend_url: str | None = None,
) -> Info:
    """
    Create and populate the ``<service_name>_info`` metric.

    Args:
        service_name: Metric name prefix (e.g. ``"healthboard"``).
        version: Package version string.
        environment: Deployment environment. Falls back to the
            ``ENVIRONMENT`` env-var, then ``"production"``.
        backend_url: Prometheus base URL the dashboard reads from; adds a
            ``backend`` label when given.
    """
    labels = {
        "version": version,
        "environment": environment or os.environ.get("ENVIRONMENT", "production"),
    }
    if backend_url:
        labels["backend"] = backend_url
    info = create_info(service_name, "Service metadata")
    info.info(labels)
    return info


def start_metrics_server(port: int) -> bool:
    """Serve the default registry on ``port``. Returns False if it could not bind."""
    try:
        start_http_server(port)
    except OSError as e:
        logger.warning("Failed to start metrics server on port %d: %s", port, e)
        return False
    logger.info("Prometheus metrics server started on port %d", port)
    return True
