"""
OpenTelemetry tracing for backend queries.

Every ``PrometheusClient`` request opens a CLIENT span on the tracer
returned by ``get_tracer``. Nothing is exported until ``init_tracing``
installs an OTLP/HTTP provider; until then the API's no-op provider
absorbs the spans.
"""

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

TRACER_NAME = "healthboard"

DEFAULT_OTLP_ENDPOINT = "http://localhost:4318"


def traces_endpoint(endpoint: str) -> str:
    """Full OTLP/HTTP traces URL for a collector base address."""
    if endpoint.endswith("/v1/traces"):
        return endpoint
    return f"{endpoint.rstrip('/')}/v1/traces"


def init_tracing(
    service_name: str,
    endpoint: str | None = None,
    *,
    version: str | None = None,
    environment: str | None = None,
) -> TracerProvider:
    """
    Install a global tracer provider exporting over OTLP/HTTP.

    Args:
        service_name: ``service.name`` resource attribute.
        endpoint: Collector address (e.g. "http://jaeger:4318"). Defaults to
                  OTEL_EXPORTER_OTLP_ENDPOINT, then http://localhost:4318.
        version: ``service.version`` resource attribute, if known.
        environment: ``deployment.environment`` resource attribute, if known.
    """
    if endpoint is None:
        endpoint = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", DEFAULT_OTLP_ENDPOINT)
    url = traces_endpoint(endpoint)

    attributes = {"service.name": service_name}
    if version:
        attributes["service.version"] = version
    if environment:
        attributes["deployment.environment"] = environment

    provider = TracerProvider(resource=Resource.create(attributes))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=url)))
    trace.set_tracer_provider(provider)

    logger.info("Tracing initialized for %s (exporting to %s)", service_name, url)
    return provider


def get_tracer() -> trace.Tracer:
    """Tracer used for backend query spans."""
    return trace.get_tracer(TRACER_NAME)


def shutdown_tracing() -> None:
    """Flush pending query spans and shut the provider down."""
    try:
        provider = trace.get_tracer_provider()
        if hasattr(provider, "shutdown"):
            provider.shutdown()
            logger.info("Tracer shutdown complete")
    except Exception as e:
        logger.warning("Tracer shutdown warning: %s", e)
