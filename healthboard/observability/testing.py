"""
Test utilities for the observability stack.

Helpers to capture spans in memory, filter them by name, and reset the
Prometheus collector registry between tests.
"""

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from prometheus_client import REGISTRY


def setup_test_tracing(service_name: str = "test-service") -> InMemorySpanExporter:
    """
    Install a TracerProvider backed by an InMemorySpanExporter.

    Forcefully replaces any existing provider so it works across tests.
    Returns the exporter so spans can be inspected.
    """
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)
    exporter = InMemorySpanExporter()
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    # Bypass the "already set" guard of the global provider
    trace._TRACER_PROVIDER = None
    trace._TRACER_PROVIDER_SET_ONCE._done = False
    trace.set_tracer_provider(provider)
    return exporter


def get_spans_by_name(exporter: InMemorySpanExporter, name: str) -> list[ReadableSpan]:
    """Filter exported spans by operation name."""
    return [s for s in exporter.get_finished_spans() if s.name == name]


def reset_metrics() -> None:
    """
    Unregister all user-created collectors from the default Prometheus
    registry so the next test gets a clean slate.

    Platform collectors (``gc``, ``process``, ``platform``) are kept.
    """
    seen = set()
    for collector in list(REGISTRY._names_to_collectors.values()):
        # Platform / internal collectors don't have _name
        if not hasattr(collector, "_name") or id(collector) in seen:
            continue
        seen.add(id(collector))
        try:
            REGISTRY.unregister(collector)
        except KeyError:
            pass
