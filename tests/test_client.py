"""Tests for PrometheusClient request building and error mapping."""

import asyncio

import httpx
import pytest

from healthboard import telemetry
from healthboard.client import PrometheusClient, QueryError
from healthboard.config import Settings
from healthboard.observability.testing import get_spans_by_name, setup_test_tracing

from conftest import BASE_URL, NOW, instant, matrix


def _run(backend, settings, fn):
    async def _go():
        async with PrometheusClient(settings, transport=httpx.MockTransport(backend)) as client:
            return await fn(client)

    return asyncio.run(_go())


class TestRequests:
    def test_instant_query_url(self, backend, settings):
        backend.on_query("up", instant(({}, NOW, "1")))
        _run(backend, settings, lambda c: c.query("up"))
        (request,) = backend.requests
        assert request.method == "GET"
        assert str(request.url).startswith(f"{BASE_URL}/api/v1/query?")
        assert request.url.params["query"] == "up"

    def test_expression_is_url_encoded(self, backend, settings):
        expr = 'a{api_name="x y"} / b{api_name="x y"}'
        backend.on_query(expr, instant())
        _run(backend, settings, lambda c: c.query(expr))
        (request,) = backend.requests
        assert request.url.params["query"] == expr
        assert '"' not in request.url.query.decode()

    def test_range_query_params(self, backend, settings):
        backend.on_range("up", matrix())
        _run(backend, settings, lambda c: c.query_range("up", 100, 200, 15))
        (request,) = backend.requests
        assert request.url.path == "/api/v1/query_range"
        assert dict(request.url.params) == {"query": "up", "start": "100", "end": "200", "step": "15"}

    def test_parses_envelope(self, backend, settings):
        backend.on_query("up", instant(({"job": "x"}, NOW, "3")))
        response = _run(backend, settings, lambda c: c.query("up"))
        assert response.status == "success"
        assert response.data.result_type == "vector"
        assert response.data.result[0].metric == {"job": "x"}
        assert response.first_point() == (NOW, 3.0)


class TestErrors:
    def test_http_status_error(self, backend, settings):
        backend.on_query("up", 503)
        with pytest.raises(QueryError) as exc_info:
            _run(backend, settings, lambda c: c.query("up"))
        assert exc_info.value.status_code == 503
        assert exc_info.value.expr == "up"

    def test_transport_error(self, backend, settings):
        backend.on_query("up", httpx.ConnectError("refused"))
        with pytest.raises(QueryError):
            _run(backend, settings, lambda c: c.query("up"))

    def test_timeout_is_transport_error(self, backend, settings):
        backend.on_query("up", httpx.ReadTimeout("slow"))
        with pytest.raises(QueryError):
            _run(backend, settings, lambda c: c.query("up"))

    def test_non_json_body(self, settings):
        def handler(request):
            return httpx.Response(200, text="<html>proxy error</html>")

        with pytest.raises(QueryError, match="malformed"):
            _run(handler, settings, lambda c: c.query("up"))

    def test_error_envelope_with_200(self, backend, settings):
        backend.on_query("up", {"status": "error", "errorType": "bad_data", "error": "parse error"})
        with pytest.raises(QueryError, match="bad_data"):
            _run(backend, settings, lambda c: c.query("up"))

    def test_unscripted_query_is_http_error(self, backend, settings):
        with pytest.raises(QueryError):
            _run(backend, settings, lambda c: c.query("nothing"))


class TestTelemetry:
    def test_outcomes_counted(self, backend, settings):
        success = telemetry.BACKEND_QUERIES.labels(endpoint="query", outcome="success")
        failure = telemetry.BACKEND_QUERIES.labels(endpoint="query", outcome="http_error")
        before = (success._value.get(), failure._value.get())

        backend.on_query("ok", instant())
        backend.on_query("bad", 500)

        async def _both(client):
            await client.query("ok")
            with pytest.raises(QueryError):
                await client.query("bad")

        _run(backend, settings, _both)
        assert success._value.get() - before[0] == 1
        assert failure._value.get() - before[1] == 1

    def test_query_span_recorded(self, backend, settings):
        exporter = setup_test_tracing("healthboard-test")
        backend.on_range("up", matrix())
        _run(backend, settings, lambda c: c.query_range("up", 0, 60, 15))
        (span,) = get_spans_by_name(exporter, "prometheus query_range")
        assert span.attributes["db.statement"] == "up"
        assert span.attributes["prometheus.series"] == 0


class TestBaseUrl:
    def test_client_uses_settings_base_url(self, backend):
        backend.on_query("up", instant())
        settings = Settings(environment="development", dev_proxy_url="http://localhost:5173/")
        _run(backend, settings, lambda c: c.query("up"))
        assert str(backend.requests[0].url).startswith("http://localhost:5173/api/v1/query")
