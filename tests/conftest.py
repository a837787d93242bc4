"""Shared fixtures: a scripted fake Prometheus backend and a client runner."""

import asyncio
import functools

import httpx
import pytest

from healthboard.client import PrometheusClient
from healthboard.config import Settings

BASE_URL = "http://prometheus.test"
NOW = 1_700_000_060  # 1700000000000 ms + 60000 ms


def instant(*rows):
    """Instant-vector envelope. Each row is ``(labels, ts, value)``."""
    return {
        "status": "success",
        "data": {
            "resultType": "vector",
            "result": [{"metric": labels, "value": [ts, value]} for labels, ts, value in rows],
        },
    }


def matrix(*series):
    """Range-matrix envelope. Each series is ``(labels, [[ts, value], ...])``."""
    return {
        "status": "success",
        "data": {
            "resultType": "matrix",
            "result": [{"metric": labels, "values": values} for labels, values in series],
        },
    }


EMPTY_VECTOR = instant()
EMPTY_MATRIX = matrix()


class FakeBackend:
    """Answers queries from a script keyed by ``(path, query expression)``.

    Scripted answers are used in order; the last one repeats. An answer is
    a dict (200 JSON body), an int (that HTTP status), or an exception
    instance (raised as a transport failure). Unscripted queries get 404.
    """

    def __init__(self):
        self.script: dict[tuple[str, str], list] = {}
        self.requests: list[httpx.Request] = []

    def on(self, path: str, expr: str, *answers):
        self.script[(path, expr)] = list(answers)
        return self

    def on_query(self, expr: str, *answers):
        return self.on("/api/v1/query", expr, *answers)

    def on_range(self, expr: str, *answers):
        return self.on("/api/v1/query_range", expr, *answers)

    def calls(self, path: str | None = None, expr: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if (path is None or r.url.path == path)
            and (expr is None or r.url.params.get("query") == expr)
        ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.url.path, request.url.params.get("query"))
        answers = self.script.get(key)
        if not answers:
            return httpx.Response(404, json={"status": "error", "error": "not scripted"})
        answer = answers.pop(0) if len(answers) > 1 else answers[0]
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, int):
            return httpx.Response(answer, json={"status": "error", "errorType": "internal", "error": "boom"})
        return httpx.Response(200, json=answer)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def settings():
    return Settings(prometheus_url=BASE_URL, timeout_seconds=1.0)


class ConcurrencyGate:
    """Async transport handler that holds the gated queries until all of
    them are in flight at once, then answers them from ``backend``.

    ``peak`` is the largest number of gated requests seen in flight
    together. Queries run one after another never meet, so each gated
    request gives up after ``timeout`` seconds and ``peak`` stays at 1.
    """

    def __init__(self, backend: FakeBackend, *exprs: str, timeout: float = 1.0):
        self.backend = backend
        self.exprs = set(exprs)
        self.timeout = timeout
        self.in_flight: set[str] = set()
        self.peak = 0
        self._all_in: asyncio.Event | None = None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        expr = request.url.params.get("query")
        if expr in self.exprs:
            if self._all_in is None:
                self._all_in = asyncio.Event()
            self.in_flight.add(expr)
            self.peak = max(self.peak, len(self.in_flight))
            if self.in_flight == self.exprs:
                self._all_in.set()
            try:
                await asyncio.wait_for(self._all_in.wait(), self.timeout)
            finally:
                self.in_flight.discard(expr)
        return self.backend(request)


def run_client(handler, settings, fn, *args, **kwargs):
    """Run ``fn(client, *args, **kwargs)`` with ``handler`` as the transport."""

    async def _go():
        async with PrometheusClient(settings, transport=httpx.MockTransport(handler)) as client:
            return await fn(client, *args, **kwargs)

    return asyncio.run(_go())


@pytest.fixture
def call(backend, settings):
    """Run ``fn(client, *args, **kwargs)`` against the fake backend."""
    return functools.partial(run_client, backend, settings)
