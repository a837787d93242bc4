"""
Async client for the Prometheus HTTP query API.

``PrometheusClient`` wraps one ``httpx.AsyncClient`` and exposes the two
endpoints the dashboard needs:

  - ``query``        GET /api/v1/query        (instant vector)
  - ``query_range``  GET /api/v1/query_range  (range matrix)

Every failure (transport error, non-2xx status, undecodable body, envelope
that does not validate, ``status: "error"``) surfaces as ``QueryError`` so
the fetchers have a single exception type to degrade on.
"""

from __future__ import annotations

import logging
import time
from typing import Any, TypeVar

import httpx
from opentelemetry.trace import SpanKind, Status, StatusCode
from pydantic import BaseModel, ValidationError

from healthboard import telemetry
from healthboard.config import Settings
from healthboard.models.prometheus import InstantQueryResponse, RangeQueryResponse
from healthboard.observability import get_tracer

logger = logging.getLogger("client")

QUERY_PATH = "/api/v1/query"
QUERY_RANGE_PATH = "/api/v1/query_range"

_ResponseT = TypeVar("_ResponseT", bound=BaseModel)


class QueryError(Exception):
    """A backend query that produced no usable envelope."""

    def __init__(self, message: str, *, expr: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.expr = expr
        self.status_code = status_code


class PrometheusClient:
    """
    Thin async wrapper around the metrics backend.

    Args:
        settings: Resolved ``Settings``; defaults to ``Settings.from_env()``.
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or Settings.from_env()
        self.base_url = self.settings.base_url
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.settings.timeout_seconds),
            transport=transport,
        )

    async def __aenter__(self) -> PrometheusClient:
        return self

    async def __aexit__(self, exc_type, exc_value, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def query(self, expr: str) -> InstantQueryResponse:
        """Run an instant query."""
        return await self._get(QUERY_PATH, {"query": expr}, InstantQueryResponse)

    async def query_range(
        self, expr: str, start: int | float, end: int | float, step: int | float
    ) -> RangeQueryResponse:
        """Run a range query over ``[start, end]`` (unix seconds) every ``step`` seconds."""
        params = {"query": expr, "start": start, "end": end, "step": step}
        return await self._get(QUERY_RANGE_PATH, params, RangeQueryResponse)

    async def _get(
        self, path: str, params: dict[str, Any], model: type[_ResponseT]
    ) -> _ResponseT:
        endpoint = path.rsplit("/", 1)[-1]
        expr = params["query"]
        with get_tracer().start_as_current_span(
            f"prometheus {endpoint}",
            kind=SpanKind.CLIENT,
            attributes={
                "db.system": "prometheus",
                "db.statement": expr,
                "server.address": self.base_url,
            },
        ) as span:
            started = time.monotonic()
            try:
                response = await self._client.get(path, params=params)
                response.raise_for_status()
                envelope = model.model_validate(response.json())
            except httpx.HTTPStatusError as exc:
                self._record(endpoint, "http_error", started)
                span.set_status(Status(StatusCode.ERROR, str(exc)))
                raise QueryError(
                    f"{endpoint} returned HTTP {exc.response.status_code}",
                    expr=expr,
                    status_code=exc.response.status_code,
                ) from exc
            except httpx.HTTPError as exc:
                self._record(endpoint, "transport_error", started)
                span.set_status(Status(StatusCode.ERROR, str(exc)))
                raise QueryError(f"{endpoint} request failed: {exc}", expr=expr) from exc
            except (ValueError, ValidationError) as exc:
                # json.JSONDecodeError is a ValueError
                self._record(endpoint, "malformed", started)
                span.set_status(Status(StatusCode.ERROR, "malformed response"))
                raise QueryError(f"{endpoint} returned a malformed body: {exc}", expr=expr) from exc

            if envelope.status == "error":
                self._record(endpoint, "query_error", started)
                span.set_status(Status(StatusCode.ERROR, envelope.error or "query error"))
                raise QueryError(
                    f"{endpoint} rejected query ({envelope.error_type}): {envelope.error}",
                    expr=expr,
                    status_code=response.status_code,
                )

            self._record(endpoint, "success", started)
            span.set_attribute("prometheus.series", len(envelope.data.result))
            return envelope

    @staticmethod
    def _record(endpoint: str, outcome: str, started: float) -> None:
        telemetry.BACKEND_QUERIES.labels(endpoint=endpoint, outcome=outcome).inc()
        telemetry.BACKEND_QUERY_DURATION.labels(endpoint=endpoint).observe(time.monotonic() - started)
