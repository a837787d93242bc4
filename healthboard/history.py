"""
Latency trend of a single API.

The range query over the mean-latency ratio is the preferred source. When
the backend cannot answer it, the fetcher walks a fixed chain of weaker
strategies and returns the first one that produces data:

  1. range query of ``sum / count``            (on request failure →)
  2. range query of ``rate(sum) / rate(count)`` (no data from 1-2 →)
  3. instant query of ``sum / count``           (no valid value →)
  4. the same instant query, once more

Each strategy is tried at most once; there is no retry loop.
"""

from __future__ import annotations

import logging
import math
import time

from healthboard import queries, telemetry
from healthboard.client import PrometheusClient, QueryError
from healthboard.models.dashboard import LatencyHistoryPoint, from_unix
from healthboard.models.prometheus import (
    InstantQueryResponse,
    RangeQueryResponse,
    is_valid_latency,
    parse_point,
)

logger = logging.getLogger("history")

DEFAULT_MINUTES = 30


async def fetch_latency_history(
    client: PrometheusClient,
    api_name: str,
    minutes: int = DEFAULT_MINUTES,
    *,
    now: float | None = None,
) -> list[LatencyHistoryPoint]:
    """Latency samples (milliseconds) for ``api_name`` over the last ``minutes``.

    Never raises; returns ``[]`` when every strategy fails.
    """
    try:
        return await _fetch_history(client, api_name, minutes, time.time() if now is None else now)
    except Exception:
        logger.exception("Failed to fetch latency history for %s", api_name)
        return []


async def _fetch_history(
    client: PrometheusClient, api_name: str, minutes: int, now: float
) -> list[LatencyHistoryPoint]:
    end = math.floor(now)
    start = end - minutes * 60
    step = queries.HISTORY_STEP_SECONDS
    direct = queries.mean_latency(api_name)

    source = "range"
    try:
        response = await client.query_range(direct, start, end, step)
    except QueryError as exc:
        logger.debug("Range query failed for %s (%s), trying rate query", api_name, exc)
        source = "rate"
        try:
            response = await client.query_range(queries.rate_latency(api_name), start, end, step)
        except QueryError as rate_exc:
            logger.debug("Rate range query failed for %s: %s", api_name, rate_exc)
            response = RangeQueryResponse()

    values = response.first_series_values()
    if values:
        telemetry.HISTORY_SOURCE.labels(source=source).inc()
        return _to_history(values)

    # No range data; fall back to the current reading
    try:
        point = _current_point(await client.query(direct))
        if point is not None:
            telemetry.HISTORY_SOURCE.labels(source="instant").inc()
            return [point]
    except QueryError as exc:
        logger.debug("Instant query failed for %s: %s", api_name, exc)

    # Last attempt repeats the instant query unchanged
    try:
        point = _current_point(await client.query(direct))
        if point is not None:
            telemetry.HISTORY_SOURCE.labels(source="instant_retry").inc()
            return [point]
    except QueryError as exc:
        logger.error("Fallback query failed for %s: %s", api_name, exc)

    telemetry.HISTORY_SOURCE.labels(source="none").inc()
    return []


def _to_history(values: list[list]) -> list[LatencyHistoryPoint]:
    history = []
    for raw in values:
        point = parse_point(raw)
        if point is None or not is_valid_latency(point.value):
            continue
        history.append(LatencyHistoryPoint(time=from_unix(point.timestamp), latency=point.value * 1000))
    return history


def _current_point(response: InstantQueryResponse) -> LatencyHistoryPoint | None:
    point = response.first_point()
    if point is None or not is_valid_latency(point.value):
        return None
    return LatencyHistoryPoint(time=from_unix(point.timestamp), latency=point.value * 1000)
