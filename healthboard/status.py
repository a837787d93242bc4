"""
Current up/down status of every monitored API.

``fetch_api_statuses`` reads the ``health_check_status`` gauge, drops
samples older than the staleness window, then resolves each surviving
API's mean latency with one concurrent instant query per API.
"""

from __future__ import annotations

import asyncio
import logging
import time

from healthboard import queries, telemetry
from healthboard.client import PrometheusClient, QueryError
from healthboard.models.dashboard import APIStatus, from_unix
from healthboard.models.prometheus import is_valid_latency, parse_point

logger = logging.getLogger("status")

STALENESS_WINDOW_SECONDS = 5 * 60


async def fetch_api_statuses(
    client: PrometheusClient, *, now: float | None = None
) -> list[APIStatus]:
    """Return one ``APIStatus`` per API with a recent status sample.

    Never raises: a failed status query yields ``[]`` and a failed
    latency lookup leaves that API's latency at 0.

    Args:
        client: Backend client.
        now: Reference time in unix seconds (defaults to ``time.time()``).
    """
    try:
        return await _fetch_statuses(client, time.time() if now is None else now)
    except Exception:
        logger.exception("Unexpected error while fetching API statuses")
        return []


async def _fetch_statuses(client: PrometheusClient, now: float) -> list[APIStatus]:
    cutoff_ms = (now - STALENESS_WINDOW_SECONDS) * 1000

    try:
        response = await client.query(queries.STATUS_QUERY)
    except QueryError as exc:
        logger.error("Failed to fetch API statuses: %s", exc)
        return []

    statuses: list[APIStatus] = []
    for series in response.data.result:
        name = series.metric.get("api_name")
        if not name:
            logger.debug("Skipping status series without api_name: %s", series.metric)
            continue

        point = parse_point(series.value)
        last_check_ms = point.timestamp * 1000 if point else None
        if last_check_ms is None or not last_check_ms > cutoff_ms:
            telemetry.STALE_STATUSES.inc()
            logger.info("API %r has not been updated recently, ignoring", name)
            continue

        statuses.append(
            APIStatus(
                name=name,
                status="up" if point.value == 1 else "down",
                last_check=from_unix(point.timestamp),
            )
        )

    telemetry.MONITORED_APIS.set(len(statuses))
    await asyncio.gather(*(_resolve_latency(client, status) for status in statuses))
    return statuses


async def _resolve_latency(client: PrometheusClient, status: APIStatus) -> None:
    try:
        response = await client.query(queries.mean_latency(status.name))
    except QueryError as exc:
        logger.warning("Failed to fetch latency for %s: %s", status.name, exc)
        return
    except Exception:
        logger.exception("Unexpected error while fetching latency for %s", status.name)
        return

    seconds = response.first_value()
    if is_valid_latency(seconds):
        status.latency = seconds * 1000
