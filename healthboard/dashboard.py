"""
One-pass dashboard snapshot.

Statuses come first since they decide which APIs are shown; totals and
history for those APIs are then fetched concurrently. Each piece keeps the
never-raise contract of its fetcher, so a snapshot is always returned.
"""

from __future__ import annotations

import asyncio
import logging
import time

from healthboard.client import PrometheusClient
from healthboard.history import DEFAULT_MINUTES, fetch_latency_history
from healthboard.models.dashboard import DashboardSnapshot, from_unix
from healthboard.status import fetch_api_statuses
from healthboard.totals import fetch_total_checks

logger = logging.getLogger("dashboard")


async def build_snapshot(
    client: PrometheusClient,
    *,
    minutes: int = DEFAULT_MINUTES,
    api_names: list[str] | None = None,
    now: float | None = None,
) -> DashboardSnapshot:
    """Fetch everything the dashboard shows.

    Args:
        client: Backend client.
        minutes: Latency-history window.
        api_names: Restrict the snapshot to these APIs (all when ``None``).
        now: Reference time in unix seconds (defaults to ``time.time()``).
    """
    now = time.time() if now is None else now
    statuses = await fetch_api_statuses(client, now=now)
    if api_names is not None:
        wanted = set(api_names)
        statuses = [s for s in statuses if s.name in wanted]

    names = [s.name for s in statuses]
    totals, histories = await asyncio.gather(
        asyncio.gather(*(fetch_total_checks(client, name) for name in names)),
        asyncio.gather(*(fetch_latency_history(client, name, minutes, now=now) for name in names)),
    )

    logger.info("Snapshot built for %d APIs", len(names))
    return DashboardSnapshot(
        generated_at=from_unix(now),
        statuses=statuses,
        totals=dict(zip(names, totals)),
        history=dict(zip(names, histories)),
    )
