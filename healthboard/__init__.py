"""
healthboard: dashboard client for Prometheus-backed API health checks.

::

    import asyncio
    from healthboard import PrometheusClient, Settings, fetch_api_statuses

    async def main():
        async with PrometheusClient(Settings.from_env()) as client:
            for status in await fetch_api_statuses(client):
                print(status.name, status.status, status.latency)

    asyncio.run(main())
"""

from healthboard.client import PrometheusClient, QueryError
from healthboard.config import Settings
from healthboard.dashboard import build_snapshot
from healthboard.history import fetch_latency_history
from healthboard.models import APIStatus, CheckTotals, DashboardSnapshot, LatencyHistoryPoint
from healthboard.status import fetch_api_statuses
from healthboard.totals import fetch_total_checks

__version__ = "0.1.0"

__all__ = [
    "PrometheusClient",
    "QueryError",
    "Settings",
    "build_snapshot",
    "fetch_api_statuses",
    "fetch_latency_history",
    "fetch_total_checks",
    "APIStatus",
    "CheckTotals",
    "DashboardSnapshot",
    "LatencyHistoryPoint",
]
