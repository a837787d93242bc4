from __future__ import annotations

import asyncio
import logging
import math

from healthboard import queries
from healthboard.client import PrometheusClient, QueryError
from healthboard.models.dashboard import CheckTotals
from healthboard.models.prometheus import InstantQueryResponse

logger = logging.getLogger("totals")


async def fetch_total_checks(client: PrometheusClient, api_name: str) -> CheckTotals:
    """Cumulative up/down check counts for ``api_name``.

    Counter values are taken as reported (no range checks). A missing
    series or an unreadable value counts as 0; if either query fails
    outright both counts are 0.
    """
    up_response, down_response = await asyncio.gather(
        client.query(queries.check_total(api_name, "up")),
        client.query(queries.check_total(api_name, "down")),
        return_exceptions=True,
    )
    for result in (up_response, down_response):
        if isinstance(result, QueryError):
            logger.error("Failed to fetch total checks for %s: %s", api_name, result)
            return CheckTotals()
        if isinstance(result, Exception):
            logger.error(
                "Unexpected error while fetching total checks for %s", api_name, exc_info=result
            )
            return CheckTotals()

    return CheckTotals(up=_counter_value(up_response), down=_counter_value(down_response))


def _counter_value(response: InstantQueryResponse) -> float:
    value = response.first_value()
    return 0.0 if math.isnan(value) else value
