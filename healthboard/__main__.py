import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace

from healthboard import __version__
from healthboard.client import PrometheusClient
from healthboard.config import Settings
from healthboard.dashboard import build_snapshot
from healthboard.models.dashboard import DashboardSnapshot
from healthboard.observability import (
    get_logger,
    init_observability,
    shutdown_tracing,
    start_metrics_server,
)

logger = get_logger("healthboard")


def parse_args(argv: list[str] | None = None, settings: Settings | None = None) -> argparse.Namespace:
    settings = settings or Settings.from_env()
    parser = argparse.ArgumentParser(
        prog="healthboard",
        description="Print the current health dashboard from a Prometheus backend",
    )
    parser.add_argument(
        "--url",
        default=None,
        help=f"Prometheus base URL (default: {settings.base_url})",
    )
    parser.add_argument(
        "--minutes",
        type=int,
        default=settings.history_minutes,
        help="Latency-history window in minutes",
    )
    parser.add_argument(
        "--api",
        action="append",
        dest="apis",
        metavar="NAME",
        help="Only show this API (repeatable)",
    )
    parser.add_argument("--json", action="store_true", help="Emit the snapshot as JSON")
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=settings.metrics_port,
        help="Expose client metrics on this port (0 disables)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def render_table(snapshot: DashboardSnapshot) -> str:
    if not snapshot.statuses:
        return "No APIs reported a recent health check."

    lines = [
        f"{'API':<24} {'STATUS':<6} {'LATENCY':>10} {'UP':>8} {'DOWN':>8} {'POINTS':>6}  LAST CHECK",
    ]
    for status in snapshot.statuses:
        totals = snapshot.totals.get(status.name)
        history = snapshot.history.get(status.name, [])
        lines.append(
            f"{status.name:<24} {status.status:<6} {status.latency:>8.1f}ms "
            f"{(totals.up if totals else 0):>8.0f} {(totals.down if totals else 0):>8.0f} "
            f"{len(history):>6}  {status.last_check.isoformat()}"
        )
    return "\n".join(lines)


async def run(args: argparse.Namespace, settings: Settings) -> DashboardSnapshot:
    logger.info("Querying %s", settings.base_url)
    async with PrometheusClient(settings) as client:
        return await build_snapshot(client, minutes=args.minutes, api_names=args.apis)


def main(argv: list[str] | None = None) -> int:
    settings = Settings.from_env()
    args = parse_args(argv, settings)
    if args.url:
        settings = replace(settings, prometheus_url=args.url)

    init_observability(
        "healthboard",
        __version__,
        log_level=logging.DEBUG if args.verbose else logging.WARNING,
        log_stream=sys.stderr,
        environment=settings.environment,
        backend_url=settings.base_url,
    )

    if args.metrics_port:
        start_metrics_server(args.metrics_port)

    try:
        snapshot = asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        return 130
    finally:
        shutdown_tracing()

    if args.json:
        print(json.dumps(snapshot.to_dict(), indent=2))
    else:
        print(render_table(snapshot))
    return 0 if snapshot.statuses else 1


if __name__ == "__main__":
    sys.exit(main())
