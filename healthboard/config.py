"""
Runtime settings for the dashboard client.

Settings are resolved once from the environment and handed to
``PrometheusClient``; nothing reads module-level globals after that, so
tests build a ``Settings`` pointing at a fake backend instead.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger("config")

DEFAULT_PROMETHEUS_URL = "http://localhost:9090"

# Dev server that forwards ``/api`` unmodified to the backend
DEFAULT_DEV_PROXY_URL = "http://localhost:5173"

DEVELOPMENT = "development"


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r (using %s)", name, raw, default)
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r (using %s)", name, raw, default)
        return default


@dataclass(frozen=True)
class Settings:
    """Connection and display settings.

    Args:
        environment: ``"development"`` routes queries through the dev proxy
            unless ``prometheus_url`` was given explicitly.
        prometheus_url: Backend address, or ``None`` for the default.
        dev_proxy_url: Reverse proxy used in development.
        timeout_seconds: Transport timeout for every backend request.
        history_minutes: Default latency-history window for the CLI.
        metrics_port: Port for the CLI's metrics endpoint, 0 to disable.
    """

    environment: str = "production"
    prometheus_url: str | None = None
    dev_proxy_url: str = DEFAULT_DEV_PROXY_URL
    timeout_seconds: float = 15.0
    history_minutes: int = 30
    metrics_port: int = 0

    @property
    def base_url(self) -> str:
        if self.prometheus_url:
            return self.prometheus_url.rstrip("/")
        if self.environment == DEVELOPMENT:
            return self.dev_proxy_url.rstrip("/")
        return DEFAULT_PROMETHEUS_URL

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            environment=os.environ.get("ENVIRONMENT", "production"),
            prometheus_url=os.environ.get("PROMETHEUS_URL") or None,
            dev_proxy_url=os.environ.get("DEV_PROXY_URL", DEFAULT_DEV_PROXY_URL),
            timeout_seconds=_env_float("PROMETHEUS_TIMEOUT_SECONDS", 15.0),
            history_minutes=_env_int("HISTORY_MINUTES", 30),
            metrics_port=_env_int("METRICS_PORT", 0),
        )
