from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Literal

StatusValue = Literal["up", "down"]


def from_unix(seconds: int | float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


@dataclass
class APIStatus:
    """Current state of one monitored API."""

    name: str
    status: StatusValue
    last_check: datetime
    latency: float = 0.0  # milliseconds
    status_code: int | None = None

    @property
    def is_up(self) -> bool:
        return self.status == "up"


@dataclass
class LatencyHistoryPoint:
    time: datetime
    latency: float  # milliseconds


@dataclass
class CheckTotals:
    up: float = 0.0
    down: float = 0.0

    @property
    def total(self) -> float:
        return self.up + self.down


@dataclass
class DashboardSnapshot:
    """Everything the dashboard renders, fetched in one pass."""

    generated_at: datetime
    statuses: list[APIStatus] = field(default_factory=list)
    totals: dict[str, CheckTotals] = field(default_factory=dict)
    history: dict[str, list[LatencyHistoryPoint]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """JSON-ready form (datetimes as ISO-8601 strings)."""
        def _iso(value):
            if isinstance(value, datetime):
                return value.isoformat()
            if isinstance(value, dict):
                return {k: _iso(v) for k, v in value.items()}
            if isinstance(value, list):
                return [_iso(v) for v in value]
            return value

        return _iso(asdict(self))
