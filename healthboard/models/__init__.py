from .dashboard import APIStatus, CheckTotals, DashboardSnapshot, LatencyHistoryPoint
from .prometheus import (
    InstantQueryResponse,
    MetricPoint,
    RangeQueryResponse,
    is_valid_latency,
    parse_point,
)

__all__ = [
    "APIStatus",
    "CheckTotals",
    "DashboardSnapshot",
    "LatencyHistoryPoint",
    "InstantQueryResponse",
    "RangeQueryResponse",
    "MetricPoint",
    "is_valid_latency",
    "parse_point",
]
