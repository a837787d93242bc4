"""
Response envelopes of the Prometheus HTTP query API.

Every nested field is optional: a well-formed but empty answer, a series
without labels or a sample without a value all validate, and the fetchers
decide what an absent piece means. Sample pairs stay raw (``[ts, "val"]``)
until ``parse_point`` turns them into a ``MetricPoint``.
"""

from __future__ import annotations

import math
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class MetricPoint(NamedTuple):
    timestamp: int
    value: float


class InstantSeries(BaseModel):
    metric: dict[str, str] = Field(default_factory=dict)
    value: list[Any] | None = None


class RangeSeries(BaseModel):
    metric: dict[str, str] = Field(default_factory=dict)
    values: list[list[Any]] = Field(default_factory=list)


class InstantData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result_type: str | None = Field(default=None, alias="resultType")
    result: list[InstantSeries] = Field(default_factory=list)


class RangeData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result_type: str | None = Field(default=None, alias="resultType")
    result: list[RangeSeries] = Field(default_factory=list)


class InstantQueryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str | None = None
    data: InstantData = Field(default_factory=InstantData)
    error_type: str | None = Field(default=None, alias="errorType")
    error: str | None = None

    def first_point(self) -> MetricPoint | None:
        """Parsed sample of the first series, if there is one."""
        if not self.data.result:
            return None
        return parse_point(self.data.result[0].value)

    def first_value(self) -> float:
        """Value of the first series, ignoring its timestamp.

        NaN when there is no series, no sample pair, or the value cannot
        be read.
        """
        if not self.data.result:
            return math.nan
        raw = self.data.result[0].value
        if not raw or len(raw) < 2:
            return math.nan
        return parse_value(raw[1])


class RangeQueryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str | None = None
    data: RangeData = Field(default_factory=RangeData)
    error_type: str | None = Field(default=None, alias="errorType")
    error: str | None = None

    def first_series_values(self) -> list[list[Any]]:
        if not self.data.result:
            return []
        return self.data.result[0].values


def parse_value(raw: Any) -> float:
    """Parse a sample value; anything unparsable becomes NaN.

    Prometheus encodes values as strings (``"0.25"``, ``"NaN"``, ``"+Inf"``).
    """
    if isinstance(raw, bool):
        return math.nan
    try:
        return float(str(raw).strip())
    except (TypeError, ValueError):
        return math.nan


def parse_timestamp(raw: Any) -> int | None:
    """Parse a sample timestamp to whole unix seconds (truncating)."""
    if isinstance(raw, bool):
        return None
    try:
        ts = float(str(raw).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(ts):
        return None
    return int(ts)


def parse_point(raw: list[Any] | None) -> MetricPoint | None:
    """Turn a raw ``[ts, "val"]`` pair into a ``MetricPoint``.

    Returns ``None`` when the pair is missing, too short, or its
    timestamp cannot be read. The value may still be NaN/infinite.
    """
    if not raw or len(raw) < 2:
        return None
    ts = parse_timestamp(raw[0])
    if ts is None:
        return None
    return MetricPoint(ts, parse_value(raw[1]))


def is_valid_latency(seconds: float) -> bool:
    """A latency sample is usable only when finite and non-negative."""
    return math.isfinite(seconds) and seconds >= 0
