"""Domain data model: data points, time windows, buckets and metric series.

``DataPoint`` and ``TimeBucket`` are small frozen Pydantic models;
``MetricSeries`` is a plain class that owns one metric's configuration and the
points fetched for it.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ..config.models import Dimension, MetricConfig, Statistic
from .utils.timestamps import ensure_utc, parse_timestamp, to_iso8601

if TYPE_CHECKING:
    from ..adapters import MetricsSource

logger = logging.getLogger(__name__)

DASH_PATTERN = "5,5"


class DataPoint(BaseModel):
    """Single CloudWatch observation.

    A point carries a maximum, an average, or both, depending on the
    statistics requested. At least one must be present.

    Attributes
    ----------
    timestamp: datetime
        Start of the aggregation period (UTC).
    maximum: Optional[float]
        Maximum statistic for the period.
    average: Optional[float]
        Average statistic for the period.
    unit: Optional[str]
        Unit reported by CloudWatch.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    maximum: Optional[float] = None
    average: Optional[float] = None
    unit: Optional[str] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _normalize_timestamp(cls, value: Any) -> Any:
        parsed = parse_timestamp(value)
        if parsed is None:
            raise ValueError(f"invalid data point timestamp: {value!r}")
        return parsed

    @model_validator(mode="after")
    def _require_statistic(self) -> "DataPoint":
        if self.maximum is None and self.average is None:
            raise ValueError("data point needs a maximum or an average value")
        return self

    @property
    def kind(self) -> Literal["maximum", "average", "both"]:
        if self.maximum is not None and self.average is not None:
            return "both"
        if self.maximum is not None:
            return "maximum"
        return "average"

    @classmethod
    def from_cloudwatch(cls, raw: Dict[str, Any]) -> "DataPoint":
        """Build a point from a ``GetMetricStatistics`` ``Datapoints`` entry."""
        return cls(
            timestamp=raw["Timestamp"],
            maximum=raw.get("Maximum"),
            average=raw.get("Average"),
            unit=raw.get("Unit"),
        )


class TimeWindow(BaseModel):
    """Query window shared by every metric fetch of one render."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    period_seconds: int

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        if self.start >= self.end:
            raise ValueError("time window start must be before its end")
        return self


class TimeBucket(BaseModel):
    """Half-open time interval ``(start_exclusive, end_inclusive]``."""

    model_config = ConfigDict(frozen=True)

    label: str
    start_exclusive: datetime
    end_inclusive: datetime

    def contains(self, timestamp: datetime) -> bool:
        return self.start_exclusive < timestamp <= self.end_inclusive


class MetricSeries:
    """One charted metric: its configuration plus the data points fetched for it.

    Parameters
    ----------
    config: MetricConfig
        Validated metric configuration.
    """

    def __init__(self, config: MetricConfig) -> None:
        self.config = config
        self._data_points: List[DataPoint] = []

    def __repr__(self) -> str:
        return (
            f"MetricSeries({self.namespace}/{self.metric_name}, "
            f"title={self.title!r}, points={len(self._data_points)})"
        )

    @property
    def namespace(self) -> str:
        return self.config.namespace

    @property
    def metric_name(self) -> str:
        return self.config.metric_name

    @property
    def statistic(self) -> Statistic:
        return self.config.statistic

    @property
    def unit(self) -> Optional[str]:
        return self.config.unit

    @property
    def color(self) -> str:
        return self.config.color

    @property
    def thickness(self) -> int:
        return self.config.thickness

    @property
    def dashed(self) -> bool:
        return self.config.dashed

    @property
    def dimensions(self) -> Tuple[Dimension, ...]:
        return self.config.dimensions

    @property
    def identity(self) -> Tuple[str, str, Tuple[Tuple[str, str], ...]]:
        return (
            self.namespace,
            self.metric_name,
            tuple((d.name, d.value) for d in self.dimensions),
        )

    @property
    def data_points(self) -> Tuple[DataPoint, ...]:
        return tuple(self._data_points)

    @property
    def title(self) -> str:
        """Legend title: configured title, else first dimension value, else ''."""
        if self.config.title is not None:
            return self.config.title
        if self.dimensions:
            return self.dimensions[0].value or ""
        return ""

    @property
    def line_style(self) -> str:
        """Chart line style token: ``"<thickness>"`` or ``"<thickness>,5,5"``."""
        if self.dashed:
            return f"{self.thickness},{DASH_PATTERN}"
        return str(self.thickness)

    def add_points(self, points: List[DataPoint]) -> int:
        """Append every point of one response.

        Stored points sharing a timestamp with the response are superseded by
        it, since the metrics API revises recent periods between calls.

        Returns
        -------
        int
            Number of stored points replaced.
        """
        incoming = list(points)
        fresh = {ensure_utc(p.timestamp) for p in incoming}
        kept = [p for p in self._data_points if ensure_utc(p.timestamp) not in fresh]
        replaced = len(self._data_points) - len(kept)
        self._data_points = kept + incoming
        return replaced

    async def fetch(self, source: "MetricsSource", window: TimeWindow) -> List[DataPoint]:
        """Fetch this metric's points for ``window`` from ``source`` and store them.

        Errors raised by the source propagate unchanged.
        """
        logger.debug(
            "metric_series.fetch",
            extra={
                "namespace": self.namespace,
                "metric_name": self.metric_name,
                "statistic": self.statistic.value,
                "start": to_iso8601(window.start),
                "end": to_iso8601(window.end),
                "period": window.period_seconds,
            },
        )
        points = await source.fetch_data_points(
            namespace=self.namespace,
            metric_name=self.metric_name,
            dimensions=list(self.dimensions),
            unit=self.unit,
            statistic=self.statistic,
            start_time=window.start,
            end_time=window.end,
            period=window.period_seconds,
        )
        replaced = self.add_points(list(points))
        logger.info(
            "metric_series.fetched",
            extra={
                "title": self.title,
                "received": len(points),
                "replaced": replaced,
                "total": len(self._data_points),
            },
        )
        return list(self._data_points)
