"""
Alignment of independently sampled metric series onto shared time buckets.

The observed time range across every series is split into ``samples`` equal
buckets; each series is reduced to one scalar per bucket using its configured
statistic. The y axis ceiling leaves 20% headroom above the largest scalar.
"""

import logging
import math
import statistics
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from ..config.models import Statistic
from ..exceptions import NoDataError
from .models import DataPoint, MetricSeries, TimeBucket
from .utils.timestamps import ensure_utc, format_clock_label, to_iso8601

logger = logging.getLogger(__name__)

HEADROOM = 1.2
MIN_Y_AXIS_MAX = 1


@dataclass(frozen=True)
class ResampledSeries:
    """
    Bucketed values for every series of a chart.

    Attributes
    ----------
    buckets : List[TimeBucket]
        Shared buckets, oldest first.
    values : List[List[float]]
        One list per series (declaration order), one scalar per bucket.
    absolute_max : float
        Largest scalar across all series and buckets.
    y_axis_max : int
        Axis ceiling used as the encoding scale.
    """

    buckets: List[TimeBucket]
    values: List[List[float]]
    absolute_max: float
    y_axis_max: int

    @property
    def labels(self) -> List[str]:
        return [bucket.label for bucket in self.buckets]


def time_range(series: Sequence[MetricSeries]) -> Tuple[datetime, datetime]:
    """
    Return the earliest and latest data point timestamps across all series.

    Raises
    ------
    NoDataError
        If no series holds any data point.
    """
    timestamps = [
        ensure_utc(point.timestamp) for s in series for point in s.data_points
    ]
    if not timestamps:
        raise NoDataError("No data points to render for any metric")
    return min(timestamps), max(timestamps)


def compute_buckets(
    global_min: datetime, global_max: datetime, samples: int
) -> List[TimeBucket]:
    """
    Split ``(global_min, global_max]`` into ``samples`` equal buckets.

    Boundary ``i`` is ``global_min + span * i / samples``, computed directly
    rather than by accumulating a step, so exactly ``samples`` buckets are
    produced and the last one ends at ``global_max``. The instant
    ``global_min`` itself falls in no bucket.

    Raises
    ------
    ValueError
        If ``samples`` is less than 1.
    NoDataError
        If the range has zero length.
    """
    if samples < 1:
        raise ValueError(f"samples must be at least 1, got {samples}")
    span = global_max - global_min
    if span <= timedelta(0):
        raise NoDataError(
            "Data points cover a single instant; cannot build a time axis"
        )

    boundaries = [global_min + span * i / samples for i in range(samples)]
    boundaries.append(global_max)

    return [
        TimeBucket(
            label=format_clock_label(end),
            start_exclusive=start,
            end_inclusive=end,
        )
        for start, end in zip(boundaries, boundaries[1:])
    ]


def reduce_bucket(
    points: Sequence[DataPoint], bucket: TimeBucket, statistic: Statistic
) -> float:
    """
    Reduce the points falling in ``bucket`` to a single value.

    ``Maximum`` takes the largest ``maximum`` field floored at 0, ``Average``
    the mean of the ``average`` fields. Points lacking the relevant field are
    skipped; a bucket with nothing to reduce yields 0.
    """
    selected = [p for p in points if bucket.contains(ensure_utc(p.timestamp))]

    if statistic is Statistic.MAXIMUM:
        maxima = [p.maximum for p in selected if p.maximum is not None]
        return float(max([0.0, *maxima]))

    averages = [p.average for p in selected if p.average is not None]
    return float(statistics.fmean(averages)) if averages else 0.0


def resample(series: Sequence[MetricSeries], samples: int) -> ResampledSeries:
    """
    Align every series onto ``samples`` shared buckets.

    Parameters
    ----------
    series : Sequence[MetricSeries]
        Series with their data points already fetched.
    samples : int
        Number of buckets.

    Returns
    -------
    ResampledSeries
        Buckets, per-series scalars and the y axis ceiling
        ``ceil(absolute_max * 1.2)``. A chart whose values are all zero gets a
        ceiling of 1 so the encoding scale stays positive.

    Raises
    ------
    NoDataError
        If there are no data points or they span no time.
    """
    global_min, global_max = time_range(series)
    buckets = compute_buckets(global_min, global_max, samples)

    values: List[List[float]] = []
    absolute_max = 0.0
    for s in series:
        points = s.data_points
        row = [reduce_bucket(points, bucket, s.statistic) for bucket in buckets]
        absolute_max = max([absolute_max, *row])
        values.append(row)

    y_axis_max = math.ceil(absolute_max * HEADROOM)
    if y_axis_max < MIN_Y_AXIS_MAX:
        logger.info(
            "resample.flat_chart",
            extra={"absolute_max": absolute_max, "y_axis_max": MIN_Y_AXIS_MAX},
        )
        y_axis_max = MIN_Y_AXIS_MAX

    logger.debug(
        "resample.complete",
        extra={
            "series": len(values),
            "buckets": len(buckets),
            "start": to_iso8601(global_min),
            "end": to_iso8601(global_max),
            "absolute_max": absolute_max,
            "y_axis_max": y_axis_max,
        },
    )
    return ResampledSeries(
        buckets=buckets,
        values=values,
        absolute_max=absolute_max,
        y_axis_max=y_axis_max,
    )
