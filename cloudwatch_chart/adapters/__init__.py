"""Collaborator interfaces: the metrics source and the chart renderer."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from ..config.models import Dimension, Statistic
from ..domain.models import DataPoint


class MetricsSource(Protocol):
    """Protocol for metrics API adapters.

    Implementations translate a metric query into calls to the monitoring
    backend (e.g., CloudWatch) and return validated data points.
    """

    async def fetch_data_points(
        self,
        *,
        namespace: str,
        metric_name: str,
        dimensions: Sequence[Dimension],
        unit: Optional[str],
        statistic: Statistic,
        start_time: datetime,
        end_time: datetime,
        period: int,
    ) -> List[DataPoint]:
        """Return the data points of one metric over ``[start_time, end_time]``."""
        raise NotImplementedError

    async def list_metrics(
        self, namespace: Optional[str] = None, metric_name: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """List available metrics matching the namespace and name filters."""
        raise NotImplementedError


class ChartRenderer(Protocol):
    """Protocol for chart rendering services."""

    async def fetch(self, url: Union[str, Any]) -> bytes:
        """Request the chart and return the image bytes."""
        raise NotImplementedError

    async def save(self, url: Union[str, Any], path: Union[str, Path]) -> Path:
        """Request the chart and write the image to ``path``."""
        raise NotImplementedError
