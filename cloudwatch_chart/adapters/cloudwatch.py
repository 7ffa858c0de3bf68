"""CloudWatch metrics adapter.

This adapter translates metric queries into AWS CloudWatch
``GetMetricStatistics`` and ``ListMetrics`` calls. The boto3 client is
synchronous, so every call runs in a worker thread via ``asyncio.to_thread``
to keep concurrent metric fetches from blocking the event loop.

Notes
-----
- No retries are performed here beyond what botocore's own retry config does.
- ``GetMetricStatistics`` returns at most 1440 points per call; the default
  one-day window at a 60 second period fits exactly.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config.models import Dimension, Statistic
from ..domain.models import DataPoint
from ..domain.utils.timestamps import to_iso8601
from ..exceptions import MetricsFetchError

logger = logging.getLogger(__name__)


class CloudWatchAdapter:
    """Adapter for the AWS CloudWatch API.

    Parameters
    ----------
    region_name: Optional[str]
        AWS region. When omitted boto3 resolves it from the environment or
        the shared config files.
    client: Any
        Optional preconfigured CloudWatch client (e.g., with custom
        credentials). Created lazily from ``region_name`` when omitted.
    """

    def __init__(self, region_name: Optional[str] = None, client: Any = None) -> None:
        self._region_name = region_name
        self._client = client
        logger.info(
            "cloudwatch.adapter.init",
            extra={"region": region_name, "client_injected": client is not None},
        )

    def inject_client_for_testing(self, client: Any) -> None:
        """Replace the underlying boto3 client (testing only)."""
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("cloudwatch", region_name=self._region_name)
        return self._client

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
        """Fetch one metric's statistics.

        Returns
        -------
        List[DataPoint]
            Points in the order CloudWatch returned them (not sorted).

        Raises
        ------
        MetricsFetchError
            On any AWS client or transport error.
        """
        params: Dict[str, Any] = {
            "Namespace": namespace,
            "MetricName": metric_name,
            "Dimensions": [d.to_cloudwatch() for d in dimensions],
            "StartTime": start_time,
            "EndTime": end_time,
            "Period": period,
            "Statistics": [statistic.value],
        }
        if unit:
            params["Unit"] = unit

        logger.debug(
            "cloudwatch.get_metric_statistics",
            extra={
                "namespace": namespace,
                "metric_name": metric_name,
                "start": to_iso8601(start_time),
                "end": to_iso8601(end_time),
                "period": period,
            },
        )
        try:
            data = await asyncio.to_thread(self.client.get_metric_statistics, **params)
        except (ClientError, BotoCoreError) as exc:
            logger.error(
                "cloudwatch.get_metric_statistics.failed",
                extra={
                    "namespace": namespace,
                    "metric_name": metric_name,
                    "error": str(exc),
                },
            )
            raise MetricsFetchError(
                f"Error loading {namespace}/{metric_name} statistics: {exc}"
            ) from exc

        raw_points = data.get("Datapoints", [])
        return [DataPoint.from_cloudwatch(raw) for raw in raw_points]

    async def list_metrics(
        self, namespace: Optional[str] = None, metric_name: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """List metric descriptors, following every result page.

        Returns
        -------
        List[Dict[str, Any]]
            CloudWatch metric descriptors (``Namespace``, ``MetricName``,
            ``Dimensions``).
        """
        params: Dict[str, Any] = {}
        if namespace:
            params["Namespace"] = namespace
        if metric_name:
            params["MetricName"] = metric_name

        def _collect() -> List[Dict[str, Any]]:
            paginator = self.client.get_paginator("list_metrics")
            metrics: List[Dict[str, Any]] = []
            for page in paginator.paginate(**params):
                metrics.extend(page.get("Metrics", []))
            return metrics

        try:
            metrics = await asyncio.to_thread(_collect)
        except (ClientError, BotoCoreError) as exc:
            raise MetricsFetchError(f"Error loading metrics list: {exc}") from exc

        logger.info(
            "cloudwatch.list_metrics",
            extra={"namespace": namespace, "metric_name": metric_name, "count": len(metrics)},
        )
        return metrics
