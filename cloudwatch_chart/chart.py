"""Chart orchestration: fetch every metric, resample, build and render.

Usage
-----
    chart_builder = CloudWatchChart(ChartConfig.load(Path("config.json")))
    chart = await chart_builder.get_chart()
    await chart.save("image.png")     # or: image = await chart.get()
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from .adapters import ChartRenderer, MetricsSource
from .config.models import ChartConfig, EnvSettings, MetricConfig
from .domain.chart_spec import ChartSpec, build_chart_spec
from .domain.models import MetricSeries, TimeWindow
from .domain.resample import resample
from .domain.utils.timestamps import format_short_datetime
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class RenderedChart:
    """A built chart request, ready to be downloaded or saved."""

    def __init__(self, spec: ChartSpec, renderer: ChartRenderer) -> None:
        self.spec = spec
        self._renderer = renderer

    @property
    def url(self) -> httpx.URL:
        return self.spec.url

    async def get(self) -> bytes:
        """Return the rendered image bytes."""
        return await self._renderer.fetch(self.url)

    async def save(self, path: Union[str, Path]) -> Path:
        """Write the rendered image to ``path`` and return the path."""
        return await self._renderer.save(self.url, path)


class CloudWatchChart:
    """Line chart of one or more CloudWatch metrics.

    Parameters
    ----------
    config: ChartConfig | Mapping
        Validated configuration, or a raw mapping validated here.
    source: Optional[MetricsSource]
        Metrics API adapter. Defaults to a :class:`CloudWatchAdapter`.
    renderer: Optional[ChartRenderer]
        Chart rendering service client. Defaults to a
        :class:`ChartServiceClient`.
    base_url: Optional[str]
        Rendering service endpoint used in chart URLs.
    settings: Optional[EnvSettings]
        Defaults for whichever collaborators or endpoint are omitted. Read
        from the environment when not given.

    Raises
    ------
    ConfigurationError
        If the configuration is invalid. Nothing touches the network before
        the configuration has been validated.
    """

    def __init__(
        self,
        config: Union[ChartConfig, Mapping[str, Any]],
        source: Optional[MetricsSource] = None,
        renderer: Optional[ChartRenderer] = None,
        *,
        base_url: Optional[str] = None,
        settings: Optional[EnvSettings] = None,
    ) -> None:
        if not isinstance(config, ChartConfig):
            config = ChartConfig.from_mapping(config)
        self.config = config

        if source is None or renderer is None or base_url is None:
            settings = settings or EnvSettings()
        if source is None:
            from .adapters.cloudwatch import CloudWatchAdapter

            source = CloudWatchAdapter(region_name=settings.aws_region)
        if renderer is None:
            from .adapters.chart_service import ChartServiceClient

            renderer = ChartServiceClient(timeout=settings.chart_timeout_seconds)
        self.base_url = base_url if base_url is not None else settings.chart_base_url
        self._source = source
        self._renderer = renderer

        self.metrics: List[MetricSeries] = [MetricSeries(m) for m in config.metrics]
        logger.info(
            "chart.init",
            extra={
                "metrics": len(self.metrics),
                "time_offset": config.time_offset,
                "time_period": config.time_period,
                "chart_samples": config.chart_samples,
            },
        )

    def add_metric(self, params: Union[MetricConfig, Mapping[str, Any]]) -> MetricSeries:
        """Validate one more metric configuration and append its series."""
        if not isinstance(params, MetricConfig):
            try:
                params = MetricConfig.model_validate(params)
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid metric configuration: {exc}") from exc
        series = MetricSeries(params)
        self.metrics.append(series)
        return series

    def time_window(self, now: Optional[datetime] = None) -> TimeWindow:
        """Return the query window ``now - timeOffset .. now``."""
        end = now or datetime.now(timezone.utc)
        start = end - timedelta(minutes=self.config.time_offset)
        return TimeWindow(start=start, end=end, period_seconds=self.config.time_period)

    def start_time_string(self, now: Optional[datetime] = None) -> str:
        return format_short_datetime(self.time_window(now).start)

    def to_time_string(self, now: Optional[datetime] = None) -> str:
        return format_short_datetime(self.time_window(now).end)

    async def fetch_all(self, now: Optional[datetime] = None) -> None:
        """Fetch every metric concurrently.

        The first failure cancels the fetches still in flight and is
        re-raised; no partial chart is produced.
        """
        window = self.time_window(now)
        tasks: Dict[str, "asyncio.Task[Any]"] = {
            f"{i}:{s.namespace}/{s.metric_name}": asyncio.create_task(
                s.fetch(self._source, window)
            )
            for i, s in enumerate(self.metrics)
        }
        try:
            await asyncio.gather(*tasks.values())
        except Exception as exc:
            pending = [t for t in tasks.values() if not t.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            failed = [
                name
                for name, task in tasks.items()
                if task not in pending and not task.cancelled() and task.exception()
            ]
            logger.error(
                "chart.fetch_failed",
                extra={"failed": failed, "cancelled": len(pending), "error": str(exc)},
            )
            raise

    def build_spec(self) -> ChartSpec:
        """Resample the already-fetched points and build the chart request.

        Makes no network calls; repeated calls yield identical specs.
        """
        resampled = resample(self.metrics, self.config.chart_samples)
        return build_chart_spec(
            self.metrics,
            resampled,
            width=self.config.width,
            height=self.config.height,
            base_url=self.base_url,
        )

    def get_url(self) -> str:
        return str(self.build_spec().url)

    async def get_chart(self, now: Optional[datetime] = None) -> RenderedChart:
        """Fetch all metrics, then build the chart request."""
        await self.fetch_all(now)
        spec = self.build_spec()
        logger.info(
            "chart.built",
            extra={"labels": len(spec.labels), "y_axis_max": spec.y_axis_max},
        )
        return RenderedChart(spec, self._renderer)

    async def list_metrics(
        self, namespace: Optional[str] = None, metric_name: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """List metrics available in the source (discovery only)."""
        return await self._source.list_metrics(namespace, metric_name)
