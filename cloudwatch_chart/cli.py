"""Command-line interface to render a CloudWatch chart.

Loads a JSON chart configuration, fetches the configured metrics and saves the
rendered image (or prints the chart URL).

Usage
-----
    cloudwatch-chart --config config.json --output chart.png
    cloudwatch-chart --config config.json --url-only
    cloudwatch-chart --list-metrics AWS/EC2 CPUUtilization
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import orjson

from . import __version__
from .adapters.chart_service import ChartServiceClient
from .adapters.cloudwatch import CloudWatchAdapter
from .chart import CloudWatchChart
from .config.models import ChartConfig, EnvSettings
from .exceptions import ChartError
from .observability import setup_logging

logger = logging.getLogger(__name__)


def _build_chart(config_path: Path, settings: EnvSettings) -> CloudWatchChart:
    """Create a chart from a config file using environment settings."""
    cfg = ChartConfig.load(config_path)
    return CloudWatchChart(
        cfg,
        source=CloudWatchAdapter(region_name=settings.aws_region),
        renderer=ChartServiceClient(timeout=settings.chart_timeout_seconds),
        base_url=settings.chart_base_url,
    )


async def _render(
    config_path: Path, output: Optional[Path], settings: EnvSettings
) -> None:
    """Render the chart; print its URL when no output path is given."""
    chart_builder = _build_chart(config_path, settings)
    logger.info(
        "cli.render",
        extra={
            "from": chart_builder.start_time_string(),
            "to": chart_builder.to_time_string(),
        },
    )
    chart = await chart_builder.get_chart()
    if output is None:
        print(chart.url)
        return
    saved = await chart.save(output)
    print(saved)


async def _list_metrics(
    namespace: str, metric_name: Optional[str], settings: EnvSettings
) -> None:
    adapter = CloudWatchAdapter(region_name=settings.aws_region)
    metrics = await adapter.list_metrics(namespace, metric_name)
    sys.stdout.write(orjson.dumps(metrics, option=orjson.OPT_INDENT_2).decode() + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint.

    Returns the process exit code: 0 on success, 1 when rendering fails.
    """
    parser = argparse.ArgumentParser(
        prog="cloudwatch-chart",
        description="Render a line chart of AWS CloudWatch metrics",
    )
    parser.add_argument("--config", help="Path to JSON chart config")
    parser.add_argument("-o", "--output", help="Output image path")
    parser.add_argument(
        "--url-only",
        action="store_true",
        help="Print the chart URL instead of downloading the image",
    )
    parser.add_argument(
        "--list-metrics",
        nargs="+",
        metavar=("NAMESPACE", "METRIC"),
        help="List available metrics for a namespace (and metric name)",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=[
            "CRITICAL",
            "ERROR",
            "WARNING",
            "INFO",
            "DEBUG",
        ],
        help="Logging level (overrides environment)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (once sets DEBUG)",
    )
    parser.add_argument("--version", action="version", version=__version__)
    args = parser.parse_args(argv)

    settings = EnvSettings()
    effective_level = args.log_level or (
        "DEBUG" if args.verbose > 0 else settings.log_level.upper()
    )
    setup_logging(effective_level)

    try:
        if args.list_metrics:
            if len(args.list_metrics) > 2:
                parser.error("--list-metrics takes NAMESPACE and optional METRIC")
            namespace, *rest = args.list_metrics
            asyncio.run(_list_metrics(namespace, rest[0] if rest else None, settings))
            return 0

        if not args.config:
            parser.error("--config is required unless --list-metrics is used")
        if not args.output and not args.url_only:
            parser.error("--output is required unless --url-only is used")
        asyncio.run(
            _render(
                Path(args.config),
                None if args.url_only else Path(args.output),
                settings,
            )
        )
    except ChartError as exc:
        logger.error("cli.failed", extra={"error": str(exc)})
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
