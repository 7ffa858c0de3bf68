"""
CloudWatch chart Python package.

Renders static line charts of AWS CloudWatch metrics through a Google Image
Charts compatible rendering service. See README.md for usage.
"""

from .__version__ import __version__
from .chart import CloudWatchChart, RenderedChart
from .config.models import ChartConfig, MetricConfig, Statistic
from .exceptions import (
    ChartError,
    ChartRenderError,
    ConfigurationError,
    MetricsFetchError,
    NoDataError,
)

__all__ = [
    "__version__",
    "CloudWatchChart",
    "RenderedChart",
    "ChartConfig",
    "MetricConfig",
    "Statistic",
    "ChartError",
    "ChartRenderError",
    "ConfigurationError",
    "MetricsFetchError",
    "NoDataError",
]
