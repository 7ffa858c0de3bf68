"""Error taxonomy for chart rendering.

Every error raised by the package derives from :class:`ChartError` so callers
can catch a single type at the outer boundary (see ``cli.main``).
"""

from __future__ import annotations


class ChartError(Exception):
    """Base class for all cloudwatch-chart errors."""


class ConfigurationError(ChartError, ValueError):
    """Invalid chart or metric configuration, raised before any network call."""


class MetricsFetchError(ChartError):
    """The metrics API failed to return data points or metric listings."""


class NoDataError(ChartError):
    """Fetched data cannot produce a meaningful chart."""


class ChartRenderError(ChartError):
    """The rendering service or the output file write failed."""
