"""Config models and loader.

This module defines the Pydantic models for the chart configuration file and
the environment-based settings. The JSON keys follow the camelCase names used
by CloudWatch (``metricName``, ``timeOffset``...) while the Python attributes
are snake_case. Models are frozen: a configuration is assembled once from
defaults plus overrides and never mutated afterwards.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import orjson
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError

DEFAULT_CHART_URL = "https://image-charts.com/chart"

MAX_SIDE_PX = 1000
MAX_AREA_PX = 300_000

# Per-metric keys are matched case-insensitively (and ignoring underscores),
# mapped onto the canonical alias of each field.
_METRIC_KEYS: Dict[str, str] = {
    "title": "title",
    "namespace": "namespace",
    "metricname": "metricName",
    "statistic": "statistic",
    "unit": "unit",
    "color": "color",
    "thickness": "thickness",
    "dashed": "dashed",
    "dimensions": "dimensions",
}


class Statistic(str, Enum):
    """Statistic requested from CloudWatch and used to reduce each bucket."""

    MAXIMUM = "Maximum"
    AVERAGE = "Average"


class Dimension(BaseModel):
    """CloudWatch dimension filter (``{"Name": ..., "Value": ...}``)."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: str = Field(..., alias="Name", min_length=1)
    value: str = Field(..., alias="Value")

    def to_cloudwatch(self) -> Dict[str, str]:
        """Return the dimension in the shape expected by the CloudWatch API."""
        return {"Name": self.name, "Value": self.value}


class MetricConfig(BaseModel):
    """Configuration of a single charted metric.

    Attributes
    ----------
    title: Optional[str]
        Legend title. Should be unique within a chart.
    namespace: str
        CloudWatch namespace (e.g., "AWS/EC2").
    metric_name: str
        CloudWatch metric name (e.g., "CPUUtilization").
    statistic: Statistic
        "Maximum" or "Average". Defaults to "Average".
    unit: Optional[str]
        CloudWatch unit filter (e.g., "Percent", "Count").
    color: str
        Line color as ``RRGGBB`` or ``RRGGBBAA`` hex.
    thickness: int
        Line thickness in pixels.
    dashed: bool
        Dashed (``True``) or solid line.
    dimensions: Tuple[Dimension, ...]
        Dimension filters, in declaration order.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    title: Optional[str] = None
    namespace: str = Field(..., min_length=1)
    metric_name: str = Field(..., alias="metricName", min_length=1)
    statistic: Statistic = Statistic.AVERAGE
    unit: Optional[str] = None
    color: str = Field("FF0000", pattern=r"^[0-9A-Fa-f]{6}([0-9A-Fa-f]{2})?$")
    thickness: int = Field(1, ge=1)
    dashed: bool = False
    dimensions: Tuple[Dimension, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        normalized: Dict[str, Any] = {}
        for key, value in data.items():
            lookup = str(key).lower().replace("_", "")
            normalized[_METRIC_KEYS.get(lookup, str(key))] = value
        return normalized

    @field_validator("title", "namespace", "metric_name", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        return value


class ChartConfig(BaseModel):
    """Top-level chart configuration.

    Attributes
    ----------
    metrics: Tuple[MetricConfig, ...]
        Metrics to draw, in legend order. At least one is required.
    time_offset: int
        Window length in minutes, ending now. Defaults to 1440 (one day).
    time_period: int
        CloudWatch aggregation period in seconds; a positive multiple of 60.
    chart_samples: int
        Number of time buckets on the x axis.
    width, height: int
        Image size in pixels. Each side is at most 1000 and the area at most
        300000 pixels (rendering service limits).
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    metrics: Tuple[MetricConfig, ...] = Field(..., min_length=1)
    time_offset: int = Field(1440, alias="timeOffset", ge=1)
    time_period: int = Field(60, alias="timePeriod", ge=60)
    chart_samples: int = Field(24, alias="chartSamples", ge=1)
    width: int = Field(1000, ge=1, le=MAX_SIDE_PX)
    height: int = Field(250, ge=1, le=MAX_SIDE_PX)

    @field_validator("time_period")
    @classmethod
    def _period_multiple_of_minute(cls, value: int) -> int:
        if value % 60 != 0:
            raise ValueError("timePeriod must be a multiple of 60 seconds")
        return value

    @model_validator(mode="after")
    def _check_area(self) -> "ChartConfig":
        if self.width * self.height > MAX_AREA_PX:
            raise ValueError(
                f"width x height cannot exceed {MAX_AREA_PX} "
                f"(got {self.width}x{self.height})"
            )
        return self

    @classmethod
    def from_mapping(cls, data: Any) -> "ChartConfig":
        """Validate a raw mapping, raising :class:`ConfigurationError` on failure."""
        if not isinstance(data, Mapping):
            raise ConfigurationError("Chart configuration must be a mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid chart configuration: {exc}") from exc

    @staticmethod
    def load(path: Path) -> "ChartConfig":
        """Load chart configuration from a JSON file."""
        try:
            data = orjson.loads(Path(path).read_bytes())
        except OSError as exc:
            raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
        except orjson.JSONDecodeError as exc:
            raise ConfigurationError(f"Config file {path} is not valid JSON: {exc}") from exc
        return ChartConfig.from_mapping(data)


class EnvSettings(BaseSettings):
    """Environment-driven settings and .env support.

    Attributes
    ----------
    log_level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".
    aws_region: Optional[str]
        Region for the CloudWatch client. Falls back to the boto3 default
        resolution chain when unset.
    chart_base_url: str
        Endpoint of the chart rendering service (Google Image Charts API).
    chart_timeout_seconds: float
        HTTP timeout for chart rendering requests.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CLOUDWATCH_CHART_")

    log_level: str = Field("INFO")
    aws_region: Optional[str] = None
    chart_base_url: str = Field(
        DEFAULT_CHART_URL,
        description="Chart rendering service endpoint",
    )
    chart_timeout_seconds: float = Field(30.0, gt=0)
