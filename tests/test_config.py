"""
Tests for chart configuration models.
"""

import json
from pathlib import Path

import pytest

from cloudwatch_chart.config.models import (
    ChartConfig,
    Dimension,
    EnvSettings,
    MetricConfig,
    Statistic,
)
from cloudwatch_chart.exceptions import ConfigurationError


def test_defaults_applied():
    """Test omitted top-level fields take their defaults."""
    cfg = ChartConfig.from_mapping(
        {"metrics": [{"namespace": "AWS/EC2", "metricName": "CPUUtilization"}]}
    )
    assert cfg.time_offset == 1440
    assert cfg.time_period == 60
    assert cfg.chart_samples == 24
    assert (cfg.width, cfg.height) == (1000, 250)

    metric = cfg.metrics[0]
    assert metric.statistic is Statistic.AVERAGE
    assert metric.color == "FF0000"
    assert metric.thickness == 1
    assert metric.dashed is False
    assert metric.dimensions == ()
    assert metric.title is None


def test_full_config(base_config):
    """Test a complete configuration validates field by field."""
    cfg = ChartConfig.from_mapping(base_config)
    metric = cfg.metrics[0]
    assert metric.metric_name == "CPUUtilization"
    assert metric.statistic is Statistic.MAXIMUM
    assert metric.dimensions == (Dimension(Name="InstanceId", Value="i-2d55aad0"),)
    assert cfg.chart_samples == 20


def test_config_is_immutable(base_config):
    """Test configuration cannot be mutated after construction."""
    cfg = ChartConfig.from_mapping(base_config)
    with pytest.raises(Exception):
        cfg.width = 10  # type: ignore[misc]
    with pytest.raises(Exception):
        cfg.metrics[0].color = "000000"  # type: ignore[misc]


def test_unknown_top_level_field_rejected(base_config):
    """Test unrecognized top-level fields are configuration errors."""
    base_config["colour"] = "red"
    with pytest.raises(ConfigurationError):
        ChartConfig.from_mapping(base_config)


def test_unknown_metric_field_rejected(base_config):
    """Test unrecognized per-metric fields are configuration errors."""
    base_config["metrics"][0]["period"] = 300
    with pytest.raises(ConfigurationError, match="period"):
        ChartConfig.from_mapping(base_config)


def test_metric_keys_case_insensitive():
    """Test per-metric keys match regardless of case or underscores."""
    metric = MetricConfig.model_validate(
        {
            "Namespace": "AWS/RDS",
            "METRICNAME": "FreeableMemory",
            "Statistic": "Maximum",
            "Dashed": 1,
        }
    )
    assert metric.namespace == "AWS/RDS"
    assert metric.metric_name == "FreeableMemory"
    assert metric.statistic is Statistic.MAXIMUM
    assert metric.dashed is True

    snake = MetricConfig.model_validate({"namespace": "AWS/EC2", "metric_name": "X"})
    assert snake.metric_name == "X"


def test_thickness_and_title_coerced():
    """Test numeric strings and numbers are coerced like the JSON config allows."""
    metric = MetricConfig.model_validate(
        {"namespace": "AWS/EC2", "metricName": "X", "thickness": "3", "title": 42}
    )
    assert metric.thickness == 3
    assert metric.title == "42"


def test_invalid_statistic_rejected(base_config):
    """Test only Maximum and Average are accepted."""
    base_config["metrics"][0]["statistic"] = "Sum"
    with pytest.raises(ConfigurationError):
        ChartConfig.from_mapping(base_config)


def test_invalid_color_rejected(base_config):
    """Test colors must be RRGGBB or RRGGBBAA hex."""
    base_config["metrics"][0]["color"] = "purple"
    with pytest.raises(ConfigurationError):
        ChartConfig.from_mapping(base_config)


@pytest.mark.parametrize("metrics", [None, {"namespace": "AWS/EC2"}, "AWS/EC2", []])
def test_metrics_must_be_non_empty_list(base_config, metrics):
    """Test metrics must be a non-empty array."""
    base_config["metrics"] = metrics
    with pytest.raises(ConfigurationError):
        ChartConfig.from_mapping(base_config)


def test_missing_metrics_rejected():
    """Test the metrics field is required."""
    with pytest.raises(ConfigurationError):
        ChartConfig.from_mapping({"timeOffset": 60})


def test_non_mapping_rejected():
    """Test a configuration must be a mapping."""
    with pytest.raises(ConfigurationError):
        ChartConfig.from_mapping([1, 2, 3])


@pytest.mark.parametrize("period", [0, 30, 90, -60])
def test_time_period_multiple_of_60(base_config, period):
    """Test the period must be a positive multiple of 60 seconds."""
    base_config["timePeriod"] = period
    with pytest.raises(ConfigurationError):
        ChartConfig.from_mapping(base_config)


def test_time_period_accepts_multiples(base_config):
    """Test valid multiples of 60 are accepted."""
    base_config["timePeriod"] = 300
    assert ChartConfig.from_mapping(base_config).time_period == 300


@pytest.mark.parametrize(
    "width,height",
    [(1001, 100), (100, 1001), (600, 600), (0, 250), (250, 0)],
)
def test_image_size_limits(base_config, width, height):
    """Test each side is 1..1000 and the area at most 300000."""
    base_config["width"] = width
    base_config["height"] = height
    with pytest.raises(ConfigurationError):
        ChartConfig.from_mapping(base_config)


def test_image_size_at_limit(base_config):
    """Test 1000x300 is exactly the maximum area."""
    base_config["width"] = 1000
    base_config["height"] = 300
    cfg = ChartConfig.from_mapping(base_config)
    assert cfg.width * cfg.height == 300_000


def test_configuration_error_is_value_error(base_config):
    """Test configuration errors can be caught as ValueError."""
    base_config["chartSamples"] = 0
    with pytest.raises(ValueError):
        ChartConfig.from_mapping(base_config)


def test_load_from_file(tmp_path: Path, base_config):
    """Test loading a JSON config file."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(base_config))
    cfg = ChartConfig.load(path)
    assert cfg.metrics[0].title == "Server1 Max CPU"


def test_load_invalid_json(tmp_path: Path):
    """Test malformed JSON is a configuration error."""
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError):
        ChartConfig.load(path)


def test_load_missing_file(tmp_path: Path):
    """Test a missing file is a configuration error."""
    with pytest.raises(ConfigurationError):
        ChartConfig.load(tmp_path / "missing.json")


def test_env_settings(monkeypatch):
    """Test environment variables override settings defaults."""
    monkeypatch.setenv("CLOUDWATCH_CHART_AWS_REGION", "eu-west-1")
    monkeypatch.setenv("CLOUDWATCH_CHART_CHART_TIMEOUT_SECONDS", "5")
    settings = EnvSettings()
    assert settings.aws_region == "eu-west-1"
    assert settings.chart_timeout_seconds == 5.0
    assert settings.chart_base_url.startswith("https://")
