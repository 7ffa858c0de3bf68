"""
Tests for the chart request builder.
"""

from urllib.parse import parse_qs

import pytest
from fakes import point

from cloudwatch_chart.config.models import MetricConfig
from cloudwatch_chart.domain.chart_spec import build_chart_spec
from cloudwatch_chart.domain.models import MetricSeries
from cloudwatch_chart.domain.resample import resample


def _series(points, **overrides):
    params = {"namespace": "AWS/EC2", "metricName": "CPUUtilization"}
    params.update(overrides)
    series = MetricSeries(MetricConfig.model_validate(params))
    series.add_points(points)
    return series


@pytest.fixture
def two_series():
    cpu = _series(
        [point(0, average=1), point(30, average=2), point(60, average=3)],
        title="CPU",
        color="af9cf4",
        thickness=2,
    )
    mem = _series(
        [point(15, maximum=1), point(45, maximum=2)],
        metricName="MemoryUtilization",
        statistic="Maximum",
        color="00ff00",
        thickness=1,
        dashed=True,
        dimensions=[{"Name": "InstanceId", "Value": "i-123"}],
    )
    return [cpu, mem]


def test_build_chart_spec_fields(two_series):
    """Test per-series fields follow declaration order."""
    resampled = resample(two_series, 2)
    spec = build_chart_spec(two_series, resampled, width=800, height=300)

    assert spec.labels == ("12:30", "13:00")
    assert spec.colors == ("af9cf4", "00ff00")
    assert spec.line_styles == ("2", "1,5,5")
    assert spec.titles == ("CPU", "i-123")
    assert spec.y_axis_max == 4
    assert spec.encoded_series == ("gAwA", "QAgA")
    assert all(len(e) == 2 * len(spec.labels) for e in spec.encoded_series)


def test_params_order_and_values(two_series):
    """Test the request parameters and their order."""
    spec = build_chart_spec(two_series, resample(two_series, 2), width=800, height=300)
    assert spec.params() == [
        ("cht", "lc"),
        ("chxl", "0:|12:30|13:00"),
        ("chxt", "x,y"),
        ("chco", "af9cf4,00ff00"),
        ("chls", "2|1,5,5"),
        ("chs", "800x300"),
        ("chxr", "1,0,4,10"),
        ("chg", "20,10,1,5"),
        ("chdl", "CPU|i-123"),
        ("chd", "e:gAwA,QAgA"),
    ]


def test_url_round_trips_params(two_series):
    """Test the URL carries every parameter, properly escaped."""
    spec = build_chart_spec(
        two_series,
        resample(two_series, 2),
        width=800,
        height=300,
        base_url="https://charts.example.com/chart",
    )
    url = spec.url
    assert url.host == "charts.example.com"
    assert url.path == "/chart"
    query = parse_qs(url.query.decode(), keep_blank_values=True)
    assert query["chd"] == ["e:gAwA,QAgA"]
    assert query["chdl"] == ["CPU|i-123"]
    assert query["chs"] == ["800x300"]


def test_build_is_deterministic(two_series):
    """Test building twice from the same points is byte-identical."""
    first = build_chart_spec(two_series, resample(two_series, 2), 800, 300)
    second = build_chart_spec(two_series, resample(two_series, 2), 800, 300)
    assert str(first.url) == str(second.url)


def test_series_count_mismatch(two_series):
    """Test resampled rows must match the series count."""
    resampled = resample(two_series, 2)
    with pytest.raises(ValueError):
        build_chart_spec(two_series[:1], resampled, 800, 300)
