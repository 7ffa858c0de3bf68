"""Pytest configuration for test suite.

Ensures the project root is on ``sys.path`` so ``import cloudwatch_chart``
resolves to the local sources regardless of the working directory pytest
chooses.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

import pytest


def _ensure_project_root_on_syspath() -> None:
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        # Prepend to prefer local sources over site-packages
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_syspath()


@pytest.fixture
def base_config() -> Dict[str, Any]:
    """Minimal valid chart configuration with one metric."""
    return {
        "metrics": [
            {
                "title": "Server1 Max CPU",
                "namespace": "AWS/EC2",
                "metricName": "CPUUtilization",
                "statistic": "Maximum",
                "unit": "Percent",
                "color": "af9cf4",
                "thickness": 2,
                "dashed": False,
                "dimensions": [{"Name": "InstanceId", "Value": "i-2d55aad0"}],
            }
        ],
        "timeOffset": 1440,
        "timePeriod": 60,
        "chartSamples": 20,
        "width": 1000,
        "height": 250,
    }
