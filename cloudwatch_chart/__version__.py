"""
Version information for cloudwatch-chart.

The package version is read from pyproject.toml via importlib.metadata so the
project metadata stays the single source of truth.
"""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("cloudwatch-chart")
except PackageNotFoundError:
    # Fallback for development (package not installed)
    # Read directly from pyproject.toml
    import tomllib
    from pathlib import Path

    try:
        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            pyproject = tomllib.load(f)
            __version__ = pyproject["project"]["version"]
    except (OSError, KeyError, tomllib.TOMLDecodeError):
        # Last resort fallback
        __version__ = "0.0.0-dev"
