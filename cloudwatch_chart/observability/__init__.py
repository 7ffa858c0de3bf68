"""Observability utilities: logging setup.

Configures standard logging for the package and binds `structlog` to the same
level so structured loggers created by embedding applications filter
consistently.
"""

from __future__ import annotations

import logging

import structlog


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Parameters
    ----------
    level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".

    Behavior
    --------
    - Initializes Python's logging with the requested level.
    - Configures `structlog` with a filtering bound logger.
    - Keeps the AWS SDK and HTTP client loggers at WARNING unless DEBUG is
      requested, since they are very chatty at INFO.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format=("%(asctime)s %(levelname)s %(name)s - %(message)s"),
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    library_loggers = [
        "boto3",
        "botocore",
        "urllib3",
        "httpx",
        "httpcore",
    ]
    library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for logger_name in library_loggers:
        logging.getLogger(logger_name).setLevel(library_level)

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
    )
