"""
Logging setup for applications and tools built on the SDK.

The library itself only creates module loggers. Applications call
setup_logging once at startup to choose the level and the output format.
"""

from __future__ import annotations

import logging

import json_log_formatter

from .config import ObservabilityConfig


def setup_logging(config: ObservabilityConfig | None = None) -> None:
    """Configure logging based on configuration.

    Args:
        config: Observability configuration (read from environment if omitted)
    """
    config = config or ObservabilityConfig()
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    if config.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]
