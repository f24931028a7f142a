"""Utility modules for the campus query service."""

from .logging_config import (
    LogConfig,
    PerformanceLogger,
    configure_logging,
    get_logger,
)
from .monitoring import PerformanceMonitor, StructuredLogger
from .response_cleaner import clean_html_artifacts

__all__ = [
    "LogConfig",
    "PerformanceLogger",
    "PerformanceMonitor",
    "StructuredLogger",
    "clean_html_artifacts",
    "configure_logging",
    "get_logger",
]
