"""Logging configuration and utilities for the campus query service."""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class LogConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S", description="Date format for logs"
    )
    enable_console: bool = Field(default=True, description="Enable console output")
    file_path: str | None = Field(
        default=None, description="Rotating log file; no file output when unset"
    )
    max_bytes: int = Field(default=10 * 1024 * 1024, description="Max file size (10MB)")
    backup_count: int = Field(default=5, description="Number of backup files")
    enable_json: bool = Field(default=True, description="Enable JSON formatting")

    @classmethod
    def from_settings(cls, settings) -> "LogConfig":
        return cls(
            level=settings.log_level,
            enable_json=settings.log_json,
            file_path=settings.log_file_path,
        )


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Fields passed through LoggerAdapter(extra=...)
        for key in ("session_id", "request_id"):
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


def configure_logging(config: LogConfig | None = None) -> None:
    """Configure logging for the application.

    Args:
        config: Logging configuration. Uses defaults if not provided.
    """
    if config is None:
        config = LogConfig()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper()))
    root_logger.handlers.clear()

    if config.enable_json:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(config.format, config.date_format)

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if config.file_path:
        log_path = Path(config.file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Set level for third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def get_logger(name: str, extra: dict[str, Any] | None = None) -> logging.Logger:
    """Get a logger instance with optional extra fields.

    Args:
        name: Logger name (usually __name__)
        extra: Optional extra fields to include in all logs

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)

    if extra:
        logger = logging.LoggerAdapter(logger, extra)

    return logger


class PerformanceLogger:
    """Times the stages of one request."""

    def __init__(self, operation: str, structured: bool = False):
        """Initialize performance logger.

        Args:
            operation: Name of the operation being timed
            structured: Whether to output structured JSON logs
        """
        self.operation = operation
        self.structured = structured
        self.logger = get_logger(f"performance.{operation}")
        self.timings: dict[str, float] = {}
        self.start_time = time.time()
        self._stage_start: float | None = None

    def log_timing(self, component: str, duration_ms: float) -> None:
        """Record the duration of a stage."""
        self.timings[component] = self.timings.get(component, 0.0) + duration_ms

        if self.structured:
            self.logger.debug(
                json.dumps(
                    {
                        "operation": self.operation,
                        "component": component,
                        "duration_ms": round(duration_ms, 2),
                    }
                )
            )
        else:
            self.logger.debug(f"[{self.operation}] {component}: {duration_ms:.1f}ms")

    def stage(self, component: str) -> "_Stage":
        """Context manager timing one stage."""
        return _Stage(self, component)

    def elapsed_ms(self) -> float:
        return (time.time() - self.start_time) * 1000

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.logger.error(
                f"Error in {self.operation}: {exc_type.__name__}: {exc_val}"
            )
            return
        summary = {
            "operation": self.operation,
            "total_ms": round(self.elapsed_ms(), 2),
            "stages": {k: round(v, 2) for k, v in self.timings.items()},
        }
        if self.structured:
            self.logger.info(json.dumps(summary))
        else:
            self.logger.info(
                f"Performance summary for {self.operation}: "
                f"total={summary['total_ms']:.1f}ms, stages={list(self.timings)}"
            )


class _Stage:
    def __init__(self, perf: PerformanceLogger, component: str):
        self.perf = perf
        self.component = component
        self.start = 0.0

    def __enter__(self):
        self.start = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.perf.log_timing(self.component, (time.time() - self.start) * 1000)
