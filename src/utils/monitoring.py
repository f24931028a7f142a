"""Monitoring and structured logging for chat requests."""

import json
import logging
import threading
from datetime import datetime, timezone
from typing import Any

from src.query_analysis.types import Complexity


class StructuredLogger:
    """Provides structured JSON logging for chat decisions."""

    def __init__(self, logger_name: str = "chat_pipeline"):
        self.logger = logging.getLogger(f"{logger_name}.structured")

    def log_chat_decision(self, log_data: dict[str, Any]):
        """Log the classification/analysis/cache decision for one request."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": "chat_decision",
            **log_data,
        }
        if "prompt" in log_entry:
            log_entry["prompt"] = (log_entry["prompt"] or "")[:200]
        self.logger.info(json.dumps(log_entry, ensure_ascii=False, default=str))

    def log_error(self, error_data: dict[str, Any]):
        """Log errors in structured format."""
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": "error",
            **error_data,
        }
        self.logger.error(json.dumps(log_entry, ensure_ascii=False, default=str))


class PerformanceMonitor:
    """Monitors request counts, cache effectiveness and latency."""

    def __init__(self):
        self._lock = threading.Lock()
        self._reset()

    def _reset(self):
        self.metrics = {
            "total_requests": 0,
            "cache_hits": 0,
            "cache_misses": 0,
            "knowledge_base_requests": 0,
            "errors": 0,
            "total_latency_ms": 0.0,
            "complexity_distribution": {c.value: 0 for c in Complexity},
        }
        self._latencies: list[float] = []

    def record_request(
        self,
        latency_ms: float,
        complexity: str,
        cached: bool,
        used_knowledge_base: bool = False,
    ):
        """Record a completed request."""
        with self._lock:
            self.metrics["total_requests"] += 1
            self.metrics["total_latency_ms"] += latency_ms
            self._latencies.append(latency_ms)
            if cached:
                self.metrics["cache_hits"] += 1
            else:
                self.metrics["cache_misses"] += 1
            if used_knowledge_base:
                self.metrics["knowledge_base_requests"] += 1
            distribution = self.metrics["complexity_distribution"]
            distribution[complexity] = distribution.get(complexity, 0) + 1

    def record_error(self):
        """Record an error occurrence."""
        with self._lock:
            self.metrics["errors"] += 1

    def get_metrics(self) -> dict[str, Any]:
        """Get current metrics."""
        with self._lock:
            metrics = dict(self.metrics)
            metrics["complexity_distribution"] = dict(
                self.metrics["complexity_distribution"]
            )
            latencies = sorted(self._latencies)

        total = metrics["total_requests"]
        attempts = total + metrics["errors"]
        if total > 0:
            metrics["average_latency_ms"] = round(metrics["total_latency_ms"] / total, 2)
            metrics["cache_hit_rate"] = round(metrics["cache_hits"] / total, 3)
        else:
            metrics["average_latency_ms"] = 0.0
            metrics["cache_hit_rate"] = 0.0
        metrics["error_rate"] = round(metrics["errors"] / attempts, 3) if attempts else 0.0

        if latencies:
            n = len(latencies)
            metrics["p50_latency_ms"] = latencies[n // 2]
            metrics["p95_latency_ms"] = latencies[min(n - 1, int(n * 0.95))]
            metrics["p99_latency_ms"] = latencies[min(n - 1, int(n * 0.99))]

        return metrics

    def reset_metrics(self):
        """Reset all metrics."""
        with self._lock:
            self._reset()
