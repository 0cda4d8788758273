"""Prometheus-style metrics collector. Thread-safe, in-memory. No real Prometheus dependency."""

import threading
from typing import Any


class MetricsCollector:
    """
    In-memory registry of counters and latency histograms.
    Labels are flattened into the counter key, e.g. provider_failure_count:candidate=gemini-2.5-flash.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, float] = {}
        self._counters_by_labels: dict[str, dict[str, float]] = {}
        self._histograms: dict[str, list[float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        candidate: str | None = None,
        category: str | None = None,
    ) -> None:
        """Increment a counter. Optional candidate or category label."""
        with self._lock:
            labels = []
            if candidate is not None:
                labels.append(f"candidate={candidate}")
            if category is not None:
                labels.append(f"category={category}")
            if not labels:
                self._counters[name] = self._counters.get(name, 0) + value
                return
            key = f"{name}:" + ",".join(labels)
            bucket = self._counters_by_labels.setdefault(name, {})
            bucket[key] = bucket.get(key, 0) + value

    def observe_latency(
        self,
        name: str,
        latency_ms: float,
        *,
        candidate: str | None = None,
    ) -> None:
        """Record a latency observation (histogram-style)."""
        with self._lock:
            bucket = name if candidate is None else f"{name}:candidate={candidate}"
            self._histograms.setdefault(bucket, []).append(latency_ms)

    def get_counter(self, name: str, **labels: str) -> float:
        """Current value of one counter; labels must match how it was incremented."""
        with self._lock:
            if not labels:
                return self._counters.get(name, 0)
            parts = [f"{k}={labels[k]}" for k in ("candidate", "category") if k in labels]
            key = f"{name}:" + ",".join(parts)
            return self._counters_by_labels.get(name, {}).get(key, 0)

    def export_metrics(self) -> dict[str, Any]:
        """Export all metrics as a dict (simulated Prometheus-style)."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_labels": {
                    k: dict(v) for k, v in self._counters_by_labels.items()
                },
                "histograms": {
                    k: {"count": len(v), "sum": sum(v)}
                    for k, v in self._histograms.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_labels.clear()
            self._histograms.clear()
