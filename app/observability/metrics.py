"""In-memory counters and latency histograms. Thread-safe. No real Prometheus dependency."""

import threading
from typing import Any


class MetricsCollector:
    """
    In-memory registry shared by the lock layer and the API.
    Counters are optionally labelled by category (e.g. lock domain "register").
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: dict[str, float] = {}
        # name -> {"name:category=<c>" -> value}
        self._counters_by_labels: dict[str, dict[str, float]] = {}
        self._histograms: dict[str, list[float]] = {}

    def increment(
        self,
        name: str,
        value: float = 1.0,
        *,
        category: str | None = None,
    ) -> None:
        """Increment a counter, labelled by category when given."""
        with self._lock:
            if category is None:
                self._counters[name] = self._counters.get(name, 0) + value
                return
            labelled = self._counters_by_labels.setdefault(name, {})
            key = f"{name}:category={category}"
            labelled[key] = labelled.get(key, 0) + value

    def count(self, name: str, *, category: str | None = None) -> float:
        """Current value of a counter (0 if never incremented)."""
        with self._lock:
            if category is None:
                return self._counters.get(name, 0)
            return self._counters_by_labels.get(name, {}).get(f"{name}:category={category}", 0)

    def observe_latency(
        self,
        name: str,
        latency_ms: float,
        *,
        category: str | None = None,
    ) -> None:
        with self._lock:
            bucket = name if category is None else f"{name}:category={category}"
            self._histograms.setdefault(bucket, []).append(latency_ms)

    def export_metrics(self) -> dict[str, Any]:
        """Snapshot of all metrics as plain dicts."""
        with self._lock:
            return {
                "counters": dict(self._counters),
                "counters_by_labels": {
                    k: dict(v) for k, v in self._counters_by_labels.items()
                },
                "histograms": {
                    k: {"count": len(v), "sum": sum(v), "values": list(v)}
                    for k, v in self._histograms.items()
                },
            }

    def reset(self) -> None:
        """Reset all metrics (for tests)."""
        with self._lock:
            self._counters.clear()
            self._counters_by_labels.clear()
            self._histograms.clear()
