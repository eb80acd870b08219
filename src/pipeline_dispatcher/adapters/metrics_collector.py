"""
In-Memory Metrics Collector.

Keeps every recorded sample, grouped by metric name. Intended for tests
and single-process deployments; nothing is exported.
"""

from __future__ import annotations

import time
from collections import defaultdict
from threading import Lock
from typing import Any, DefaultDict, Dict, List, Optional


class InMemoryMetricsCollector:
    """Thread-safe sample store implementing MetricsCollector."""

    def __init__(self) -> None:
        self._samples: DefaultDict[str, List[Dict[str, Any]]] = defaultdict(list)
        self._lock = Lock()

    def record_timing(
        self, name: str, duration_seconds: float, tags: Optional[Dict[str, str]] = None
    ) -> None:
        self._add(name, "timing", duration_seconds, tags)

    def record_count(
        self, name: str, value: int, tags: Optional[Dict[str, str]] = None
    ) -> None:
        self._add(name, "count", value, tags)

    def record_gauge(
        self, name: str, value: float, tags: Optional[Dict[str, str]] = None
    ) -> None:
        self._add(name, "gauge", value, tags)

    def get_metrics(self) -> Dict[str, Any]:
        """
        Summary per metric name.

        Returns:
            ``{name: {"count": samples, "total": sum, "last": latest value}}``
        """
        with self._lock:
            return {
                name: {
                    "count": len(samples),
                    "total": sum(s["value"] for s in samples),
                    "last": samples[-1]["value"],
                }
                for name, samples in self._samples.items()
                if samples
            }

    def get_entries(self, name: str) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._samples.get(name, ()))

    def total(self, name: str, **tags: str) -> float:
        """Sum of ``name`` over samples whose tags include every given tag."""
        with self._lock:
            samples = self._samples.get(name, ())
            return sum(
                s["value"]
                for s in samples
                if all(s["tags"].get(key) == value for key, value in tags.items())
            )

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()

    def _add(
        self, name: str, kind: str, value: Any, tags: Optional[Dict[str, str]]
    ) -> None:
        sample = {
            "type": kind,
            "value": value,
            "tags": dict(tags or {}),
            "recorded_at": time.time(),
        }
        with self._lock:
            self._samples[name].append(sample)
